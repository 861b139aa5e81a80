"""Dependency graph construction from a flat task list."""

import logging
from typing import Iterable

from ..tasks.models import Task
from .graph import DependencyGraph, DependencyNode

logger = logging.getLogger(__name__)


def build_graph(tasks: Iterable[Task]) -> DependencyGraph:
    """Build the node/edge structure of a task snapshot.

    Dependency ids that match no task become a blocking reason on the
    referencing node. Metrics and actionability are left at their defaults.

    Args:
        tasks: Full task list of a project (may be empty)

    Returns:
        Graph with nodes, dependents, children, roots and leaves
    """
    graph = DependencyGraph()

    for task in tasks:
        graph.nodes[task.id] = DependencyNode(
            task_id=task.id,
            task=task,
            dependencies=list(task.dependencies),
            parent=task.parent_id,
        )
    graph.task_count = len(graph.nodes)

    for node in graph.nodes.values():
        for dep_id in node.dependencies:
            dep_node = graph.nodes.get(dep_id)
            if dep_node is not None:
                dep_node.dependents.append(node.task_id)
            else:
                node.blocking_reasons.append(f"dependency {dep_id} not found")

        if node.parent is not None:
            parent_node = graph.nodes.get(node.parent)
            if parent_node is not None:
                parent_node.children.append(node.task_id)

    for task_id, node in graph.nodes.items():
        if not node.dependencies:
            graph.root_tasks.append(task_id)
        if not node.dependents:
            graph.leaf_tasks.append(task_id)

    logger.debug(
        f"Built graph: {graph.task_count} tasks, "
        f"{len(graph.root_tasks)} roots, {len(graph.leaf_tasks)} leaves"
    )
    return graph
