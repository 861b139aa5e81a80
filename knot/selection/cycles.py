"""Circular dependency detection."""

import logging
from uuid import UUID

from .graph import DependencyGraph

logger = logging.getLogger(__name__)


def _existing_dependencies(graph: DependencyGraph, task_id: UUID) -> list[UUID]:
    return [d for d in graph.nodes[task_id].dependencies if d in graph.nodes]


def detect_cycles(graph: DependencyGraph) -> list[UUID]:
    """Mark every task that lies on a dependency cycle.

    Strongly connected components are found with an iterative Tarjan walk
    over dependency edges. Members of components larger than one task and
    self-dependent tasks are cyclic. Sets ``has_cycles`` and
    ``cyclic_tasks`` (in graph order) on the graph.

    Args:
        graph: Graph produced by the builder

    Returns:
        Cyclic task ids
    """
    index: dict[UUID, int] = {}
    lowlink: dict[UUID, int] = {}
    stack: list[UUID] = []
    on_stack: set[UUID] = set()
    cyclic: set[UUID] = set()
    counter = 0

    for root in graph.nodes:
        if root in index:
            continue

        index[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work = [(root, iter(_existing_dependencies(graph, root)))]

        while work:
            node, deps = work[-1]
            descended = False
            for dep in deps:
                if dep not in index:
                    index[dep] = lowlink[dep] = counter
                    counter += 1
                    stack.append(dep)
                    on_stack.add(dep)
                    work.append((dep, iter(_existing_dependencies(graph, dep))))
                    descended = True
                    break
                if dep in on_stack:
                    lowlink[node] = min(lowlink[node], index[dep])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])

            if lowlink[node] == index[node]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                if len(component) > 1 or node in graph.nodes[node].dependencies:
                    cyclic.update(component)

    graph.cyclic_tasks = [task_id for task_id in graph.nodes if task_id in cyclic]
    graph.has_cycles = bool(graph.cyclic_tasks)
    if graph.has_cycles:
        logger.warning(f"Circular dependencies involve {len(graph.cyclic_tasks)} task(s)")
    return graph.cyclic_tasks
