"""Per-node graph metrics: depth, critical path, unblock impact, hierarchy."""

from typing import Callable, Optional
from uuid import UUID

from ..config.models import SelectionConfig
from ..tasks.models import TaskMap, TaskState, WORKABLE_STATES
from .graph import DependencyGraph, DependencyNode

Neighbors = Callable[[UUID], list[UUID]]


def _walk(
    start: UUID,
    neighbors: Neighbors,
    memo: dict[UUID, int],
    base: int = 0,
    summed: bool = False,
    cap: int = 0,
    choice: Optional[dict[UUID, Optional[UUID]]] = None,
) -> int:
    """Evaluate a recursive path metric without recursion.

    Each node's value starts at ``base``; every neighbor contributes
    ``1 + value(neighbor)``, combined by max (or by sum when ``summed``).
    A neighbor already on the current path contributes ``1 + 0``. Results
    land in ``memo`` so later walks reuse them.

    Args:
        start: Node to evaluate
        neighbors: Node -> neighbor ids (existing nodes only)
        memo: Per-build memo table, updated in place
        base: Value of a node without neighbors
        summed: Sum contributions instead of taking the maximum
        cap: Upper bound applied to every value (0 = unbounded)
        choice: Optional table recording the neighbor that set each maximum

    Returns:
        Value of ``start``
    """
    if start in memo:
        return memo[start]

    acc = {start: base}
    on_path = {start}
    work = [(start, iter(neighbors(start)))]
    if choice is not None:
        choice[start] = None

    def contribute(node: UUID, nxt: UUID, value: int) -> None:
        if summed:
            acc[node] += 1 + value
        elif 1 + value > acc[node]:
            acc[node] = 1 + value
            if choice is not None:
                choice[node] = nxt

    while work:
        node, pending = work[-1]
        descended = False
        for nxt in pending:
            if nxt in memo:
                contribute(node, nxt, memo[nxt])
            elif nxt in on_path:
                contribute(node, nxt, 0)
            else:
                acc[nxt] = base
                on_path.add(nxt)
                if choice is not None:
                    choice[nxt] = None
                work.append((nxt, iter(neighbors(nxt))))
                descended = True
                break
        if descended:
            continue

        work.pop()
        on_path.discard(node)
        value = acc.pop(node)
        if cap > 0:
            value = min(value, cap)
        memo[node] = value
        if work:
            contribute(work[-1][0], node, value)

    return memo[start]


class MetricsCalculator:
    """Computes structural metrics for every node of a graph."""

    def __init__(self, config: SelectionConfig):
        self.config = config

    def calculate_all(self, graph: DependencyGraph) -> None:
        """Fill in metrics on every node and set the graph critical path."""
        nodes = graph.nodes

        def dependencies(task_id: UUID) -> list[UUID]:
            return [d for d in nodes[task_id].dependencies if d in nodes]

        def dependents(task_id: UUID) -> list[UUID]:
            return nodes[task_id].dependents

        def unblockable(task_id: UUID) -> list[UUID]:
            return [
                d
                for d in nodes[task_id].dependents
                if nodes[d].task.state == TaskState.PENDING
                and self.would_become_actionable(nodes[d], graph, task_id)
            ]

        depth_memo: dict[UUID, int] = {}
        path_memo: dict[UUID, int] = {}
        unblock_memo: dict[UUID, int] = {}
        path_choice: dict[UUID, Optional[UUID]] = {}
        max_depth = self.config.advanced.max_dependency_depth
        task_map = TaskMap(node.task for node in nodes.values())

        for task_id, node in nodes.items():
            node.dependent_count = len(node.dependents)
            node.child_count = len(node.children)
            node.dependency_depth = _walk(task_id, dependencies, depth_memo, cap=max_depth)
            node.critical_path_length = _walk(
                task_id, dependents, path_memo, base=1, choice=path_choice
            )
            node.unblocked_count = _walk(task_id, unblockable, unblock_memo, summed=True)
            node.hierarchy_depth = task_map.hierarchy_depth(node.task)

        graph.critical_path = self._find_critical_path(graph, path_memo, path_choice)

    def would_become_actionable(
        self, node: DependencyNode, graph: DependencyGraph, completed_id: UUID
    ) -> bool:
        """Check if a node would be unblocked once ``completed_id`` is done.

        Args:
            node: Dependent node under consideration
            graph: Graph holding the node
            completed_id: Dependency assumed to be completed

        Returns:
            True if every other existing dependency is completed and, unless
            parents may run alongside subtasks, no child is still active
        """
        for dep_id in node.dependencies:
            if dep_id == completed_id:
                continue
            dep_node = graph.nodes.get(dep_id)
            if dep_node is not None and dep_node.task.state != TaskState.COMPLETED:
                return False

        if not self.config.behavior.allow_parent_with_subtasks:
            for child_id in node.children:
                child = graph.nodes.get(child_id)
                if child is not None and child.task.state in WORKABLE_STATES:
                    return False

        return True

    @staticmethod
    def _find_critical_path(
        graph: DependencyGraph,
        lengths: dict[UUID, int],
        choice: dict[UUID, Optional[UUID]],
    ) -> list[UUID]:
        best: list[UUID] = []
        for root in graph.root_tasks:
            if lengths.get(root, 0) <= len(best):
                continue
            path = [root]
            seen = {root}
            nxt = choice.get(root)
            while nxt is not None and nxt not in seen:
                path.append(nxt)
                seen.add(nxt)
                nxt = choice.get(nxt)
            if len(path) > len(best):
                best = path
        return best
