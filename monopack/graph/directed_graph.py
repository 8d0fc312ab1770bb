"""Generic directed graph keyed by string ids.

Nodes live in an index-addressed arena; every node keeps an insertion-ordered
adjacency set.  The graph has no domain knowledge: the module graph, the
resource graphs of the linker and the package graph of the scheduler are all
built on top of it.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterator, TypeVar

from monopack.errors import GraphError

T = TypeVar("T")

_EXHAUSTED = object()


@dataclass
class GraphNode(Generic[T]):
    id: str
    data: T
    _adjacent: dict[str, None] = field(default_factory=dict, repr=False)

    @property
    def adjacent_ids(self) -> tuple[str, ...]:
        return tuple(self._adjacent)


Visitor = Callable[[GraphNode[T]], None]


class DirectedGraph(Generic[T]):
    """Directed graph with BFS traversal, cycle detection and topological generations."""

    def __init__(self):
        self._nodes: list[GraphNode[T]] = []
        self._index: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[GraphNode[T]]:
        return iter(self._nodes)

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self._nodes]

    # ── Mutation ────────────────────────────────────────────

    def add_node(self, node_id: str, data: T) -> None:
        if node_id in self._index:
            raise GraphError(f'Node with id "{node_id}" already exists')
        self._index[node_id] = len(self._nodes)
        self._nodes.append(GraphNode(id=node_id, data=data))

    def connect(self, from_id: str, to_id: str) -> None:
        from_node = self.get_node(from_id)
        self.get_node(to_id)
        if to_id in from_node._adjacent:
            raise GraphError(f'Edge from "{from_id}" to "{to_id}" already exists')
        from_node._adjacent[to_id] = None

    def disconnect(self, from_id: str, to_id: str) -> None:
        from_node = self.get_node(from_id)
        self.get_node(to_id)
        if to_id not in from_node._adjacent:
            raise GraphError(f'Edge from "{from_id}" to "{to_id}" does not exist')
        del from_node._adjacent[to_id]

    # ── Lookups ─────────────────────────────────────────────

    def get_node(self, node_id: str) -> GraphNode[T]:
        index = self._index.get(node_id)
        if index is None:
            raise GraphError(f'Node with id "{node_id}" does not exist')
        return self._nodes[index]

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    def has_connection(self, from_id: str, to_id: str) -> bool:
        return to_id in self.get_node(from_id)._adjacent

    def get_adjacent_ids(self, node_id: str) -> tuple[str, ...]:
        return self.get_node(node_id).adjacent_ids

    # ── Traversal ───────────────────────────────────────────

    def traverse(self, visitor: Visitor) -> None:
        """Visit every node once, in insertion order."""
        for node in list(self._nodes):
            visitor(node)

    def visit_breadth_first_search(self, start_id: str, visitor: Visitor) -> None:
        """Visit every node reachable from ``start_id`` exactly once, breadth first."""
        start = self.get_node(start_id)
        visited = {start.id}
        queue = deque([start])

        while queue:
            node = queue.popleft()
            visitor(node)
            for adjacent_id in node._adjacent:
                if adjacent_id not in visited:
                    visited.add(adjacent_id)
                    queue.append(self.get_node(adjacent_id))

    def detect_cycles(self) -> list[list[str]]:
        """Return every simple cycle once; the closing id is implied, not repeated."""
        cycles: list[list[str]] = []
        known: set[tuple[str, ...]] = set()

        for start in self._nodes:
            visited = {start.id}
            path = [start.id]
            position = {start.id: 0}
            stack = [iter(start._adjacent)]

            while stack:
                neighbor = next(stack[-1], _EXHAUSTED)
                if neighbor is _EXHAUSTED:
                    stack.pop()
                    del position[path.pop()]
                    continue

                if neighbor in position:
                    # Back-edge to an ancestor on the current path
                    cycle = path[position[neighbor]:]
                    key = _canonical_cycle(cycle)
                    if key not in known:
                        known.add(key)
                        cycles.append(cycle)
                elif neighbor not in visited:
                    visited.add(neighbor)
                    position[neighbor] = len(path)
                    path.append(neighbor)
                    stack.append(iter(self.get_node(neighbor)._adjacent))

        return cycles

    def is_cyclic(self) -> bool:
        return len(self.detect_cycles()) > 0

    def get_topological_generations(self) -> list[list[str]]:
        """Batches of ids, sinks first: a node lands in the first generation after all its targets."""
        if self.is_cyclic():
            raise GraphError("Failed to determine topological generations, current graph is cyclic")

        remaining = {node.id: len(node._adjacent) for node in self._nodes}
        incoming: dict[str, list[str]] = {node.id: [] for node in self._nodes}
        for node in self._nodes:
            for adjacent_id in node._adjacent:
                incoming[adjacent_id].append(node.id)

        generations: list[list[str]] = []
        discovered: set[str] = set()
        while True:
            current = [
                node.id for node in self._nodes
                if node.id not in discovered and remaining[node.id] == 0
            ]
            if not current:
                break
            generations.append(current)
            discovered.update(current)
            for node_id in current:
                for predecessor in incoming[node_id]:
                    remaining[predecessor] -= 1

        return generations


def _canonical_cycle(cycle: list[str]) -> tuple[str, ...]:
    pivot = cycle.index(min(cycle))
    return tuple(cycle[pivot:] + cycle[:pivot])
