from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from project_scheduler.core.model import ItemRef, WorkItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DanglingRef:
    """A dependency whose target is not part of the scheduling batch."""

    source: ItemRef
    target: ItemRef


@dataclass(frozen=True)
class DependencyGraph:
    nodes: tuple[ItemRef, ...]  # input order
    predecessors: dict[ItemRef, tuple[ItemRef, ...]]
    successors: dict[ItemRef, tuple[ItemRef, ...]]

    def positions(self) -> dict[ItemRef, int]:
        return {ref: i for i, ref in enumerate(self.nodes)}

    @property
    def edge_count(self) -> int:
        return sum(len(v) for v in self.successors.values())


def build_graph(items: Iterable[WorkItem]) -> tuple[DependencyGraph, list[DanglingRef]]:
    """Build predecessor -> successor adjacency from each item's dependencies.

    References to identities outside ``items`` are returned as dangling and
    left out of the graph. Repeated references collapse to a single edge.
    """

    items = list(items)
    nodes = tuple(item.ref for item in items)
    known = set(nodes)

    preds: dict[ItemRef, list[ItemRef]] = {ref: [] for ref in nodes}
    succs: dict[ItemRef, list[ItemRef]] = {ref: [] for ref in nodes}
    dangling: list[DanglingRef] = []

    for item in items:
        ref = item.ref
        for dep in item.dependencies:
            if dep not in known:
                dangling.append(DanglingRef(source=ref, target=dep))
                continue
            if dep in preds[ref]:
                continue
            preds[ref].append(dep)
            succs[dep].append(ref)

    graph = DependencyGraph(
        nodes=nodes,
        predecessors={k: tuple(v) for k, v in preds.items()},
        successors={k: tuple(v) for k, v in succs.items()},
    )
    if dangling:
        logger.warning(
            "Dropped %d dangling dependency reference(s): %s",
            len(dangling),
            ", ".join(f"{d.source} -> {d.target}" for d in dangling),
        )
    logger.debug("Built dependency graph: %d nodes, %d edges", len(nodes), graph.edge_count)
    return graph, dangling


def detect_cycle(graph: DependencyGraph) -> tuple[bool, list[ItemRef]]:
    """Three-colour DFS over successor edges.

    Reaching an in-progress node closes a cycle; the slice of the active stack
    from that node onwards is recorded. Members come back in input order.
    """

    WHITE, GRAY, BLACK = 0, 1, 2
    state: dict[ItemRef, int] = {ref: WHITE for ref in graph.nodes}
    members: set[ItemRef] = set()

    for root in graph.nodes:
        if state[root] != WHITE:
            continue

        stack: list[ItemRef] = [root]
        iters: list[Iterator[ItemRef]] = [iter(graph.successors[root])]
        state[root] = GRAY

        while iters:
            nxt = next(iters[-1], None)
            if nxt is None:
                state[stack.pop()] = BLACK
                iters.pop()
                continue
            if state[nxt] == GRAY:
                # cycle: nxt ... top -> nxt
                members.update(stack[stack.index(nxt):])
            elif state[nxt] == WHITE:
                state[nxt] = GRAY
                stack.append(nxt)
                iters.append(iter(graph.successors[nxt]))

    ordered = [ref for ref in graph.nodes if ref in members]
    if ordered:
        logger.warning(
            "Dependency cycle detected among %d item(s): %s",
            len(ordered),
            ", ".join(str(r) for r in ordered),
        )
    return bool(ordered), ordered


def topological_order(
    graph: DependencyGraph, cycle_members: Iterable[ItemRef] = ()
) -> list[ItemRef]:
    """Kahn's algorithm, ties broken by input order.

    Cycle members are released together once the acyclic portion is exhausted,
    in input order. Nodes that only waited on them follow in a Kahn order. Any
    node still blocked after that (a cycle the DFS did not record) is emitted
    last in input order so the result always covers every node.
    """

    index = graph.positions()
    members = set(cycle_members)
    indegree: dict[ItemRef, int] = {ref: len(graph.predecessors[ref]) for ref in graph.nodes}
    emitted: set[ItemRef] = set()
    order: list[ItemRef] = []

    def drain(ready: list[int]) -> None:
        heapq.heapify(ready)
        while ready:
            ref = graph.nodes[heapq.heappop(ready)]
            if ref in emitted:
                continue
            emitted.add(ref)
            order.append(ref)
            for succ in graph.successors[ref]:
                indegree[succ] -= 1
                if indegree[succ] == 0 and succ not in emitted:
                    heapq.heappush(ready, index[succ])

    drain([index[ref] for ref, deg in indegree.items() if deg == 0])

    cyclic = [ref for ref in graph.nodes if ref in members and ref not in emitted]
    released: list[int] = []
    for ref in cyclic:
        emitted.add(ref)
        order.append(ref)
    for ref in cyclic:
        for succ in graph.successors[ref]:
            indegree[succ] -= 1
            if indegree[succ] == 0 and succ not in emitted:
                released.append(index[succ])
    drain(released)

    leftover = [ref for ref in graph.nodes if ref not in emitted]
    if leftover:
        logger.warning("Unordered items appended in input order: %s", ", ".join(map(str, leftover)))
        order.extend(leftover)
    return order
