"""Cycle-tolerant topological ordering of the dependency graph.

The sort runs in two passes. The first is a depth-first search that records
every node reached again while still on the recursion path as a cycle member.
The second walks the graph again from scratch, ignoring edges into cycle
members, and emits nodes in post-order so dependencies come before the
entities that reference them.
"""
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, List, Set, Tuple

from setup_data.core.workflow import Stage
from setup_data.graph.builder import DependencyGraph

log = logging.getLogger(__name__)


@dataclass
class TraversalContext:
    """Per-call traversal state."""
    visited: Set[str] = field(default_factory=set)
    in_progress: Set[str] = field(default_factory=set)
    cycle_members: Set[str] = field(default_factory=set)
    cycles: List[Tuple[str, ...]] = field(default_factory=list)
    order: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DependencyOrder:
    order: List[str]
    cycle_members: FrozenSet[str]
    cycles: List[Tuple[str, ...]]


def _detect(node: str, graph: DependencyGraph, ctx: TraversalContext, path: List[str]) -> None:
    if node in ctx.visited:
        return
    if node in ctx.in_progress:
        start = path.index(node) if node in path else len(path)
        cycle = tuple(path[start:]) + (node,)
        ctx.cycle_members.add(node)
        ctx.cycles.append(cycle)
        log.warning(f"Cyclic dependency: {' -> '.join(cycle)}", extra={"stage": Stage.RESOLVE, "entity": node})
        return

    ctx.in_progress.add(node)
    path.append(node)
    for dep in graph[node].dependencies:
        if dep in graph and dep not in ctx.cycle_members:
            _detect(dep, graph, ctx, path)
    path.pop()
    ctx.in_progress.discard(node)
    ctx.visited.add(node)
    ctx.order.append(node)


def _resolve(node: str, graph: DependencyGraph, ctx: TraversalContext) -> None:
    if node in ctx.visited:
        return
    ctx.visited.add(node)
    for dep in graph[node].dependencies:
        if dep in graph and dep not in ctx.cycle_members:
            _resolve(dep, graph, ctx)
    ctx.order.append(node)


def resolve_dependency_order(graph: DependencyGraph) -> DependencyOrder:
    """Order every entity so that non-cyclic parents precede their children."""
    detection = TraversalContext()
    for node in graph:
        if node not in detection.visited:
            _detect(node, graph, detection, [])

    resolution = TraversalContext(cycle_members=set(detection.cycle_members))
    for node in graph:
        if node not in resolution.visited:
            _resolve(node, graph, resolution)

    log.info(f"Dependency order: {', '.join(resolution.order)}", extra={"stage": Stage.RESOLVE})
    return DependencyOrder(
        order=resolution.order,
        cycle_members=frozenset(detection.cycle_members),
        cycles=detection.cycles,
    )


def topo_sort(graph: DependencyGraph) -> List[str]:
    return resolve_dependency_order(graph).order
