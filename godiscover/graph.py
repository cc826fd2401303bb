"""
Dependency graph views over a DiscoverResult.

Edges only ever connect resources of the same file, pointing from a
resource to the resource it references.
"""

import logging
from typing import Dict, List, Tuple

from .models import DiscoveredResource, DiscoverResult

logger = logging.getLogger(__name__)

Edge = Tuple[DiscoveredResource, DiscoveredResource]


def dependency_edges(result: DiscoverResult) -> List[Edge]:
    """(dependent, dependency) pairs between resources in the same file."""
    by_file: Dict[str, Dict[str, DiscoveredResource]] = {}
    for r in result.resources:
        by_file.setdefault(r.file, {})[r.name] = r

    edges: List[Edge] = []
    for r in result.resources:
        same_file = by_file[r.file]
        for dep in r.dependencies:
            target = same_file.get(dep)
            if target is not None and target is not r:
                edges.append((r, target))
    return edges


def ordered_by_dependencies(result: DiscoverResult) -> List[DiscoveredResource]:
    """
    Resources ordered so each comes after the resources it depends on.

    Ordering is per file, files in first-seen order.  Within a file the
    original declaration order is kept wherever dependencies allow; a
    cycle is broken by emitting the earliest remaining resource.
    """
    ordered: List[DiscoveredResource] = []
    for file_path in result.files():
        pending = result.resources_in(file_path)
        names = {r.name for r in pending}
        done: set = set()
        while pending:
            ready = next(
                (r for r in pending
                 if all(d in done or d == r.name or d not in names for d in r.dependencies)),
                None,
            )
            if ready is None:
                ready = pending[0]
                logger.debug("Dependency cycle in %s, emitting %s first", file_path, ready.name)
            pending.remove(ready)
            done.add(ready.name)
            ordered.append(ready)
    return ordered


def _node_ids(result: DiscoverResult) -> Dict[Tuple[str, str], str]:
    return {(r.file, r.name): f"n{i}" for i, r in enumerate(result.resources)}


def render_mermaid(result: DiscoverResult) -> str:
    """Mermaid flowchart of resources and their dependencies."""
    ids = _node_ids(result)
    lines = ["graph LR"]
    for r in result.resources:
        lines.append(f'    {ids[(r.file, r.name)]}["{r.name}<br/>{r.kind}"]')
    for src, dst in dependency_edges(result):
        lines.append(f"    {ids[(src.file, src.name)]} --> {ids[(dst.file, dst.name)]}")
    return "\n".join(lines) + "\n"


def render_dot(result: DiscoverResult) -> str:
    """Graphviz DOT digraph of resources and their dependencies."""
    ids = _node_ids(result)
    lines = ["digraph resources {", "    rankdir=LR;"]
    for r in result.resources:
        label = f"{r.name}\\n{r.kind}".replace('"', '\\"')
        lines.append(f'    {ids[(r.file, r.name)]} [label="{label}"];')
    for src, dst in dependency_edges(result):
        lines.append(f"    {ids[(src.file, src.name)]} -> {ids[(dst.file, dst.name)]};")
    lines.append("}")
    return "\n".join(lines) + "\n"
