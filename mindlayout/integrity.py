"""Snapshot integrity checks.

The engine tolerates broken snapshots (cycles, dangling references) without
failing; these checks let callers surface such problems instead.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from mindlayout.geometry import node_lookup
from mindlayout.model import Edge, Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrityIssue:
    code: str
    node_id: str
    message: str


@dataclass(frozen=True)
class IntegrityReport:
    issues: tuple = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.issues

    def codes(self) -> set[str]:
        return {issue.code for issue in self.issues}


def _find_parent_cycles(nodes: Sequence[Node]) -> list[IntegrityIssue]:
    lookup = node_lookup(nodes)
    issues = []
    reported: set[str] = set()
    for node in nodes:
        seen = [node.id]
        current = node
        while current.parent_id is not None and current.parent_id in lookup:
            if current.parent_id in seen:
                cycle = seen[seen.index(current.parent_id):]
                key = min(cycle)
                if key not in reported:
                    reported.add(key)
                    issues.append(IntegrityIssue(
                        "parent-cycle", key,
                        "Parent chain loops: " + " -> ".join(cycle + [current.parent_id]),
                    ))
                break
            seen.append(current.parent_id)
            current = lookup[current.parent_id]
    return issues


def check_snapshot(nodes: Sequence[Node], edges: Sequence[Edge]) -> IntegrityReport:
    """Report structural problems in a node/edge snapshot."""
    issues: list[IntegrityIssue] = []
    lookup = node_lookup(nodes)

    for node_id, count in Counter(n.id for n in nodes).items():
        if count > 1:
            issues.append(IntegrityIssue(
                "duplicate-id", node_id, f"Node id used {count} times"))

    for node in nodes:
        if node.depth < 0:
            issues.append(IntegrityIssue(
                "negative-depth", node.id, f"Depth {node.depth} is negative"))
        if node.parent_id is None:
            continue
        parent = lookup.get(node.parent_id)
        if parent is None:
            issues.append(IntegrityIssue(
                "dangling-parent", node.id,
                f"Parent {node.parent_id} is not in the snapshot"))
        elif node.depth != parent.depth + 1:
            issues.append(IntegrityIssue(
                "depth-mismatch", node.id,
                f"Depth {node.depth} should be {parent.depth + 1} under {parent.id}"))

    issues.extend(_find_parent_cycles(nodes))

    for edge in edges:
        for endpoint in (edge.source, edge.target):
            if endpoint not in lookup:
                issues.append(IntegrityIssue(
                    "dangling-edge", endpoint,
                    f"Edge {edge.id} references missing node {endpoint}"))

    for issue in issues:
        logger.warning("Snapshot integrity: %s", issue.message)

    return IntegrityReport(tuple(issues))
