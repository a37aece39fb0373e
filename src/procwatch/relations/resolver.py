"""
Relation closure of a process identifier over a process table.

Given a ProcessIdentifier and one snapshot's ``(pid, parent_pid, name)``
rows, the resolver returns the identifier's group members: the target PID
(or every PID with the target name) plus all transitive descendants.

The expansion is breadth-first over a parent -> children index built once
per call. A visited set guarantees termination even if a partial snapshot
makes the parent relation look cyclic, so no depth limit is needed.
"""

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional, Protocol

from ..models.identifiers import ProcessIdentifier

logger = logging.getLogger(__name__)


class ProcessRow(Protocol):
    """The three fields relation resolution reads from a process record."""

    pid: int
    parent_pid: Optional[int]
    name: str


def build_child_index(table: Iterable[ProcessRow]) -> Dict[int, List[int]]:
    """
    Map each parent PID to its child PIDs, in table order.

    Rows without a parent are not indexed. Parents that are absent from the
    table still get an entry; it is simply never reached from a seed.
    """
    children: Dict[int, List[int]] = {}
    for row in table:
        if row.parent_pid is None:
            continue
        children.setdefault(row.parent_pid, []).append(row.pid)
    return children


def _seed_pids(identifier: ProcessIdentifier, rows: List[ProcessRow]) -> List[int]:
    if identifier.is_pid:
        target = identifier.pid
        return [row.pid for row in rows if row.pid == target][:1]
    # Exact, case-sensitive match; every matching tree joins one group.
    return [row.pid for row in rows if row.name == identifier.name]


def resolve_relations(
    identifier: ProcessIdentifier, table: Iterable[ProcessRow]
) -> Optional[List[int]]:
    """
    Resolve an identifier to its group members.

    Args:
        identifier: The group's name or PID identifier.
        table: One snapshot's process rows. PIDs are unique within it.

    Returns:
        The member PIDs in breadth-first discovery order, seeds first, or
        None if nothing in the table matches the identifier.

    Examples:
        With rows 1 <- 2 <- 3 and an unrelated 4, ``pid:1`` resolves to
        ``[1, 2, 3]`` and ``pid:99`` resolves to None.
    """
    rows = list(table)
    seeds = _seed_pids(identifier, rows)
    if not seeds:
        return None

    children = build_child_index(rows)
    visited = set(seeds)
    order = list(seeds)
    queue = deque(seeds)

    while queue:
        pid = queue.popleft()
        for child in children.get(pid, ()):
            if child in visited:
                continue
            visited.add(child)
            order.append(child)
            queue.append(child)

    return order


class RelationResolver:
    """
    Stateless wrapper around ``resolve_relations`` used by the monitor engine.

    It only remembers the size of the last table and closure, for debug
    logging and tests.
    """

    def __init__(self):
        self.last_table_size = 0
        self.last_member_count = 0

    def resolve(
        self, identifier: ProcessIdentifier, table: Iterable[ProcessRow]
    ) -> Optional[List[int]]:
        rows = list(table)
        members = resolve_relations(identifier, rows)
        self.last_table_size = len(rows)
        self.last_member_count = len(members) if members else 0
        if members is None:
            logger.debug(f"No process matches {identifier} in {len(rows)} rows")
        else:
            logger.debug(f"{identifier} resolved to {len(members)} members")
        return members
