"""
System process table queries.

Helpers over a ProcessSnapshot used to pick the processes to watch:

- Sorted, de-duplicated process names
- (name, PID) listings
- Existence checks for a process identifier
"""

from .processes import (
    find_process,
    list_process_names,
    list_processes_with_pid,
    process_exists,
)

__all__ = [
    "find_process",
    "list_process_names",
    "list_processes_with_pid",
    "process_exists",
]
