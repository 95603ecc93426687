"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Grouping table: digest -> files in discovery order.
"""

from typing import Dict, Iterator, Optional
from dupefinder.core.models import FileRecord, DuplicateGroup


class GroupingTable:
    """
    Accumulates files by digest while the scanner is drained.

    Only one writer may call record(); when digests are computed in parallel the
    caller publishes results from a single thread.
    """

    def __init__(self):
        self._groups: Dict[str, DuplicateGroup] = {}
        self._file_count = 0

    def record(self, path: str, digest: Optional[str], size: int = 0) -> bool:
        """
        Append a file to the group of its digest, creating the group on first insertion.
        Files without a digest are never recorded; returns False for them.
        """
        if not digest:
            return False

        group = self._groups.get(digest)
        if group is None:
            group = DuplicateGroup(digest=digest)
            self._groups[digest] = group
        group.add_file(FileRecord(path=path, digest=digest, size=size))
        self._file_count += 1
        return True

    def groups(self) -> Iterator[DuplicateGroup]:
        """Every group exactly once, including single-file groups."""
        yield from self._groups.values()

    def duplicate_groups(self) -> Iterator[DuplicateGroup]:
        """Only groups with two or more files."""
        return (g for g in self._groups.values() if g.is_duplicate())

    def get(self, digest: str) -> Optional[DuplicateGroup]:
        return self._groups.get(digest)

    @property
    def file_count(self) -> int:
        return self._file_count

    def __len__(self) -> int:
        return len(self._groups)

    def __repr__(self):
        return f"<GroupingTable groups={len(self._groups)}, files={self._file_count}>"
