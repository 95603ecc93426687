"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/classifier.py
Splits a duplicate group into files inside and outside the deletion directories.

Containment is decided on canonical paths (symlinks, '.' and '..' resolved) by
computing the relative path from the directory to the file, never by string prefix.
A path that cannot be canonicalized is never deletable and never counts as a surviving
copy: it is reported once and skipped.
"""

import os
import logging
from pathlib import Path
from typing import List, Optional, Callable, NamedTuple
from dupefinder.core.models import DuplicateGroup, FileRecord, ClassificationError

logger = logging.getLogger(__name__)


class Membership(NamedTuple):
    """Result of classifying one group. Members in neither list are confirmed outside."""
    in_scope: List[FileRecord]
    unresolved: List[FileRecord]


def canonicalize(path: str) -> str:
    """
    Canonical absolute form of an existing path.

    Raises:
        ClassificationError: if the path does not exist or cannot be resolved.
    """
    try:
        return str(Path(path).resolve(strict=True))
    except (OSError, RuntimeError) as e:
        raise ClassificationError(path, str(e)) from e


def is_path_in_directory(file_path: str, directory: str) -> bool:
    """
    True if file_path is a strict descendant of directory.

    Raises:
        ClassificationError: if either side cannot be canonicalized.
    """
    return MembershipClassifier.contains(canonicalize(file_path), canonicalize(directory))


class MembershipClassifier:
    """
    Decides which members of a group live inside a deletion directory.

    Args:
        deletion_roots: Directories whose files may be deleted
        on_error: Called with a ClassificationError for every path that could not be compared
    """

    def __init__(
            self,
            deletion_roots: List[str],
            on_error: Optional[Callable[[ClassificationError], None]] = None
    ):
        self.deletion_roots = list(deletion_roots)
        self.on_error = on_error
        self._roots: Optional[List[str]] = None

    def classify(self, group: DuplicateGroup) -> List[FileRecord]:
        """Returns the in-scope members of the group, in discovery order."""
        return self.split(group).in_scope

    def split(self, group: DuplicateGroup) -> Membership:
        """
        Separates in-scope members from members whose path could not be resolved.
        An unresolved member is neither deletable nor a confirmed surviving copy.
        """
        if not self.deletion_roots:
            return Membership([], [])

        roots = self._canonical_roots()
        in_scope, unresolved = [], []
        for record in group.files:
            try:
                file_canonical = canonicalize(record.path)
            except ClassificationError as e:
                self._report(e)
                unresolved.append(record)
                continue
            if any(self.contains(file_canonical, root) for root in roots):
                in_scope.append(record)
        return Membership(in_scope, unresolved)

    def _canonical_roots(self) -> List[str]:
        # Resolved once per run; a broken root is reported a single time
        if self._roots is None:
            self._roots = []
            for root in self.deletion_roots:
                try:
                    self._roots.append(canonicalize(root))
                except ClassificationError as e:
                    self._report(e)
        return self._roots

    @staticmethod
    def contains(file_canonical: str, root_canonical: str) -> bool:
        """Strict descendant check on two already canonical paths."""
        try:
            relative = os.path.relpath(file_canonical, root_canonical)
        except ValueError:
            # Different drives on Windows
            return False
        return relative != os.curdir and Path(relative).parts[0] != os.pardir

    def _report(self, error: ClassificationError) -> None:
        logger.info(str(error))
        if self.on_error:
            self.on_error(error)
