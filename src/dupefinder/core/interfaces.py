"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate cleanup system.
These protocols let the engine stay free of terminal I/O and filesystem details:
every collaborator is injected and can be replaced in tests.

Key Components:
---------------
- HashAlgorithm: Streaming hash function (MD5, SHA-256, xxHash64).
- Hasher: Computes the full-content digest of a file.
- FileScanner: Lazily enumerates regular files under the scan roots.
- AuditSink: Receives one line per decision and informational notes.
- Confirmation: Asks the user which copy to keep (manual mode).
- Remover: Removes a file from disk (unlink or trash).
"""

from typing import Protocol, List, Iterator, Optional, Callable
from dupefinder.core.models import DuplicateGroup, Decision, FileRecord


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions like SHA-256, MD5, or xxHash
    without affecting the rest of the grouping logic.
    """
    name: str

    def new(self):
        """Returns a fresh hash object supporting update() and hexdigest()."""
        ...


class Hasher(Protocol):
    """Interface for hashing the full content of a file."""
    def compute_digest(self, path: str) -> str: ...


class FileScanner(Protocol):
    """
    Interface for enumerating files across the scan roots.
    """
    def scan(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> Iterator[str]:
        """
        Yield absolute paths of regular files, lazily and only once.

        Args:
            stopped_flag: Function that returns True if operation should be canceled.
            progress_callback: Optional callback for reporting progress.
        """
        ...


class AuditSink(Protocol):
    """Append-only destination for decisions."""
    def emit(self, decision: Decision) -> None: ...

    def note(self, message: str) -> None: ...


class Confirmation(Protocol):
    """
    Manual-mode collaborator.

    Receives the group and its in-scope members (shown as 1..N) and returns the
    1-based number of the file to KEEP. 0, None or an out-of-range number skips the group.
    """
    def __call__(self, group: DuplicateGroup, candidates: List[FileRecord]) -> Optional[int]: ...


class Remover(Protocol):
    """Removes one file; raises OSError/RuntimeError on failure."""
    def __call__(self, path: str) -> None: ...
