"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements file enumeration across several scan roots.
Features:
- Uses os.walk for fast traversal and pathlib.Path for path handling
- Recursively scans every root in the order given
- Yields absolute paths lazily, so hashing can start before the walk ends
- Skips symbolic links, system trash and inaccessible directories
"""

import os
import sys
from typing import List, Optional, Callable, Iterator
from pathlib import Path
import time
import logging

logger = logging.getLogger(__name__)

# Local imports
from dupefinder.core.interfaces import FileScanner


class FileScannerImpl(FileScanner):
    """
    Walks the scan roots and yields the absolute path of every regular file.

    Attributes:
        roots: Directories to scan, in the order they were given
    """

    def __init__(self, roots: List[str]):
        self.roots = [str(Path(r).absolute()) for r in roots]

    def scan(self,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, object], None]] = None) -> Iterator[str]:
        """
        Generator over regular files. Not restartable: call scan() again for a new pass.
        """
        logger.debug(f"Starting scan of {len(self.roots)} root(s)")
        start_time = time.time()
        found = 0
        # Overlapping roots must not report one file twice: it would be its own duplicate
        seen = set()

        for root in self.roots:
            if stopped_flag and stopped_flag():
                logger.debug("Scan interrupted by user")
                return

            if not Path(root).is_dir():
                logger.warning(f"Directory not found: {root}")
                continue

            for path in self._walk(root, stopped_flag):
                key = os.path.normcase(os.path.realpath(path))
                if key in seen:
                    logger.debug(f"Skipping already scanned file: {path}")
                    continue
                seen.add(key)
                found += 1
                if progress_callback:
                    progress_callback('scanning', found, None)
                yield path

        logger.debug(f"Scan completed in {time.time() - start_time:.2f}s, {found} files found")

    def count(self, stopped_flag: Optional[Callable[[], bool]] = None) -> int:
        """Number of files scan() would yield. Walks the trees once."""
        return sum(1 for _ in self.scan(stopped_flag=stopped_flag))

    def _walk(self, root: str, stopped_flag: Optional[Callable[[], bool]]) -> Iterator[str]:
        for current, dirs, files in os.walk(root, onerror=self._on_walk_error):
            if stopped_flag and stopped_flag():
                return

            # Pre-filter subdirectories BEFORE os.walk enters them
            dirs[:] = [d for d in dirs if self._prefilter_dirs(Path(current) / d)]

            for filename in files:
                path = Path(current) / filename
                if self._is_regular_file(path):
                    yield str(path)

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Cannot read directory: {error}")

    @staticmethod
    def _is_system_trash(path: Path) -> bool:
        """
        Check if path belongs to OS trash/recycle bin (cross-platform).
        Returns False on any error (fail-safe: better to scan than skip valid data).
        """
        try:
            path_str = str(path.resolve(strict=False))

            if sys.platform == "win32":
                if "$Recycle.Bin" in path_str or "\\Recycler\\" in path_str:
                    return True
            elif sys.platform == "darwin":
                if "/.Trash/" in path_str or path_str.endswith("/.Trash"):
                    return True
            else:
                # Linux/BSD: freedesktop.org standard locations
                if ".local/share/Trash" in path_str or "/.trash/" in path_str:
                    return True

            return False
        except (OSError, ValueError, RuntimeError):
            return False

    def _prefilter_dirs(self, path: Path) -> bool:
        """Skip symlinked directories, system trash and inaccessible locations."""
        if path.is_symlink():
            logger.debug(f"Skipping symbolic link: {path}")
            return False

        # Files moved to trash by an earlier run must not be found again
        if FileScannerImpl._is_system_trash(path):
            logger.debug(f"Skipping system trash directory: {path}")
            return False

        try:
            return path.is_dir() and os.access(path, os.R_OK | os.X_OK)
        except OSError:
            logger.debug(f"Skipping inaccessible directory: {path}")
            return False

    @staticmethod
    def _is_regular_file(path: Path) -> bool:
        try:
            if path.is_symlink():
                logger.debug(f"Skipping symbolic link: {path}")
                return False
            return path.is_file()
        except OSError as e:
            logger.debug(f"Could not check {path}: {e}")
            return False
