"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/audit_log.py
Append-only audit log of every decision taken during a run.

Each line is flushed as soon as it is written, so an interrupted run still
leaves a truthful record of everything done up to that point.
"""
import os
import time
from pathlib import Path
from typing import List, Optional
from dupefinder.core.models import Decision, DigestAlgorithm
from dupefinder.core.interfaces import AuditSink
from dupefinder.utils.convert_utils import ConvertUtils


def default_log_path(timestamp: Optional[float] = None) -> str:
    """log_<YYYYMMDDHHMMSS>.txt in the current directory."""
    stamp = ConvertUtils.timestamp_to_compact(timestamp if timestamp is not None else time.time())
    return f"log_{stamp}.txt"


class AuditLog(AuditSink):
    """
    File-backed audit sink.

    Usage:
        with AuditLog("log.txt") as audit:
            audit.write_header(DigestAlgorithm.SHA256, roots)
            audit.emit(decision)
    """

    def __init__(self, path: Optional[str] = None):
        self.path = str(Path(path or default_log_path()).absolute())
        self._stream = None
        self.lines_written = 0

    def open(self) -> "AuditLog":
        if self._stream is None:
            self._stream = open(self.path, "a", encoding="utf-8")
        return self

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __enter__(self) -> "AuditLog":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def write_header(self, algorithm: DigestAlgorithm, roots: List[str],
                     timestamp: Optional[float] = None) -> None:
        stamp = ConvertUtils.timestamp_to_compact(timestamp if timestamp is not None else time.time())
        self._write("Log for the duplicate deletion script")
        self._write(f"Date: {stamp}")
        self._write(f"Using algorithm: {algorithm.display_name}")
        self._write("Directories:")
        for root in roots:
            self._write(f"- {root}")
        self._write("-------------------")

    def emit(self, decision: Decision) -> None:
        self._write(decision.render())

    def note(self, message: str) -> None:
        self._write(f"Note: {message}")

    def _write(self, line: str) -> None:
        if self._stream is None:
            raise RuntimeError(f"Audit log is not open: {self.path}")
        self._stream.write(line + "\n")
        self._stream.flush()
        os.fsync(self._stream.fileno())
        self.lines_written += 1


class MemoryAuditSink(AuditSink):
    """Keeps audit lines in memory. Used by library callers and tests."""

    def __init__(self):
        self.lines: List[str] = []
        self.decisions: List[Decision] = []
        self.notes: List[str] = []

    def emit(self, decision: Decision) -> None:
        self.decisions.append(decision)
        self.lines.append(decision.render())

    def note(self, message: str) -> None:
        self.notes.append(message)
        self.lines.append(f"Note: {message}")
