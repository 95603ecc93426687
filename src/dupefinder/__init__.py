"""
dupefinder: find duplicate files and delete them from selected directories.

Core features:
- Full-content digests: MD5, SHA-256 (default) or xxHash64
- Deletion restricted to user-selected directories; copies elsewhere are never touched
- Automatic or manual (pick the file to keep) deletion policy
- Dry run by default; optional removal to the system trash (via send2trash)
- Append-only audit log with one line per decision
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("dupefinder")
except Exception:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from dupefinder.commands import DuplicateCleanupCommand
from dupefinder.core import (
    RunParams, RunStats, PolicyMode, DigestAlgorithm, Action,
    FileRecord, DuplicateGroup, Decision, ConfigurationError,
)
from dupefinder.services import AuditLog, MemoryAuditSink, FileService

__all__ = [
    "DuplicateCleanupCommand",
    "RunParams",
    "RunStats",
    "PolicyMode",
    "DigestAlgorithm",
    "Action",
    "FileRecord",
    "DuplicateGroup",
    "Decision",
    "ConfigurationError",
    "AuditLog",
    "MemoryAuditSink",
    "FileService",
    "__version__",
]
