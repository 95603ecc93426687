"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models and domain logic for duplicate grouping and deletion decisions.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional
from pathlib import Path
from enum import Enum
import logging

from dupefinder.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)


# =============================
# Exceptions
# =============================

class DupeFinderError(Exception):
    """Base class for all dupefinder errors."""


class ConfigurationError(DupeFinderError):
    """Invalid run configuration. The only error that stops a run before it starts."""


class DigestError(DupeFinderError):
    """A file could not be hashed. The file is excluded from grouping."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot hash {path} - {reason}")
        self.path = path
        self.reason = reason


class ClassificationError(DupeFinderError):
    """A path could not be canonicalized while checking deletion scope."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Error comparing paths for {path}: {reason}")
        self.path = path
        self.reason = reason


# =============================
# Enums
# =============================

class DigestAlgorithm(Enum):
    """
    Content digest used as the grouping key.
    """
    MD5 = "MD5"
    SHA256 = "SHA-256"
    XXH64 = "XXH64"

    @property
    def display_name(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "DigestAlgorithm":
        """Resolve a CLI alias (md5, -sha256, SHA-256, ...) to an algorithm."""
        key = (name or "").strip().lstrip("-").lower().replace("-", "").replace("_", "")
        aliases = {
            "md5": cls.MD5,
            "sha256": cls.SHA256,
            "xxh64": cls.XXH64,
            "xxhash": cls.XXH64,
        }
        if key not in aliases:
            raise ConfigurationError(f"Invalid hash algorithm: {name}")
        return aliases[key]

    def __repr__(self) -> str:
        return self.value


class PolicyMode(Enum):
    """How the file to keep is chosen inside a duplicate group."""
    MANUAL = "manual"
    AUTOMATIC = "auto"

    @property
    def display_name(self) -> str:
        mapping = {
            PolicyMode.MANUAL: "Manual",
            PolicyMode.AUTOMATIC: "Automatic",
        }
        return mapping.get(self, self.value)


class Action(Enum):
    """Terminal decision for one file of a duplicate group."""
    KEPT = "kept"
    DELETED = "deleted"
    DRY_RUN = "dry-run"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def label(self) -> str:
        """Prefix used in audit log lines."""
        mapping = {
            Action.KEPT: "Kept",
            Action.DELETED: "Deleted",
            Action.DRY_RUN: "DRY run: Would delete",
            Action.SKIPPED: "Skipped",
            Action.FAILED: "Failed to delete",
        }
        return mapping[self]


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class FileRecord:
    """
    A scanned regular file and its content digest.
    """
    path: str
    digest: str
    size: int = 0  # in bytes

    def __repr__(self):
        return f"<FileRecord path={self.path}, digest={self.digest}>"


@dataclass
class DuplicateGroup:
    """
    Files sharing one digest, in discovery order.
    """
    digest: str
    files: List[FileRecord] = field(default_factory=list)

    @property
    def duplicate_count(self) -> int:
        return len(self.files)

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    def add_file(self, record: FileRecord) -> None:
        if record.digest != self.digest:
            raise ValueError("Cannot add file with different digest to a group.")
        self.files.append(record)

    def is_duplicate(self) -> bool:
        """True if this group contains at least two files."""
        return self.duplicate_count >= 2

    def render_duplicates(self) -> str:
        return ", ".join(self.paths)

    def __repr__(self):
        return f"<DuplicateGroup digest={self.digest}, count={len(self.files)}>"


@dataclass(frozen=True)
class Decision:
    """
    What happened to one file of a group. Never revised once emitted.
    """
    action: Action
    record: FileRecord
    group: DuplicateGroup
    reason: Optional[str] = None

    @property
    def path(self) -> str:
        return self.record.path

    def render(self) -> str:
        """Single audit line for this decision."""
        line = (f"{self.action.label} {self.record.path} "
                f"(Hash: {self.group.digest}, Duplicates: {self.group.render_duplicates()})")
        if self.action == Action.FAILED and self.reason:
            line += f" - {self.reason}"
        return line


# ======================
#  Run parameters
# ======================

@dataclass
class RunParams:
    """Parameters for one scan-and-clean run with validation."""
    scan_roots: List[str]
    delete_indices: List[int] = field(default_factory=list)
    algorithm: DigestAlgorithm = DigestAlgorithm.SHA256
    mode: PolicyMode = PolicyMode.AUTOMATIC
    dry_run: bool = True
    use_trash: bool = False
    jobs: int = 1
    log_path: Optional[str] = None

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.scan_roots:
            raise ConfigurationError("At least one directory must be specified.")

        if self.jobs < 1:
            raise ConfigurationError("Number of jobs must be at least 1")

        for root in self.scan_roots:
            if not Path(root).is_dir():
                logger.warning(f"Directory not found: {root}")

        if not self.reachable_roots:
            raise ConfigurationError("None of the specified directories exist.")

    @property
    def reachable_roots(self) -> List[str]:
        """Absolute paths of the scan roots that exist, in the order given."""
        return [str(Path(r).absolute()) for r in self.scan_roots if Path(r).is_dir()]

    @property
    def deletion_roots(self) -> List[str]:
        """
        Scan roots selected by 1-based index as eligible for deletion.
        Indices refer to scan_roots as given; out-of-range or unreachable entries are ignored.
        """
        roots = []
        for index in self.delete_indices:
            if not 1 <= index <= len(self.scan_roots):
                logger.warning(f"Ignoring invalid directory number: {index}")
                continue
            path = Path(self.scan_roots[index - 1])
            if not path.is_dir():
                continue
            resolved = str(path.resolve())
            if resolved not in roots:
                roots.append(resolved)
        return roots

    @staticmethod
    def parse_indices(selection: str) -> List[int]:
        """
        Parse a comma separated list of numbers ("1,3,4").
        Tokens that are not numbers are dropped with a warning.
        """
        indices = []
        for token in (selection or "").split(","):
            token = token.strip()
            if not token:
                continue
            try:
                indices.append(int(token))
            except ValueError:
                logger.warning(f"Invalid input: {token}")
        return indices


@dataclass
class RunStats:
    """
    Statistics collected during a run.
    """
    files_scanned: int = 0
    digest_failures: int = 0
    classification_notes: int = 0
    groups_total: int = 0
    duplicate_groups: int = 0
    bytes_reclaimed: int = 0
    total_time: float = 0.0
    actions: Dict[Action, int] = field(default_factory=lambda: {a: 0 for a in Action})

    def record_decision(self, decision: Decision) -> None:
        self.actions[decision.action] += 1
        if decision.action in (Action.DELETED, Action.DRY_RUN):
            self.bytes_reclaimed += decision.record.size

    @property
    def processed(self) -> int:
        """Files actually removed from disk."""
        return self.actions[Action.DELETED]

    def print_summary(self) -> str:
        lines = [
            "📊 Run Statistics:",
            f"Total Execution Time: {ConvertUtils.format_duration(int(self.total_time))}",
            f"Files hashed: {self.files_scanned} ({self.digest_failures} failed)",
            f"Duplicate groups: {self.duplicate_groups} of {self.groups_total}",
        ]
        for action in Action:
            if self.actions[action]:
                lines.append(f"{action.label}: {self.actions[action]}")
        if self.classification_notes:
            lines.append(f"Path comparison errors: {self.classification_notes}")
        lines.append(f"Space reclaimable: {ConvertUtils.bytes_to_human(self.bytes_reclaimed)}")
        return "\n".join(lines)
