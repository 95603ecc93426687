"""
Core duplicate cleanup engine: scanner, hasher, grouping table, classifier and deletion policy.

This package contains the decision-making foundation of dupefinder:
- FileScannerImpl: recursive traversal of several scan roots
- HasherImpl: MD5 / SHA-256 / xxHash64 full-content digests
- GroupingTable: digest -> files in discovery order
- MembershipClassifier: canonical-path containment in deletion directories
- DeletionPolicyEngine: manual/automatic keep-or-delete decisions with dry-run
- Models: FileRecord, DuplicateGroup, Decision, RunParams and errors

All components are pure Python with no terminal I/O: prompts are injected callables.
"""

from .scanner import FileScannerImpl
from .grouper import GroupingTable
from .hasher import (
    HasherImpl, Md5AlgorithmImpl, Sha256AlgorithmImpl, XXHashAlgorithmImpl, get_algorithm)
from .classifier import MembershipClassifier, Membership, is_path_in_directory
from .policy import DeletionPolicyEngine
from .models import (
    FileRecord, DuplicateGroup, Decision, Action, DigestAlgorithm, PolicyMode,
    RunParams, RunStats, DupeFinderError, ConfigurationError, DigestError, ClassificationError)

__all__ = [
    "FileScannerImpl",
    "GroupingTable",
    "HasherImpl",
    "Md5AlgorithmImpl",
    "Sha256AlgorithmImpl",
    "XXHashAlgorithmImpl",
    "get_algorithm",
    "MembershipClassifier",
    "Membership",
    "is_path_in_directory",
    "DeletionPolicyEngine",
    "FileRecord",
    "DuplicateGroup",
    "Decision",
    "Action",
    "DigestAlgorithm",
    "PolicyMode",
    "RunParams",
    "RunStats",
    "DupeFinderError",
    "ConfigurationError",
    "DigestError",
    "ClassificationError",
]
