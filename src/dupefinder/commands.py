"""
Unified command orchestrator for a scan-and-clean run.
This is the SINGLE source of truth for the workflow: the CLI only gathers input and prints.
No terminal I/O here: prompts and progress are injected callables.
"""
import os
import time
import logging
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Callable, Tuple, NamedTuple, Iterable, Iterator
from dupefinder.core.models import (
    DuplicateGroup, Decision, RunParams, RunStats, DigestError, ClassificationError,
)
from dupefinder.core.interfaces import AuditSink, Confirmation, Remover
from dupefinder.core.scanner import FileScannerImpl
from dupefinder.core.hasher import HasherImpl, get_algorithm
from dupefinder.core.grouper import GroupingTable
from dupefinder.core.classifier import MembershipClassifier
from dupefinder.core.policy import DeletionPolicyEngine
from dupefinder.services.file_service import FileService

logger = logging.getLogger(__name__)

STAGE_HASHING = "hashing"
STAGE_GROUPS = "groups"

# Digests queued per hashing thread
PENDING_PER_WORKER = 4


class _DigestResult(NamedTuple):
    path: str
    digest: Optional[str]
    size: int
    error: Optional[DigestError]


class DuplicateCleanupCommand:
    """
    Orchestrates the entire workflow:
    1. Enumerate files under the scan roots
    2. Hash every file (optionally in a thread pool) and fill the grouping table
    3. After ALL files are hashed: classify each duplicate group and apply the policy

    Usage:
        params = RunParams(scan_roots=["/a", "/b"], delete_indices=[2])
        with AuditLog() as audit:
            groups, stats = DuplicateCleanupCommand().execute(params, audit)

    Returns duplicate groups and statistics; every decision was already
    written to the sink while the run progressed.
    """

    def __init__(self):
        self._decisions: List[Decision] = []
        self._stats = RunStats()
        self._sink: Optional[AuditSink] = None

    def execute(
            self,
            params: RunParams,
            sink: AuditSink,
            confirmation: Optional[Confirmation] = None,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None,
            remover: Optional[Remover] = None
    ) -> Tuple[List[DuplicateGroup], RunStats]:
        """
        Execute one run with given parameters.

        Args:
            params: Validated run parameters
            sink: Audit sink receiving decisions and notes
            confirmation: Required for manual mode
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None
            stopped_flag: () -> bool (returns True if operation should stop)
            remover: Overrides the removal backend chosen by params.use_trash

        Raises:
            ConfigurationError: before any file is hashed
        """
        start_time = time.time()
        self._decisions = []
        self._stats = RunStats()
        self._sink = sink

        # Fail on configuration problems before touching any file
        engine = DeletionPolicyEngine(
            mode=params.mode,
            dry_run=params.dry_run,
            remover=remover or FileService.get_remover(params.use_trash),
            confirmation=confirmation,
            sink=sink,
        )
        classifier = MembershipClassifier(params.deletion_roots, on_error=self._on_classification_error)
        logger.info(f"Deletion directories: {classifier.deletion_roots}")

        # Step 1 + 2: enumerate and hash
        scanner = FileScannerImpl(params.reachable_roots)
        hasher = HasherImpl(get_algorithm(params.algorithm))
        table = GroupingTable()

        total = scanner.count(stopped_flag) if progress_callback else None
        completed = self._fill_table(scanner, hasher, table, params.jobs, total,
                                     progress_callback, stopped_flag)
        if not completed:
            # Group membership is incomplete; deciding now could delete the last copy
            logger.warning("Run stopped during hashing, no files were processed")
            self._stats.total_time = time.time() - start_time
            return [], self._stats

        # Step 3: decide per duplicate group
        duplicates = []
        for group in table.groups():
            self._stats.groups_total += 1
            if group.is_duplicate():
                duplicates.append(group)
        self._stats.duplicate_groups = len(duplicates)

        for index, group in enumerate(duplicates, 1):
            if stopped_flag and stopped_flag():
                logger.warning("Run stopped between groups")
                break
            membership = classifier.split(group)
            for decision in engine.evaluate(group, membership.in_scope, membership.unresolved):
                self._decisions.append(decision)
                self._stats.record_decision(decision)
            if progress_callback:
                progress_callback(STAGE_GROUPS, index, len(duplicates))

        self._stats.total_time = time.time() - start_time
        return duplicates, self._stats

    def _fill_table(
            self,
            scanner: FileScannerImpl,
            hasher: HasherImpl,
            table: GroupingTable,
            jobs: int,
            total: Optional[int],
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]],
            stopped_flag: Optional[Callable[[], bool]]
    ) -> bool:
        """
        Hash every enumerated file and record it. Results are published from this
        thread in discovery order, also when hashing runs in a pool.
        Returns False if stopped before all files were hashed.
        """
        paths = scanner.scan(stopped_flag=stopped_flag)

        def digest(path: str) -> _DigestResult:
            try:
                size = os.path.getsize(path)
                return _DigestResult(path, hasher.compute_digest(path), size, None)
            except DigestError as e:
                return _DigestResult(path, None, 0, e)
            except OSError as e:
                return _DigestResult(path, None, 0, DigestError(path, str(e)))

        if jobs <= 1:
            results = map(digest, paths)
            return self._publish_all(results, table, total, progress_callback, stopped_flag)

        executor = ThreadPoolExecutor(max_workers=jobs)
        try:
            results = self._bounded_map(executor, digest, paths, jobs * PENDING_PER_WORKER)
            completed = self._publish_all(results, table, total, progress_callback, stopped_flag)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)
        return completed

    @staticmethod
    def _bounded_map(executor: ThreadPoolExecutor, fn, items: Iterable[str],
                     window: int) -> Iterator[_DigestResult]:
        """
        Like executor.map, in submission order, but pulls from `items` only as
        results are consumed: at most `window` digests are pending at a time.
        """
        pending = deque()
        for item in items:
            pending.append(executor.submit(fn, item))
            if len(pending) >= window:
                yield pending.popleft().result()
        while pending:
            yield pending.popleft().result()

    def _publish_all(self, results, table: GroupingTable, total: Optional[int],
                     progress_callback, stopped_flag) -> bool:
        for result in results:
            if stopped_flag and stopped_flag():
                return False
            self._stats.files_scanned += 1
            if result.error is not None:
                self._on_digest_error(result.error)
            else:
                table.record(result.path, result.digest, result.size)
            if progress_callback:
                progress_callback(STAGE_HASHING, self._stats.files_scanned, total)
        return not (stopped_flag and stopped_flag())

    def _on_digest_error(self, error: DigestError) -> None:
        self._stats.digest_failures += 1
        logger.warning(str(error))
        self._sink.note(str(error))

    def _on_classification_error(self, error: ClassificationError) -> None:
        self._stats.classification_notes += 1
        self._sink.note(str(error))

    def get_decisions(self) -> List[Decision]:
        """Decisions of the last execution, in the order they were made."""
        return self._decisions.copy()
