"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/policy.py
Deletion policy engine: decides what happens to every file of a duplicate group.

MODES
-----
MANUAL    : The confirmation collaborator picks the in-scope file to KEEP (1..N).
            0 or an invalid answer skips the whole group.
AUTOMATIC : No interaction. If no copy is confirmed outside the deletion directories
            the first in-scope one (discovery order) is kept; otherwise all in-scope
            copies are deleted because a copy survives outside.

Dry-run only changes whether a deletion is performed or just recorded. The choice
of what to keep is the same in both cases.

Files outside the deletion directories are never touched and are logged as kept
whenever the group has in-scope members. Files whose location could not be
resolved are logged as skipped and never count as the surviving copy.
"""

import logging
from typing import List, Optional, Sequence, Set
from dupefinder.core.models import (
    Action, Decision, DuplicateGroup, FileRecord, PolicyMode, ConfigurationError,
)
from dupefinder.core.interfaces import AuditSink, Confirmation, Remover

logger = logging.getLogger(__name__)


class DeletionPolicyEngine:
    """
    Applies the active policy to one group at a time.

    Args:
        mode: MANUAL or AUTOMATIC
        dry_run: Record intended deletions instead of performing them
        remover: Callable that removes a file (see FileService.get_remover)
        confirmation: Required in MANUAL mode
        sink: Receives each decision as soon as it is made
    """

    def __init__(
            self,
            mode: PolicyMode,
            dry_run: bool,
            remover: Remover,
            confirmation: Optional[Confirmation] = None,
            sink: Optional[AuditSink] = None
    ):
        if mode == PolicyMode.MANUAL and confirmation is None:
            raise ConfigurationError("Manual mode requires a confirmation handler")
        self.mode = mode
        self.dry_run = dry_run
        self.remover = remover
        self.confirmation = confirmation
        self.sink = sink

    def evaluate(self, group: DuplicateGroup, in_scope: List[FileRecord],
                 unresolved: Sequence[FileRecord] = ()) -> List[Decision]:
        """
        Produce one terminal decision per file of the group.
        Members in `unresolved` could not be classified: they are skipped and
        never count as a surviving copy.
        Deletion failures are recorded and never stop the remaining files.
        """
        if not in_scope:
            return [self._emit(Decision(Action.SKIPPED, record, group)) for record in group.files]

        in_scope_paths = {r.path for r in in_scope}
        unresolved_paths = {r.path for r in unresolved}

        if self.mode == PolicyMode.MANUAL:
            keeper = self._ask_keeper(group, in_scope)
            skip_group = keeper is None
        else:
            keeper = self._auto_keeper(group, in_scope, unresolved_paths)
            skip_group = False

        decisions = []
        for record in group.files:
            if record.path in unresolved_paths:
                decisions.append(self._emit(Decision(Action.SKIPPED, record, group)))
            elif record.path not in in_scope_paths:
                decisions.append(self._emit(Decision(Action.KEPT, record, group)))
            elif skip_group:
                decisions.append(self._emit(Decision(Action.SKIPPED, record, group)))
            elif keeper is not None and record.path == keeper.path:
                decisions.append(self._emit(Decision(Action.KEPT, record, group)))
            else:
                decisions.append(self._emit(self._delete(record, group)))
        return decisions

    def _ask_keeper(self, group: DuplicateGroup, in_scope: List[FileRecord]) -> Optional[FileRecord]:
        """Returns the in-scope file chosen to keep, or None to skip the group."""
        answer = self.confirmation(group, list(in_scope))
        if not isinstance(answer, int) or isinstance(answer, bool):
            logger.debug(f"Invalid selection {answer!r} for {group.digest}, skipping")
            return None
        if answer <= 0 or answer > len(in_scope):
            return None
        return in_scope[answer - 1]

    @staticmethod
    def _auto_keeper(group: DuplicateGroup, in_scope: List[FileRecord],
                     unresolved_paths: Set[str]) -> Optional[FileRecord]:
        """First in-scope file unless a copy is confirmed outside the deletion directories."""
        survivors = group.duplicate_count - len(in_scope) - len(unresolved_paths)
        if survivors <= 0:
            return in_scope[0]
        return None

    def _delete(self, record: FileRecord, group: DuplicateGroup) -> Decision:
        if self.dry_run:
            return Decision(Action.DRY_RUN, record, group)
        try:
            self.remover(record.path)
        except (OSError, RuntimeError) as e:
            logger.error(f"Error deleting file: {record.path} - {e}")
            return Decision(Action.FAILED, record, group, reason=str(e))
        logger.info(f"Deleted {record.path}")
        return Decision(Action.DELETED, record, group)

    def _emit(self, decision: Decision) -> Decision:
        if self.sink is not None:
            self.sink.emit(decision)
        return decision

