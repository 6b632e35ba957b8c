"""League error taxonomy.

Validation-type errors are raised before anything touches the store.
``PartialWriteError`` is the only error that can follow committed writes.
"""

from __future__ import annotations


class LeagueError(Exception):
    """Base class for league domain errors."""


class SubmissionValidationError(LeagueError):
    """Input rejected before any write (missing fields, empty batch, bad ids...)."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("; ".join(problems))


class MalformedBackupError(LeagueError):
    """Backup payload is not a usable league export. Nothing was written."""


class AdminProtectedError(LeagueError):
    """The target player is linked to an administrator account."""


class ImmutableRecordError(LeagueError):
    """Attempted to overwrite a tournament record that already exists."""


class NotFoundError(LeagueError):
    """No document with the requested id."""


class PartialWriteError(LeagueError):
    """A staged write sequence failed after some documents were committed.

    Committed documents are not rolled back. ``committed`` and ``failed`` hold
    ``"collection/id"`` keys in the order they were attempted.
    """

    def __init__(
        self,
        committed: list[str],
        failed: list[str],
        skipped: list[str] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.committed = committed
        self.failed = failed
        self.skipped = skipped or []
        self.cause = cause
        msg = (
            f"{len(failed)} write(s) failed after {len(committed)} committed"
            f" ({len(self.skipped)} not attempted)"
        )
        if cause is not None:
            msg = f"{msg}: {cause}"
        super().__init__(msg)
