"""
Failure classification for batch card generation.

Every problem the batch can run into is a KnownError with a FailureKind,
so the orchestrator can log it, attach it to the unit's outcome and decide
whether the run continues.

Propagation policy:
- Per-unit errors (pairing, mapping, surface timeout or error, canceled
  download) never abort the batch.
- FatalIOError aborts the run with a non-zero exit.
- InvariantError is a programming error and always propagates.

There is no automatic retry of a failed unit within a run. Re-running the
batch resumes by skipping units whose output already exists.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input rows
    RECORD_SKIPPED = "record_skipped"
    PAIRING_ERROR = "pairing_error"
    MAPPING_ERROR = "mapping_error"

    # Card creator session
    SURFACE_TIMEOUT = "surface_timeout"
    SURFACE_ERROR = "surface_error"
    DOWNLOAD_CANCELED = "download_canceled"

    # Setup
    FATAL_IO = "fatal_io"

    # Internal errors
    INVARIANT_VIOLATION = "invariant_violation"


class UnitStatus(str, Enum):
    """Terminal status of one render unit within a batch."""

    COMPLETED = "completed"
    ALREADY_COMPLETE = "already_complete"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="Operator-facing explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )


class UnitOutcome(BaseModel):
    """Result of processing one render unit."""

    number: int = Field(..., description="Sequence number of the unit's top record")
    name: str = Field(..., description="Display name of the unit")
    status: UnitStatus
    output_path: str | None = Field(
        default=None,
        description="Exported artifact (present when completed)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present when skipped or failed)",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail for reporting."""
        return FailureDetail(kind=self.kind, message=self.message, detail=self.detail)


class RecordSkipped(KnownError):
    """A row lacks a required field and is treated as a template/separator row."""

    def __init__(self, row_index: int, missing: str):
        self.row_index = row_index
        self.missing = missing
        super().__init__(
            kind=FailureKind.RECORD_SKIPPED,
            message=f"Row {row_index} skipped: missing {missing}",
        )


class PairingError(KnownError):
    """A split/fuse group key does not identify exactly two records."""

    def __init__(
        self,
        pair_kind: str,
        key: str,
        numbers: list[int],
        reason: str | None = None,
    ):
        self.pair_kind = pair_kind
        self.key = key
        self.numbers = numbers
        if reason is None:
            if len(numbers) == 1:
                reason = "has no partner"
            else:
                reason = f"is shared by {len(numbers)} records"
        super().__init__(
            kind=FailureKind.PAIRING_ERROR,
            message=f"{pair_kind} key {key!r} {reason}",
            detail=f"records: {', '.join(f'#{n}' for n in numbers)}",
        )


class MappingError(KnownError):
    """A color or rarity token has no entry in the lookup tables."""

    def __init__(self, field: str, token: str, number: int, name: str):
        self.field = field
        self.token = token
        self.number = number
        self.name = name
        super().__init__(
            kind=FailureKind.MAPPING_ERROR,
            message=f"Unknown {field} {token!r} on #{number} {name}",
        )


class RemoteSurfaceTimeout(KnownError):
    """A bounded wait against the card creator expired."""

    def __init__(self, step: str, timeout: float):
        self.step = step
        self.timeout = timeout
        super().__init__(
            kind=FailureKind.SURFACE_TIMEOUT,
            message=f"Timed out after {timeout:g}s waiting for {step}",
        )


class RemoteSurfaceError(KnownError):
    """A card creator action failed for a reason other than a timeout."""

    def __init__(self, step: str, reason: str | None = None):
        self.step = step
        super().__init__(
            kind=FailureKind.SURFACE_ERROR,
            message=f"Card creator failed during {step}",
            detail=reason,
        )


class DownloadCanceled(KnownError):
    """The card creator reported the export as canceled."""

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__(
            kind=FailureKind.DOWNLOAD_CANCELED,
            message="Export download was canceled",
            detail=reason,
        )


class FatalIOError(KnownError):
    """
    Setup-time failure that aborts the whole run.

    Raised for a missing or unparseable input sheet, an unwritable output
    directory, or an unreachable card creator.
    """

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(kind=FailureKind.FATAL_IO, message=message, detail=detail)


class InvariantError(KnownError):
    """A processing step was attempted out of order."""

    def __init__(self, message: str):
        super().__init__(kind=FailureKind.INVARIANT_VIOLATION, message=message)


class BatchReport(BaseModel):
    """Outcome of one batch run, in unit order."""

    outcomes: list[UnitOutcome] = Field(default_factory=list)
    pairing_errors: list[FailureDetail] = Field(
        default_factory=list,
        description="Records that never became units",
    )

    def with_status(self, status: UnitStatus) -> list[UnitOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def completed(self) -> list[UnitOutcome]:
        return self.with_status(UnitStatus.COMPLETED)

    @property
    def already_complete(self) -> list[UnitOutcome]:
        return self.with_status(UnitStatus.ALREADY_COMPLETE)

    @property
    def skipped(self) -> list[UnitOutcome]:
        return self.with_status(UnitStatus.SKIPPED)

    @property
    def failed(self) -> list[UnitOutcome]:
        return self.with_status(UnitStatus.FAILED)
