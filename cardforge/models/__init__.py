from cardforge.models.card import CardRecord, PairKind, RenderUnit
from cardforge.models.failure import (
    BatchReport,
    DownloadCanceled,
    FailureDetail,
    FailureKind,
    FatalIOError,
    InvariantError,
    KnownError,
    MappingError,
    PairingError,
    RecordSkipped,
    RemoteSurfaceError,
    RemoteSurfaceTimeout,
    UnitOutcome,
    UnitStatus,
)
from cardforge.models.layout import PackingPlan, PaperLayout

__all__ = [
    "BatchReport",
    "CardRecord",
    "DownloadCanceled",
    "FailureDetail",
    "FailureKind",
    "FatalIOError",
    "InvariantError",
    "KnownError",
    "MappingError",
    "PackingPlan",
    "PairKind",
    "PairingError",
    "PaperLayout",
    "RecordSkipped",
    "RemoteSurfaceError",
    "RemoteSurfaceTimeout",
    "RenderUnit",
    "UnitOutcome",
    "UnitStatus",
]
