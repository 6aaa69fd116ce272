from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CATALOG_GAP = "catalog_gap"
    SYNC = "sync"


class FailureReason(str, Enum):
    INSUFFICIENT_POINTS = "insufficient_points"
    INSUFFICIENT_INVENTORY = "insufficient_inventory"
    INVALID_QUANTITY = "invalid_quantity"
    POSITION_OCCUPIED = "position_occupied"
    POSITION_OUT_OF_RANGE = "position_out_of_range"
    NO_FERTILIZER = "no_fertilizer"
    ALREADY_GROWN = "already_grown"
    NOT_GROWN = "not_grown"
    ALREADY_WATERED = "already_watered"
    MAX_PLOTS_REACHED = "max_plots_reached"
    PLANT_NOT_FOUND = "plant_not_found"
    BLUEPRINT_NOT_FOUND = "blueprint_not_found"
    EMPTY_CATALOG_FOR_THEME = "empty_catalog_for_theme"
    SYNC_FAILED = "sync_failed"
    STALE_SESSION = "stale_session"

    @property
    def kind(self) -> ErrorKind:
        if self in (FailureReason.PLANT_NOT_FOUND, FailureReason.BLUEPRINT_NOT_FOUND):
            return ErrorKind.NOT_FOUND
        if self is FailureReason.EMPTY_CATALOG_FOR_THEME:
            return ErrorKind.CATALOG_GAP
        if self in (FailureReason.SYNC_FAILED, FailureReason.STALE_SESSION):
            return ErrorKind.SYNC
        return ErrorKind.VALIDATION


class SyncError(Exception):
    """Raised by a remote store when a push, pull or query cannot complete."""


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a ledger operation. A failed result means nothing was changed."""
    success: bool
    message: str
    reason: Optional[FailureReason] = None
    value: Any = None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.reason.kind if self.reason else None

    @classmethod
    def ok(cls, message: str, value: Any = None) -> "ActionResult":
        return cls(True, message, None, value)

    @classmethod
    def fail(cls, reason: FailureReason, message: str) -> "ActionResult":
        return cls(False, message, reason)

    def __bool__(self) -> bool:
        return self.success
