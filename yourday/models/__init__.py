from .assets import (
    Rarity,
    PlantTheme,
    GridPosition,
    PlantBlueprint,
)
from .user_data import (
    PlacedPlant,
    PlayerLedger,
    PlayerLedgerView,
)
from .tasks import (
    Subtask,
    TodoTask,
    TaskPointResult,
    DailySummary,
)
from .remote import (
    LeaderboardEntry,
    LedgerDocument,
)
from .results import (
    ActionResult,
    ErrorKind,
    FailureReason,
    SyncError,
)

__all__ = [
    "Rarity",
    "PlantTheme",
    "GridPosition",
    "PlantBlueprint",
    "PlacedPlant",
    "PlayerLedger",
    "PlayerLedgerView",
    "Subtask",
    "TodoTask",
    "TaskPointResult",
    "DailySummary",
    "LeaderboardEntry",
    "LedgerDocument",
    "ActionResult",
    "ErrorKind",
    "FailureReason",
    "SyncError",
]
