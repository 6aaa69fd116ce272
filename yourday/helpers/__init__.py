from .time_helper import TimeHelper
from .plant_helper import PlantHelper
from .gacha_helper import GachaHelper
from .sales_helper import SalesHelper
from .level_helper import LevelHelper
from .lock_helper import LockHelper
from .logging_helper import LoggingHelper
from .data_helper import DataHelper
from .game_state_helper import GameStateHelper
from .garden_helper import GardenHelper
from .task_helper import TaskHelper
from .point_helper import PointHelper
from .leaderboard_helper import LeaderboardHelper
from .session_helper import SessionHelper
from .sync_helper import SyncHelper, RemoteStore, ConfigRemoteStore
