from datetime import date, datetime, timedelta
from typing import Optional, Union

import pytz

from ..models import PlantTheme

DateLike = Union[date, datetime, str]


class TimeHelper:
    """A static helper class for standardized time and date operations. All day boundaries use US/Eastern."""
    EST = pytz.timezone('US/Eastern')

    _SEASONS_BY_MONTH = {
        3: PlantTheme.SPRING, 4: PlantTheme.SPRING, 5: PlantTheme.SPRING,
        6: PlantTheme.SUMMER, 7: PlantTheme.SUMMER, 8: PlantTheme.SUMMER,
        9: PlantTheme.FALL, 10: PlantTheme.FALL, 11: PlantTheme.FALL,
        12: PlantTheme.WINTER, 1: PlantTheme.WINTER, 2: PlantTheme.WINTER,
    }

    @staticmethod
    def now() -> datetime:
        return datetime.now(TimeHelper.EST)

    @staticmethod
    def today() -> date:
        return TimeHelper.now().date()

    @staticmethod
    def parse_datetime(value: str) -> datetime:
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(TimeHelper.EST)
        return parsed

    @staticmethod
    def parse_date(value: str) -> date:
        if len(value) == 10:
            return date.fromisoformat(value)
        return TimeHelper.parse_datetime(value).date()

    @staticmethod
    def to_date(value: DateLike) -> date:
        """Collapses a date, datetime or ISO string to its civil day."""
        if isinstance(value, str):
            return TimeHelper.parse_date(value)
        if isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(TimeHelper.EST)
            return value.date()
        return value

    @staticmethod
    def date_str(value: DateLike) -> str:
        return TimeHelper.to_date(value).isoformat()

    @staticmethod
    def start_of_day(value: DateLike) -> datetime:
        return TimeHelper.EST.localize(datetime.combine(TimeHelper.to_date(value), datetime.min.time()))

    @staticmethod
    def is_same_day(a: Optional[DateLike], b: Optional[DateLike]) -> bool:
        if a is None or b is None:
            return False
        return TimeHelper.to_date(a) == TimeHelper.to_date(b)

    @staticmethod
    def yesterday(value: DateLike) -> date:
        return TimeHelper.to_date(value) - timedelta(days=1)

    @staticmethod
    def season_for(value: DateLike) -> PlantTheme:
        return TimeHelper._SEASONS_BY_MONTH[TimeHelper.to_date(value).month]

    @staticmethod
    def next_day_start(value: Optional[DateLike] = None) -> datetime:
        day = TimeHelper.to_date(value) if value is not None else TimeHelper.today()
        return TimeHelper.start_of_day(day + timedelta(days=1))
