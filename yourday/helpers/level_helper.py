from typing import Tuple

from .sales_helper import round_half_up

_FIXED_XP_REQUIREMENTS = {1: 100, 2: 300, 3: 400, 4: 500}

PLOT_COST_PER_LEVEL = 20


class LevelHelper:
    """The XP curve and the plot capacity it unlocks."""

    @staticmethod
    def xp_required_for_next_level(level: int) -> float:
        if level in _FIXED_XP_REQUIREMENTS:
            return float(_FIXED_XP_REQUIREMENTS[level])
        if level < 1:
            return float(_FIXED_XP_REQUIREMENTS[1])
        # Level 5 restarts at 300 and doubles each level after.
        return round_half_up(300 * 2 ** (level - 5))

    @staticmethod
    def max_plots_for_level(level: int) -> int:
        if level <= 1:
            return 3
        return level * 3

    @staticmethod
    def cost_to_buy_next_plot(level: int) -> float:
        return float(PLOT_COST_PER_LEVEL * level)

    @staticmethod
    def apply_xp(level: int, current_xp: float, points: float) -> Tuple[bool, int, float]:
        """
        Adds XP and levels up while the remainder covers the next requirement.
        Returns (leveled_up, new_level, new_xp). Non-positive points change nothing.
        """

        if points <= 0:
            return False, level, current_xp

        new_level = level
        new_xp = current_xp + points
        leveled_up = False

        requirement = LevelHelper.xp_required_for_next_level(new_level)
        while new_xp >= requirement:
            new_xp -= requirement
            new_level += 1
            leveled_up = True
            requirement = LevelHelper.xp_required_for_next_level(new_level)

        return leveled_up, new_level, new_xp
