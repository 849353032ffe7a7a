"""Heat-level optimization engine.

Pure numeric functions converting step durations between heat levels with the
empirical low:medium:high ratio of 5:3:1. Every conversion goes through the
low-heat equivalent: current-heat seconds → low seconds → target-heat seconds.
"""

import math
from typing import Iterable, List

from stovetop.models.models import CookingAction, HeatLevel, HeatOption, OptimizableStep, Step
from stovetop.parsing.taxonomy import detect_cooking_action, effective_duration


MIN_OPTION_SECONDS = 30
MIN_REMAINING_SECONDS = 15
MIN_OPTIMIZABLE_SECONDS = 60
MIN_WORTHWHILE_SAVINGS = 30

HEAT_OPTIMIZABLE_ACTIONS = frozenset({
    CookingAction.BOIL,
    CookingAction.SIMMER,
    CookingAction.FRY,
    CookingAction.STIR_FRY,
    CookingAction.HEAT,
    CookingAction.COOK,
    CookingAction.STEAM,
})

# Simmering at high heat changes texture and flavor
HIGH_HEAT_RISKY = frozenset({CookingAction.SIMMER})

HIGH_HEAT_TEXTURE_WARNING = "High heat may affect texture"
HIGH_HEAT_BURN_WARNING = "Watch closely to avoid burning"


def _ceil_seconds(value: float) -> int:
    # Round first so exact products like 240 * 0.2 never ceil up by one
    return math.ceil(round(value, 6))


def can_optimize(action: CookingAction) -> bool:
    return action in HEAT_OPTIMIZABLE_ACTIONS


def _safety(level: HeatLevel, action: CookingAction) -> tuple:
    if level is HeatLevel.HIGH and action in HIGH_HEAT_RISKY:
        return False, HIGH_HEAT_TEXTURE_WARNING
    if level is HeatLevel.HIGH and action is CookingAction.COOK:
        return True, HIGH_HEAT_BURN_WARNING
    return True, None


def heat_options(
    base_duration_seconds: int,
    action: CookingAction,
    base_heat: HeatLevel = HeatLevel.LOW,
) -> List[HeatOption]:
    """Duration of a step at every heat level.

    Args:
        base_duration_seconds: Planned duration at `base_heat`.
        action: Cooking action of the step (drives safety warnings).
        base_heat: Heat level the base duration was planned for.

    Returns:
        Exactly three options (low, medium, high), each at least 30 seconds.
    """
    low_equivalent = base_duration_seconds / base_heat.time_multiplier
    options = []
    for level in HeatLevel:
        is_safe, warning = _safety(level, action)
        options.append(
            HeatOption(
                heat_level=level,
                duration_seconds=max(_ceil_seconds(low_equivalent * level.time_multiplier), MIN_OPTION_SECONDS),
                is_safe=is_safe,
                warning=warning,
            )
        )
    return options


def remaining_time(
    elapsed: int,
    total_on_current: int,
    current_heat: HeatLevel,
    target_heat: HeatLevel,
) -> int:
    """Remaining seconds after switching heat part-way through a step.

    Args:
        elapsed: Seconds already cooked on `current_heat` (since the last switch).
        total_on_current: Seconds that were planned on `current_heat`.
        current_heat: Heat level being left.
        target_heat: Heat level being switched to.

    Returns:
        0 if nothing remained, otherwise the converted time, at least 15 seconds.
    """
    remaining = total_on_current - elapsed
    if remaining <= 0:
        return 0
    low_equivalent = remaining / current_heat.time_multiplier
    return max(_ceil_seconds(low_equivalent * target_heat.time_multiplier), MIN_REMAINING_SECONDS)


def remaining_options(
    elapsed: int,
    total_on_current: int,
    current_heat: HeatLevel,
    action: CookingAction,
) -> List[HeatOption]:
    """Remaining time at every heat level for a step already under way."""
    options = []
    for level in HeatLevel:
        is_safe, warning = _safety(level, action)
        options.append(
            HeatOption(
                heat_level=level,
                duration_seconds=remaining_time(elapsed, total_on_current, current_heat, level),
                is_safe=is_safe,
                warning=warning,
            )
        )
    return options


def high_heat_duration(low_duration_seconds: int) -> int:
    """Low-heat duration converted to high heat, at least 30 seconds."""
    high = _ceil_seconds(
        low_duration_seconds * HeatLevel.HIGH.time_multiplier / HeatLevel.LOW.time_multiplier
    )
    return max(high, MIN_OPTION_SECONDS)


def estimate_total_time(steps: Iterable[Step]) -> int:
    """Sum of explicit or suggested durations."""
    return sum(effective_duration(step) or 0 for step in steps)


def estimate_optimized_time(steps: Iterable[Step]) -> int:
    """Total time with every optimizable step moved to high heat."""
    total = 0
    for step in steps:
        action = detect_cooking_action(step.instruction)
        duration = effective_duration(step) or 0
        if can_optimize(action) and duration > 0:
            total += high_heat_duration(duration)
        else:
            total += duration
    return total


def optimizable_steps(steps: Iterable[Step]) -> List[OptimizableStep]:
    """Steps longer than a minute whose high-heat savings exceed 30 seconds."""
    candidates = []
    for step in steps:
        action = detect_cooking_action(step.instruction)
        duration = effective_duration(step) or 0
        if not can_optimize(action) or duration <= MIN_OPTIMIZABLE_SECONDS:
            continue
        optimized = high_heat_duration(duration)
        if duration - optimized <= MIN_WORTHWHILE_SAVINGS:
            continue
        candidates.append(
            OptimizableStep(step=step, original_duration=duration, optimized_duration=optimized, action=action)
        )
    return candidates
