"""Guided-cooking state machine: per-step timer, heat switching, voice coupling and auto-advance.

All mutation happens on one event loop, from user intents, the one-second tick
or speech-device callbacks. Time-based side effects are either tick-driven
(timer, auto-advance countdown) or registered in `DeferredCalls` so that
navigation can cancel them before they fire.

Heat tracking works in segments: `_segment_total` is the number of seconds
planned on the current heat level since the timer was seeded or the heat was
last switched, so `_segment_total - time_remaining` is always the time spent on
the heat level being left.
"""

import asyncio
from enum import Enum
from typing import Annotated, Any, List, Optional, Set

from pydantic import BaseModel, Field

from stovetop.cooking.deferred import DeferredCalls
from stovetop.cooking.heat import (
    can_optimize,
    estimate_optimized_time,
    estimate_total_time,
    heat_options,
    high_heat_duration,
    remaining_options,
    remaining_time,
)
from stovetop.cooking.voice import TickInput, VoiceAssistant
from stovetop.models.models import CookingAction, HeatLevel, HeatOption, Recipe, Step
from stovetop.parsing.durations import format_clock
from stovetop.parsing.taxonomy import detect_cooking_action, effective_duration
from stovetop.utils.config import config
from stovetop.utils.logger import logger


ANNOUNCE = "announce"


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"
    AUTO_ADVANCING = "auto_advancing"


class SessionPhase(str, Enum):
    COOKING = "cooking"
    REVIEWING = "reviewing"


class SessionSnapshot(BaseModel):
    """Everything a UI needs to render the current step."""

    current_index: Annotated[int, Field(ge=0)]
    step_count: Annotated[int, Field(ge=1)]
    instruction: str
    action: CookingAction
    timer_state: TimerState
    phase: SessionPhase
    time_string: Annotated[str, Field(description="Remaining or planned time as MM:SS")]
    time_remaining: int
    heat_level: HeatLevel
    heat_options: List[HeatOption] = Field(default_factory=list)
    can_optimize: bool = False
    progress: Annotated[float, Field(ge=0.0, le=1.0)]
    auto_advance_countdown: int = 0
    next_step_preview: Optional[str] = None
    estimated_total_seconds: int = 0
    estimated_optimized_seconds: int = 0
    estimated_saved_seconds: int = 0


class CookingSessionStateMachine:
    """Walks a recipe step by step.

    Args:
        recipe: Recipe to cook; must have at least one step.
        optimized_step_orders: `Step.order` values pre-selected for high heat.
        voice: Voice channel; a silent, disabled one is created when omitted.
        loop: Event loop for deferred calls (defaults to the running loop).
    """

    def __init__(
        self,
        recipe: Recipe,
        optimized_step_orders: Optional[Set[int]] = None,
        voice: Optional[VoiceAssistant] = None,
        loop: Optional[Any] = None,
    ) -> None:
        if not recipe.steps:
            raise ValueError(f"Recipe '{recipe.name}' has no steps to cook")

        self.recipe = recipe
        self.steps: List[Step] = recipe.sorted_steps
        self.optimized_step_orders: Set[int] = set(optimized_step_orders or ())
        self.voice = voice if voice is not None else VoiceAssistant(enabled=False)
        self.voice.on_step_announcement_completed = self._on_announcement_completed
        self.deferred = DeferredCalls(loop)

        self.current_index = 0
        self.phase = SessionPhase.COOKING
        self.timer_state = TimerState.IDLE
        self.time_remaining = 0
        self.auto_advance_countdown = 0
        self.current_heat = self.default_heat
        self._segment_total = 0
        self._stopped = False

    # ------------------------------------------------------------------
    # Current step
    # ------------------------------------------------------------------

    @property
    def current_step(self) -> Step:
        return self.steps[self.current_index]

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def is_last_step(self) -> bool:
        return self.current_index == self.step_count - 1

    @property
    def current_action(self) -> CookingAction:
        return detect_cooking_action(self.current_step.instruction)

    @property
    def is_current_step_optimized(self) -> bool:
        return self.current_step.order in self.optimized_step_orders

    @property
    def default_heat(self) -> HeatLevel:
        return HeatLevel.HIGH if self.is_current_step_optimized else HeatLevel.LOW

    @property
    def raw_base_duration(self) -> Optional[int]:
        """Low-heat duration of the step, explicit or suggested."""
        return effective_duration(self.current_step)

    @property
    def effective_duration(self) -> Optional[int]:
        """Planned duration at the step's default heat; None when the step has no timer."""
        base = self.raw_base_duration
        if not base:
            return None
        if self.is_current_step_optimized:
            return high_heat_duration(base)
        return base

    @property
    def has_duration(self) -> bool:
        return self.effective_duration is not None

    @property
    def elapsed_on_current_heat(self) -> int:
        return max(self._segment_total - self.time_remaining, 0)

    @property
    def can_optimize_current_step(self) -> bool:
        return self.has_duration and can_optimize(self.current_action)

    @property
    def heat_options(self) -> List[HeatOption]:
        base = self.raw_base_duration
        if base is None:
            return []
        if self._segment_total > 0 and (self.elapsed_on_current_heat > 0 or self.current_heat is not self.default_heat):
            return remaining_options(
                self.elapsed_on_current_heat, self._segment_total, self.current_heat, self.current_action
            )
        return heat_options(base, self.current_action)

    @property
    def progress(self) -> float:
        return (self.current_index + 1) / self.step_count

    @property
    def next_step_preview(self) -> Optional[str]:
        if self.is_last_step:
            return None
        return self.steps[self.current_index + 1].instruction

    @property
    def time_string(self) -> str:
        if self.timer_state is TimerState.RUNNING or self.time_remaining > 0:
            return format_clock(self.time_remaining)
        return format_clock(self.effective_duration or 0)

    @property
    def estimated_total_seconds(self) -> int:
        return estimate_total_time(self.steps)

    @property
    def estimated_optimized_seconds(self) -> int:
        return estimate_optimized_time(self.steps)

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Announce the first step after the configured delay."""
        self.deferred.schedule(ANNOUNCE, config.ANNOUNCE_DELAY_SECONDS, self._announce_current_step)
        logger.info(
            f"🍳 Guided cooking started: '{self.recipe.name}' ({self.step_count} steps)",
            extra={"recipe": self.recipe.name},
        )

    def next_step(self) -> None:
        if self.phase is SessionPhase.REVIEWING:
            return
        self.cancel_auto_advance()
        self.voice.stop_speaking()
        if self.is_last_step:
            self._finish()
            return
        self._enter_step(self.current_index + 1)

    def previous_step(self) -> None:
        if self.phase is SessionPhase.REVIEWING:
            return
        self.cancel_auto_advance()
        self.voice.stop_speaking()
        if self.current_index > 0:
            self._enter_step(self.current_index - 1)

    def toggle_timer(self) -> None:
        """Start or resume the timer, or pause it while running."""
        self.cancel_auto_advance()
        if self.timer_state is TimerState.RUNNING:
            self.timer_state = TimerState.PAUSED
            self.voice.stop_speaking()
            logger.debug("Timer paused", extra={"step_index": self.current_index})
            return
        if not self.has_duration:
            return
        if self.time_remaining == 0:
            self._seed_timer()
        self.timer_state = TimerState.RUNNING
        logger.debug("Timer running", extra={"step_index": self.current_index})

    def add_one_minute(self) -> None:
        self.cancel_auto_advance()
        if not self.has_duration:
            return
        if self.timer_state is TimerState.IDLE and self.time_remaining == 0:
            self._seed_timer()
        self.time_remaining += 60
        self._segment_total += 60
        if self.timer_state is TimerState.EXPIRED:
            self.timer_state = TimerState.PAUSED

    def switch_heat(self, level: HeatLevel) -> None:
        """Change heat mid-step and convert the remaining time."""
        duration = self.effective_duration
        if duration is None:
            logger.debug("Heat switch ignored: step has no duration", extra={"step_index": self.current_index})
            return

        self.cancel_auto_advance()
        self.deferred.cancel(ANNOUNCE)
        self.voice.stop_speaking()

        if self._segment_total > 0:
            total_on_current, elapsed = self._segment_total, self.elapsed_on_current_heat
        else:
            total_on_current, elapsed = self._planned_on_current_heat(), 0

        remaining = remaining_time(elapsed, total_on_current, self.current_heat, level)
        logger.info(
            f"🔥 Heat {self.current_heat.value} → {level.value}: {elapsed}s cooked, {remaining}s remaining",
            extra={"step_index": self.current_index},
        )

        self.current_heat = level
        self.time_remaining = remaining
        self._segment_total = remaining
        self.voice.announce_heat_change(level, remaining)

    def cancel_auto_advance(self) -> None:
        if self.timer_state is TimerState.AUTO_ADVANCING:
            self.timer_state = TimerState.EXPIRED
            logger.debug("Auto-advance cancelled", extra={"step_index": self.current_index})
        self.auto_advance_countdown = 0

    def stop(self) -> None:
        """Stop the session driver, pending calls and speech."""
        self._stopped = True
        self.deferred.cancel_all()
        self.voice.stop_speaking()

    # ------------------------------------------------------------------
    # Tick source
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance the session by one second."""
        if self.timer_state is TimerState.RUNNING and self.time_remaining > 0:
            self.time_remaining -= 1
            self.voice.timer_tick(
                TickInput(
                    step_index=self.current_index,
                    time_remaining=self.time_remaining,
                    total_duration=self._segment_total,
                    is_running=True,
                    action=self.current_action,
                )
            )
            if self.time_remaining == 0:
                self._expire()
        elif self.timer_state is TimerState.AUTO_ADVANCING and self.auto_advance_countdown > 0:
            self.auto_advance_countdown -= 1
            if self.auto_advance_countdown == 0:
                self.timer_state = TimerState.EXPIRED
                logger.info("⏭️ Auto-advancing to the next step", extra={"step_index": self.current_index})
                self.next_step()

    async def run(self, tick_interval: Optional[float] = None, hands_free: bool = False) -> None:
        """Drive the session until it reaches review or is stopped.

        Args:
            tick_interval: Seconds between ticks (defaults to TICK_INTERVAL_SECONDS).
            hands_free: Press "next" whenever the session waits for the cook:
                on a step without a timer once it has been announced, and on
                the last step once its timer has expired.
        """
        interval = config.TICK_INTERVAL_SECONDS if tick_interval is None else tick_interval
        self._stopped = False
        self.start()
        while self.phase is SessionPhase.COOKING and not self._stopped:
            await asyncio.sleep(interval)
            self.tick()
            if hands_free and self.waiting_for_cook:
                self.next_step()
        self.deferred.cancel_all()

    @property
    def waiting_for_cook(self) -> bool:
        """True when nothing but a "next" intent can move the session forward."""
        if self.phase is not SessionPhase.COOKING or self.deferred.is_pending(ANNOUNCE):
            return False
        if self.voice.is_speaking:
            return False
        if not self.has_duration:
            return True
        return self.is_last_step and self.timer_state is TimerState.EXPIRED

    def snapshot(self) -> SessionSnapshot:
        total = self.estimated_total_seconds
        optimized = self.estimated_optimized_seconds
        return SessionSnapshot(
            current_index=self.current_index,
            step_count=self.step_count,
            instruction=self.current_step.instruction,
            action=self.current_action,
            timer_state=self.timer_state,
            phase=self.phase,
            time_string=self.time_string,
            time_remaining=self.time_remaining,
            heat_level=self.current_heat,
            heat_options=self.heat_options,
            can_optimize=self.can_optimize_current_step,
            progress=self.progress,
            auto_advance_countdown=self.auto_advance_countdown,
            next_step_preview=self.next_step_preview,
            estimated_total_seconds=total,
            estimated_optimized_seconds=optimized,
            estimated_saved_seconds=total - optimized,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _planned_on_current_heat(self) -> int:
        duration = self.effective_duration or 0
        if self.current_heat is self.default_heat:
            return duration
        return remaining_time(0, duration, self.default_heat, self.current_heat)

    def _seed_timer(self) -> None:
        self.time_remaining = self._planned_on_current_heat()
        self._segment_total = self.time_remaining

    def _enter_step(self, index: int) -> None:
        self.deferred.cancel(ANNOUNCE)
        self.current_index = index
        self.timer_state = TimerState.IDLE
        self.time_remaining = 0
        self._segment_total = 0
        self.auto_advance_countdown = 0
        self.current_heat = self.default_heat
        self.voice.reset_for_step(index)
        logger.info(
            f"👉 Step {index + 1}/{self.step_count}: {self.current_step.instruction}",
            extra={"step_index": index},
        )
        self._announce_current_step()

    def _announce_current_step(self) -> None:
        self.voice.announce_step(
            self.current_index,
            self.current_step.instruction,
            self.current_action,
            self.effective_duration,
        )

    def _on_announcement_completed(self) -> None:
        if self.phase is not SessionPhase.COOKING or not self.has_duration:
            return
        if self.timer_state is TimerState.RUNNING:
            return
        if self.time_remaining == 0:
            self._seed_timer()
        self.timer_state = TimerState.RUNNING
        logger.debug("Timer auto-started after announcement", extra={"step_index": self.current_index})

    def _expire(self) -> None:
        self.timer_state = TimerState.EXPIRED
        logger.info("⏰ Step timer finished", extra={"step_index": self.current_index})
        if not self.is_last_step:
            self.timer_state = TimerState.AUTO_ADVANCING
            self.auto_advance_countdown = config.AUTO_ADVANCE_SECONDS

    def _finish(self) -> None:
        self.phase = SessionPhase.REVIEWING
        self.timer_state = TimerState.IDLE
        self.deferred.cancel_all()
        logger.info(f"✅ All steps done for '{self.recipe.name}'", extra={"recipe": self.recipe.name})
