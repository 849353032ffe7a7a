"""Voice side-channel for guided cooking.

Advisory only: nothing here can block or alter timer correctness. Two layers:

- `timer_alerts()`: pure function from one timer tick and the per-step alert
  state to the utterances due on that tick and the next alert state.
- `VoiceAssistant`: owns the single speech channel. Starting an utterance
  cancels whatever is in flight (most recent intent wins, no queueing). The
  output device reports each utterance as finished or cancelled; a finished
  step announcement is what auto-starts the step timer.
"""

import itertools
from typing import Any, Callable, List, Optional, Protocol, Tuple

from pydantic import BaseModel, ConfigDict

from stovetop.models.models import CookingAction, HeatLevel
from stovetop.parsing.durations import format_spoken_duration
from stovetop.utils.config import config
from stovetop.utils.logger import logger


CONTEXT_HINTS: dict[CookingAction, str] = {
    CookingAction.BOIL: "You should start seeing bubbles forming. Maintain steady heat.",
    CookingAction.SIMMER: "You should see gentle bubbles, not a rolling boil.",
    CookingAction.FRY: "Listen for a light sizzling sound. Avoid burning.",
    CookingAction.STIR_FRY: "Listen for a light sizzling sound. Avoid burning.",
    CookingAction.STEAM: "Steam should be consistently rising from the pot.",
    CookingAction.COOK: "Stir occasionally to prevent sticking.",
    CookingAction.HEAT: "Do not let it smoke.",
    CookingAction.BAKE: "Ensure your oven has preheated fully.",
    CookingAction.GRILL: "Watch for even browning on both sides.",
}

HINT_WINDOW = (5, 10)
ONE_MINUTE_MIN_TOTAL = 300
COUNTDOWN_FROM = 5


def context_hint(action: CookingAction) -> Optional[str]:
    return CONTEXT_HINTS.get(action)


class AlertState(BaseModel):
    """One-time alert flags for a single step. A different step index means fresh flags."""

    model_config = ConfigDict(frozen=True)

    step_index: int = -1
    hint_spoken: bool = False
    one_minute_spoken: bool = False
    ten_seconds_spoken: bool = False


class TickInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_index: int
    time_remaining: int
    total_duration: int
    is_running: bool
    action: CookingAction


class Alert(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    quick: bool = False


def timer_alerts(tick: TickInput, alerts: AlertState) -> Tuple[List[Alert], AlertState]:
    """Utterances due on this tick and the updated alert state.

    Args:
        tick: Timer state right after the one-second decrement.
        alerts: Alert flags so far; ignored if they belong to another step.

    Returns:
        (alerts to speak in order, new alert state).
    """
    if alerts.step_index != tick.step_index:
        alerts = AlertState(step_index=tick.step_index)
    if not tick.is_running:
        return [], alerts

    due: List[Alert] = []
    remaining = tick.time_remaining
    elapsed = tick.total_duration - remaining

    if HINT_WINDOW[0] <= elapsed <= HINT_WINDOW[1] and not alerts.hint_spoken:
        alerts = alerts.model_copy(update={"hint_spoken": True})
        hint = context_hint(tick.action)
        if hint:
            due.append(Alert(text=hint))

    if tick.total_duration > ONE_MINUTE_MIN_TOTAL and remaining == 60 and not alerts.one_minute_spoken:
        alerts = alerts.model_copy(update={"one_minute_spoken": True})
        due.append(Alert(text="One minute remaining."))

    if remaining == 10 and not alerts.ten_seconds_spoken:
        alerts = alerts.model_copy(update={"ten_seconds_spoken": True})
        due.append(Alert(text="10 seconds remaining."))

    if 1 <= remaining <= COUNTDOWN_FROM:
        due.append(Alert(text=str(remaining), quick=True))

    if remaining == 0:
        due.append(Alert(text="Step complete."))

    return due, alerts


class Utterance(BaseModel):
    """Text plus delivery hints handed to the speech device."""

    model_config = ConfigDict(frozen=True)

    id: int
    text: str
    language: str
    rate: float
    pitch: float
    pre_delay: float = 0.0
    post_delay: float = 0.0
    is_announcement: bool = False


class Speaker(Protocol):
    """Speech output device.

    Reports every utterance back exactly once through the bound listener's
    `utterance_finished(id)` or `utterance_cancelled(id)`.
    """

    def bind(self, listener: Any) -> None: ...

    def speak(self, utterance: Utterance) -> None: ...

    def stop(self) -> None: ...


class VoiceAssistant:
    """Single speech channel for a guided-cooking session."""

    def __init__(
        self,
        speaker: Optional[Speaker] = None,
        enabled: Optional[bool] = None,
        on_step_announcement_completed: Optional[Callable[[], None]] = None,
    ) -> None:
        self.speaker = speaker
        self.enabled = (config.VOICE_ENABLED if enabled is None else enabled) and speaker is not None
        self.on_step_announcement_completed = on_step_announcement_completed
        self.alerts = AlertState()
        self._current: Optional[Utterance] = None
        self._ids = itertools.count(1)
        if speaker is not None:
            speaker.bind(self)

    @property
    def is_speaking(self) -> bool:
        return self._current is not None

    def announce_step(
        self,
        index: int,
        instruction: str,
        action: CookingAction,
        duration_seconds: Optional[int],
    ) -> None:
        """Read a step aloud. With voice disabled the completion callback fires immediately."""
        self.reset_for_step(index)

        if not self.enabled:
            self._announcement_completed()
            return

        text = f"Step {index + 1}. {instruction}"
        if duration_seconds:
            text += f" for {format_spoken_duration(duration_seconds)}."
        logger.debug(f"Announcing step {index + 1} ({action.value})")
        self._speak(text, announcement=True)

    def timer_tick(self, tick: TickInput) -> None:
        if not self.enabled:
            return
        due, self.alerts = timer_alerts(tick, self.alerts)
        for alert in due:
            self._speak(alert.text, quick=alert.quick)

    def announce_heat_change(self, new_heat: HeatLevel, new_remaining_seconds: int) -> None:
        if not self.enabled:
            return
        self.stop_speaking()
        self._speak(
            f"Heat changed to {new_heat.label}. "
            f"New remaining time: {format_spoken_duration(new_remaining_seconds)}."
        )

    def stop_speaking(self) -> None:
        """Cut the current utterance immediately (skip, pause, heat change)."""
        if self._current is None:
            return
        self._current = None
        if self.speaker is not None:
            self.speaker.stop()

    def reset_for_step(self, index: int = -1) -> None:
        self.alerts = AlertState(step_index=index)

    def utterance_finished(self, utterance_id: int) -> None:
        current = self._current
        if current is None or current.id != utterance_id:
            return
        self._current = None
        if current.is_announcement:
            self._announcement_completed()

    def utterance_cancelled(self, utterance_id: int) -> None:
        if self._current is not None and self._current.id == utterance_id:
            self._current = None

    def _announcement_completed(self) -> None:
        if self.on_step_announcement_completed is not None:
            self.on_step_announcement_completed()

    def _speak(self, text: str, announcement: bool = False, quick: bool = False) -> None:
        self.stop_speaking()
        if quick:
            utterance = Utterance(
                id=next(self._ids),
                text=text,
                language=config.SPEECH_LANGUAGE,
                rate=config.COUNTDOWN_SPEECH_RATE,
                pitch=config.COUNTDOWN_SPEECH_PITCH,
            )
        else:
            utterance = Utterance(
                id=next(self._ids),
                text=text,
                language=config.SPEECH_LANGUAGE,
                rate=config.SPEECH_RATE,
                pitch=config.SPEECH_PITCH,
                pre_delay=0.1,
                post_delay=0.2,
                is_announcement=announcement,
            )
        self._current = utterance
        self.speaker.speak(utterance)


class LoggingSpeaker:
    """Speech device that writes utterances to the log.

    Given an event loop it also simulates playback time (about 2.5 words per
    second at rate 1.0) and reports completion; `stop()` reports cancellation.
    Without a loop utterances stay in flight until reported by the caller.
    """

    WORDS_PER_SECOND = 2.5

    def __init__(self, loop: Optional[Any] = None) -> None:
        self.loop = loop
        self.listener: Optional[Any] = None
        self.spoken: List[Utterance] = []
        self._playing: Optional[Utterance] = None
        self._handle: Optional[Any] = None

    def bind(self, listener: Any) -> None:
        self.listener = listener

    def playback_seconds(self, utterance: Utterance) -> float:
        words = max(len(utterance.text.split()), 1)
        return utterance.pre_delay + words / (self.WORDS_PER_SECOND * utterance.rate) + utterance.post_delay

    def speak(self, utterance: Utterance) -> None:
        self.stop()
        self.spoken.append(utterance)
        self._playing = utterance
        logger.info(f"🔊 {utterance.text}")
        if self.loop is not None:
            self._handle = self.loop.call_later(self.playback_seconds(utterance), self._finish, utterance.id)

    def stop(self) -> None:
        playing, self._playing = self._playing, None
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if playing is not None and self.listener is not None:
            self.listener.utterance_cancelled(playing.id)

    def _finish(self, utterance_id: int) -> None:
        if self._playing is None or self._playing.id != utterance_id:
            return
        self._playing = None
        self._handle = None
        if self.listener is not None:
            self.listener.utterance_finished(utterance_id)
