"""Unit tests for the guided-cooking state machine."""

import asyncio
from unittest.mock import Mock

import pytest

from stovetop.cooking.session import (
    ANNOUNCE,
    CookingSessionStateMachine,
    SessionPhase,
    TimerState,
)
from stovetop.cooking.voice import VoiceAssistant
from stovetop.models.models import CookingAction, HeatLevel, Recipe, Step
from stovetop.utils.config import config


def tick_n(session, n):
    for _ in range(n):
        session.tick()


def durations(options):
    return [option.duration_seconds for option in options]


@pytest.fixture
def recipe():
    return Recipe(
        name="Pasta",
        steps=[
            Step(instruction="Chop the onion", order=0),
            Step(instruction="Boil the pasta", duration_seconds=300, order=1),
            Step(instruction="Simmer the sauce", duration_seconds=120, order=2),
        ],
    )


@pytest.fixture
def session(recipe, fake_loop):
    return CookingSessionStateMachine(recipe, loop=fake_loop)


@pytest.fixture
def speaker():
    return Mock()


@pytest.fixture
def voiced_session(recipe, fake_loop, speaker):
    voice = VoiceAssistant(speaker=speaker, enabled=True)
    return CookingSessionStateMachine(recipe, voice=voice, loop=fake_loop)


class TestSetup:
    """Test construction and derived step properties."""

    def test_initial_state(self, session):
        """Test the first step, idle timer and preview."""
        assert session.current_index == 0
        assert session.phase is SessionPhase.COOKING
        assert session.timer_state is TimerState.IDLE
        assert session.current_heat is HeatLevel.LOW
        assert session.progress == pytest.approx(1 / 3)
        assert session.next_step_preview == "Boil the pasta"
        assert session.has_duration is False
        assert session.time_string == "00:00"

    def test_empty_recipe_rejected(self, fake_loop):
        """Test that a recipe without steps cannot be cooked."""
        with pytest.raises(ValueError, match="no steps"):
            CookingSessionStateMachine(Recipe(name="Empty"), loop=fake_loop)

    def test_steps_sorted_by_order(self, fake_loop):
        """Test that steps are walked in `order`, not list position."""
        recipe = Recipe(
            name="Tea",
            steps=[Step(instruction="Pour the tea", order=1), Step(instruction="Boil the water", order=0)],
        )
        session = CookingSessionStateMachine(recipe, loop=fake_loop)

        assert session.current_step.instruction == "Boil the water"
        assert session.effective_duration == 600

    def test_start_announces_after_delay(self, voiced_session, speaker, fake_loop):
        """Test that the first announcement waits for the configured delay."""
        voiced_session.start()
        speaker.speak.assert_not_called()
        assert voiced_session.deferred.is_pending(ANNOUNCE)

        fake_loop.advance(config.ANNOUNCE_DELAY_SECONDS)

        assert speaker.speak.call_args.args[0].text == "Step 1. Chop the onion"

    def test_stop_cancels_pending_announcement(self, voiced_session, speaker, fake_loop):
        """Test that stopping drops the scheduled announcement."""
        voiced_session.start()
        voiced_session.stop()
        fake_loop.advance(5)

        speaker.speak.assert_not_called()
        assert fake_loop.pending == []


class TestNavigation:
    """Test next/previous and timer auto-start with voice disabled."""

    def test_next_step_auto_starts_timer(self, session):
        """Test that a silent announcement completes immediately and starts the timer."""
        session.next_step()

        assert session.current_index == 1
        assert session.timer_state is TimerState.RUNNING
        assert session.time_remaining == 300
        assert session.time_string == "05:00"

    def test_tick_counts_down(self, session):
        """Test one tick per second."""
        session.next_step()
        session.tick()

        assert session.time_remaining == 299
        assert session.time_string == "04:59"

    def test_untimed_step_stays_idle(self, session, fake_loop):
        """Test that a step without a duration never starts a timer."""
        session.start()
        fake_loop.advance(config.ANNOUNCE_DELAY_SECONDS)
        session.toggle_timer()

        assert session.timer_state is TimerState.IDLE
        assert session.waiting_for_cook

    def test_previous_at_first_step(self, session):
        """Test that going back from the first step is a no-op."""
        session.previous_step()

        assert session.current_index == 0

    def test_previous_resets_timer(self, session):
        """Test that leaving a step discards its timer and heat."""
        session.next_step()
        tick_n(session, 5)
        session.switch_heat(HeatLevel.HIGH)

        session.previous_step()
        session.next_step()

        assert session.time_remaining == 300
        assert session.current_heat is HeatLevel.LOW

    def test_progress(self, session):
        """Test progress as (index + 1) / count."""
        session.next_step()
        session.next_step()

        assert session.progress == 1.0
        assert session.next_step_preview is None
        assert session.is_last_step


class TestExpiry:
    """Test timer expiry, auto-advance and review."""

    def test_expiry_starts_auto_advance(self, session):
        """Test that an expired timer counts down to the next step."""
        session.next_step()
        tick_n(session, 300)

        assert session.timer_state is TimerState.AUTO_ADVANCING
        assert session.auto_advance_countdown == config.AUTO_ADVANCE_SECONDS

        tick_n(session, config.AUTO_ADVANCE_SECONDS - 1)
        assert session.current_index == 1

        session.tick()
        assert session.current_index == 2
        assert session.timer_state is TimerState.RUNNING
        assert session.time_remaining == 120

    def test_last_step_waits_for_cook(self, session):
        """Test that the last step expires without auto-advancing."""
        session.next_step()
        session.next_step()
        tick_n(session, 120 + 30)

        assert session.current_index == 2
        assert session.timer_state is TimerState.EXPIRED
        assert session.auto_advance_countdown == 0
        assert session.waiting_for_cook

    def test_next_on_last_step_reviews(self, session):
        """Test that finishing the last step enters review and freezes navigation."""
        session.next_step()
        session.next_step()
        session.next_step()

        assert session.phase is SessionPhase.REVIEWING
        assert session.timer_state is TimerState.IDLE

        session.previous_step()
        session.next_step()
        assert session.current_index == 2
        assert session.phase is SessionPhase.REVIEWING

    def test_navigation_cancels_auto_advance(self, session):
        """Test that going back during the countdown stops it for good."""
        session.next_step()
        tick_n(session, 300)
        session.previous_step()
        tick_n(session, config.AUTO_ADVANCE_SECONDS + 1)

        assert session.current_index == 0
        assert session.auto_advance_countdown == 0

    def test_cancel_auto_advance(self, session):
        """Test that cancelling leaves the step expired."""
        session.next_step()
        tick_n(session, 300)
        session.cancel_auto_advance()
        tick_n(session, config.AUTO_ADVANCE_SECONDS + 1)

        assert session.current_index == 1
        assert session.timer_state is TimerState.EXPIRED


class TestTimerControls:
    """Test pause, resume and add-a-minute."""

    def test_toggle_pauses_and_resumes(self, session):
        """Test that a paused timer ignores ticks."""
        session.next_step()
        session.toggle_timer()
        tick_n(session, 5)

        assert session.timer_state is TimerState.PAUSED
        assert session.time_remaining == 300

        session.toggle_timer()
        session.tick()
        assert session.timer_state is TimerState.RUNNING
        assert session.time_remaining == 299

    def test_add_minute_while_running(self, session):
        """Test that a minute is added to the remaining time."""
        session.next_step()
        session.add_one_minute()

        assert session.time_remaining == 360
        assert session.timer_state is TimerState.RUNNING

    def test_add_minute_while_idle_seeds_timer(self, voiced_session):
        """Test that adding to an unstarted timer adds to the planned duration."""
        voiced_session.next_step()
        voiced_session.add_one_minute()

        assert voiced_session.timer_state is TimerState.IDLE
        assert voiced_session.time_remaining == 360

    def test_add_minute_after_expiry_pauses(self, session):
        """Test that an expired last step gets a paused extra minute."""
        session.next_step()
        session.next_step()
        tick_n(session, 120)
        session.add_one_minute()

        assert session.timer_state is TimerState.PAUSED
        assert session.time_remaining == 60

    def test_add_minute_on_untimed_step_ignored(self, session):
        """Test that a step without a timer gets no extra minute."""
        session.add_one_minute()

        assert session.time_remaining == 0
        assert session.time_string == "00:00"
        assert session.timer_state is TimerState.IDLE


class TestHeatSwitching:
    """Test mid-step heat changes."""

    def test_options_before_any_time_elapsed(self, session):
        """Test full-duration options at every level."""
        session.next_step()

        assert durations(session.heat_options) == [300, 180, 60]
        assert session.can_optimize_current_step

    def test_options_after_one_minute(self, session):
        """Test that options show remaining time once the timer has run."""
        session.next_step()
        tick_n(session, 60)

        assert durations(session.heat_options) == [240, 144, 48]

    def test_switch_high_then_back_to_low(self, session):
        """Test two switches, each measured from the previous one."""
        session.next_step()
        tick_n(session, 60)
        session.switch_heat(HeatLevel.HIGH)

        assert session.current_heat is HeatLevel.HIGH
        assert session.time_remaining == 48
        assert session.timer_state is TimerState.RUNNING

        tick_n(session, 10)
        session.switch_heat(HeatLevel.LOW)

        assert session.time_remaining == 190

    def test_switch_without_duration_is_noop(self, session):
        """Test that untimed steps ignore heat changes."""
        session.switch_heat(HeatLevel.HIGH)

        assert session.current_heat is HeatLevel.LOW
        assert session.time_remaining == 0
        assert session.heat_options == []

    def test_switch_before_start_seeds_converted_time(self, voiced_session):
        """Test that switching an unstarted timer converts the planned duration."""
        voiced_session.next_step()
        voiced_session.switch_heat(HeatLevel.HIGH)

        assert voiced_session.timer_state is TimerState.IDLE
        assert voiced_session.time_remaining == 60

        voiced_session.toggle_timer()
        assert voiced_session.timer_state is TimerState.RUNNING
        assert voiced_session.time_remaining == 60

    def test_switch_cancels_announcement(self, voiced_session, speaker):
        """Test that a heat change cuts the announcement so it never starts the timer."""
        voiced_session.next_step()
        announcement = speaker.speak.call_args.args[0]
        voiced_session.switch_heat(HeatLevel.HIGH)

        voiced_session.voice.utterance_finished(announcement.id)

        assert voiced_session.timer_state is TimerState.IDLE

    def test_pre_optimized_step_starts_on_high(self, recipe, fake_loop):
        """Test that steps chosen in the optimizer start on high with the shorter time."""
        session = CookingSessionStateMachine(recipe, optimized_step_orders={1}, loop=fake_loop)
        session.next_step()

        assert session.current_heat is HeatLevel.HIGH
        assert session.effective_duration == 60
        assert session.time_remaining == 60
        assert durations(session.heat_options) == [300, 180, 60]

        session.switch_heat(HeatLevel.LOW)
        assert session.time_remaining == 300


class TestVoiceCoupling:
    """Test that the timer waits for the announcement."""

    def test_timer_starts_when_announcement_finishes(self, voiced_session, speaker):
        """Test the auto-start after the spoken step."""
        voiced_session.next_step()
        assert voiced_session.timer_state is TimerState.IDLE
        assert not voiced_session.waiting_for_cook

        voiced_session.voice.utterance_finished(speaker.speak.call_args.args[0].id)

        assert voiced_session.timer_state is TimerState.RUNNING
        assert voiced_session.time_remaining == 300

    def test_skipped_announcement_never_starts_old_timer(self, voiced_session, speaker):
        """Test that finishing an announcement after navigating away does nothing."""
        voiced_session.next_step()
        stale = speaker.speak.call_args.args[0]
        voiced_session.next_step()

        voiced_session.voice.utterance_finished(stale.id)

        assert voiced_session.current_index == 2
        assert voiced_session.timer_state is TimerState.IDLE

    def test_pause_stops_speech(self, voiced_session, speaker):
        """Test that pausing cuts whatever is being said."""
        voiced_session.next_step()
        voiced_session.voice.utterance_finished(speaker.speak.call_args.args[0].id)
        tick_n(voiced_session, 5)
        speaker.stop.reset_mock()

        voiced_session.toggle_timer()

        assert voiced_session.timer_state is TimerState.PAUSED
        speaker.stop.assert_called()

    def test_alerts_follow_timer_after_switch_to_low(self, fake_loop, speaker):
        """Test the one-minute alert on an optimized step slowed back to low heat."""
        recipe = Recipe(name="Potatoes", steps=[Step(instruction="Boil the potatoes", duration_seconds=600, order=0)])
        voice = VoiceAssistant(speaker=speaker, enabled=True)
        session = CookingSessionStateMachine(recipe, optimized_step_orders={0}, voice=voice, loop=fake_loop)
        assert session.effective_duration == 120

        session.switch_heat(HeatLevel.LOW)
        session.toggle_timer()
        tick_n(session, 540)

        assert session.time_remaining == 60
        spoken = [c.args[0].text for c in speaker.speak.call_args_list]
        assert "One minute remaining." in spoken

    def test_hint_after_adding_a_minute(self, voiced_session, speaker):
        """Test that the context hint still plays when the timer was extended first."""
        voiced_session.next_step()
        voiced_session.voice.utterance_finished(speaker.speak.call_args.args[0].id)
        voiced_session.add_one_minute()

        tick_n(voiced_session, 5)

        assert speaker.speak.call_args.args[0].text == "You should start seeing bubbles forming. Maintain steady heat."


class TestSnapshot:
    """Test the render snapshot."""

    def test_snapshot(self, session):
        """Test every field for a running boil step."""
        session.next_step()
        session.tick()

        snapshot = session.snapshot()

        assert snapshot.current_index == 1
        assert snapshot.step_count == 3
        assert snapshot.instruction == "Boil the pasta"
        assert snapshot.action is CookingAction.BOIL
        assert snapshot.timer_state is TimerState.RUNNING
        assert snapshot.phase is SessionPhase.COOKING
        assert snapshot.time_string == "04:59"
        assert snapshot.heat_level is HeatLevel.LOW
        assert snapshot.can_optimize is True
        assert snapshot.progress == pytest.approx(2 / 3)
        assert snapshot.next_step_preview == "Simmer the sauce"
        assert snapshot.estimated_total_seconds == 420
        assert snapshot.estimated_optimized_seconds == 90
        assert snapshot.estimated_saved_seconds == 330


class TestRun:
    """Test the asyncio driver."""

    def test_hands_free_run_reaches_review(self, recipe, monkeypatch):
        """Test that a hands-free run walks every step to review."""
        monkeypatch.setattr(config, "ANNOUNCE_DELAY_SECONDS", 0)
        monkeypatch.setattr(config, "AUTO_ADVANCE_SECONDS", 2)
        session = CookingSessionStateMachine(recipe)

        asyncio.run(session.run(tick_interval=0, hands_free=True))

        assert session.phase is SessionPhase.REVIEWING
        assert session.current_index == 2
