"""Tests for the Pomodo session engine.

Covers: start/pause/tick/reset/skip, the work/break sequencing rule and
cycle index, auto-start, configure() validation, signal ordering, and the
completed-work-session counter.
"""

import pytest

from pomodo.timer.engine import (
    SessionEngine, EngineConfig, ConfigurationError, Phase,
    DEFAULT_DURATIONS, SESSIONS_UNTIL_LONG_BREAK,
)

from helpers import SignalCollector, complete_phase, tick_n


# ═══════════════════════════════════════════════════════════════════════════
#  INITIAL STATE / CONTROLS
# ═══════════════════════════════════════════════════════════════════════════


class TestControls:

    def test_initial_state(self, engine):
        assert engine.phase == Phase.WORK
        assert engine.cycle_index == 1
        assert engine.remaining == DEFAULT_DURATIONS[Phase.WORK]
        assert engine.is_running is False
        assert engine.sessions_until_long_break == SESSIONS_UNTIL_LONG_BREAK

    def test_start_sets_running(self, engine):
        engine.start()
        assert engine.is_running is True

    def test_start_twice_same_as_once(self, engine):
        started = SignalCollector()
        running = SignalCollector()
        engine.phase_started.connect(started)
        engine.running_changed.connect(running)

        engine.start()
        engine.start()

        assert engine.is_running is True
        assert len(started) == 1
        assert running.items == [True]

    def test_start_emits_phase_started(self, engine):
        c = SignalCollector()
        engine.phase_started.connect(c)
        engine.start()
        assert c.last == Phase.WORK

    def test_pause_stops_running(self, engine):
        engine.start()
        engine.pause()
        assert engine.is_running is False

    def test_pause_is_noop_when_idle(self, engine):
        c = SignalCollector()
        engine.running_changed.connect(c)
        engine.pause()
        assert engine.is_running is False
        assert len(c) == 0

    def test_tick_decrements_remaining(self, engine):
        engine.start()
        engine.tick()
        assert engine.remaining == DEFAULT_DURATIONS[Phase.WORK] - 1

    def test_tick_is_noop_when_not_running(self, engine):
        c = SignalCollector()
        engine.ticked.connect(c)
        engine.tick()
        assert engine.remaining == DEFAULT_DURATIONS[Phase.WORK]
        assert len(c) == 0

    def test_tick_is_noop_after_pause(self, engine):
        engine.start()
        engine.tick()
        engine.pause()
        before = engine.remaining
        tick_n(engine, 10)
        assert engine.remaining == before

    def test_ticked_signal_carries_remaining_and_phase(self, engine):
        c = SignalCollector()
        engine.ticked.connect(c)
        engine.start()
        engine.tick()
        assert c.last == (DEFAULT_DURATIONS[Phase.WORK] - 1, Phase.WORK)

    def test_percent_complete(self, qapp):
        engine = SessionEngine(EngineConfig(work_duration=100))
        assert engine.percent_complete == pytest.approx(0.0)
        engine.start()
        tick_n(engine, 50)
        assert engine.percent_complete == pytest.approx(0.5)


# ═══════════════════════════════════════════════════════════════════════════
#  RESET
# ═══════════════════════════════════════════════════════════════════════════


class TestReset:

    def test_reset_restores_full_duration_and_pauses(self, engine):
        engine.start()
        tick_n(engine, 30)
        engine.reset()
        assert engine.is_running is False
        assert engine.remaining == DEFAULT_DURATIONS[Phase.WORK]

    def test_reset_keeps_phase_and_cycle(self, engine):
        complete_phase(engine)          # work 1 -> short break
        engine.start()
        tick_n(engine, 10)
        engine.reset()
        assert engine.phase == Phase.SHORT_BREAK
        assert engine.cycle_index == 2
        assert engine.remaining == DEFAULT_DURATIONS[Phase.SHORT_BREAK]

    def test_reset_emits_running_changed_only_when_running(self, engine):
        c = SignalCollector()
        engine.running_changed.connect(c)
        engine.reset()
        assert len(c) == 0
        engine.start()
        engine.reset()
        assert c.items == [True, False]


# ═══════════════════════════════════════════════════════════════════════════
#  SEQUENCING / CYCLE INDEX
# ═══════════════════════════════════════════════════════════════════════════


class TestSequencing:

    def test_scenario_first_work_session(self, qapp):
        engine = SessionEngine(EngineConfig(
            work_duration=1500, short_break_duration=300,
            long_break_duration=900, sessions_until_long_break=4,
        ))
        c = SignalCollector()
        engine.phase_completed.connect(c)

        engine.start()
        tick_n(engine, 1500)

        assert c.items == [(Phase.WORK, Phase.SHORT_BREAK)]
        assert engine.phase == Phase.SHORT_BREAK
        assert engine.cycle_index == 2
        assert engine.remaining == 300

    def test_scenario_fourth_work_session_goes_long(self, qapp):
        engine = SessionEngine(EngineConfig(
            work_duration=1500, short_break_duration=300,
            long_break_duration=900, sessions_until_long_break=4,
        ))
        c = SignalCollector()
        engine.phase_completed.connect(c)

        for _ in range(3):
            engine.start()
            tick_n(engine, 1500)    # work
            engine.start()
            tick_n(engine, 300)     # short break

        engine.start()
        tick_n(engine, 1500)        # 4th work

        work_completions = [t for t in c.items if t[0] == Phase.WORK]
        assert work_completions[:3] == [(Phase.WORK, Phase.SHORT_BREAK)] * 3
        assert work_completions[3] == (Phase.WORK, Phase.LONG_BREAK)
        assert engine.remaining == 900

    @pytest.mark.parametrize("n", [2, 3, 4, 6])
    def test_long_break_after_nth_work_session(self, qapp, n):
        engine = SessionEngine(EngineConfig(
            work_duration=3, short_break_duration=1,
            long_break_duration=2, sessions_until_long_break=n,
        ))
        c = SignalCollector()
        engine.phase_completed.connect(c)

        for i in range(1, n + 1):
            assert engine.phase == Phase.WORK
            complete_phase(engine)
            expected = Phase.LONG_BREAK if i == n else Phase.SHORT_BREAK
            assert c.last == (Phase.WORK, expected)
            complete_phase(engine)
            assert engine.phase == Phase.WORK

        assert engine.cycle_index == 1
        assert c.last == (Phase.LONG_BREAK, Phase.WORK)

    def test_cycle_index_increments_on_work_completion(self, engine):
        complete_phase(engine)
        assert engine.phase == Phase.SHORT_BREAK
        assert engine.cycle_index == 2

    def test_cycle_index_unchanged_leaving_short_break(self, engine):
        complete_phase(engine)
        complete_phase(engine)
        assert engine.phase == Phase.WORK
        assert engine.cycle_index == 2

    def test_cycle_index_stays_in_range(self, engine):
        for _ in range(3 * SESSIONS_UNTIL_LONG_BREAK * 2):
            complete_phase(engine)
            assert 1 <= engine.cycle_index <= SESSIONS_UNTIL_LONG_BREAK

    def test_new_phase_loads_full_duration(self, engine):
        complete_phase(engine)
        assert engine.remaining == DEFAULT_DURATIONS[Phase.SHORT_BREAK]

    def test_remaining_never_negative(self, short_engine):
        short_engine.start()
        for _ in range(20):
            short_engine.tick()
            assert 0 <= short_engine.remaining <= short_engine.total_duration
            if not short_engine.is_running:
                short_engine.start()

    def test_final_tick_reports_zero_before_completion(self, short_engine):
        events = []
        short_engine.ticked.connect(lambda r, p: events.append(("tick", r, p)))
        short_engine.phase_completed.connect(lambda a, b: events.append(("done", a, b)))
        short_engine.start()
        tick_n(short_engine, 5)
        assert events[-2] == ("tick", 0, Phase.WORK)
        assert events[-1] == ("done", Phase.WORK, Phase.SHORT_BREAK)

    def test_observer_sees_post_transition_state(self, short_engine):
        seen = {}

        def on_completed(previous, new):
            seen["phase"] = short_engine.phase
            seen["remaining"] = short_engine.remaining
            seen["cycle"] = short_engine.cycle_index
            seen["running"] = short_engine.is_running

        short_engine.phase_completed.connect(on_completed)
        short_engine.start()
        tick_n(short_engine, 5)
        assert seen == {"phase": Phase.SHORT_BREAK, "remaining": 2, "cycle": 2, "running": False}

    def test_multiple_observers_called_in_order(self, short_engine):
        order = []
        short_engine.phase_completed.connect(lambda a, b: order.append("first"))
        short_engine.phase_completed.connect(lambda a, b: order.append("second"))
        complete_phase(short_engine)
        assert order == ["first", "second"]


# ═══════════════════════════════════════════════════════════════════════════
#  AUTO-START
# ═══════════════════════════════════════════════════════════════════════════


class TestAutoStart:

    def test_without_auto_start_engine_stops_after_completion(self, engine):
        complete_phase(engine)
        assert engine.is_running is False
        before = engine.remaining
        engine.tick()
        assert engine.remaining == before

    def test_explicit_start_needed_to_resume(self, engine):
        complete_phase(engine)
        engine.start()
        engine.tick()
        assert engine.remaining == DEFAULT_DURATIONS[Phase.SHORT_BREAK] - 1

    def test_auto_start_keeps_running(self, engine_auto):
        complete_phase(engine_auto)
        assert engine_auto.phase == Phase.SHORT_BREAK
        assert engine_auto.is_running is True
        engine_auto.tick()
        assert engine_auto.remaining == DEFAULT_DURATIONS[Phase.SHORT_BREAK] - 1

    def test_auto_start_emits_phase_started_after_completed(self, engine_auto):
        events = []
        engine_auto.phase_completed.connect(lambda a, b: events.append(("completed", b)))
        engine_auto.phase_started.connect(lambda p: events.append(("started", p)))
        complete_phase(engine_auto)
        assert events == [
            ("started", Phase.WORK),
            ("completed", Phase.SHORT_BREAK),
            ("started", Phase.SHORT_BREAK),
        ]

    def test_running_changed_false_after_completion(self, engine):
        c = SignalCollector()
        engine.running_changed.connect(c)
        complete_phase(engine)
        assert c.items == [True, False]


# ═══════════════════════════════════════════════════════════════════════════
#  SKIP
# ═══════════════════════════════════════════════════════════════════════════


class TestSkip:

    def test_skip_during_work_is_noop(self, engine):
        c = SignalCollector()
        engine.phase_completed.connect(c)
        engine.start()
        engine.tick()
        engine.skip()
        assert engine.phase == Phase.WORK
        assert engine.remaining == DEFAULT_DURATIONS[Phase.WORK] - 1
        assert engine.is_running is True
        assert len(c) == 0

    def test_skip_short_break(self, engine):
        complete_phase(engine)
        c = SignalCollector()
        engine.phase_completed.connect(c)
        engine.skip()
        assert c.items == [(Phase.SHORT_BREAK, Phase.WORK)]
        assert engine.phase == Phase.WORK
        assert engine.cycle_index == 2
        assert engine.remaining == DEFAULT_DURATIONS[Phase.WORK]

    def test_skip_mid_break_regardless_of_remaining(self, engine):
        complete_phase(engine)
        engine.start()
        tick_n(engine, 7)
        engine.skip()
        assert engine.phase == Phase.WORK

    def test_skip_long_break_resets_cycle(self, qapp):
        engine = SessionEngine(EngineConfig(sessions_until_long_break=2))
        complete_phase(engine)   # work 1
        complete_phase(engine)   # short break
        complete_phase(engine)   # work 2 -> long break
        assert engine.phase == Phase.LONG_BREAK
        engine.skip()
        assert engine.phase == Phase.WORK
        assert engine.cycle_index == 1

    def test_skip_follows_auto_start(self, engine_auto):
        complete_phase(engine_auto)
        engine_auto.pause()
        engine_auto.skip()
        assert engine_auto.phase == Phase.WORK
        assert engine_auto.is_running is True


# ═══════════════════════════════════════════════════════════════════════════
#  CONFIGURE
# ═══════════════════════════════════════════════════════════════════════════


class TestConfigure:

    def test_configure_when_idle_reloads_duration(self, engine):
        engine.configure(EngineConfig(work_duration=50 * 60))
        assert engine.remaining == 50 * 60

    def test_configure_keeps_phase_and_cycle(self, engine):
        complete_phase(engine)
        engine.configure(EngineConfig(short_break_duration=120))
        assert engine.phase == Phase.SHORT_BREAK
        assert engine.cycle_index == 2
        assert engine.remaining == 120

    def test_configure_clamps_cycle_index_to_smaller_cycle(self, engine):
        for _ in range(6):
            complete_phase(engine)
        assert engine.phase == Phase.WORK
        assert engine.cycle_index == 4
        engine.configure(EngineConfig(sessions_until_long_break=2))
        assert engine.cycle_index == 2
        complete_phase(engine)
        assert engine.phase == Phase.LONG_BREAK
        assert engine.cycle_index == 2
        complete_phase(engine)
        assert engine.cycle_index == 1

    def test_configure_larger_cycle_keeps_index(self, engine):
        complete_phase(engine)
        engine.configure(EngineConfig(sessions_until_long_break=6))
        assert engine.cycle_index == 2

    def test_configure_while_running_keeps_progress(self, engine):
        engine.start()
        tick_n(engine, 10)
        engine.configure(EngineConfig(work_duration=50 * 60))
        assert engine.remaining == DEFAULT_DURATIONS[Phase.WORK] - 10
        assert engine.is_running is True

    def test_configure_while_running_clamps_to_new_duration(self, engine):
        engine.start()
        engine.configure(EngineConfig(work_duration=60))
        assert engine.remaining == 60

    @pytest.mark.parametrize("changes", [
        {"work_duration": 0},
        {"short_break_duration": -5},
        {"long_break_duration": 0},
        {"sessions_until_long_break": 1},
    ])
    def test_invalid_config_rejected_without_mutation(self, engine, changes):
        engine.start()
        engine.tick()
        before = (engine.config, engine.remaining, engine.phase, engine.is_running)
        with pytest.raises(ConfigurationError):
            engine.configure(EngineConfig().with_changes(**changes))
        assert (engine.config, engine.remaining, engine.phase, engine.is_running) == before

    def test_invalid_initial_config_rejected(self, qapp):
        with pytest.raises(ConfigurationError):
            SessionEngine(EngineConfig(work_duration=0))

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)

    def test_lowering_sessions_below_index_gives_long_break(self, engine):
        for _ in range(4):
            complete_phase(engine)   # cycle index now 3, phase WORK
        assert engine.cycle_index == 3
        engine.configure(EngineConfig(sessions_until_long_break=2))
        complete_phase(engine)
        assert engine.phase == Phase.LONG_BREAK


# ═══════════════════════════════════════════════════════════════════════════
#  COMPLETED WORK SESSIONS
# ═══════════════════════════════════════════════════════════════════════════


class TestCompletedCounter:

    def test_seeded_value(self, qapp):
        engine = SessionEngine(completed_work_sessions=7)
        assert engine.completed_work_sessions == 7

    def test_increments_on_work_only(self, engine):
        complete_phase(engine)
        assert engine.completed_work_sessions == 1
        complete_phase(engine)   # break
        assert engine.completed_work_sessions == 1

    def test_skip_does_not_count_as_work(self, engine):
        complete_phase(engine)
        engine.skip()
        assert engine.completed_work_sessions == 1
