"""Tests for grid_cleaning_sim.model.engine."""

import pytest

from grid_cleaning_sim.config import (
    LayoutConfig,
    SimulationConfig,
    WallSpec,
)
from grid_cleaning_sim.model.agent import AgentCategory, MissionKind
from grid_cleaning_sim.model.engine import (
    MOVEMENT_TIMELINE,
    SimulationEngine,
    parse_category,
    parse_int,
    parse_kind,
)


class TestParsing:
    def test_parse_int(self) -> None:
        assert parse_int(None) is None
        assert parse_int("  ") is None
        assert parse_int(" 7 ") == 7
        assert parse_int(3) == 3
        with pytest.raises(ValueError):
            parse_int("seven")
        with pytest.raises(ValueError):
            parse_int(True)

    @pytest.mark.parametrize("label,kind", [
        ("Straight Line", MissionKind.STRAIGHT_LINE),
        ("jumping", MissionKind.JUMPING),
        ("Free Movement", MissionKind.FREE_RANDOM),
        ("complete-sweep", MissionKind.COMPLETE_SWEEP),
        ("Smart Cleaner", MissionKind.SMART_PATHFINDER),
    ])
    def test_parse_kind_labels(self, label, kind) -> None:
        assert parse_kind(label) == kind

    def test_parse_kind_unknown(self) -> None:
        with pytest.raises(ValueError):
            parse_kind("teleporting")

    def test_parse_category(self) -> None:
        assert parse_category("Polluters") == AgentCategory.POLLUTER
        assert parse_category("cleaner") == AgentCategory.CLEANER


class TestGridCommands:
    def test_one_based_coordinates(self, engine: SimulationEngine) -> None:
        assert engine.dirty_cell(1, 1)
        assert engine.grid.is_dirty(0, 0)
        assert engine.is_dirty(1, 1)
        assert engine.dirty_cell("10", "10")
        assert engine.grid.is_dirty(9, 9)

    def test_out_of_range_and_garbage_are_rejected(self, engine: SimulationEngine) -> None:
        assert not engine.dirty_cell(0, 1)
        assert not engine.dirty_cell(11, 1)
        assert not engine.dirty_cell("abc", 1)
        assert not engine.dirty_cell("", 1)
        assert not engine.clean_cell(None, 2)
        assert engine.dirty_count() == 0

    def test_queries_accept_text_and_reject_garbage(self, engine: SimulationEngine) -> None:
        engine.dirty_cell(3, 4)
        engine.set_wall(5, 5)
        assert engine.is_dirty("3", " 4 ")
        assert engine.is_wall("5", "5")
        assert not engine.is_dirty("abc", 4)
        assert not engine.is_wall("", 5)
        assert not engine.is_dirty(None, None)
        assert not engine.is_wall(0, 5)

    def test_listener_sees_each_change(self, engine: SimulationEngine) -> None:
        seen = []
        engine.set_listener(seen.append)
        engine.dirty_cell(2, 2)
        engine.dirty_cell(2, 2)
        engine.dirty_cell(3, 3)
        engine.clean_cell(2, 2)
        engine.clean_cell(2, 2)
        assert seen == [1, 2, 1]

    def test_wall_clears_dirt(self, engine: SimulationEngine) -> None:
        engine.dirty_cell(4, 4)
        assert engine.set_wall(4, 4)
        assert engine.is_wall(4, 4)
        assert not engine.is_dirty(4, 4)
        assert not engine.dirty_cell(4, 4)
        assert engine.set_wall(4, 4, False)
        assert not engine.is_wall(4, 4)

    def test_reset_grid_keeps_walls(self, engine: SimulationEngine) -> None:
        engine.set_wall(1, 1)
        engine.dirty_cell(2, 2)
        engine.reset_grid()
        assert engine.dirty_count() == 0
        assert engine.is_wall(1, 1)


class TestLayout:
    def test_walls_and_dirt_from_config(self) -> None:
        layout = LayoutConfig(
            walls=[WallSpec("rectangle", {'row': 1, 'col': 1, 'height': 1, 'width': 3}),
                   WallSpec("points", {'coords': [(5, 5)]})],
            dirty=[[10, 10], [2, 2]],
        )
        engine = SimulationEngine(SimulationConfig(layout=layout, seed=1))
        assert engine.is_wall(1, 3)
        assert not engine.is_wall(1, 4)
        assert engine.is_wall(5, 5)
        assert engine.is_dirty(10, 10)
        assert engine.dirty_count() == 2
        assert engine.peak_dirty == 2


class TestAgentCommands:
    def test_create_plain_agent(self, engine: SimulationEngine) -> None:
        agent = engine.create_agent(3, 4)
        assert agent.position == (2, 3)
        assert engine.create_agent("x", 1) is None
        assert engine.create_agent(None, 1) is None
        assert engine.create_agent(11, 1) is None
        assert engine.agent_count() == 1

    def test_straight_line_defaults_to_first_row(self, engine: SimulationEngine) -> None:
        agent = engine.create_polluter("Straight Line", col=5)
        assert agent.position == (0, 4)
        assert agent.kind == MissionKind.STRAIGHT_LINE

    def test_sweep_defaults_to_corner(self, engine: SimulationEngine) -> None:
        agent = engine.create_cleaner("complete_sweep")
        assert agent.position == (0, 0)

    def test_missing_position_is_random(self, engine: SimulationEngine) -> None:
        for _ in range(20):
            agent = engine.create_polluter("free_random")
            assert engine.grid.in_bounds(*agent.position)

    def test_invalid_requests(self, engine: SimulationEngine) -> None:
        assert engine.create_polluter("jumping", jump_size="abc") is None
        assert engine.create_polluter("smart_pathfinder") is None
        assert engine.create_cleaner("bogus") is None
        assert engine.create_cleaner("jumping", row=0, col=1) is None
        assert engine.agent_count() == 0

    def test_parameters_reach_mission(self, engine: SimulationEngine) -> None:
        jumper = engine.create_polluter("jumping", row=1, col=1, jump_size="4")
        smart = engine.create_cleaner("smart", row=1, col=2, max_steps=7)
        assert jumper.mission.jump_size == 4
        assert smart.mission.max_steps == 7

    def test_unknown_parameter_is_ignored(self, engine: SimulationEngine) -> None:
        agent = engine.create_polluter("straight_line", col=2, jump_size=4)
        assert agent is not None
        assert agent.position == (0, 1)

    def test_cardinal_moves(self, engine: SimulationEngine) -> None:
        agent = engine.create_agent(1, 1)
        assert not engine.move_agent_cardinal(agent.id, "up")
        assert engine.move_agent_cardinal(agent.id, "down")
        assert agent.position == (1, 0)
        assert not engine.move_agent_cardinal(agent.id, "sideways")
        assert not engine.move_agent_cardinal(99, "down")

    def test_remove_and_clear(self, engine: SimulationEngine) -> None:
        a = engine.create_agent(1, 1)
        engine.create_agent(1, 2)
        assert engine.remove_agent(a.id)
        assert not engine.remove_agent(a.id)
        assert engine.agent_count() == 1
        engine.clear_all()
        assert engine.agent_count() == 0


class TestMovement:
    def test_animated_move_runs_on_movement_timeline(self, engine: SimulationEngine) -> None:
        agent = engine.create_agent(1, 1)
        assert engine.move_agent_to(agent.id, 1, 4)
        assert agent.moving
        assert engine.scheduler.is_running(MOVEMENT_TIMELINE)

        engine.advance(500)
        assert agent.position == (0, 1)
        engine.advance(1000)
        assert agent.position == (0, 3)
        assert not agent.moving
        assert not engine.scheduler.is_running(MOVEMENT_TIMELINE)

    def test_move_to_rejections(self, engine: SimulationEngine) -> None:
        agent = engine.create_agent(1, 1)
        engine.set_wall(3, 3)
        assert not engine.move_agent_to(agent.id, 3, 3)
        assert not engine.move_agent_to(agent.id, 0, 3)
        assert not engine.move_agent_to(agent.id, "x", 3)
        assert not engine.move_agent_to(42, 2, 2)

    def test_move_to_own_cell_starts_nothing(self, engine: SimulationEngine) -> None:
        agent = engine.create_agent(2, 2)
        assert engine.move_agent_to(agent.id, 2, 2)
        assert not agent.moving
        assert not engine.scheduler.is_running(MOVEMENT_TIMELINE)


class TestPlainAgentLoop:
    def test_cleans_cell_underneath(self, engine: SimulationEngine) -> None:
        engine.dirty_cell(2, 2)
        engine.create_agent(2, 2)
        assert engine.start_simulation()
        assert not engine.start_simulation()
        engine.advance(200)
        assert not engine.is_dirty(2, 2)
        assert engine.simulation_running()

    def test_moving_agent_does_not_clean(self, engine: SimulationEngine) -> None:
        engine.dirty_cell(1, 1)
        agent = engine.create_agent(1, 1)
        engine.move_agent_to(agent.id, 1, 5)
        engine.start_simulation()
        engine.advance(200)
        assert engine.is_dirty(1, 1)

    def test_stop_simulation(self, engine: SimulationEngine) -> None:
        engine.create_agent(2, 2)
        engine.start_simulation()
        assert engine.stop_simulation()
        engine.dirty_cell(2, 2)
        engine.advance(1000)
        assert engine.is_dirty(2, 2)


class TestMissionLoops:
    def test_category_loop_stops_when_all_complete(self, engine: SimulationEngine) -> None:
        engine.create_polluter("straight_line", col=5)
        assert engine.start_missions("polluters")
        engine.advance(500)
        assert engine.dirty_count() == 1
        engine.run_until_idle()
        assert engine.dirty_count() == 10
        assert not engine.missions_running("polluters")
        assert engine.is_idle()

    def test_failed_mission_does_not_block_others(self, engine: SimulationEngine) -> None:
        engine.set_wall(2, 1)
        failing = engine.create_polluter("straight_line", col=1)
        engine.create_polluter("straight_line", col=2)
        engine.start_missions(AgentCategory.POLLUTER)
        engine.run_until_idle()
        assert failing.mission.failed
        assert engine.dirty_count() == 11

    def test_unknown_category(self, engine: SimulationEngine) -> None:
        assert not engine.start_missions("plain")
        assert not engine.start_missions("robots")
        assert not engine.missions_running("robots")

    def test_unknown_category_queries(self, engine: SimulationEngine) -> None:
        engine.create_agent(1, 1)
        assert engine.agent_count("robots") == 0
        assert engine.agents("robots") == []
        assert engine.agent_count("plain") == 1
        assert len(engine.agents("Plain")) == 1

    def test_single_mission_replaces_category_loop(self, engine: SimulationEngine) -> None:
        first = engine.create_polluter("straight_line", col=1)
        engine.create_polluter("straight_line", col=2)
        engine.start_missions("polluters")
        assert engine.start_single_mission(first.id)
        assert not engine.missions_running("polluters")
        assert engine.scheduler.is_running("mission:1")

        engine.advance(1000)
        assert engine.grid.dirty_cells() == [(0, 0), (1, 0)]

        assert engine.remove_agent(first.id)
        assert not engine.scheduler.has_timeline("mission:1")
        engine.advance(2000)
        assert engine.dirty_count() == 2

    def test_single_mission_stops_on_completion(self, engine: SimulationEngine) -> None:
        agent = engine.create_polluter("straight_line", col=3)
        engine.start_single_mission(agent.id)
        engine.run_until_idle()
        assert agent.mission.complete
        assert not engine.scheduler.is_running("mission:1")

    def test_single_mission_needs_mission_agent(self, engine: SimulationEngine) -> None:
        plain = engine.create_agent(1, 1)
        assert not engine.start_single_mission(plain.id)
        assert not engine.start_single_mission(99)

    def test_reset_mission(self, engine: SimulationEngine) -> None:
        agent = engine.create_polluter("straight_line", col=1)
        engine.start_missions("polluters")
        engine.run_until_idle()
        assert agent.mission.complete
        assert engine.reset_mission(agent.id)
        assert not agent.mission.complete
        assert not engine.reset_mission(99)

    def test_is_finished_respects_max_ticks(self) -> None:
        engine = SimulationEngine(SimulationConfig(max_ticks=5, seed=1))
        engine.create_agent(1, 1)
        engine.start_simulation()
        while not engine.is_finished():
            engine.step()
        assert engine.scheduler.ticks == 5


class TestSnapshot:
    def test_metrics_and_agent_states(self, engine: SimulationEngine) -> None:
        engine.create_polluter("straight_line", col=1)
        engine.create_cleaner("complete_sweep")
        engine.create_agent(5, 6)
        engine.dirty_cell(1, 5)
        engine.set_wall(5, 5)

        state = engine.snapshot()
        assert state.tick == 0
        assert state.metrics['dirty_count'] == 1
        assert state.metrics['wall_count'] == 1
        assert state.metrics['total_agents'] == 3
        assert state.metrics['polluters'] == 1
        assert state.metrics['cleaners'] == 1
        assert state.metrics['missions_active'] == 2
        assert state.metrics['dirty_fraction'] == pytest.approx(0.01)
        assert [a.state for a in state.agents] == ["active", "active", "idle"]
        assert (state.agents[2].row, state.agents[2].col) == (5, 6)

    def test_snapshot_is_a_copy(self, engine: SimulationEngine) -> None:
        state = engine.snapshot()
        engine.dirty_cell(1, 1)
        assert not state.dirty.any()

    def test_peak_dirty(self, engine: SimulationEngine) -> None:
        for col in (1, 2, 3):
            engine.dirty_cell(1, col)
        engine.clean_cell(1, 1)
        engine.clean_cell(1, 2)
        assert engine.snapshot().metrics['peak_dirty'] == 3

    def test_failed_and_complete_counts(self, engine: SimulationEngine) -> None:
        engine.set_wall(2, 1)
        engine.create_polluter("straight_line", col=1)
        engine.create_polluter("straight_line", col=2)
        engine.start_missions("polluters")
        engine.run_until_idle()
        state = engine.step()
        assert state.metrics['missions_failed'] == 1
        assert state.metrics['missions_complete'] == 1
        assert state.metrics['missions_active'] == 0
        assert [a.state for a in state.agents] == ["failed", "complete"]
