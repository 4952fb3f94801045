"""Configuration dataclasses and YAML loader for the grid cleaning simulation."""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from pathlib import Path
import yaml


@dataclass
class GridConfig:
    size: int = 10


@dataclass
class TimingConfig:
    """Timeline intervals, in engine milliseconds."""
    tick: int = 100
    agent_clean_interval: int = 200
    move_step_interval: int = 500
    mission_step_interval: int = 500


@dataclass
class MissionConfig:
    """Budgets and wall-hit thresholds for the mission strategies."""
    jump_budget: int = 10
    jump_size: int = 2
    max_consecutive_wall_hits: int = 3
    sweep_wall_hit_limit: int = 10
    free_polluter_budget: int = 15
    free_cleaner_budget: int = 10
    smart_step_budget: Optional[int] = None  # None = size * size


@dataclass
class WallSpec:
    wall_type: str  # "rectangle" or "points"
    data: Dict[str, Any]


@dataclass
class RandomWallsSpec:
    count: int = 3
    min_length: int = 2
    max_length: int = 4


@dataclass
class LayoutConfig:
    walls: List[WallSpec] = field(default_factory=list)
    random_walls: Optional[RandomWallsSpec] = None
    dirty: List[List[int]] = field(default_factory=list)


@dataclass
class AgentSpec:
    """One agent to create at scenario start (1-based coordinates)."""
    category: str  # "plain", "polluter", "cleaner"
    kind: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SimulationConfig:
    grid: GridConfig = field(default_factory=GridConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    missions: MissionConfig = field(default_factory=MissionConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    agents: List[AgentSpec] = field(default_factory=list)
    start: List[str] = field(default_factory=list)
    max_ticks: int = 1000

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    quiet: bool = False
    seed: Optional[int] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))


_START_TARGETS = ("simulation", "polluters", "cleaners")


def _parse_walls(walls_raw: List[Dict]) -> List[WallSpec]:
    """Parse wall specifications from raw YAML data."""
    walls = []
    for w in walls_raw:
        wall_type = w.get('type', 'rectangle')
        if wall_type == 'rectangle':
            data = {
                'row': w['row'],
                'col': w['col'],
                'height': w.get('height', 1),
                'width': w.get('width', 1)
            }
        elif wall_type == 'points':
            data = {'coords': [tuple(c) for c in w['coords']]}
        else:
            raise ValueError(f"Unknown wall type: {wall_type}")
        walls.append(WallSpec(wall_type=wall_type, data=data))
    return walls


def _parse_random_walls(raw: Optional[Dict]) -> Optional[RandomWallsSpec]:
    if not raw:
        return None
    spec = RandomWallsSpec(
        count=raw.get('count', 3),
        min_length=raw.get('min_length', 2),
        max_length=raw.get('max_length', 4)
    )
    if spec.min_length < 1 or spec.max_length < spec.min_length:
        raise ValueError(
            f"Invalid random wall lengths: {spec.min_length}-{spec.max_length}")
    return spec


def _parse_agents(agents_raw: List[Dict]) -> List[AgentSpec]:
    """Parse the initial agent list from raw YAML data."""
    agents = []
    for a in agents_raw:
        category = a['category']
        if category not in ('plain', 'polluter', 'cleaner'):
            raise ValueError(f"Unknown agent category: {category}")
        params = {k: v for k, v in a.items() if k not in ('category', 'kind')}
        agents.append(AgentSpec(category=category, kind=a.get('kind'),
                                params=params))
    return agents


def _parse_start(start_raw: List[str]) -> List[str]:
    for target in start_raw:
        if target not in _START_TARGETS:
            raise ValueError(f"Unknown start target: {target}")
    return list(start_raw)


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    grid_raw = raw.get('grid', {})
    grid = GridConfig(size=grid_raw.get('size', 10))
    if grid.size < 1:
        raise ValueError(f"Grid size must be positive, got {grid.size}")

    timing_raw = raw.get('timing', {})
    defaults = TimingConfig()
    timing = TimingConfig(
        tick=timing_raw.get('tick', defaults.tick),
        agent_clean_interval=timing_raw.get('agent_clean_interval',
                                            defaults.agent_clean_interval),
        move_step_interval=timing_raw.get('move_step_interval',
                                          defaults.move_step_interval),
        mission_step_interval=timing_raw.get('mission_step_interval',
                                             defaults.mission_step_interval)
    )

    missions_raw = raw.get('missions', {})
    mission_defaults = MissionConfig()
    missions = MissionConfig(**{
        name: missions_raw.get(name, getattr(mission_defaults, name))
        for name in mission_defaults.__dataclass_fields__
    })

    layout_raw = raw.get('layout', {})
    layout = LayoutConfig(
        walls=_parse_walls(layout_raw.get('walls', [])),
        random_walls=_parse_random_walls(layout_raw.get('random_walls')),
        dirty=[list(c) for c in layout_raw.get('dirty', [])]
    )

    sim_raw = raw.get('simulation', {})

    # Parse export config (optional)
    export_raw = raw.get('export', {})

    return SimulationConfig(
        grid=grid,
        timing=timing,
        missions=missions,
        layout=layout,
        agents=_parse_agents(raw.get('agents', [])),
        start=_parse_start(sim_raw.get('start', [])),
        max_ticks=sim_raw.get('max_ticks', 1000),
        seed=sim_raw.get('seed'),
        csv_enabled=export_raw.get('csv', True),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False)
    )
