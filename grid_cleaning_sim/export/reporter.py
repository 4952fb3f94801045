"""Summary report generation for the grid cleaning simulation."""

from typing import List, Dict, Optional, Tuple, TYPE_CHECKING
from pathlib import Path

import numpy as np
from scipy import ndimage

if TYPE_CHECKING:
    from ..model.state import SimulationState


def count_dirty_patches(dirty: np.ndarray) -> int:
    """Number of 4-connected regions of dirty cells."""
    if not dirty.any():
        return 0
    _, n_patches = ndimage.label(dirty)
    return int(n_patches)


def mission_outcomes(state: "SimulationState") -> Dict[Tuple[str, str], Dict[str, int]]:
    """Agent states counted per (category, kind), plain agents excluded."""
    outcomes: Dict[Tuple[str, str], Dict[str, int]] = {}
    for agent in state.agents:
        if agent.kind is None:
            continue
        counts = outcomes.setdefault((agent.category, agent.kind), {})
        counts[agent.state] = counts.get(agent.state, 0) + 1
    return outcomes


class Reporter:
    """Generates summary statistics and formatted text report."""

    def __init__(self, config_path: str, seed: Optional[int]):
        self.config_path = config_path
        self.seed = seed
        self.step_metrics: List[Dict] = []
        self.peak_dirty = 0
        self.peak_patches = 0
        self.first_clean_tick: Optional[int] = None
        self._initial_dirty: Optional[int] = None

    def update(self, state: "SimulationState") -> None:
        """Accumulate metrics per tick."""
        self.step_metrics.append(state.metrics.copy())

        dirty_count = int(state.metrics.get('dirty_count', 0))
        if self._initial_dirty is None:
            self._initial_dirty = dirty_count
        self.peak_dirty = max(self.peak_dirty, dirty_count)
        self.peak_patches = max(self.peak_patches,
                                count_dirty_patches(state.dirty))

        # First tick at which a dirtied grid has been fully cleaned
        if (self.first_clean_tick is None and dirty_count == 0
                and self.peak_dirty > 0):
            self.first_clean_tick = state.tick

    def generate_summary(self, final_state: "SimulationState",
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        metrics = final_state.metrics
        total_cells = final_state.dirty.size
        dirty_count = int(metrics.get('dirty_count', 0))
        wall_count = int(metrics.get('wall_count', 0))
        floor_cells = max(1, total_cells - wall_count)
        clean_pct = (floor_cells - dirty_count) / floor_cells * 100

        lines = [
            "",
            "=" * 80,
            "                    GRID CLEANING SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            "",
            "SIMULATION METRICS",
            "-" * 40,
            f"Total Ticks:           {final_state.tick} ({final_state.time} ms)",
            f"Agents:                {int(metrics.get('total_agents', 0))} "
            f"({int(metrics.get('polluters', 0))} polluters, "
            f"{int(metrics.get('cleaners', 0))} cleaners)",
            f"Missions Complete:     {int(metrics.get('missions_complete', 0))}",
            f"Missions Failed:       {int(metrics.get('missions_failed', 0))}",
            f"Missions Unfinished:   {int(metrics.get('missions_active', 0))}",
            f"Dirty Cells (start):   {self._initial_dirty or 0}",
            f"Dirty Cells (peak):    {self.peak_dirty}",
            f"Dirty Cells (final):   {dirty_count}",
            f"Clean Floor:           {clean_pct:.1f}% of {floor_cells} cells",
            f"Dirty Patches:         {count_dirty_patches(final_state.dirty)} "
            f"(peak {self.peak_patches})",
            "",
            "MISSIONS BY KIND",
            "-" * 40,
        ]
        outcomes = mission_outcomes(final_state)
        if not outcomes:
            lines.append("(no mission agents)")
        for (category, kind), counts in sorted(outcomes.items()):
            lines.append(f"{category + ' ' + kind:<30} "
                         + ", ".join(f"{n} {s}" for s, n in sorted(counts.items())))

        lines += [
            "",
            "EVENTS",
            "-" * 40,
            f"[{'X' if self.first_clean_tick is not None else ' '}] Grid fully cleaned"
            + (f" at tick {self.first_clean_tick}"
               if self.first_clean_tick is not None else ""),
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        # Output file paths
        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'simulation_log.csv'}")
            lines.append(f"Metrics:    {output_dir / 'metrics_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
