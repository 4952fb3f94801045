"""State snapshot dataclasses for the grid cleaning simulation."""

from dataclasses import dataclass
from typing import List, Dict, Optional
import numpy as np


@dataclass(frozen=True)
class AgentSnapshot:
    """Immutable snapshot of an agent at a given tick (1-based coordinates)."""
    agent_id: int
    category: str  # "plain", "polluter", "cleaner"
    kind: Optional[str]
    row: int
    col: int
    moving: bool
    state: str  # "idle", "moving", "active", "complete", "failed"
    color: str


@dataclass
class SimulationState:
    """Complete snapshot of simulation state at a given tick."""
    tick: int
    time: int
    agents: List[AgentSnapshot]
    dirty: np.ndarray  # Copy of the dirt layer
    walls: np.ndarray  # Copy of the wall layer
    metrics: Dict[str, float]

    def to_csv_rows(self) -> List[Dict]:
        """Convert to CSV-compatible format."""
        return [
            {
                "tick": self.tick,
                "time": self.time,
                "agent_id": a.agent_id,
                "category": a.category,
                "kind": a.kind or "",
                "row": a.row,
                "col": a.col,
                "state": a.state,
                "dirty_count": int(self.metrics.get("dirty_count", 0))
            }
            for a in self.agents
        ]

    def to_metrics_row(self) -> Dict:
        row = {"tick": self.tick, "time": self.time}
        row.update(self.metrics)
        return row
