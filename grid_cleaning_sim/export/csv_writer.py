"""CSV logs of a simulation run: one row per agent per tick, and one row per tick."""

import csv
from pathlib import Path
from typing import Dict, IO, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model.state import SimulationState

FIELDNAMES = ['tick', 'time', 'agent_id', 'category', 'kind',
              'row', 'col', 'state', 'dirty_count']

METRIC_FIELDNAMES = ['tick', 'time', 'dirty_count', 'peak_dirty',
                     'dirty_fraction', 'wall_count', 'total_agents',
                     'missions_complete', 'missions_failed', 'missions_active']


class CSVWriter:
    """
    Per-agent position log, written incrementally as the run advances.

    Output format:
        tick,time,agent_id,category,kind,row,col,state,dirty_count
        5,500,1,polluter,straight_line,1,2,active,1
        ...

    Subclasses choose the columns and how a state becomes rows.
    """

    fieldnames: List[str] = FIELDNAMES

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)
        self.file: Optional[IO[str]] = None
        self.writer: Optional[csv.DictWriter] = None
        self.rows_written = 0

    @property
    def is_open(self) -> bool:
        return self.file is not None

    def open(self) -> None:
        """Create the file (and parent directories) and write the header."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.file = open(self.output_path, 'w', newline='')
        self.writer = csv.DictWriter(self.file, fieldnames=self.fieldnames,
                                     extrasaction='ignore')
        self.writer.writeheader()
        self.rows_written = 0

    def rows(self, state: "SimulationState") -> List[Dict]:
        return state.to_csv_rows()

    def append(self, state: "SimulationState") -> None:
        if not self.is_open:
            self.open()
        rows = self.rows(state)
        self.writer.writerows(rows)
        self.rows_written += len(rows)
        self.file.flush()

    def close(self) -> None:
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class MetricsCSVWriter(CSVWriter):
    """Aggregate counters, one row per tick."""

    fieldnames = METRIC_FIELDNAMES

    def rows(self, state: "SimulationState") -> List[Dict]:
        return [state.to_metrics_row()]
