"""PNG snapshots and GIF animations of a grid cleaning run."""

import io
from pathlib import Path
from typing import List, TYPE_CHECKING

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from matplotlib.colors import to_rgb
from PIL import Image

if TYPE_CHECKING:
    from ..model.state import AgentSnapshot, SimulationState


class Visualizer:
    """
    Renders simulation states with matplotlib.

    Cells are drawn as one RGB image (floor, dirt, walls); agents are
    drawn on top at their 1-based (row, col), with a marker per category.
    Finished missions are faded and failed ones get a black outline.
    """

    CELL_COLORS = {
        'floor': '#FFFFFF',
        'dirty': '#A52A2A',
        'wall': '#A9A9A9',
    }
    GRID_LINE = '#2C3E50'
    MARKERS = {'plain': 'o', 'polluter': '^', 'cleaner': 's'}

    def __init__(self, grid_size: int):
        self.size = grid_size
        self.frames: List[Image.Image] = []

    def cell_image(self, state: "SimulationState") -> np.ndarray:
        """(size, size, 3) RGB array of the cell layers."""
        image = np.empty((self.size, self.size, 3))
        image[:, :] = to_rgb(self.CELL_COLORS['floor'])
        image[state.dirty] = to_rgb(self.CELL_COLORS['dirty'])
        image[state.walls] = to_rgb(self.CELL_COLORS['wall'])
        return image

    def _draw_cells(self, ax, state: "SimulationState") -> None:
        ax.imshow(self.cell_image(state), origin='upper', aspect='equal',
                  extent=[0.5, self.size + 0.5, self.size + 0.5, 0.5])
        for edge in np.arange(0.5, self.size + 1):
            ax.axhline(edge, color=self.GRID_LINE, linewidth=0.5)
            ax.axvline(edge, color=self.GRID_LINE, linewidth=0.5)

    def _draw_agent(self, ax, agent: "AgentSnapshot") -> None:
        outline = 'black' if agent.state == 'failed' else 'white'
        ax.plot(agent.col, agent.row, self.MARKERS.get(agent.category, 'o'),
                color=agent.color, markersize=14,
                markeredgecolor=outline, markeredgewidth=1.0,
                alpha=0.5 if agent.state in ('complete', 'failed') else 1.0)

    def _legend(self, ax) -> None:
        handles = [
            plt.Line2D([0], [0], marker='s', color='w', label=label.title(),
                       markerfacecolor=self.CELL_COLORS[label], markersize=10)
            for label in ('dirty', 'wall')
        ]
        handles += [
            plt.Line2D([0], [0], marker=marker, color='w', label=category.title(),
                       markerfacecolor='#555555', markersize=10)
            for category, marker in self.MARKERS.items()
        ]
        ax.legend(handles=handles, loc='upper center',
                  bbox_to_anchor=(0.5, -0.08), ncol=len(handles), fontsize=8)

    def _create_figure(self, state: "SimulationState") -> plt.Figure:
        fig, ax = plt.subplots(figsize=(7, 7))
        self._draw_cells(ax, state)
        for agent in state.agents:
            self._draw_agent(ax, agent)

        ax.set_title(f'Tick {state.tick} ({state.time} ms) | '
                     f'dirty {int(state.metrics.get("dirty_count", 0))} | '
                     f'agents {len(state.agents)}')
        ax.set_xlabel('Column')
        ax.set_ylabel('Row')
        ax.set_xticks(range(1, self.size + 1))
        ax.set_yticks(range(1, self.size + 1))
        ax.set_xlim(0.5, self.size + 0.5)
        ax.set_ylim(self.size + 0.5, 0.5)
        self._legend(ax)
        fig.tight_layout()
        return fig

    def buffer_frame(self, state: "SimulationState") -> None:
        """Render a state into memory for the GIF."""
        fig = self._create_figure(state)
        with io.BytesIO() as buf:
            fig.savefig(buf, format='png', dpi=80)
            buf.seek(0)
            self.frames.append(Image.open(buf).convert('RGB'))
        plt.close(fig)

    def save_snapshot(self, state: "SimulationState", output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 5) -> None:
        """Write the buffered frames as a looping GIF. No frames, no file."""
        if not self.frames:
            return
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        first, *rest = self.frames
        first.save(output_path, save_all=True, append_images=rest,
                   duration=int(1000 / fps), loop=0)

    def clear_frames(self) -> None:
        self.frames.clear()
