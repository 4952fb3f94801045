#!/usr/bin/env python3
"""
Grid Cleaning Simulation

Runs a scenario headless: polluters dirty the grid, cleaners clean it,
and the run is exported as a CSV log, a PNG snapshot and optionally a GIF.

Usage:
    python -m grid_cleaning_sim.main --config configs/demo.yaml [options]

Examples:
    python -m grid_cleaning_sim.main --config configs/demo.yaml
    python -m grid_cleaning_sim.main --config configs/demo.yaml --gif --out-dir results/
    python -m grid_cleaning_sim.main --config configs/demo.yaml --no-csv --no-snapshot --quiet
    python -m grid_cleaning_sim.main --config configs/demo.yaml --seed 42
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import SimulationConfig, load_config
from .model.agent import AgentCategory
from .model.engine import SimulationEngine
from .export.csv_writer import CSVWriter, MetricsCSVWriter
from .export.visualizer import Visualizer
from .export.reporter import Reporter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Grid Cleaning Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m grid_cleaning_sim.main --config configs/demo.yaml
    python -m grid_cleaning_sim.main --config configs/demo.yaml --gif --out-dir results/
    python -m grid_cleaning_sim.main --config configs/demo.yaml --no-csv --no-snapshot --quiet
    python -m grid_cleaning_sim.main --config configs/demo.yaml --seed 42
        """
    )

    # Required arguments
    parser.add_argument('--config', type=Path, required=True,
                        help='Path to YAML configuration file')

    # Optional overrides
    parser.add_argument('--ticks', type=int, default=None,
                        help='Override max simulation ticks')
    parser.add_argument('--out-dir', type=Path, default=Path('./output'),
                        help='Output directory for exports (default: ./output)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV export (default)')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV export')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable final snapshot (default)')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable final snapshot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')
    parser.add_argument('--verbose', action='store_true', default=False,
                        help='Log every mission event')

    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    return parser.parse_args(argv)


def populate(engine: SimulationEngine, config: SimulationConfig) -> int:
    """Create the scenario's agents. Returns how many were rejected."""
    rejected = 0
    for spec in config.agents:
        if spec.category == 'plain':
            agent = engine.create_agent(spec.params.get('row'),
                                        spec.params.get('col'))
        elif spec.category == 'polluter':
            agent = engine.create_polluter(spec.kind, **spec.params)
        else:
            agent = engine.create_cleaner(spec.kind, **spec.params)
        if agent is None:
            rejected += 1
    return rejected


def start_loops(engine: SimulationEngine, config: SimulationConfig) -> None:
    for target in config.start:
        if target == 'simulation':
            engine.start_simulation()
        elif target == 'polluters':
            engine.start_missions(AgentCategory.POLLUTER)
        elif target == 'cleaners':
            engine.start_missions(AgentCategory.CLEANER)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    level = logging.WARNING
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level,
                        format='%(levelname)s %(name)s: %(message)s')

    # Load configuration
    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except (KeyError, TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.ticks is not None:
        config.max_ticks = args.ticks
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.gif:
        config.gif_enabled = True
    config.quiet = args.quiet
    if args.seed is not None:
        config.seed = args.seed
    config.out_dir = args.out_dir

    # Initialize engine
    if not config.quiet:
        print("Initializing simulation...")
        print(f"  Grid: {config.grid.size}x{config.grid.size}")
        print(f"  Agents: {len(config.agents)}")
        print(f"  Max ticks: {config.max_ticks}")

    engine = SimulationEngine(config)
    rejected = populate(engine, config)

    if not config.quiet:
        print(f"  Created: {engine.agent_count()} agents ({rejected} rejected)")
        print(f"  Walls: {engine.grid.wall_count()} cells")

    # Initialize exporters
    csv_writers: List[CSVWriter] = []
    if config.csv_enabled:
        csv_writers = [CSVWriter(config.out_dir / 'simulation_log.csv'),
                       MetricsCSVWriter(config.out_dir / 'metrics_log.csv')]
        for writer in csv_writers:
            writer.open()

    visualizer = Visualizer(config.grid.size)
    reporter = Reporter(str(args.config), config.seed)

    start_loops(engine, config)

    # Main simulation loop
    if not config.quiet:
        print("\nRunning simulation...")

    final_state = engine.snapshot()
    reporter.update(final_state)
    try:
        while not engine.is_finished():
            state = engine.step()
            final_state = state

            # Export CSV
            for writer in csv_writers:
                writer.append(state)

            # Buffer a GIF frame every mission step
            if config.gif_enabled:
                if state.time % config.timing.mission_step_interval == 0 \
                        or engine.is_finished():
                    visualizer.buffer_frame(state)

            reporter.update(state)

            # Progress indicator
            if not config.quiet and state.tick % 50 == 0:
                print(f"  Tick {state.tick}: "
                      f"{int(state.metrics['dirty_count'])} dirty, "
                      f"{int(state.metrics['missions_active'])} missions active")

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")

    # Cleanup and final exports
    for writer in csv_writers:
        writer.close()
        if not config.quiet:
            print(f"CSV saved: {writer.output_path} ({writer.rows_written} rows)")

    if config.snapshot_enabled:
        snapshot_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(final_state, snapshot_path)
        if not config.quiet:
            print(f"Snapshot saved: {snapshot_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'simulation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    # Print summary report
    if not config.quiet:
        report = reporter.generate_summary(
            final_state,
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled
        )
        print(report)

    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == '__main__':
    cli()
