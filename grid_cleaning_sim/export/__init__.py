"""Run exports: CSV logs, PNG/GIF images and the text report."""

from .csv_writer import CSVWriter, MetricsCSVWriter
from .visualizer import Visualizer
from .reporter import Reporter

__all__ = ['CSVWriter', 'MetricsCSVWriter', 'Visualizer', 'Reporter']
