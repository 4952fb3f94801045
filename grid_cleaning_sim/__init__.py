"""Grid cleaning simulation engine."""

__version__ = "0.1.0"
