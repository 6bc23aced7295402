"""City Cycling - bike-share station snapshots and history."""

__version__ = "0.1.0"
