"""daylist: personal day planner with recurring tasks synced to a per-user JSON document."""

__version__ = "0.1.0"
