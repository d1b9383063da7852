"""MemoGarden health synchronization and statistics engine."""

__version__ = "1.0.0"
