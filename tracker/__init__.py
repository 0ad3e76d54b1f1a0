"""Personal task tracker: recurrence and streak engine."""

__version__ = "1.0.0"
