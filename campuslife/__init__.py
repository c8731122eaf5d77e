"""campuslife - club membership and event workflows for a campus."""

__version__ = "0.1.0"
