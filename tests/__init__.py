"""campuslife test suite."""
