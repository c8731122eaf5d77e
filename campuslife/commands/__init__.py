"""Command implementations behind the `campuslife` CLI."""
