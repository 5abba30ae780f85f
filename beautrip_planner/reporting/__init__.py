"""Terminal formatters and CSV / JSON report writers."""
