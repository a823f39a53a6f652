"""
Reporting package: aggregation, date filtering and PDF report rendering.

Qt pieces live in `controller` and `view`; import them explicitly so the
pure aggregation code stays importable from the repositories.
"""
