"""
Link Stats Dashboard.

Click statistics for shortened links, fetched from an upstream
link-management API and served as a filterable, exportable report.
"""
