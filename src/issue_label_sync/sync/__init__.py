"""Label reconciliation engine.

See `issue_label_sync.sync.main` for the CLI entrypoint.
"""
