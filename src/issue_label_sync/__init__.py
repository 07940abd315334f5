"""Issue Label Sync.

Adds the canonical "core system" (e.g. `[100-199]`) and "core area" (e.g.
`[50]`) labels to every tracker issue that belongs to a project. Labels are
derived from the project identifier or looked up in a JSON mapping, and are
only ever added, never removed.
"""

__version__ = "0.1.0"

from issue_label_sync.sync.config import SyncSettings

__all__ = ["__version__", "SyncSettings"]
