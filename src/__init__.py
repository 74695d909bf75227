"""cachedirs

Content-addressed directory cache for CI pipelines.

Primary entrypoints:
 - main.py (CLI and error boundary)
 - pipeline/orchestrator.py (restore-or-save run)
 - cache/keys.py (key templates)
"""

from cachedirs.version import __version__

__all__ = ["__version__"]
