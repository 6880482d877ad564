"""
Detecting the library's own version.

The codebase does not contain the version directly: it is taken from
the installed distribution's metadata, if available.

The version is determined only once at startup when the code is loaded.
"""
from typing import Optional

version: Optional[str] = None

try:
    import importlib.metadata
except ImportError:
    pass
else:
    try:
        name, *_ = __name__.split('.')  # usually "apibind", unless renamed/forked.
        version = importlib.metadata.version(name)
    except Exception:
        pass  # not installed, or installed from a source tree without metadata.
