"""ember-try - Run a test command against a matrix of dependency scenarios."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ember-try")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Fallback for editable installs without metadata

from .main import main

__all__ = ["main", "__version__"]
