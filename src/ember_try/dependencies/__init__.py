"""Dependency-manager adapters and the applier that drives them."""

from .applier import DependencyContextApplier
from .base import BACKUP_SUFFIX, DependencyManagerAdapter
from .bower import BowerAdapter
from .factory import adapters_from_config
from .npm import NpmAdapter

__all__ = [
    "BACKUP_SUFFIX",
    "BowerAdapter",
    "DependencyContextApplier",
    "DependencyManagerAdapter",
    "NpmAdapter",
    "adapters_from_config",
]
