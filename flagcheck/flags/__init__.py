"""Flag catalog, storage, platform capabilities and intrinsic names."""

from .catalog import FLAGS, FlagSpec, FlagType
from .platform import Platform
from .store import FlagStore, Origin

__all__ = ["FLAGS", "FlagSpec", "FlagStore", "FlagType", "Origin", "Platform"]
