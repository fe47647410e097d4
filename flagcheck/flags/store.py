"""Typed flag storage with origin tracking."""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from .catalog import FLAGS, FlagSpec, FlagValue


class Origin(str, Enum):
    """Where a flag's current value came from."""

    DEFAULT = "default"
    CONFIG_FILE = "config_file"
    COMMAND_LINE = "command_line"
    ERGONOMIC = "ergonomic"
    MANAGEMENT = "management"


class FlagStore:
    """
    Current values of all catalog flags.

    Every flag starts at its catalog default with origin DEFAULT. Writes are
    type-checked against the flag's declared storage type.
    """

    def __init__(self, catalog: Mapping[str, FlagSpec] | None = None):
        self.catalog = dict(catalog if catalog is not None else FLAGS)
        self._values: dict[str, FlagValue] = {name: spec.default for name, spec in self.catalog.items()}
        self._origins: dict[str, Origin] = {name: Origin.DEFAULT for name in self.catalog}

    @classmethod
    def from_values(
        cls,
        values: Mapping[str, FlagValue],
        origin: Origin = Origin.CONFIG_FILE,
    ) -> "FlagStore":
        """Build a store with `values` applied on top of the defaults."""
        store = cls()
        for name, value in values.items():
            store.set(name, value, origin=origin)
        return store

    def spec(self, name: str) -> FlagSpec:
        spec = self.catalog.get(name)
        if spec is None:
            raise ValueError(f"Unknown flag: {name}")
        return spec

    def get(self, name: str) -> FlagValue:
        if name not in self._values:
            raise ValueError(f"Unknown flag: {name}")
        return self._values[name]

    def set(self, name: str, value: FlagValue, origin: Origin = Origin.COMMAND_LINE) -> None:
        spec = self.spec(name)
        self._values[name] = spec.check_value(value)
        self._origins[name] = origin

    def origin(self, name: str) -> Origin:
        if name not in self._origins:
            raise ValueError(f"Unknown flag: {name}")
        return self._origins[name]

    def is_default(self, name: str) -> bool:
        return self.origin(name) is Origin.DEFAULT

    def snapshot(self) -> dict[str, FlagValue]:
        """Copy of all current values."""
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values
