from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..constraints.schema import Mode
from .catalog import FLAGS, FlagValue
from .intrinsics import IntrinsicRegistry
from .platform import Platform
from .store import FlagStore, Origin


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class FlagConfig:
    platform: Platform = field(default_factory=Platform)
    mode: Mode = Mode.STRICT
    verbose: bool = True
    values: dict[str, FlagValue] = field(default_factory=dict)
    extra_intrinsics: tuple[str, ...] = ()

    def build_store(self) -> FlagStore:
        return FlagStore.from_values(self.values, origin=Origin.CONFIG_FILE)

    def build_intrinsics(self) -> IntrinsicRegistry:
        return IntrinsicRegistry(extra=self.extra_intrinsics)


def _load_platform(raw: dict[str, Any]) -> Platform:
    compilers = raw.get("compilers", ["c1", "c2"])
    if not isinstance(compilers, list) or not all(isinstance(c, str) for c in compilers):
        raise ValueError("platform.compilers must be a list of compiler names")
    names = {c.strip().lower() for c in compilers}
    unknown = names - {"c1", "c2"}
    if unknown:
        raise ValueError(f"platform.compilers: unknown compiler(s) {', '.join(sorted(unknown))}")

    flags: dict[str, bool] = {}
    for key in ("tiered", "interpreter_only", "rtm"):
        if key in raw:
            if not isinstance(raw[key], bool):
                raise ValueError(f"platform.{key} must be a boolean")
            flags[key] = raw[key]

    return Platform(
        arch=str(raw.get("arch", "x86_64")).strip(),
        compiler1="c1" in names,
        compiler2="c2" in names,
        **flags,
    )


def parse_flag_config(data: dict[str, Any]) -> FlagConfig:
    """Build a FlagConfig from already-parsed TOML data."""
    platform = _load_platform(_coerce_dict(data.get("platform")))

    validation = _coerce_dict(data.get("validation"))
    mode_raw = str(validation.get("mode", Mode.STRICT.value)).strip().lower()
    try:
        mode = Mode(mode_raw)
    except ValueError:
        raise ValueError(f"validation.mode must be 'strict' or 'verify', got {mode_raw!r}") from None
    verbose = validation.get("verbose", True)
    if not isinstance(verbose, bool):
        raise ValueError("validation.verbose must be a boolean")

    extra = _coerce_dict(data.get("intrinsics")).get("extra", [])
    if not isinstance(extra, list) or not all(isinstance(e, str) for e in extra):
        raise ValueError("intrinsics.extra must be a list of names")

    values: dict[str, FlagValue] = {}
    for name, value in _coerce_dict(data.get("flags")).items():
        spec = FLAGS.get(name)
        if spec is None:
            raise ValueError(f"Unknown flag in [flags]: {name}")
        values[name] = spec.check_value(value)

    return FlagConfig(
        platform=platform,
        mode=mode,
        verbose=verbose,
        values=values,
        extra_intrinsics=tuple(extra),
    )


def load_flag_config(path: Path) -> FlagConfig:
    """
    Load a flag configuration from TOML.

    Values in [flags] are taken as typed by TOML; only their type and width
    are checked here, never their constraints.
    """
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Failed to parse {path}: {e}") from e
    return parse_flag_config(data)
