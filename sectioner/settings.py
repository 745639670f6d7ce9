from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    # Repair schedule: {count, gender, count} per round
    rebalance_rounds: int = 3
    count_iterations: int = 50
    gender_iterations: int = 50
    gender_tolerance: float = 0.15

    # Importer accepts 그룹1..그룹<group_limit>
    group_limit: int = 10

    log_dir: str = "logs"
    outputs_dir: str = "outputs"


def _project_root() -> Path:
    # sectioner/settings.py -> project root is parents[1]
    return Path(__file__).resolve().parents[1]


def _coerce(default: Any, value: Any) -> Any:
    # Integer settings must not silently truncate 2.7 -> 2
    if isinstance(default, int):
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise ValueError(f"expected an integer, got {value!r}")
    return type(default)(value)


def load_settings(project_root: Path | str | None = None) -> EngineSettings:
    """Load engine settings from configs/sectioner.toml if present, else defaults.

    Keys may sit at the top level or under an [engine] table; unknown keys are
    ignored and a value that cannot be coerced keeps its default.
    """
    base = EngineSettings()
    root: Path = _project_root() if project_root is None else Path(project_root)
    cfg = root / "configs" / "sectioner.toml"
    if not cfg.exists():
        return base
    try:
        data: Dict[str, Any] = tomllib.loads(cfg.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning(f"Ignoring unreadable settings file {cfg}: {exc}")
        return base
    table = data.get("engine") if isinstance(data.get("engine"), dict) else data

    overrides: Dict[str, Any] = {}
    for f in fields(EngineSettings):
        if f.name not in table:
            continue
        default = getattr(base, f.name)
        try:
            overrides[f.name] = _coerce(default, table[f.name])
        except (TypeError, ValueError):
            logger.warning(f"Bad value for {f.name!r} in {cfg}; keeping {default!r}")
    return replace(base, **overrides)
