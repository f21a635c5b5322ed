from __future__ import annotations

import dataclasses
import json
from pathlib import Path

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

DEFAULT_CONFIG: dict = {
    "rename_files": [],
    "ignore_files": [],
    "first_day_of_week": "monday",
    "strict_rules": True,
    "top_authors": 0,
}


@dataclasses.dataclass(frozen=True)
class ImpactConfig:
    rename_files: tuple[Path, ...] = ()
    ignore_files: tuple[Path, ...] = ()
    first_day_of_week: int = 0
    strict_rules: bool = True
    top_authors: int = 0


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    return json.loads(config_path.read_text(encoding="utf-8"))


def save_config(config_path: Path, config: dict) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(config, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def parse_first_day_of_week(value: object) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid first_day_of_week: {value!r}")
    if isinstance(value, int):
        if 0 <= value <= 6:
            return value
        raise ValueError(f"invalid first_day_of_week: {value!r} (expected 0-6, 0 = Monday)")
    s = str(value or "").strip().lower()
    if s.isdigit():
        return parse_first_day_of_week(int(s))
    for i, day in enumerate(WEEKDAYS):
        if s and (s == day or (len(s) >= 3 and day.startswith(s))):
            return i
    raise ValueError(f"invalid first_day_of_week: {value!r} (expected a weekday name)")


def _path_list(data: dict, key: str, base_dir: Path) -> tuple[Path, ...]:
    raw = data.get(key) or []
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise ValueError(f"config key {key!r} must be a list of paths")
    out: list[Path] = []
    for item in raw:
        s = str(item or "").strip()
        if not s:
            continue
        p = Path(s).expanduser()
        out.append(p if p.is_absolute() else base_dir / p)
    return tuple(out)


def config_from_dict(data: dict, base_dir: Path) -> ImpactConfig:
    if not isinstance(data, dict):
        raise ValueError("config must be a JSON object")
    top = data.get("top_authors", 0) or 0
    if isinstance(top, bool) or not isinstance(top, int) or top < 0:
        raise ValueError(f"config key 'top_authors' must be a non-negative integer, got {top!r}")
    strict = data.get("strict_rules", True)
    if not isinstance(strict, bool):
        raise ValueError(f"config key 'strict_rules' must be true or false, got {strict!r}")
    return ImpactConfig(
        rename_files=_path_list(data, "rename_files", base_dir),
        ignore_files=_path_list(data, "ignore_files", base_dir),
        first_day_of_week=parse_first_day_of_week(data.get("first_day_of_week") or "monday"),
        strict_rules=strict,
        top_authors=top,
    )


def init_config(config_path: Path) -> bool:
    """Write DEFAULT_CONFIG to `config_path` unless a file is already there."""
    if config_path.exists():
        return False
    save_config(config_path, dict(DEFAULT_CONFIG))
    return True


def read_config(config_path: Path) -> ImpactConfig:
    return config_from_dict(load_config(config_path), base_dir=config_path.resolve().parent)
