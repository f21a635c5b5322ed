from __future__ import annotations

import json
from pathlib import Path

import pytest

from git_impact.config import DEFAULT_CONFIG, ImpactConfig, config_from_dict, init_config, parse_first_day_of_week, read_config


def test_missing_config_yields_defaults(tmp_path: Path) -> None:
    assert read_config(tmp_path / "config.json") == ImpactConfig()


def test_relative_rule_paths_resolve_against_config_dir(tmp_path: Path) -> None:
    cfg_path = tmp_path / "conf" / "config.json"
    cfg_path.parent.mkdir()
    cfg_path.write_text(
        json.dumps(
            {
                "rename_files": ["../renames", "/etc/git-impact/renames"],
                "ignore_files": "ignore",
                "first_day_of_week": "sunday",
                "strict_rules": False,
                "top_authors": 10,
            }
        ),
        encoding="utf-8",
    )
    cfg = read_config(cfg_path)
    base = cfg_path.resolve().parent
    assert cfg.rename_files == (base / "../renames", Path("/etc/git-impact/renames"))
    assert cfg.ignore_files == (base / "ignore",)
    assert cfg.first_day_of_week == 6
    assert cfg.strict_rules is False
    assert cfg.top_authors == 10


@pytest.mark.parametrize(
    "value,expected",
    [("monday", 0), ("Sunday", 6), ("sun", 6), ("wed", 2), (6, 6), ("0", 0)],
)
def test_parse_first_day_of_week(value: object, expected: int) -> None:
    assert parse_first_day_of_week(value) == expected


@pytest.mark.parametrize("value", ["", "mo", "someday", 7, -1, True])
def test_parse_first_day_of_week_invalid(value: object) -> None:
    with pytest.raises(ValueError):
        parse_first_day_of_week(value)


@pytest.mark.parametrize(
    "data",
    [
        {"top_authors": -1},
        {"top_authors": "ten"},
        {"strict_rules": "yes"},
        {"rename_files": {"a": 1}},
        {"first_day_of_week": "blursday"},
    ],
)
def test_invalid_config_values(data: dict, tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        config_from_dict(data, tmp_path)


def test_init_config_writes_defaults_once(tmp_path: Path) -> None:
    p = tmp_path / "config.json"
    assert init_config(p) is True
    assert json.loads(p.read_text(encoding="utf-8")) == DEFAULT_CONFIG
    assert init_config(p) is False
    assert read_config(p) == ImpactConfig()
