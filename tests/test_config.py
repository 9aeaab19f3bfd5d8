import json
from pathlib import Path

import pytest

from lineplan.config import PlannerConfig, config_from_dict, load_config
from lineplan.models import Color

ROOT = Path(__file__).resolve().parents[1]


def test_repository_config_matches_defaults():
    cfg = load_config(ROOT / "config.yaml")
    assert cfg == PlannerConfig()
    assert cfg.policy.costly_duration == 25
    assert cfg.policy.neutral_color is Color.WHITE
    assert cfg.max_steps is None


def test_empty_mapping_gives_defaults():
    assert config_from_dict({}) == PlannerConfig()


def test_overrides():
    cfg = config_from_dict(
        {
            "log_level": "debug",
            "instance": {"file": "data/small_plant.yaml", "strict": True, "generator": {"seed": 3}},
            "switchover": {"normal_duration": 2, "costly_duration": 9, "neutral_color": "MILK"},
            "search": {"max_steps": "4", "time_limit_ms": 500},
            "output": {"dir": "out", "gantt": False},
        }
    )
    assert cfg.instance_file == "data/small_plant.yaml"
    assert cfg.strict
    assert cfg.generator.seed == 3
    assert cfg.generator.plain_orders == 150
    assert (cfg.policy.normal_duration, cfg.policy.costly_duration) == (2, 9)
    assert cfg.policy.neutral_color is Color.MILK
    assert (cfg.max_steps, cfg.time_limit_ms) == (4, 500)
    assert cfg.output.dir == "out"
    assert not cfg.output.gantt
    assert cfg.output.results_json


@pytest.mark.parametrize(
    "raw",
    [
        {"switchover": {"neutral_color": "blue"}},
        {"switchover": {"costly_duration": -1}},
        {"search": {"max_steps": "many"}},
        {"output": ["not", "a", "mapping"]},
    ],
)
def test_invalid_values(raw):
    with pytest.raises(ValueError):
        config_from_dict(raw)


def test_json_config_and_missing_file(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"search": {"max_steps": 2}}), encoding="utf-8")
    assert load_config(path).max_steps == 2
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")
