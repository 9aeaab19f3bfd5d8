"""Run configuration loaded from ``config.yaml`` (or JSON).

``PlannerConfig`` bundles every setting the command line driver needs so
that it can be passed around (and logged) as one value. Missing keys fall
back to the defaults below; unknown sections are ignored.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .models import Color
from .switchover import SwitchoverPolicy


@dataclass(slots=True)
class GeneratorSettings:
    seed: int = 0
    plain_orders: int = 150
    allergen_orders: int = 50
    machines_a: int = 5
    machines_b: int = 5


@dataclass(slots=True)
class OutputSettings:
    dir: str = "results"
    gantt: bool = True
    progress_plot: bool = True
    results_json: bool = True


@dataclass(slots=True)
class PlannerConfig:
    """Bundle of all configurable settings of one planning run.

    ``instance_file`` wins over the generator when both are given.
    ``max_steps`` / ``time_limit_ms`` only bound the optimization phase.
    """

    log_level: str = "INFO"
    instance_file: Optional[str] = None
    generator: GeneratorSettings = field(default_factory=GeneratorSettings)
    policy: SwitchoverPolicy = field(default_factory=SwitchoverPolicy)
    strict: bool = False
    max_steps: Optional[int] = None
    time_limit_ms: Optional[int] = None
    output: OutputSettings = field(default_factory=OutputSettings)


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = cfg.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return value


def _optional_int(value: Any, name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Config value '{name}' must be an integer, got {value!r}") from None


def config_from_dict(cfg: Dict[str, Any]) -> PlannerConfig:
    instance_cfg = _section(cfg, "instance")
    gen_cfg = instance_cfg.get("generator") or {}
    sw_cfg = _section(cfg, "switchover")
    search_cfg = _section(cfg, "search")
    out_cfg = _section(cfg, "output")

    defaults = GeneratorSettings()
    generator = GeneratorSettings(
        seed=int(gen_cfg.get("seed", defaults.seed)),
        plain_orders=int(gen_cfg.get("plain_orders", defaults.plain_orders)),
        allergen_orders=int(gen_cfg.get("allergen_orders", defaults.allergen_orders)),
        machines_a=int(gen_cfg.get("machines_a", defaults.machines_a)),
        machines_b=int(gen_cfg.get("machines_b", defaults.machines_b)),
    )
    base_policy = SwitchoverPolicy()
    neutral = str(sw_cfg.get("neutral_color", base_policy.neutral_color.value)).lower()
    try:
        neutral_color = Color(neutral)
    except ValueError:
        raise ValueError(f"Unknown neutral_color {neutral!r}") from None
    policy = SwitchoverPolicy(
        normal_duration=int(sw_cfg.get("normal_duration", base_policy.normal_duration)),
        costly_duration=int(sw_cfg.get("costly_duration", base_policy.costly_duration)),
        neutral_color=neutral_color,
    )
    out_defaults = OutputSettings()
    output = OutputSettings(
        dir=str(out_cfg.get("dir", out_defaults.dir)),
        gantt=bool(out_cfg.get("gantt", out_defaults.gantt)),
        progress_plot=bool(out_cfg.get("progress_plot", out_defaults.progress_plot)),
        results_json=bool(out_cfg.get("results_json", out_defaults.results_json)),
    )
    return PlannerConfig(
        log_level=str(cfg.get("log_level", "INFO")),
        instance_file=instance_cfg.get("file"),
        generator=generator,
        policy=policy,
        strict=bool(instance_cfg.get("strict", False)),
        max_steps=_optional_int(search_cfg.get("max_steps"), "search.max_steps"),
        time_limit_ms=_optional_int(search_cfg.get("time_limit_ms"), "search.time_limit_ms"),
        output=output,
    )


def load_config(config_file: str | Path = "config.yaml") -> PlannerConfig:
    """Load configuration from a YAML (``.yml``/``.yaml``) or JSON file."""
    path = Path(config_file)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    if path.suffix in (".yml", ".yaml"):
        cfg = yaml.safe_load(text) or {}
    else:
        cfg = json.loads(text)
    if not isinstance(cfg, dict):
        raise ValueError("Config root must be a mapping")
    return config_from_dict(cfg)
