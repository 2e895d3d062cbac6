"""Load skill/scoring configuration and env settings."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobboard.errors import ConfigError
from jobboard.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SKILLS_PATH: Path = CONFIG_DIR / "skills.yaml"
DATA_DIR: Path = ROOT_DIR / "data"
REPORTS_DIR: Path = ROOT_DIR / "reports"

DEFAULT_TEMPERATURE = 0.4

DEFAULT_SENIORITY_KEYWORDS: tuple[str, ...] = (
    "senior", "staff", "principal", "lead", "director", "head of",
    "vp", "vice president", "architect", "distinguished", "tech lead",
)


@dataclass(frozen=True)
class BonusValues:
    remote_position: float = 15
    region_friendly: float = 10
    seniority_match: float = 20
    domain_relevance: float = 15

    @property
    def total(self) -> float:
        return (
            self.remote_position + self.region_friendly
            + self.seniority_match + self.domain_relevance
        )


@dataclass(frozen=True)
class SkillCeiling:
    base_skill_count: int = 8
    temperature_sensitivity: float = 0.6
    min_skill_count: int = 4
    max_skill_count: int = 12


@dataclass(frozen=True)
class ScoreWeights:
    skills: float = 0.65
    bonuses: float = 0.35


@dataclass(frozen=True)
class TemperaturePreset:
    value: float
    label: str
    description: str = ""


def _default_presets() -> dict[str, TemperaturePreset]:
    return {
        "strict": TemperaturePreset(0.1, "Strict", "Near-perfect skill matches only"),
        "balanced": TemperaturePreset(0.4, "Balanced", "Good balance of relevance and variety"),
        "exploratory": TemperaturePreset(0.7, "Exploratory", "Partial matches welcome, more variety"),
        "loose": TemperaturePreset(0.95, "Loose", "Show everything with any relevance"),
    }


@dataclass(frozen=True)
class ScoringConfig:
    """Fully-populated scoring settings; built once by resolve_scoring_config."""

    default_skill_weight: int = 5
    bonuses: BonusValues = field(default_factory=BonusValues)
    relevant_domains: tuple[str, ...] = ()
    seniority_keywords: tuple[str, ...] = DEFAULT_SENIORITY_KEYWORDS
    skill_ceiling: SkillCeiling = field(default_factory=SkillCeiling)
    score_weights: ScoreWeights = field(default_factory=ScoreWeights)
    temperature_presets: dict[str, TemperaturePreset] = field(default_factory=_default_presets)


@dataclass(frozen=True)
class UserLocation:
    country: str = "IT"
    locality: str = ""


@dataclass(frozen=True)
class Settings:
    scoring: ScoringConfig
    skill_categories: tuple[dict, ...]
    location: UserLocation


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def is_job_board_enabled() -> bool:
    """JOB_BOARD_ENABLED=true/false wins; unset means enabled."""
    value = get_env("JOB_BOARD_ENABLED").lower()
    if value == "false":
        return False
    return True


def _number(raw: dict, key: str, default: float, lo: float | None = None, hi: float | None = None) -> float:
    value = raw.get(key, default)
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    if lo is not None and value < lo or hi is not None and value > hi:
        raise ConfigError(f"{key}={value} outside allowed range [{lo}, {hi}]")
    return value


def _keywords(raw: dict, key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    values = raw.get(key)
    if values is None:
        return default
    if not isinstance(values, list):
        raise ConfigError(f"{key} must be a list of strings")
    return tuple(str(v).lower() for v in values if str(v).strip())


def resolve_scoring_config(raw: dict[str, Any] | None) -> ScoringConfig:
    """Apply defaults and validation to a raw ``jobBoardScoring`` mapping."""
    raw = raw or {}

    bonus_raw = raw.get("bonuses") or {}
    bonuses = BonusValues(
        remote_position=_number(bonus_raw, "remotePosition", 15, lo=0),
        region_friendly=_number(bonus_raw, "regionFriendly", 10, lo=0),
        seniority_match=_number(bonus_raw, "seniorityMatch", 20, lo=0),
        domain_relevance=_number(bonus_raw, "domainRelevance", 15, lo=0),
    )

    ceiling_raw = raw.get("skillCeiling") or {}
    ceiling = SkillCeiling(
        base_skill_count=int(_number(ceiling_raw, "baseSkillCount", 8, lo=3, hi=20)),
        temperature_sensitivity=_number(ceiling_raw, "temperatureSensitivity", 0.6, lo=0, hi=1),
        min_skill_count=int(_number(ceiling_raw, "minSkillCount", 4, lo=2, hi=10)),
        max_skill_count=int(_number(ceiling_raw, "maxSkillCount", 12, lo=5, hi=25)),
    )
    if ceiling.min_skill_count > ceiling.max_skill_count:
        raise ConfigError(
            f"skillCeiling.minSkillCount ({ceiling.min_skill_count}) exceeds "
            f"maxSkillCount ({ceiling.max_skill_count})"
        )

    weights_raw = raw.get("scoreWeights") or {}
    weights = ScoreWeights(
        skills=_number(weights_raw, "skills", 0.65, lo=0, hi=1),
        bonuses=_number(weights_raw, "bonuses", 0.35, lo=0, hi=1),
    )
    if weights.skills + weights.bonuses <= 0:
        raise ConfigError("scoreWeights must not both be zero")

    presets = _default_presets()
    for name, preset_raw in (raw.get("temperaturePresets") or {}).items():
        presets[name] = TemperaturePreset(
            value=_number(preset_raw, "value", presets.get(name, TemperaturePreset(0.4, name)).value, lo=0, hi=1),
            label=str(preset_raw.get("label", name.title())),
            description=str(preset_raw.get("description", "")),
        )

    return ScoringConfig(
        default_skill_weight=int(_number(raw, "defaultSkillWeight", 5, lo=1, hi=10)),
        bonuses=bonuses,
        relevant_domains=_keywords(raw, "relevantDomains", ()),
        seniority_keywords=_keywords(raw, "seniorityKeywords", DEFAULT_SENIORITY_KEYWORDS),
        skill_ceiling=ceiling,
        score_weights=weights,
        temperature_presets=presets,
    )


def resolve_settings(data: dict[str, Any]) -> Settings:
    categories = data.get("skillCategories") or []
    if not isinstance(categories, list):
        raise ConfigError("skillCategories must be a list")
    loc = data.get("location") or {}
    return Settings(
        scoring=resolve_scoring_config(data.get("jobBoardScoring")),
        skill_categories=tuple(categories),
        location=UserLocation(
            country=str(loc.get("country", "IT")).upper(),
            locality=str(loc.get("locality", "")),
        ),
    )


def load_settings(path: Path | None = None) -> Settings:
    """Read the YAML config (``JOBBOARD_CONFIG`` overrides the default path)."""
    path = path or Path(get_env("JOBBOARD_CONFIG") or SKILLS_PATH)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    settings = resolve_settings(data)
    log.debug(
        "Loaded %d skill categories from %s (country=%s)",
        len(settings.skill_categories), path.name, settings.location.country,
    )
    return settings


def ensure_dirs() -> None:
    for d in (DATA_DIR, REPORTS_DIR):
        d.mkdir(parents=True, exist_ok=True)
