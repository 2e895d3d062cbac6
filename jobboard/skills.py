"""Weighted skill registry built once from the skill categories config."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from jobboard.errors import ConfigError
from jobboard.log import get_logger

log = get_logger(__name__)


def whole_word_pattern(term: str) -> re.Pattern[str]:
    """Case-insensitive whole-word regex for *term* with metacharacters escaped."""
    return re.compile(rf"\b{re.escape(term.lower())}\b", re.IGNORECASE)


@dataclass(frozen=True)
class Skill:
    name: str
    weight: int
    aliases: tuple[str, ...]
    context: str = ""

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in _alias_patterns(self.aliases))


_PATTERN_CACHE: dict[str, re.Pattern[str]] = {}


def _alias_patterns(aliases: tuple[str, ...]) -> Iterator[re.Pattern[str]]:
    for alias in aliases:
        pattern = _PATTERN_CACHE.get(alias)
        if pattern is None:
            pattern = _PATTERN_CACHE[alias] = whole_word_pattern(alias)
        yield pattern


def _parse_skill(item: Any, default_weight: int) -> Skill:
    if isinstance(item, str):
        item = {"name": item}
    if not isinstance(item, dict) or not str(item.get("name", "")).strip():
        raise ConfigError(f"Skill entry needs a name: {item!r}")

    name = str(item["name"]).strip()
    weight = item.get("weight")
    if weight is None:
        weight = default_weight
    if not isinstance(weight, int) or isinstance(weight, bool) or not 1 <= weight <= 10:
        raise ConfigError(f"Skill {name!r} weight must be an integer 1-10, got {weight!r}")

    aliases = [str(a).strip().lower() for a in item.get("aliases") or []]
    aliases = [a for a in aliases if a]
    if not aliases:
        aliases = [name.lower()]

    return Skill(
        name=name,
        weight=weight,
        aliases=tuple(dict.fromkeys(aliases)),
        context=str(item.get("context", "")),
    )


class SkillRegistry:
    """Immutable set of weighted skills, looked up by lowercase alias.

    Built once at start-up and handed to the scorer; nothing adds skills or
    changes weights afterwards.
    """

    def __init__(self, skills: Iterable[Skill]) -> None:
        by_name: dict[str, Skill] = {}
        for skill in skills:
            key = skill.name.lower()
            if key in by_name:
                log.warning("Duplicate skill %r in config; later entry wins", skill.name)
            by_name[key] = skill
        self._skills: tuple[Skill, ...] = tuple(by_name.values())

        self._by_alias: dict[str, Skill] = {}
        for skill in self._skills:
            self._by_alias.setdefault(skill.name.lower(), skill)
            for alias in skill.aliases:
                self._by_alias.setdefault(alias, skill)

        self._by_weight: tuple[Skill, ...] = tuple(
            sorted(self._skills, key=lambda s: s.weight, reverse=True)
        )

    @classmethod
    def from_categories(cls, categories: Iterable[dict], default_weight: int = 5) -> "SkillRegistry":
        skills: list[Skill] = []
        for category in categories:
            for item in category.get("skills", []):
                skills.append(_parse_skill(item, default_weight))
        registry = cls(skills)
        log.debug("Skill registry built with %d skills", len(registry))
        return registry

    def lookup(self, alias: str) -> Skill | None:
        return self._by_alias.get(alias.strip().lower())

    def aliases_for(self, name: str) -> tuple[str, ...]:
        skill = self.lookup(name)
        return skill.aliases if skill else (name.strip().lower(),)

    def top_by_weight(self, n: int) -> tuple[Skill, ...]:
        return self._by_weight[: max(n, 0)]

    def __iter__(self) -> Iterator[Skill]:
        return iter(self._skills)

    def __len__(self) -> int:
        return len(self._skills)
