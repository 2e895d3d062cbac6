"""Temperature-controlled weighted relevance scoring.

Temperature bands (0.0-1.0):

  <= 0.2  strict       weights amplified, bonuses halved, low scores compressed
  <= 0.5  balanced     linear weights, full bonuses, linear curve
  <= 0.8  exploratory  weight differences compressed, bonuses up to 125%
  >  0.8  loose        weights nearly flat, bonuses up to 200%

The skill denominator is the top-N skills by weight, with N shifting around
``skillCeiling.baseSkillCount`` as temperature moves away from 0.4.
"""
from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass

from jobboard.config import DEFAULT_TEMPERATURE, ScoringConfig
from jobboard.location import is_remote_job, is_remote_job_available_in_region
from jobboard.models import (
    Bonuses,
    MatchedSkill,
    MatchResult,
    ParsedJob,
    WeightedMatchResult,
)
from jobboard.skills import SkillRegistry, whole_word_pattern


@dataclass(frozen=True)
class TemperatureFactors:
    weight_exponent: float
    bonus_multiplier: float
    score_curve_exponent: float
    temperature: float
    effective_skill_ceiling: int


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def temperature_factors(temperature: float, config: ScoringConfig) -> TemperatureFactors:
    t = _clamp(temperature, 0.0, 1.0)

    ceiling = config.skill_ceiling
    span = ceiling.max_skill_count - ceiling.min_skill_count
    adjustment = (t - 0.4) * ceiling.temperature_sensitivity * span
    effective_ceiling = _round_half_up(
        _clamp(ceiling.base_skill_count + adjustment, ceiling.min_skill_count, ceiling.max_skill_count)
    )

    if t <= 0.2:
        f = t / 0.2
        exponent, bonus, curve = 2.0 - f, 0.5 + 0.5 * f, 1.5 - 0.5 * f
    elif t <= 0.5:
        exponent, bonus, curve = 1.0, 1.0, 1.0
    elif t <= 0.8:
        f = (t - 0.5) / 0.3
        exponent, bonus, curve = 1.0 - 0.5 * f, 1.0 + 0.25 * f, 1.0 - 0.3 * f
    else:
        f = (t - 0.8) / 0.2
        exponent, bonus, curve = 0.5 - 0.3 * f, 1.25 + 0.75 * f, 0.7 - 0.2 * f

    return TemperatureFactors(
        weight_exponent=exponent,
        bonus_multiplier=bonus,
        score_curve_exponent=curve,
        temperature=t,
        effective_skill_ceiling=effective_ceiling,
    )


class ScoringEngine:
    """Scores posting text against a SkillRegistry.

    Stateless apart from the injected registry and config, both immutable.
    """

    def __init__(self, registry: SkillRegistry, config: ScoringConfig) -> None:
        self.registry = registry
        self.config = config
        self._seniority = tuple(whole_word_pattern(k) for k in config.seniority_keywords)
        self._domains = tuple(whole_word_pattern(k) for k in config.relevant_domains)

    def factors(self, temperature: float) -> TemperatureFactors:
        return temperature_factors(temperature, self.config)

    # -- points ---------------------------------------------------------------

    def _skill_points(self, text: str, factors: TemperatureFactors) -> tuple[float, list[MatchedSkill]]:
        matched: list[MatchedSkill] = []
        total = 0.0
        for skill in self.registry:
            if skill.matches(text):
                points = skill.weight ** factors.weight_exponent
                matched.append(MatchedSkill(name=skill.name, weight=skill.weight, points_earned=points))
                total += points
        return total, matched

    def _max_skill_points(self, factors: TemperatureFactors) -> float:
        top = self.registry.top_by_weight(factors.effective_skill_ceiling)
        return sum(s.weight ** factors.weight_exponent for s in top)

    def _bonus_points(self, text: str, region: str, factors: TemperatureFactors) -> tuple[float, Bonuses]:
        values = self.config.bonuses
        mult = factors.bonus_multiplier
        total = 0.0

        remote = is_remote_job(text)
        if remote:
            total += values.remote_position * mult

        region_friendly = remote and is_remote_job_available_in_region(text, region)
        if region_friendly:
            total += values.region_friendly * mult

        seniority = any(p.search(text) for p in self._seniority)
        if seniority:
            total += values.seniority_match * mult

        domain = any(p.search(text) for p in self._domains)
        if domain:
            total += values.domain_relevance * mult

        return total, Bonuses(
            remote=remote,
            region_friendly=region_friendly,
            seniority_match=seniority,
            domain_relevance=domain,
        )

    def _normalize(
        self,
        skill_points: float,
        bonus_points: float,
        max_skill_points: float,
        max_bonus_points: float,
        factors: TemperatureFactors,
    ) -> float:
        weights = self.config.score_weights

        skill_pct = min(1.0, skill_points / max_skill_points) if max_skill_points > 0 else 0.0
        bonus_pct = bonus_points / max_bonus_points if max_bonus_points > 0 else 0.0

        # Bonus-only postings: 0.15 at t=0 rising to 0.30 at t=1
        penalty = 0.15 + factors.temperature * 0.15 if skill_points == 0 else 1.0

        bonus_weight = weights.bonuses * factors.bonus_multiplier
        skill_weight = weights.skills * (2 - factors.bonus_multiplier)
        total_weight = skill_weight + bonus_weight
        if total_weight <= 0:
            skill_weight, bonus_weight, total_weight = 1.0, 0.0, 1.0

        blended = (skill_pct * skill_weight + bonus_pct * bonus_weight) / total_weight * 100
        penalized = blended * penalty
        curved = math.pow(penalized / 100, factors.score_curve_exponent) * 100
        return _clamp(curved, 0.0, 100.0)

    # -- public ---------------------------------------------------------------

    def score(self, text: str, temperature: float = DEFAULT_TEMPERATURE, region: str = "EU") -> WeightedMatchResult:
        factors = self.factors(temperature)
        max_skill = self._max_skill_points(factors)
        max_bonus = self.config.bonuses.total * factors.bonus_multiplier

        if not text or not text.strip():
            return WeightedMatchResult(
                score=0,
                raw_points=0.0,
                max_possible_points=max_skill + max_bonus,
                skill_points=0.0,
                bonus_points=0.0,
                matched_skills=(),
                bonuses=Bonuses(),
                temperature=temperature,
            )

        skill_points, matched = self._skill_points(text, factors)
        bonus_points, bonuses = self._bonus_points(text, region, factors)
        normalized = self._normalize(skill_points, bonus_points, max_skill, max_bonus, factors)

        return WeightedMatchResult(
            score=_round_half_up(normalized),
            raw_points=skill_points + bonus_points,
            max_possible_points=max_skill + max_bonus,
            skill_points=skill_points,
            bonus_points=bonus_points,
            matched_skills=tuple(matched),
            bonuses=bonuses,
            temperature=temperature,
        )

    def rescore(self, job: ParsedJob, temperature: float, region: str = "EU") -> ParsedJob:
        """Derived copy of *job* scored at another temperature; *job* is untouched."""
        result = self.score(job.raw_text, temperature, region)
        return dataclasses.replace(
            job,
            match_score=result.score,
            matched_skills=tuple(result.matched_skill_names),
            match_details=result,
        )

    def match_job_to_skills(self, text: str, skills: list[str]) -> MatchResult:
        """Unweighted share of *skills* found in *text*, aliases included."""
        matched: list[str] = []
        for name in skills:
            aliases = self.registry.aliases_for(name)
            if any(whole_word_pattern(a).search(text) for a in aliases):
                matched.append(name)
        score = _round_half_up(len(matched) / len(skills) * 100) if skills else 0
        return MatchResult(
            score=score,
            matched_skills=matched,
            total_skills=len(skills),
            matched_count=len(matched),
        )
