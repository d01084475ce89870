"""Multi-factor weighted scoring over structured resume and job facts.

Six sub-scores, each 0-100: skills, experience, location, salary, culture and
resume. A factor whose facts are missing is omitted and its weight is
redistributed proportionally over the factors that are present, so partial
information degrades the match instead of aborting it.
"""

import logging
import unicodedata
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from pillar_match.core.config import (
    FACTOR_NAMES,
    ExperienceBand,
    ExplanationConfig,
    FactorsConfig,
    FactorWeights,
    MethodologyConfig,
    load_methodology,
)
from pillar_match.core.errors import MissingFactAvailability
from pillar_match.core.numeric import HUNDRED, clamp, mean, quantize, round_half_up, to_decimal
from pillar_match.core.schemas import (
    CandidateFacts,
    JobFacts,
    MultiFactorScore,
    ScoreBreakdown,
    WorkModel,
)

logger = logging.getLogger(__name__)

# (sub-score or None when the facts are missing, details for the explanation view)
FactorResult = tuple[Decimal | None, dict[str, Any]]

# Percentage points lost per point of difference on a 1-5 rating.
RATING_SIMILARITY_FACTOR = 20


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower().strip()


# ---------------------------------------------------------------------------
# Individual factors
# ---------------------------------------------------------------------------


def score_skills(candidate: CandidateFacts, job: JobFacts) -> FactorResult:
    """Fraction of required job skills the candidate has.

    A skill matches on case-insensitive equality or containment in either
    direction (``"python"`` matches ``"Python 3"``). When no skill is flagged
    required, every listed skill counts.
    """
    if not job.skills:
        return None, {}

    required = [s for s in job.skills if s.required] or list(job.skills)
    candidate_skills = [_fold(s) for s in candidate.skills if s.strip()]

    details: dict[str, bool] = {}
    for skill in required:
        key = _fold(skill.name)
        details[skill.name] = any(cs == key or key in cs or cs in key for cs in candidate_skills)

    matched = [name for name, hit in details.items() if hit]
    missing = [name for name, hit in details.items() if not hit]
    score = Decimal(len(matched)) / Decimal(len(required)) * HUNDRED

    logger.debug("Skills: %d/%d matched, missing %s", len(matched), len(required), missing)
    return score, {"details": details, "matched": matched, "missing": missing}


def score_experience(
    candidate: CandidateFacts,
    job: JobFacts,
    config: FactorsConfig | None = None,
) -> FactorResult:
    """Years of experience against the job requirement.

    The requirement is the stricter of ``min_experience`` and the lower bound
    of the job's seniority band. Below it the score ramps linearly from 0 (no
    experience) to 100 (requirement met). Above the upper bound of the band
    an overqualification penalty applies, floored at ``overqualified_floor``.
    """
    config = config or load_methodology().factors
    band = _experience_band(job.experience_level, config)

    bounds = [b for b in (job.min_experience, band.min if band else None) if b is not None]
    required = max(bounds) if bounds else None
    years = candidate.years_experience
    if years is None or required is None:
        return None, {}

    level_match = band is None or band.min <= years <= band.max
    y, req = to_decimal(years), to_decimal(required)

    if y < req:
        score = y / req * HUNDRED
    elif band is not None and years > band.max:
        over = y - to_decimal(band.max)
        score = max(
            to_decimal(config.overqualified_floor),
            HUNDRED - over * to_decimal(config.overqualified_penalty_per_year),
        )
    else:
        score = HUNDRED

    logger.debug("Experience: %.1f years vs %.1f required -> %s", years, required, score)
    return clamp(score), {
        "years_experience": years,
        "required_years": required,
        "experience_level": job.experience_level,
        "level_match": level_match,
    }


def score_location(candidate: CandidateFacts, job: JobFacts) -> FactorResult:
    """Work-model and geographic agreement, each worth half the factor.

    A remote job counts as geographically compatible wherever the candidate
    lives. A requirement the job does not state is met; one the candidate
    does not state is not.
    """
    if job.work_model is None and not job.location:
        return None, {}

    checks: dict[str, bool] = {"work_model_match": True, "location_match": True}
    if job.work_model is not WorkModel.REMOTE:
        if job.work_model is not None:
            checks["work_model_match"] = job.work_model in candidate.work_models
        if job.location:
            wanted = _fold(job.location)
            checks["location_match"] = any(
                wanted in _fold(loc) or _fold(loc) in wanted for loc in candidate.locations if loc.strip()
            )

    score = Decimal(sum(checks.values())) * 50
    logger.debug("Location checks %s -> %s", checks, score)
    return score, {
        "work_model_match": checks["work_model_match"],
        "location_match": checks["location_match"],
        "job_work_model": job.work_model.value if job.work_model else None,
        "job_location": job.location,
    }


def score_salary(
    candidate: CandidateFacts,
    job: JobFacts,
    config: FactorsConfig | None = None,
) -> FactorResult:
    """Overlap between the candidate's expected range and the job's offer.

    Offer covering the expectation scores 100. Partial overlap scores the
    overlapping share of the candidate's range, never below the near-miss
    score. Disjoint ranges decay from the near-miss score to 0 as the gap
    grows to ``salary_tolerance`` times the candidate's midpoint.
    """
    config = config or load_methodology().factors
    if candidate.salary is None or job.salary is None:
        return None, {}

    c_min, c_max = to_decimal(candidate.salary.min), to_decimal(candidate.salary.max)
    j_min, j_max = to_decimal(job.salary.min), to_decimal(job.salary.max)
    near_miss = to_decimal(config.salary_near_miss_score)

    overlap = max(Decimal(0), min(c_max, j_max) - max(c_min, j_min))

    if j_min <= c_min and c_max <= j_max:
        score = HUNDRED
    elif overlap > 0:
        score = max(near_miss, overlap / (c_max - c_min) * HUNDRED)
    else:
        gap = c_min - j_max if c_min > j_max else j_min - c_max
        band = to_decimal(config.salary_tolerance) * (c_min + c_max) / 2
        if band > 0:
            score = near_miss * max(Decimal(0), 1 - gap / band)
        else:
            score = near_miss if gap == 0 else Decimal(0)

    logger.debug("Salary: overlap %s -> %s", overlap, score)
    return clamp(score), {
        "candidate_expectation": {"min": candidate.salary.min, "max": candidate.salary.max},
        "job_offer": {"min": job.salary.min, "max": job.salary.max},
        "overlap": float(overlap),
    }


def score_culture(
    candidate: CandidateFacts,
    job: JobFacts,
    config: FactorsConfig | None = None,
) -> FactorResult:
    """Mean of work-style alignment and value alignment.

    Uses the candidate's pre-computed alignment when supplied; otherwise
    derives both from 1-5 ratings shared by candidate and job.
    """
    config = config or load_methodology().factors

    if candidate.culture_alignment is not None:
        work_style = to_decimal(candidate.culture_alignment.work_style_alignment)
        values = to_decimal(candidate.culture_alignment.value_alignment)
        source = "assessment"
    else:
        shared = sorted(set(candidate.cultural_ratings) & set(job.cultural_requirements))
        if not shared:
            return None, {}
        style_dims = {d.lower() for d in config.work_style_dimensions}
        style = [_rating_similarity(candidate, job, d) for d in shared if d in style_dims]
        value = [_rating_similarity(candidate, job, d) for d in shared if d not in style_dims]
        work_style = mean(style or value)
        values = mean(value or style)
        source = "derived"

    score = (work_style + values) / 2
    logger.debug("Culture (%s): work style %s, values %s", source, work_style, values)
    return score, {
        "work_style_alignment": float(quantize(work_style)),
        "value_alignment": float(quantize(values)),
        "source": source,
    }


def score_resume(candidate: CandidateFacts) -> FactorResult:
    """Mean of the resume's technical and soft-skill sub-scores."""
    if candidate.resume is None:
        return None, {}
    technical = to_decimal(candidate.resume.technical_score)
    soft = to_decimal(candidate.resume.soft_skills_score)
    return (technical + soft) / 2, {
        "technical_score": candidate.resume.technical_score,
        "soft_skills_score": candidate.resume.soft_skills_score,
    }


# ---------------------------------------------------------------------------
# Weighting
# ---------------------------------------------------------------------------


def redistribute_weights(
    weights: Mapping[str, float],
    present: Iterable[str],
) -> dict[str, float]:
    """Rescale the weights of the present factors so they sum to 1.0.

    Raises:
        MissingFactAvailability: If no present factor carries any weight.
    """
    present = [name for name in present if name in weights]
    total = sum(weights[name] for name in present)
    if not present or total <= 0:
        msg = "No scorable factors: every weighted factor lacks the facts it needs"
        raise MissingFactAvailability(msg)
    return {name: weights[name] / total for name in present}


def score_multi_factor(
    candidate_facts: CandidateFacts,
    job_facts: JobFacts,
    weights: FactorWeights | Mapping[str, float] | None = None,
    config: MethodologyConfig | None = None,
) -> MultiFactorScore:
    """Combine the six factors into one weighted, explained score.

    Raises:
        MissingFactAvailability: If none of the six factors can be scored.
    """
    config = config or load_methodology()
    if weights is None:
        weights = config.weights
    elif not isinstance(weights, FactorWeights):
        weights = FactorWeights.model_validate(dict(weights))

    results: dict[str, FactorResult] = {
        "skills": score_skills(candidate_facts, job_facts),
        "experience": score_experience(candidate_facts, job_facts, config.factors),
        "location": score_location(candidate_facts, job_facts),
        "salary": score_salary(candidate_facts, job_facts, config.factors),
        "culture": score_culture(candidate_facts, job_facts, config.factors),
        "resume": score_resume(candidate_facts),
    }
    present = [name for name in FACTOR_NAMES if results[name][0] is not None]
    omitted = [name for name in FACTOR_NAMES if results[name][0] is None]
    effective = redistribute_weights(weights.as_dict(), present)

    base_weights = weights.as_dict()
    total_weight = sum(to_decimal(base_weights[name]) for name in present)
    total = Decimal(0)
    sub_scores: dict[str, float] = {}
    factors_analyzed: dict[str, dict[str, Any]] = {}
    for name in present:
        score = quantize(results[name][0])  # type: ignore[arg-type]
        total += score * to_decimal(base_weights[name]) / total_weight
        sub_scores[name] = float(score)
        factors_analyzed[name] = {
            "score": float(score),
            "weight": round(effective[name], 4),
            **results[name][1],
        }

    overall = round_half_up(clamp(total))
    if omitted:
        logger.info("Omitted factors (missing facts): %s", ", ".join(omitted))
    logger.info("Multi-factor score: %d%%", overall)

    explanation = build_explanation(overall, sub_scores, effective, factors_analyzed, omitted, config.explanation)
    return MultiFactorScore(
        score=overall,
        breakdown=ScoreBreakdown(**sub_scores),
        factors_analyzed=factors_analyzed,
        effective_weights={name: round(w, 4) for name, w in effective.items()},
        omitted_factors=omitted,
        explanation=explanation,
    )


# ---------------------------------------------------------------------------
# Explanation
# ---------------------------------------------------------------------------


def fit_label(score: int, config: ExplanationConfig | None = None) -> str:
    """Map an overall score to its band label."""
    config = config or load_methodology().explanation
    if score >= config.excellent:
        return "Excellent fit"
    if score >= config.strong:
        return "Strong fit"
    if score >= config.moderate:
        return "Moderate fit"
    return "Weak fit"


def build_explanation(
    overall: int,
    sub_scores: Mapping[str, float],
    effective_weights: Mapping[str, float],
    factors: Mapping[str, Mapping[str, Any]],
    omitted: list[str],
    config: ExplanationConfig | None = None,
) -> str:
    """Short natural-language summary of a multi-factor score."""
    parts = [f"{fit_label(overall, config)} ({overall}%)."]

    if sub_scores:
        dominant = max(sub_scores, key=lambda name: effective_weights[name] * sub_scores[name])
        parts.append(f"Strongest factor: {dominant} ({sub_scores[dominant]:.0f}%).")

    skills = factors.get("skills")
    if skills is not None and skills["missing"]:
        parts.append(f"Missing skills: {', '.join(skills['missing'])}.")

    experience = factors.get("experience")
    if experience is not None:
        if experience["years_experience"] < experience["required_years"]:
            parts.append(
                f"Experience below requirement ({experience['years_experience']:g} of "
                f"{experience['required_years']:g} years).",
            )
        elif not experience["level_match"]:
            parts.append("Experience exceeds the level of the role.")
        else:
            parts.append("Experience level suits the role.")

    location = factors.get("location")
    if location is not None:
        if location["work_model_match"] is not False and location["location_match"] is not False:
            parts.append("Location and work model compatible.")
        elif location["work_model_match"]:
            parts.append("Work model compatible; location needs flexibility.")
        else:
            parts.append("Location or work model needs flexibility.")

    salary = factors.get("salary")
    if salary is not None:
        if salary["overlap"] > 0 or salary["score"] >= 100:
            parts.append("Salary expectation aligned with the offer.")
        else:
            parts.append("Salary expectation needs negotiation.")

    if omitted:
        parts.append(f"Not assessed: {', '.join(omitted)}.")
    return " ".join(parts)


def _rating_similarity(candidate: CandidateFacts, job: JobFacts, dimension: str) -> Decimal:
    diff = abs(to_decimal(candidate.cultural_ratings[dimension]) - to_decimal(job.cultural_requirements[dimension]))
    return clamp(HUNDRED - diff * RATING_SIMILARITY_FACTOR)


def _experience_band(level: str | None, config: FactorsConfig) -> ExperienceBand | None:
    if not level:
        return None
    wanted = _fold(level)
    for name, band in config.experience_levels.items():
        if _fold(name) == wanted:
            return band
    logger.debug("Unknown experience level '%s'", level)
    return None
