"""Tests for multi-factor weighted scoring."""

from typing import Any

import pytest
from pydantic import ValidationError

from pillar_match.core.config import FactorWeights
from pillar_match.core.errors import MissingFactAvailability
from pillar_match.core.schemas import (
    CandidateFacts,
    CultureAlignment,
    JobFacts,
    ResumeScores,
    SalaryRange,
)
from pillar_match.pipeline.multi_factor import (
    fit_label,
    redistribute_weights,
    score_culture,
    score_experience,
    score_location,
    score_multi_factor,
    score_resume,
    score_salary,
    score_skills,
)


def _candidate_facts(**overrides: Any) -> CandidateFacts:
    data: dict[str, Any] = {
        "skills": ["Python", "PostgreSQL", "Docker"],
        "years_experience": 6,
        "work_models": ["hybrid", "remote"],
        "locations": ["São Paulo"],
        "salary": {"min": 14000, "max": 18000},
        "resume": {"technical_score": 80, "soft_skills_score": 70},
    }
    data.update(overrides)
    return CandidateFacts.model_validate(data)


def _job_facts(**overrides: Any) -> JobFacts:
    data: dict[str, Any] = {
        "skills": ["Python", "PostgreSQL"],
        "experience_level": "Sênior",
        "work_model": "hybrid",
        "location": "São Paulo",
        "salary": {"min": 15000, "max": 20000},
    }
    data.update(overrides)
    return JobFacts.model_validate(data)


# ---------------------------------------------------------------------------
# Individual factors
# ---------------------------------------------------------------------------


class TestSkills:
    def test_all_required_matched(self) -> None:
        score, details = score_skills(_candidate_facts(), _job_facts())
        assert score == 100
        assert details["missing"] == []

    def test_partial_match(self) -> None:
        score, details = score_skills(_candidate_facts(), _job_facts(skills=["python", "Kubernetes"]))
        assert score == 50
        assert details["matched"] == ["python"]
        assert details["missing"] == ["Kubernetes"]

    def test_containment_matches(self) -> None:
        score, _ = score_skills(_candidate_facts(skills=["Python 3.12"]), _job_facts(skills=["python"]))
        assert score == 100

    def test_optional_skills_ignored_when_required_exist(self) -> None:
        job = _job_facts(skills=[{"name": "Python"}, {"name": "Go", "required": False}])
        score, _ = score_skills(_candidate_facts(skills=["Python"]), job)
        assert score == 100

    def test_only_optional_skills_all_count(self) -> None:
        job = _job_facts(skills=[{"name": "Go", "required": False}, {"name": "Docker", "required": False}])
        score, _ = score_skills(_candidate_facts(), job)
        assert score == 50

    def test_no_job_skills_omitted(self) -> None:
        score, _ = score_skills(_candidate_facts(), _job_facts(skills=[]))
        assert score is None


class TestExperience:
    def test_within_level_band(self) -> None:
        score, details = score_experience(_candidate_facts(), _job_facts())
        assert score == 100
        assert details["required_years"] == 5
        assert details["level_match"] is True

    def test_below_requirement_ramps(self) -> None:
        score, details = score_experience(
            _candidate_facts(years_experience=2.5),
            _job_facts(experience_level=None, min_experience=5),
        )
        assert score == 50
        assert details["level_match"] is True

    def test_level_band_raises_low_min_experience(self) -> None:
        score, details = score_experience(
            _candidate_facts(years_experience=3),
            _job_facts(min_experience=2, experience_level="Sênior"),
        )
        # Sênior band starts at 5 years, stricter than min_experience
        assert score == 60
        assert details["required_years"] == 5
        assert details["level_match"] is False

    def test_min_experience_above_band_start(self) -> None:
        score, details = score_experience(
            _candidate_facts(years_experience=6),
            _job_facts(min_experience=8, experience_level="Sênior"),
        )
        assert score == 75
        assert details["required_years"] == 8

    def test_overqualified_penalty(self) -> None:
        score, details = score_experience(
            _candidate_facts(years_experience=8), _job_facts(experience_level="Júnior"),
        )
        # 5 years above the Júnior band max of 3
        assert score == 50
        assert details["level_match"] is False

    def test_overqualified_floor(self) -> None:
        score, _ = score_experience(_candidate_facts(years_experience=20), _job_facts(experience_level="junior"))
        assert score == 40

    def test_level_lookup_ignores_accents(self) -> None:
        _, details = score_experience(_candidate_facts(), _job_facts(experience_level="senior"))
        assert details["required_years"] == 5

    def test_missing_years_omitted(self) -> None:
        score, _ = score_experience(_candidate_facts(years_experience=None), _job_facts())
        assert score is None

    def test_missing_requirement_omitted(self) -> None:
        score, _ = score_experience(_candidate_facts(), _job_facts(experience_level=None))
        assert score is None


class TestLocation:
    def test_full_match(self) -> None:
        score, details = score_location(_candidate_facts(), _job_facts())
        assert score == 100
        assert details["work_model_match"] is True
        assert details["location_match"] is True

    def test_remote_job_matches_anywhere(self) -> None:
        score, _ = score_location(
            _candidate_facts(work_models=["onsite"], locations=["Manaus"]),
            _job_facts(work_model="remote", location="Curitiba"),
        )
        assert score == 100

    def test_work_model_mismatch_is_half(self) -> None:
        score, details = score_location(
            _candidate_facts(work_models=["remote"]), _job_facts(work_model="Presencial"),
        )
        assert score == 50
        assert details["work_model_match"] is False

    def test_location_substring_case_insensitive(self) -> None:
        score, _ = score_location(
            _candidate_facts(locations=["sao paulo, SP"]), _job_facts(location="São Paulo"),
        )
        assert score == 100

    def test_unstated_candidate_preferences_do_not_match(self) -> None:
        score, details = score_location(
            _candidate_facts(work_models=[], locations=["Recife"]), _job_facts(location="Porto Alegre"),
        )
        assert score == 0
        assert details["work_model_match"] is False
        assert details["location_match"] is False

    def test_one_check_true_is_half(self) -> None:
        score, details = score_location(
            _candidate_facts(work_models=["onsite"], locations=[]),
            _job_facts(work_model="onsite", location="Recife"),
        )
        assert score == 50
        assert details["work_model_match"] is True
        assert details["location_match"] is False

    def test_unstated_job_requirement_is_met(self) -> None:
        score, details = score_location(
            _candidate_facts(locations=["Recife"]), _job_facts(work_model=None, location="Recife"),
        )
        assert score == 100
        assert details["work_model_match"] is True

    def test_no_facts_omitted(self) -> None:
        score, _ = score_location(_candidate_facts(), _job_facts(work_model=None, location=None))
        assert score is None


class TestSalary:
    def test_offer_covers_expectation(self) -> None:
        score, _ = score_salary(
            _candidate_facts(salary={"min": 15000, "max": 18000}),
            _job_facts(salary={"min": 14000, "max": 20000}),
        )
        assert score == 100

    def test_partial_overlap(self) -> None:
        score, details = score_salary(
            _candidate_facts(salary={"min": 10000, "max": 20000}),
            _job_facts(salary={"min": 15000, "max": 25000}),
        )
        assert score == 50
        assert details["overlap"] == 5000.0

    def test_small_overlap_floored_at_near_miss(self) -> None:
        score, _ = score_salary(
            _candidate_facts(salary={"min": 10000, "max": 20000}),
            _job_facts(salary={"min": 19500, "max": 30000}),
        )
        assert score == 20

    def test_near_gap_decays(self) -> None:
        score, _ = score_salary(
            _candidate_facts(salary={"min": 10000, "max": 12000}),
            _job_facts(salary={"min": 8000, "max": 9000}),
        )
        # gap 1000 within a 2750 tolerance band around the 11000 midpoint
        assert float(score) == pytest.approx(20 * (1 - 1000 / 2750))

    def test_far_gap_scores_zero(self) -> None:
        score, details = score_salary(
            _candidate_facts(salary={"min": 20000, "max": 25000}),
            _job_facts(salary={"min": 5000, "max": 8000}),
        )
        assert score == 0
        assert details["overlap"] == 0.0

    def test_more_overlap_never_scores_lower(self) -> None:
        candidate = _candidate_facts(salary={"min": 10000, "max": 20000})
        scores = [
            score_salary(candidate, _job_facts(salary={"min": low, "max": 30000}))[0]
            for low in (25000, 21000, 19000, 15000, 10000)
        ]
        assert scores == sorted(scores)

    def test_missing_salary_omitted(self) -> None:
        score, _ = score_salary(_candidate_facts(salary=None), _job_facts())
        assert score is None


class TestCulture:
    def test_precomputed_alignment(self) -> None:
        candidate = _candidate_facts(
            culture_alignment=CultureAlignment(work_style_alignment=80, value_alignment=60),
        )
        score, details = score_culture(candidate, _job_facts())
        assert score == 70
        assert details["source"] == "assessment"

    def test_derived_from_ratings(self) -> None:
        candidate = _candidate_facts(cultural_ratings={"autonomy": 4, "innovation": 5})
        job = _job_facts(cultural_requirements={"Autonomy": 5, "innovation": 5, "stability": 2})
        score, details = score_culture(candidate, job)
        assert score == 90
        assert details == {"work_style_alignment": 80.0, "value_alignment": 100.0, "source": "derived"}

    def test_only_work_style_dimensions(self) -> None:
        candidate = _candidate_facts(cultural_ratings={"pace": 3})
        score, _ = score_culture(candidate, _job_facts(cultural_requirements={"pace": 5}))
        assert score == 60

    def test_no_shared_dimensions_omitted(self) -> None:
        candidate = _candidate_facts(cultural_ratings={"pace": 3})
        score, _ = score_culture(candidate, _job_facts(cultural_requirements={"stability": 5}))
        assert score is None


class TestResume:
    def test_mean_of_sub_scores(self) -> None:
        score, details = score_resume(_candidate_facts())
        assert score == 75
        assert details["technical_score"] == 80

    def test_missing_resume_omitted(self) -> None:
        assert score_resume(_candidate_facts(resume=None))[0] is None

    def test_accepts_model(self) -> None:
        candidate = _candidate_facts(resume=ResumeScores(technical_score=90, soft_skills_score=90))
        assert score_resume(candidate)[0] == 90


# ---------------------------------------------------------------------------
# Weighting
# ---------------------------------------------------------------------------


class TestRedistributeWeights:
    def test_proportional(self) -> None:
        result = redistribute_weights(FactorWeights().as_dict(), ["skills", "experience"])
        assert result["skills"] == pytest.approx(0.25 / 0.45)
        assert result["experience"] == pytest.approx(0.20 / 0.45)
        assert sum(result.values()) == pytest.approx(1.0)

    def test_all_present_unchanged(self) -> None:
        weights = FactorWeights().as_dict()
        result = redistribute_weights(weights, list(weights))
        assert result == pytest.approx(weights)

    def test_nothing_present_raises(self) -> None:
        with pytest.raises(MissingFactAvailability):
            redistribute_weights(FactorWeights().as_dict(), [])


class TestScoreMultiFactor:
    def test_overall_with_omitted_culture(self) -> None:
        result = score_multi_factor(_candidate_facts(), _job_facts())
        # (100*.25 + 100*.20 + 100*.15 + 75*.15 + 75*.10) / .85
        assert result.score == 93
        assert result.omitted_factors == ["culture"]
        assert result.breakdown.culture is None
        assert result.breakdown.salary == 75.0
        assert result.effective_weights["skills"] == pytest.approx(0.2941, abs=1e-4)
        assert set(result.factors_analyzed) == {"skills", "experience", "location", "salary", "resume"}

    def test_missing_all_skills_does_not_zero_total(self) -> None:
        result = score_multi_factor(_candidate_facts(), _job_facts(skills=["Go", "Rust"]))
        assert result.breakdown.skills == 0.0
        assert result.score == 63

    def test_no_facts_raises(self) -> None:
        with pytest.raises(MissingFactAvailability):
            score_multi_factor(CandidateFacts(), JobFacts())

    def test_custom_weights_mapping(self) -> None:
        weights = {"skills": 1.0, "experience": 0, "location": 0, "salary": 0, "culture": 0, "resume": 0}
        result = score_multi_factor(_candidate_facts(), _job_facts(skills=["Python", "Go"]), weights)
        assert result.score == 50

    def test_invalid_weights_raise(self) -> None:
        with pytest.raises(ValidationError, match="must sum to 1.0"):
            score_multi_factor(_candidate_facts(), _job_facts(), {"skills": 0.9})

    def test_factor_details_carry_weight(self) -> None:
        result = score_multi_factor(_candidate_facts(), _job_facts())
        assert result.factors_analyzed["skills"]["score"] == 100.0
        assert result.factors_analyzed["skills"]["matched"] == ["Python", "PostgreSQL"]
        assert "weight" in result.factors_analyzed["salary"]

    def test_idempotent(self) -> None:
        first = score_multi_factor(_candidate_facts(), _job_facts())
        second = score_multi_factor(_candidate_facts(), _job_facts())
        assert first.model_dump_json() == second.model_dump_json()


# ---------------------------------------------------------------------------
# Explanation
# ---------------------------------------------------------------------------


class TestExplanation:
    @pytest.mark.parametrize(
        ("score", "label"),
        [(100, "Excellent fit"), (85, "Excellent fit"), (84, "Strong fit"), (70, "Strong fit"),
         (50, "Moderate fit"), (49, "Weak fit"), (0, "Weak fit")],
    )
    def test_fit_label(self, score: int, label: str) -> None:
        assert fit_label(score) == label

    def test_summary_sentences(self) -> None:
        explanation = score_multi_factor(_candidate_facts(), _job_facts()).explanation
        assert explanation.startswith("Excellent fit (93%).")
        assert "Strongest factor: skills (100%)." in explanation
        assert "Experience level suits the role." in explanation
        assert "Location and work model compatible." in explanation
        assert "Salary expectation aligned with the offer." in explanation
        assert explanation.endswith("Not assessed: culture.")

    def test_missing_skills_and_low_experience(self) -> None:
        explanation = score_multi_factor(
            _candidate_facts(years_experience=2),
            _job_facts(skills=["Python", "Kafka"], experience_level=None, min_experience=5),
        ).explanation
        assert "Missing skills: Kafka." in explanation
        assert "Experience below requirement (2 of 5 years)." in explanation

    def test_salary_gap_needs_negotiation(self) -> None:
        explanation = score_multi_factor(
            _candidate_facts(salary=SalaryRange(min=30000, max=35000)), _job_facts(),
        ).explanation
        assert "Salary expectation needs negotiation." in explanation
