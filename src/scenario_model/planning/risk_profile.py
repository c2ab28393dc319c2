# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Client risk profiling questionnaire.

Six multiple-choice questions, each option scored between 2 and 10. The
total is expressed as a percentage of the maximum score and banded into one
of four risk categories, each with a recommended allocation.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Tuple

from ..errors import ValidationError
from ..scenario import RiskLevel


@dataclass(frozen=True)
class QuestionOption:
    id: int
    text: str
    score: int


@dataclass(frozen=True)
class RiskQuestion:
    id: str
    category: str
    question: str
    options: Tuple[QuestionOption, ...]

    def option(self, option_id: int) -> QuestionOption:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        raise ValidationError(f"Question '{self.id}' has no option {option_id!r}")

    @property
    def max_score(self) -> int:
        return max(opt.score for opt in self.options)


def _options(texts, scores) -> Tuple[QuestionOption, ...]:
    return tuple(QuestionOption(i + 1, text, score) for i, (text, score) in enumerate(zip(texts, scores)))


QUESTIONS: Tuple[RiskQuestion, ...] = (
    RiskQuestion(
        "loss_tolerance", "Loss Tolerance",
        "If your 1 lakh investment becomes 70,000 in 6 months, what would you do?",
        _options(("Sell immediately to avoid further loss",
                  "Hold and wait for recovery",
                  "Invest more money at lower prices",
                  "Don't care, it's long-term investment"), (2, 5, 8, 10)),
    ),
    RiskQuestion(
        "market_volatility", "Market Volatility",
        "How comfortable are you with market ups and downs?",
        _options(("Very uncomfortable, prefer stable returns",
                  "Somewhat comfortable with minor fluctuations",
                  "Comfortable with moderate volatility",
                  "Very comfortable, volatility creates opportunity"), (2, 4, 7, 10)),
    ),
    RiskQuestion(
        "investment_horizon", "Investment Timeline",
        "When will you need this invested money?",
        _options(("Within 2 years", "3-5 years", "6-10 years", "More than 10 years"), (2, 4, 7, 10)),
    ),
    RiskQuestion(
        "financial_priority", "Financial Priority",
        "What is your primary investment objective?",
        _options(("Capital preservation with minimal risk",
                  "Steady income generation",
                  "Balanced growth with moderate income",
                  "Maximum capital appreciation"), (2, 4, 7, 10)),
    ),
    RiskQuestion(
        "income_stability", "Income Stability",
        "How would you describe your income stability?",
        _options(("Highly variable/uncertain income",
                  "Somewhat stable with occasional variations",
                  "Very stable and predictable",
                  "Multiple income sources, very secure"), (2, 4, 7, 10)),
    ),
    RiskQuestion(
        "investment_experience", "Investment Experience",
        "What is your investment experience level?",
        _options(("Beginner - mostly savings accounts and FDs",
                  "Basic - some mutual funds or insurance",
                  "Intermediate - stocks, bonds, various funds",
                  "Advanced - complex products and strategies"), (2, 4, 7, 10)),
    ),
)


@dataclass(frozen=True)
class RiskBand:
    upper_bound: float
    category: str
    risk_level: RiskLevel
    allocation: Dict[str, int]
    description: str
    warnings: Tuple[str, ...]


# Checked in order; a percentage falls into the first band whose upper bound it does not exceed
RISK_BANDS: Tuple[RiskBand, ...] = (
    RiskBand(35, "Conservative", RiskLevel.LOW,
             {"equity": 30, "debt": 60, "alternatives": 10},
             "You prefer stability and capital preservation over high returns. "
             "Focus on debt instruments with minimal equity exposure.",
             ("Market volatility may cause significant stress",
              "Emergency fund should be 12+ months of expenses")),
    RiskBand(60, "Moderate", RiskLevel.MEDIUM,
             {"equity": 60, "debt": 35, "alternatives": 5},
             "You seek balanced growth with acceptable risk levels. "
             "Suitable for long-term wealth building with diversified portfolio.",
             ("Be prepared for 15-20% portfolio swings",
              "Review and rebalance annually")),
    RiskBand(80, "Aggressive", RiskLevel.HIGH,
             {"equity": 80, "debt": 15, "alternatives": 5},
             "You are comfortable with volatility to achieve superior long-term returns. "
             "Suitable for wealth maximization goals.",
             ("Expect 25-30% portfolio volatility",
              "Requires 7+ year investment horizon",
              "Regular review needed during market downturns")),
    RiskBand(float("inf"), "Very Aggressive", RiskLevel.VERY_HIGH,
             {"equity": 90, "debt": 5, "alternatives": 5},
             "You seek maximum growth and are comfortable with high volatility. "
             "Suitable only for very long-term goals.",
             ("Portfolio may swing 40%+ annually",
              "Requires 10+ year commitment",
              "Strong emotional discipline needed",
              "Consider reducing allocation as you approach goals")),
)


@dataclass(frozen=True)
class RiskProfile:
    """Scored outcome of the questionnaire.

    ``risk_percentage`` is the rounded share of the maximum score; the band
    is chosen from the unrounded value.
    """
    total_score: int
    max_score: int
    risk_percentage: int
    category: str
    risk_level: RiskLevel
    recommended_allocation: Dict[str, int]
    description: str
    warnings: List[str]
    scores: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "total_score": self.total_score,
            "max_score": self.max_score,
            "risk_percentage": self.risk_percentage,
            "category": self.category,
            "risk_level": self.risk_level.value,
            "recommended_allocation": dict(self.recommended_allocation),
            "description": self.description,
            "warnings": list(self.warnings),
            "scores": dict(self.scores),
        }


class RiskProfiler:
    """Scores questionnaire answers into a RiskProfile.

    Example:
        >>> profiler = RiskProfiler()
        >>> profile = profiler.assess({'loss_tolerance': 2, 'market_volatility': 3, ...})
        >>> print(profile.category, profile.risk_percentage)
        Moderate 52
    """

    def __init__(self, questions: Tuple[RiskQuestion, ...] = QUESTIONS,
                 bands: Tuple[RiskBand, ...] = RISK_BANDS):
        self.questions = {q.id: q for q in questions}
        self.bands = bands

    @property
    def max_score(self) -> int:
        return sum(q.max_score for q in self.questions.values())

    def band_for(self, percentage: float) -> RiskBand:
        for band in self.bands:
            if percentage <= band.upper_bound:
                return band
        return self.bands[-1]

    def assess(self, answers: Mapping[str, int]) -> RiskProfile:
        """Score a complete set of answers.

        Args:
            answers: Question id to selected option id (1-4)

        Returns:
            RiskProfile for the answers

        Raises:
            ValidationError: On unknown questions, unknown options or
                             unanswered questions
        """
        unknown = sorted(set(answers) - set(self.questions))
        if unknown:
            raise ValidationError(f"Unknown risk questions: {', '.join(unknown)}")
        missing = [qid for qid in self.questions if qid not in answers]
        if missing:
            raise ValidationError(f"Unanswered risk questions: {', '.join(missing)}")

        scores = {}
        for qid, question in self.questions.items():
            try:
                option_id = int(answers[qid])
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Answer to '{qid}' must be an option number") from e
            scores[qid] = question.option(option_id).score

        total = sum(scores.values())
        percentage = total / self.max_score * 100.0
        band = self.band_for(percentage)

        return RiskProfile(
            total_score=total,
            max_score=self.max_score,
            risk_percentage=int(round(percentage)),
            category=band.category,
            risk_level=band.risk_level,
            recommended_allocation=dict(band.allocation),
            description=band.description,
            warnings=list(band.warnings),
            scores=scores,
        )
