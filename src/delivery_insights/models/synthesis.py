from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .kpi import Kpi


class Classification(str, Enum):
    STRENGTH = "strength"
    WEAKNESS = "weakness"
    NEUTRAL = "neutral"


class OverallStatus(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    MIXED = "mixed"


@dataclass(frozen=True)
class KpiAssessment:
    kpi: Kpi
    value: float
    objective: float
    meets_objective: bool
    significance: float
    classification: Classification
    sentence: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kpi": self.kpi.value,
            "value": self.value,
            "objective": self.objective,
            "meetsObjective": self.meets_objective,
            "significance": self.significance,
            "classification": self.classification.value,
            "sentence": self.sentence,
        }


@dataclass(frozen=True)
class ScopeSynthesis:
    """Strengths/weaknesses for the global scope or one depot."""
    strengths: tuple[str, ...] = ()
    weaknesses: tuple[str, ...] = ()
    overall: OverallStatus = OverallStatus.MIXED
    assessments: tuple[KpiAssessment, ...] = ()
    name: str = "global"

    @property
    def score(self) -> int:
        return len(self.strengths) - len(self.weaknesses)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "overall": self.overall.value,
            "assessments": [a.to_dict() for a in self.assessments],
        }


@dataclass(frozen=True)
class SynthesisResult:
    global_scope: ScopeSynthesis
    depots: tuple[ScopeSynthesis, ...]
    conclusion: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "global": self.global_scope.to_dict(),
            "depots": [d.to_dict() for d in self.depots],
            "conclusion": self.conclusion,
        }
