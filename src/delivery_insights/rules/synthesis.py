from __future__ import annotations

from typing import Optional

from delivery_insights.models import (
    AggregatedStats,
    Classification,
    Kpi,
    KpiAssessment,
    Objectives,
    OverallStatus,
    Report,
    ScopeSynthesis,
    Section,
    SynthesisResult,
)
from delivery_insights.rules.kpis import KPI_DEFINITIONS, KpiDefinition

# Deviations within 5% of the objective are not worth reporting
SIGNIFICANCE_RATIO = 0.05
# |strengths - weaknesses| must exceed this for a non-mixed status
STATUS_MARGIN = 1
# More than this many strengths (or weaknesses) earns a conclusion sentence
CONCLUSION_TRIGGER = 2

SOLID_SENTENCE = "Overall performance is solid, with several key indicators beating their objectives."
ATTENTION_SENTENCE = "Several areas need particular attention to improve overall performance."
STRUGGLING_SENTENCE = "The {names} depots appear to be struggling the most."
MIXED_SENTENCE = "Performance is mixed, with strengths and weaknesses fairly balanced."


def assess_kpi(
    definition: KpiDefinition,
    stats: AggregatedStats,
    objectives: Objectives,
) -> Optional[KpiAssessment]:
    """Compare one KPI with its objective; None when the KPI has no value."""
    value = definition.value(stats)
    if value is None:
        return None
    objective = definition.objective(objectives)
    meets = definition.meets(value, objective)
    significance = abs(value - objective)

    if significance > SIGNIFICANCE_RATIO * abs(objective):
        classification = Classification.STRENGTH if meets else Classification.WEAKNESS
    else:
        classification = Classification.NEUTRAL

    unit = definition.unit
    sentence = f"**{definition.label}**: {value:.2f}{unit} (objective {objective:.2f}{unit})"
    return KpiAssessment(
        kpi=definition.kpi,
        value=value,
        objective=objective,
        meets_objective=meets,
        significance=significance,
        classification=classification,
        sentence=sentence,
    )


def overall_status(score: int) -> OverallStatus:
    if score > STATUS_MARGIN:
        return OverallStatus.POSITIVE
    if score < -STATUS_MARGIN:
        return OverallStatus.NEGATIVE
    return OverallStatus.MIXED


def _top_performer(section: Section) -> Optional[str]:
    drivers = section.kpi_rankings.drivers.get(Kpi.AVERAGE_RATING)
    if drivers and drivers.top:
        best = drivers.top[0]
        return f"Top driver: **{best.name}** ({best.value:.2f}/5)"
    carriers = section.kpi_rankings.carriers.get(Kpi.AVERAGE_RATING)
    if carriers and carriers.top:
        best = carriers.top[0]
        return f"Top carrier: **{best.name}** ({best.value:.2f}/5)"
    return None


def synthesize_section(section: Section, objectives: Objectives, *, name: str = "global") -> ScopeSynthesis:
    """
    Strengths and weaknesses for one scope.

    A scope without closed deliveries has nothing to assess. The failure rate
    is assessed but not turned into a sentence: it restates the success rate.
    """
    assessments: list[KpiAssessment] = []
    strengths: list[str] = []
    weaknesses: list[str] = []

    if section.stats.total_deliveries > 0:
        for definition in KPI_DEFINITIONS.values():
            assessment = assess_kpi(definition, section.stats, objectives)
            if assessment is None:
                continue
            assessments.append(assessment)
            if definition.complement_of is not None:
                continue
            if assessment.classification is Classification.STRENGTH:
                strengths.append(assessment.sentence)
            elif assessment.classification is Classification.WEAKNESS:
                weaknesses.append(assessment.sentence)

    top = _top_performer(section)
    if top:
        strengths.append(top)

    return ScopeSynthesis(
        strengths=tuple(strengths),
        weaknesses=tuple(weaknesses),
        overall=overall_status(len(strengths) - len(weaknesses)),
        assessments=tuple(assessments),
        name=name,
    )


def build_conclusion(global_scope: ScopeSynthesis, depots: tuple[ScopeSynthesis, ...]) -> str:
    sentences: list[str] = []
    if len(global_scope.strengths) > CONCLUSION_TRIGGER:
        sentences.append(SOLID_SENTENCE)
    if len(global_scope.weaknesses) > CONCLUSION_TRIGGER:
        sentences.append(ATTENTION_SENTENCE)

    struggling = [d.name for d in depots if d.overall is OverallStatus.NEGATIVE]
    if struggling:
        sentences.append(STRUGGLING_SENTENCE.format(names=", ".join(struggling)))

    return " ".join(sentences) if sentences else MIXED_SENTENCE


def synthesize(report: Report, objectives: Optional[Objectives] = None) -> SynthesisResult:
    objectives = objectives or Objectives()
    global_scope = synthesize_section(report.global_section, objectives)
    depots = tuple(
        synthesize_section(depot, objectives, name=depot.name)
        for depot in report.depots
    )
    return SynthesisResult(
        global_scope=global_scope,
        depots=depots,
        conclusion=build_conclusion(global_scope, depots),
    )
