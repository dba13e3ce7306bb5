# tests/unit/rules/test_synthesis.py
from delivery_insights.models import (
    AggregatedStats,
    Classification,
    DepotSection,
    Kpi,
    KpiRankings,
    Objectives,
    OverallStatus,
    Ranking,
    RankingEntity,
    Report,
    Section,
)
from delivery_insights.rules.kpis import KPI_DEFINITIONS
from delivery_insights.rules.synthesis import (
    ATTENTION_SENTENCE,
    MIXED_SENTENCE,
    SOLID_SENTENCE,
    assess_kpi,
    overall_status,
    synthesize,
    synthesize_section,
)


def _section(stats, rankings=None):
    return Section(stats=stats, kpi_rankings=rankings or KpiRankings())


def _depot(name, stats):
    return DepotSection(name=name, stats=stats, kpi_rankings=KpiRankings())


def test_low_rating_against_objective_is_a_weakness():
    stats = AggregatedStats(total_deliveries=20, success_rate=100.0, average_rating=3.0,
                            punctuality_rate=100.0)
    scope = synthesize_section(_section(stats), Objectives(average_rating=4.5))

    assert "**Average rating**: 3.00/5 (objective 4.50/5)" in scope.weaknesses


def test_assess_kpi_within_five_percent_is_neutral():
    stats = AggregatedStats(total_deliveries=20, average_rating=4.7)
    a = assess_kpi(KPI_DEFINITIONS[Kpi.AVERAGE_RATING], stats, Objectives())

    assert a.meets_objective is False
    assert a.classification is Classification.NEUTRAL


def test_assess_kpi_lower_is_better():
    stats = AggregatedStats(total_deliveries=20, forced_on_site_rate=30.0)
    a = assess_kpi(KPI_DEFINITIONS[Kpi.FORCED_ON_SITE_RATE], stats, Objectives())

    assert a.meets_objective is False
    assert a.classification is Classification.WEAKNESS
    assert a.significance == 20.0


def test_assess_kpi_skips_undefined_values():
    stats = AggregatedStats(total_deliveries=20)
    assert assess_kpi(KPI_DEFINITIONS[Kpi.AVERAGE_SENTIMENT], stats, Objectives()) is None


def test_failure_rate_is_assessed_but_not_repeated_in_prose():
    stats = AggregatedStats(total_deliveries=20, success_rate=80.0, punctuality_rate=95.0)
    scope = synthesize_section(_section(stats), Objectives())

    kpis = {a.kpi for a in scope.assessments}
    assert Kpi.FAILURE_RATE in kpis
    assert not any("Failure rate" in w for w in scope.weaknesses)
    assert any("Success rate" in w for w in scope.weaknesses)


def test_balanced_scope_with_many_findings():
    stats = AggregatedStats(
        total_deliveries=20, success_rate=80.0, average_rating=3.0, punctuality_rate=50.0,
        forced_on_site_rate=0.0, forced_no_contact_rate=0.0, web_completion_rate=0.0,
    )
    result = synthesize(Report(global_section=_section(stats)))

    assert len(result.global_scope.strengths) == 3
    assert len(result.global_scope.weaknesses) == 3
    assert result.global_scope.overall is OverallStatus.MIXED
    assert result.conclusion == f"{SOLID_SENTENCE} {ATTENTION_SENTENCE}"


def test_top_driver_sentence_counts_as_a_strength():
    rankings = KpiRankings(drivers={
        Kpi.AVERAGE_RATING: Ranking(top=(RankingEntity("Jean (Vitry)", 4.9, 30),)),
    })
    stats = AggregatedStats(total_deliveries=30, success_rate=100.0, average_rating=4.9,
                            punctuality_rate=100.0)
    scope = synthesize_section(_section(stats, rankings), Objectives())

    assert scope.strengths[-1] == "Top driver: **Jean (Vitry)** (4.90/5)"


def test_top_carrier_used_when_no_driver_ranked():
    rankings = KpiRankings(carriers={
        Kpi.AVERAGE_RATING: Ranking(top=(RankingEntity("STEF", 4.5, 40),)),
    })
    scope = synthesize_section(_section(AggregatedStats(total_deliveries=40), rankings), Objectives())
    assert "Top carrier: **STEF** (4.50/5)" in scope.strengths


def test_empty_report_has_no_findings():
    result = synthesize(Report(global_section=_section(AggregatedStats())))

    assert result.global_scope.strengths == ()
    assert result.global_scope.weaknesses == ()
    assert result.global_scope.overall is OverallStatus.MIXED
    assert result.depots == ()
    assert result.conclusion == MIXED_SENTENCE


def test_struggling_depots_are_named_in_conclusion():
    bad = AggregatedStats(total_deliveries=20, success_rate=50.0, average_rating=2.0,
                          punctuality_rate=40.0, forced_on_site_rate=50.0,
                          forced_no_contact_rate=50.0, web_completion_rate=20.0)
    good = AggregatedStats(total_deliveries=20, success_rate=100.0, punctuality_rate=100.0)
    report = Report(
        global_section=_section(good),
        depots=(_depot("Aix", bad), _depot("Vitry", good), _depot("Rungis", bad)),
    )
    result = synthesize(report)

    assert [d.name for d in result.depots] == ["Aix", "Vitry", "Rungis"]
    assert result.depots[0].overall is OverallStatus.NEGATIVE
    assert result.conclusion.endswith("The Aix, Rungis depots appear to be struggling the most.")


def test_overall_status_thresholds():
    assert overall_status(2) is OverallStatus.POSITIVE
    assert overall_status(1) is OverallStatus.MIXED
    assert overall_status(-1) is OverallStatus.MIXED
    assert overall_status(-2) is OverallStatus.NEGATIVE


def test_synthesis_is_serializable():
    stats = AggregatedStats(total_deliveries=20, success_rate=100.0, punctuality_rate=100.0)
    out = synthesize(Report(global_section=_section(stats))).to_dict()

    assert set(out) == {"global", "depots", "conclusion"}
    assert out["global"]["overall"] in {"positive", "negative", "mixed"}
