from datetime import datetime

import pytest

from rootpilot.infrastructure import sql_models as models
from rootpilot.services.analysis_engine import (
    MockAnalysisEngine,
    build_analysis_engine,
)


def _incident(**fields) -> models.Incident:
    defaults = dict(
        id="inc-1",
        user_id="user-1",
        title="Pump Trip",
        description="Unexpected pump trip at 14:02",
        incident_date=datetime(2024, 1, 15, 14, 2),
        status=models.IncidentStatus.ANALYZING,
    )
    defaults.update(fields)
    return models.Incident(**defaults)


def test_bare_incident_gets_fallback_cause():
    findings = MockAnalysisEngine(seed=7).analyze_incident(_incident())

    assert len(findings.primary_root_causes) == 1
    cause = findings.primary_root_causes[0]
    assert cause.confidence == "High"
    assert cause.category == "Mechanical"
    assert cause.evidence_indicators[-1].startswith("Incident report:")
    # one action per cause plus condition monitoring
    assert len(findings.recommended_actions) == 2
    assert findings.recommended_actions[-1].category == "Monitoring"
    assert findings.metadata["triggeredFactors"] == []


def test_filled_in_factors_drive_root_causes():
    incident = _incident(
        affected_assets=["P-101"],
        maintenance_history={"overdueForMaintenance": True, "lastMaintenanceDate": "2023-06-01"},
        process_context={"recentProcessChanges": True},
        environmental_factors={"weather_conditions": "Heatwave"},
    )
    findings = MockAnalysisEngine(seed=7).analyze_incident(incident)

    assert [c.category for c in findings.primary_root_causes] == [
        "Maintenance",
        "Process",
        "Environmental",
    ]
    assert findings.primary_root_causes[0].confidence == "High"
    assert {c.confidence for c in findings.primary_root_causes[1:]} <= {"Medium", "Low"}
    assert "Last maintenance recorded on 2023-06-01" in findings.primary_root_causes[0].evidence_indicators
    assert "P-101" in findings.recommended_actions[0].title
    assert [a.priority for a in findings.recommended_actions] == [
        models.ActionItemPriority.HIGH,
        models.ActionItemPriority.MEDIUM,
        models.ActionItemPriority.LOW,
        models.ActionItemPriority.MEDIUM,
    ]
    assert findings.causal_chain.pathway == "Maintenance -> Process -> Environmental -> Pump Trip"
    assert findings.metadata["triggeredFactors"] == ["maintenance", "process", "environmental"]


def test_safety_critical_incident_forces_high_priority():
    incident = _incident(
        operator_factors={"trainingStatus": "Expired"},
        risk_compliance={"isSafetyCritical": True},
    )
    findings = MockAnalysisEngine(seed=3).analyze_incident(incident)
    assert findings.recommended_actions[0].priority == models.ActionItemPriority.HIGH


def test_timeline_shape():
    findings = MockAnalysisEngine(seed=1).analyze_incident(_incident(location="Unit 3"))
    timeline = findings.causal_chain.timeline

    assert [e.type for e in timeline] == ["trigger", "failure", "cascade", "outcome"]
    assert timeline[0].time == "2024-01-15 13:17"
    assert timeline[1].time == "2024-01-15 14:02"
    assert timeline[1].event == "Pump Trip"
    assert "Unit 3" in timeline[3].event


def test_attachments_become_supporting_documents():
    incident = _incident(attachments=[{"name": "trend.png", "type": "image"}, {"size": 3}])
    findings = MockAnalysisEngine(seed=1).analyze_incident(incident)
    assert [d.name for d in findings.supporting_documents] == [
        "Incident report: Pump Trip",
        "trend.png",
    ]


@pytest.mark.parametrize("seed", range(10))
def test_numbers_stay_in_range(seed):
    findings = MockAnalysisEngine(seed=seed).analyze_incident(_incident())
    assert 70 <= findings.confidence_rating <= 95
    assert len(findings.risk_insights.similar_incidents) <= 2
    for similar in findings.risk_insights.similar_incidents:
        assert 0.55 <= similar.correlation <= 0.9


def test_seeded_engine_is_deterministic():
    first = MockAnalysisEngine(seed=11).analyze_incident(_incident())
    second = MockAnalysisEngine(seed=11).analyze_incident(_incident())
    assert first.confidence_rating == second.confidence_rating
    assert first.risk_insights == second.risk_insights
    assert first.metadata["runId"] != second.metadata["runId"]


def test_project_analysis_payload():
    project = models.AnalysisProject(id="p-1", user_id="user-1", title="Study")
    results = MockAnalysisEngine(seed=5).analyze_project(project, "trend")

    assert results["analysisType"] == "trend"
    assert 100 <= results["summary"]["totalDataPoints"] <= 1099
    assert 0.7 <= results["summary"]["confidenceScore"] <= 1.0
    assert len(results["rootCauses"]) == 3
    assert len(results["recommendations"]) == 3
    series = results["chartData"]["timeSeriesData"]
    assert len(series) == 30
    assert [point["date"] for point in series] == sorted(point["date"] for point in series)
    assert all(50 <= point["value"] <= 150 for point in series)


def test_build_analysis_engine():
    assert isinstance(build_analysis_engine("mock", seed=1), MockAnalysisEngine)
    with pytest.raises(ValueError):
        build_analysis_engine("gpt")
