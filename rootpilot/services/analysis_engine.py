"""Analysis engines turning an incident or project into RCA findings.

Only ``MockAnalysisEngine`` ships. It performs no inference: root causes are
picked from templates according to which structured factors the reporter
filled in, and every number is drawn from a fixed range. Anything satisfying
``AnalysisEngine`` can be installed on ``app.state.analysis_engine``.
"""
import dataclasses
import logging
import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Protocol

from rootpilot.api import schemas
from rootpilot.infrastructure import sql_models as models

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class IncidentFindings:
    primary_root_causes: List[schemas.RootCause]
    causal_chain: schemas.CausalChain
    recommended_actions: List[schemas.RecommendedAction]
    supporting_documents: List[schemas.SupportingDocument]
    risk_insights: schemas.RiskInsights
    confidence_rating: int
    metadata: dict = dataclasses.field(default_factory=dict)


class AnalysisEngine(Protocol):
    name: str

    def analyze_incident(self, incident: models.Incident) -> IncidentFindings: ...

    def analyze_project(
        self, project: models.AnalysisProject, analysis_type: str
    ) -> dict: ...


@dataclasses.dataclass(frozen=True)
class _CauseTemplate:
    factor: str
    category: str
    description: str
    action_title: str
    action_description: str
    team: str
    priority: models.ActionItemPriority
    trend: str


CAUSE_TEMPLATES = [
    _CauseTemplate(
        factor="maintenance",
        category="Maintenance",
        description="Deferred preventive maintenance on {asset} allowed wear to progress to failure",
        action_title="Restore preventive maintenance schedule for {asset}",
        action_description="Clear the maintenance backlog and add {asset} to the critical equipment PM list.",
        team="Maintenance Engineering",
        priority=models.ActionItemPriority.HIGH,
        trend="Maintenance-related trips increased over the last quarter",
    ),
    _CauseTemplate(
        factor="system",
        category="Mechanical",
        description="Operating anomaly on {asset} was present before the event and not escalated",
        action_title="Inspect and recalibrate {asset}",
        action_description="Perform a vibration and alignment survey and recalibrate instrumentation on {asset}.",
        team="Reliability Engineering",
        priority=models.ActionItemPriority.HIGH,
        trend="Repeated parameter excursions recorded on rotating equipment",
    ),
    _CauseTemplate(
        factor="process",
        category="Process",
        description="A recent process change altered operating conditions without a full hazard review",
        action_title="Run a management-of-change review",
        action_description="Review recent process changes against the operating envelope and update procedures.",
        team="Process Engineering",
        priority=models.ActionItemPriority.MEDIUM,
        trend="Process changes are frequently followed by short-term instability",
    ),
    _CauseTemplate(
        factor="operator",
        category="Human Factors",
        description="Operator response deviated from the standard operating procedure",
        action_title="Refresh operator training on abnormal situation response",
        action_description="Deliver targeted training and walk through the procedure with the shift crews involved.",
        team="Operations Training",
        priority=models.ActionItemPriority.MEDIUM,
        trend="Human factor contributions concentrate on night shifts",
    ),
    _CauseTemplate(
        factor="environmental",
        category="Environmental",
        description="External conditions pushed {asset} beyond its design envelope",
        action_title="Assess weather protection for {asset}",
        action_description="Evaluate enclosure, heat tracing or cooling needs under the observed conditions.",
        team="Process Safety",
        priority=models.ActionItemPriority.LOW,
        trend="Seasonal weather correlates with equipment alarms",
    ),
]

FALLBACK_TEMPLATE = _CauseTemplate(
    factor="fallback",
    category="Mechanical",
    description="Component degradation on {asset} led to loss of function",
    action_title="Perform a condition assessment of {asset}",
    action_description="Inspect {asset} and replace degraded components identified during the assessment.",
    team="Reliability Engineering",
    priority=models.ActionItemPriority.HIGH,
    trend="Unplanned equipment failures remain the leading incident category",
)

DEADLINE_DAYS = {
    models.ActionItemPriority.HIGH: 7,
    models.ActionItemPriority.MEDIUM: 30,
    models.ActionItemPriority.LOW: 90,
}


def _to_snake(key: str) -> str:
    return "".join("_" + c.lower() if c.isupper() else c for c in key)


def _lookup(section: Optional[dict], key: str) -> Any:
    """Read a form field stored either camelCase or snake_case."""
    if not section:
        return None
    if key in section:
        return section[key]
    return section.get(_to_snake(key))


def _triggered_factors(incident) -> List[str]:
    triggered = []
    maintenance = incident.maintenance_history
    if _lookup(maintenance, "overdueForMaintenance") or _lookup(maintenance, "knownIssues"):
        triggered.append("maintenance")
    system = incident.system_data
    if _lookup(system, "recentAnomalies") or _lookup(system, "anomalyDetails"):
        triggered.append("system")
    if _lookup(incident.process_context, "recentProcessChanges"):
        triggered.append("process")
    operator = incident.operator_factors
    if _lookup(operator, "trainingStatus") or _lookup(operator, "humanFactorNotes"):
        triggered.append("operator")
    environment = incident.environmental_factors
    if _lookup(environment, "weatherConditions") or _lookup(environment, "externalDisturbances"):
        triggered.append("environmental")
    return triggered


def _evidence_for(factor: str, incident) -> List[str]:
    evidence = []
    if factor == "maintenance":
        last = _lookup(incident.maintenance_history, "lastMaintenanceDate")
        issues = _lookup(incident.maintenance_history, "knownIssues")
        if _lookup(incident.maintenance_history, "overdueForMaintenance"):
            evidence.append("Equipment flagged as overdue for maintenance")
        if last:
            evidence.append(f"Last maintenance recorded on {last}")
        if issues:
            evidence.append(f"Known issues: {issues}")
    elif factor == "system":
        details = _lookup(incident.system_data, "anomalyDetails")
        mode = _lookup(incident.system_data, "operatingMode")
        evidence.append(details or "Parameter anomalies recorded before the event")
        if mode:
            evidence.append(f"Operating mode at the time: {mode}")
    elif factor == "process":
        details = _lookup(incident.process_context, "processChangeDetails")
        evidence.append(details or "Recent process change reported")
    elif factor == "operator":
        for key in ("trainingStatus", "humanFactorNotes", "shiftTime"):
            value = _lookup(incident.operator_factors, key)
            if value:
                evidence.append(f"{key}: {value}")
    elif factor == "environmental":
        for key in ("weatherConditions", "externalDisturbances"):
            value = _lookup(incident.environmental_factors, key)
            if value:
                evidence.append(f"{key}: {value}")
    evidence.append(f"Incident report: {incident.description[:120]}")
    return evidence


class MockAnalysisEngine:
    """Placeholder engine producing fixed-shape, randomized findings."""

    name = "mock"

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random(seed)

    def _confidence_label(self, rank: int) -> str:
        if rank == 0:
            return "High"
        return "Medium" if self.rng.random() < 0.6 else "Low"

    def analyze_incident(self, incident) -> IncidentFindings:
        logger.debug("Mock analysis of incident %s", incident.id)
        incident_date = incident.incident_date
        assets = list(incident.affected_assets or [])
        asset = assets[0] if assets else "the affected equipment"

        factors = _triggered_factors(incident)
        templates = [t for t in CAUSE_TEMPLATES if t.factor in factors] or [FALLBACK_TEMPLATE]

        root_causes = [
            schemas.RootCause(
                id=str(rank + 1),
                description=template.description.format(asset=asset),
                confidence=self._confidence_label(rank),
                evidence_indicators=_evidence_for(template.factor, incident),
                category=template.category,
            )
            for rank, template in enumerate(templates)
        ]

        safety_critical = bool(
            _lookup(incident.risk_compliance, "isSafetyCritical")
            or _lookup(incident.risk_compliance, "isEnvironmentCritical")
        )
        today = datetime.now(timezone.utc).date()
        actions = []
        for template in templates:
            priority = models.ActionItemPriority.HIGH if safety_critical else template.priority
            actions.append(
                schemas.RecommendedAction(
                    title=template.action_title.format(asset=asset),
                    description=template.action_description.format(asset=asset),
                    priority=priority,
                    responsible_team=template.team,
                    suggested_deadline=(today + timedelta(days=DEADLINE_DAYS[priority])).isoformat(),
                    category=template.category,
                )
            )
        actions.append(
            schemas.RecommendedAction(
                title=f"Implement condition monitoring for {asset}",
                description="Add trending and alarm thresholds so early warning signs are escalated.",
                priority=models.ActionItemPriority.MEDIUM,
                responsible_team="Reliability Engineering",
                suggested_deadline=(today + timedelta(days=DEADLINE_DAYS[models.ActionItemPriority.MEDIUM])).isoformat(),
                category="Monitoring",
            )
        )

        fmt = "%Y-%m-%d %H:%M"
        timeline = [
            schemas.TimelineEvent(
                time=(incident_date - timedelta(minutes=45)).strftime(fmt),
                event=f"Precursor: {root_causes[0].description}",
                type="trigger",
            ),
            schemas.TimelineEvent(
                time=incident_date.strftime(fmt), event=incident.title, type="failure"
            ),
            schemas.TimelineEvent(
                time=(incident_date + timedelta(minutes=5)).strftime(fmt),
                event=f"Downstream impact on {', '.join(assets) if assets else 'connected systems'}",
                type="cascade",
            ),
            schemas.TimelineEvent(
                time=(incident_date + timedelta(minutes=20)).strftime(fmt),
                event=f"Situation stabilised at {incident.location or 'site'}",
                type="outcome",
            ),
        ]
        pathway = " -> ".join([c.category for c in root_causes] + [incident.title])

        documents = [schemas.SupportingDocument(name=f"Incident report: {incident.title}", type="report")]
        for attachment in incident.attachments or []:
            if isinstance(attachment, dict) and attachment.get("name"):
                documents.append(
                    schemas.SupportingDocument(
                        name=attachment["name"], type=attachment.get("type") or "attachment"
                    )
                )

        similar = [
            schemas.SimilarIncident(
                date=(incident_date - timedelta(days=self.rng.randint(30, 365))).date().isoformat(),
                description=f"{templates[0].category} event with comparable symptoms",
                correlation=round(self.rng.uniform(0.55, 0.9), 2),
            )
            for _ in range(self.rng.randint(0, 2))
        ]

        return IncidentFindings(
            primary_root_causes=root_causes,
            causal_chain=schemas.CausalChain(timeline=timeline, pathway=pathway),
            recommended_actions=actions,
            supporting_documents=documents,
            risk_insights=schemas.RiskInsights(
                similar_incidents=similar, trends=[t.trend for t in templates]
            ),
            confidence_rating=self.rng.randint(70, 95),
            metadata={
                "engine": self.name,
                "generatedAt": datetime.now(timezone.utc).isoformat(),
                "triggeredFactors": factors,
                "runId": str(uuid.uuid4()),
            },
        )

    def analyze_project(self, project, analysis_type: str) -> dict:
        now = datetime.now(timezone.utc)
        return {
            "analysisType": analysis_type,
            "timestamp": now.isoformat(),
            "summary": {
                "totalDataPoints": self.rng.randint(100, 1099),
                "identifiedIssues": self.rng.randint(1, 10),
                "confidenceScore": round(self.rng.random() * 0.3 + 0.7, 2),
            },
            "rootCauses": [
                {
                    "id": "1",
                    "description": "Equipment vibration exceeding normal parameters",
                    "probability": 0.85,
                    "impact": "High",
                    "category": "Mechanical",
                },
                {
                    "id": "2",
                    "description": "Temperature fluctuations in Process Unit A",
                    "probability": 0.72,
                    "impact": "Medium",
                    "category": "Process",
                },
                {
                    "id": "3",
                    "description": "Inconsistent raw material quality",
                    "probability": 0.68,
                    "impact": "Medium",
                    "category": "Material",
                },
            ],
            "recommendations": [
                "Schedule immediate equipment inspection and calibration",
                "Implement enhanced temperature monitoring system",
                "Review supplier quality standards and contracts",
            ],
            "chartData": {
                "timeSeriesData": [
                    {
                        "date": (now - timedelta(days=29 - i)).date().isoformat(),
                        "value": round(self.rng.random() * 100 + 50, 2),
                        "anomaly": self.rng.random() > 0.8,
                    }
                    for i in range(30)
                ],
                "categoryData": [
                    {"category": "Mechanical", "count": 3, "severity": "High"},
                    {"category": "Process", "count": 2, "severity": "Medium"},
                    {"category": "Material", "count": 1, "severity": "Low"},
                    {"category": "Environmental", "count": 1, "severity": "Low"},
                ],
            },
        }


def build_analysis_engine(name: str, seed: Optional[int] = None) -> AnalysisEngine:
    if name == "mock":
        return MockAnalysisEngine(seed=seed)
    raise ValueError(f"Unknown analysis engine: {name!r}")
