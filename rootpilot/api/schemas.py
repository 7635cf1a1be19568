from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from rootpilot.infrastructure.sql_models import (
    ActionItemPriority,
    ActionItemStatus,
    IncidentStatus,
    ProjectStatus,
)


class CamelModel(BaseModel):
    """Wire models: camelCase on the wire, snake_case accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _reject_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if "@" not in value or value.startswith("@") or value.endswith("@"):
        raise ValueError("invalid email address")
    return value


# User schemas
class UserCreate(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=6)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        # bcrypt rejects longer input
        if len(value.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return value


class UserLogin(CamelModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    company: Optional[str] = None
    role: Optional[str] = None

    @field_validator("name")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class User(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    company: Optional[str] = None
    role: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# Token schemas
class AuthResponse(CamelModel):
    user: User
    token: str


class TokenData(BaseModel):
    user_id: str
    email: Optional[str] = None


# Analysis project schemas
class ProjectCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    data_file_url: Optional[str] = None


class ProjectUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    data_file_url: Optional[str] = None

    @field_validator("title", "status")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class Project(CamelModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    status: ProjectStatus
    data_file_url: Optional[str] = None
    analysis_results: Optional[dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime


class AnalyzeProjectRequest(CamelModel):
    project_id: Optional[str] = None
    analysis_type: str = "root_cause"


class AnalyzeProjectResponse(CamelModel):
    success: bool
    analysis_results: dict[str, Any]
    message: str


# Incident schemas
SubmittableIncidentStatus = Literal["draft", "pending"]


class IncidentCreate(CamelModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    incident_date: datetime
    location: Optional[str] = None
    affected_assets: Optional[List[str]] = None
    system_data: Optional[dict[str, Any]] = None
    maintenance_history: Optional[dict[str, Any]] = None
    operator_factors: Optional[dict[str, Any]] = None
    environmental_factors: Optional[dict[str, Any]] = None
    process_context: Optional[dict[str, Any]] = None
    risk_compliance: Optional[dict[str, Any]] = None
    attachments: Optional[List[dict[str, Any]]] = None
    status: SubmittableIncidentStatus = "pending"

    @field_validator("incident_date")
    @classmethod
    def incident_date_to_utc(cls, value: datetime) -> datetime:
        return _to_utc(value)


class IncidentUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    incident_date: Optional[datetime] = None
    location: Optional[str] = None
    affected_assets: Optional[List[str]] = None
    system_data: Optional[dict[str, Any]] = None
    maintenance_history: Optional[dict[str, Any]] = None
    operator_factors: Optional[dict[str, Any]] = None
    environmental_factors: Optional[dict[str, Any]] = None
    process_context: Optional[dict[str, Any]] = None
    risk_compliance: Optional[dict[str, Any]] = None
    attachments: Optional[List[dict[str, Any]]] = None
    status: Optional[SubmittableIncidentStatus] = None

    @field_validator("title", "description", "incident_date", "status")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)

    @field_validator("incident_date")
    @classmethod
    def incident_date_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _to_utc(value)


class Incident(CamelModel):
    id: str
    user_id: str
    title: str
    description: str
    incident_date: datetime
    location: Optional[str] = None
    affected_assets: Optional[List[str]] = None
    system_data: Optional[dict[str, Any]] = None
    maintenance_history: Optional[dict[str, Any]] = None
    operator_factors: Optional[dict[str, Any]] = None
    environmental_factors: Optional[dict[str, Any]] = None
    process_context: Optional[dict[str, Any]] = None
    risk_compliance: Optional[dict[str, Any]] = None
    attachments: Optional[List[dict[str, Any]]] = None
    status: IncidentStatus
    created_at: datetime
    updated_at: datetime


# RCA result schemas
class RootCause(CamelModel):
    id: str
    description: str
    confidence: Literal["High", "Medium", "Low"]
    evidence_indicators: List[str]
    category: Optional[str] = None


class TimelineEvent(CamelModel):
    time: str
    event: str
    type: Literal["trigger", "failure", "cascade", "outcome"]


class CausalChain(CamelModel):
    timeline: List[TimelineEvent]
    pathway: str


class RecommendedAction(CamelModel):
    title: str
    description: Optional[str] = None
    priority: ActionItemPriority
    responsible_team: str
    suggested_deadline: Optional[str] = None
    category: Optional[str] = None


class SupportingDocument(CamelModel):
    name: str
    type: str


class SimilarIncident(CamelModel):
    date: str
    description: str
    correlation: float


class RiskInsights(CamelModel):
    similar_incidents: List[SimilarIncident] = []
    trends: List[str] = []


class RcaResultCreate(CamelModel):
    incident_id: str
    primary_root_causes: List[RootCause]
    causal_chain: CausalChain
    recommended_actions: List[RecommendedAction]
    supporting_documents: Optional[List[SupportingDocument]] = None
    risk_insights: Optional[RiskInsights] = None
    confidence_rating: int = Field(ge=0, le=100)
    ai_analysis_data: Optional[dict[str, Any]] = None


class RcaResultUpdate(CamelModel):
    supporting_documents: Optional[List[SupportingDocument]] = None
    risk_insights: Optional[RiskInsights] = None
    confidence_rating: Optional[int] = Field(default=None, ge=0, le=100)
    ai_analysis_data: Optional[dict[str, Any]] = None

    @field_validator("confidence_rating")
    @classmethod
    def reject_null(cls, value):
        return _reject_null(value)


class RcaResult(CamelModel):
    id: str
    incident_id: str
    primary_root_causes: List[RootCause]
    causal_chain: CausalChain
    recommended_actions: List[RecommendedAction]
    supporting_documents: Optional[List[SupportingDocument]] = None
    risk_insights: Optional[RiskInsights] = None
    confidence_rating: int
    created_at: datetime


# Action item schemas
class ActionItemCreate(RecommendedAction):
    rca_result_id: str


class ActionItemStatusUpdate(CamelModel):
    status: ActionItemStatus


class ActionItem(CamelModel):
    id: str
    rca_result_id: str
    title: str
    description: Optional[str] = None
    priority: ActionItemPriority
    responsible_team: str
    suggested_deadline: Optional[str] = None
    category: Optional[str] = None
    status: ActionItemStatus
    created_at: datetime
    updated_at: datetime


class RcaReport(CamelModel):
    rca_result: RcaResult
    action_items: List[ActionItem]


class MessageResponse(CamelModel):
    message: str
