from datetime import datetime, timezone
import enum
import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SAEnum,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON, TypeDecorator

from rootpilot.infrastructure.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime stored as UTC.

    SQLite drops the offset, so values are converted to UTC before writing and
    loaded back with UTC attached. Naive input is taken to be UTC already.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class ProjectStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class IncidentStatus(str, enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"


class ActionItemPriority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ActionItemStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_new_id, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=True)
    company = Column(String, nullable=True)
    role = Column(String, nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)


# Owner and parent references are plain indexed columns: deleting a project or
# incident leaves its dependents in place.
class AnalysisProject(Base):
    __tablename__ = "analysis_projects"

    id = Column(String, primary_key=True, default=_new_id, nullable=False)
    user_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status: Mapped[ProjectStatus] = mapped_column(
        SAEnum(ProjectStatus, values_callable=_enum_values, native_enum=False),
        default=ProjectStatus.ACTIVE,
        nullable=False,
    )
    data_file_url = Column(String, nullable=True)
    analysis_results = Column(JSON, nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)


class Incident(Base):
    __tablename__ = "incidents"

    id = Column(String, primary_key=True, default=_new_id, nullable=False)
    user_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    incident_date = Column(UTCDateTime(), nullable=False)
    location = Column(String, nullable=True)
    affected_assets = Column(JSON, nullable=True)
    system_data = Column(JSON, nullable=True)
    maintenance_history = Column(JSON, nullable=True)
    operator_factors = Column(JSON, nullable=True)
    environmental_factors = Column(JSON, nullable=True)
    process_context = Column(JSON, nullable=True)
    risk_compliance = Column(JSON, nullable=True)
    attachments = Column(JSON, nullable=True)
    status: Mapped[IncidentStatus] = mapped_column(
        SAEnum(IncidentStatus, values_callable=_enum_values, native_enum=False),
        default=IncidentStatus.PENDING,
        nullable=False,
    )
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)


class RcaResult(Base):
    __tablename__ = "rca_results"

    id = Column(String, primary_key=True, default=_new_id, nullable=False)
    incident_id = Column(String, unique=True, index=True, nullable=False)
    primary_root_causes = Column(JSON, nullable=False)
    causal_chain = Column(JSON, nullable=False)
    recommended_actions = Column(JSON, nullable=False)
    supporting_documents = Column(JSON, nullable=True)
    risk_insights = Column(JSON, nullable=True)
    confidence_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    ai_analysis_data = Column(JSON, nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)


class ActionItem(Base):
    __tablename__ = "action_items"

    id = Column(String, primary_key=True, default=_new_id, nullable=False)
    rca_result_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    priority: Mapped[ActionItemPriority] = mapped_column(
        SAEnum(ActionItemPriority, values_callable=_enum_values, native_enum=False),
        nullable=False,
    )
    responsible_team = Column(String, nullable=False)
    suggested_deadline = Column(String, nullable=True)
    category = Column(String, nullable=True)
    status: Mapped[ActionItemStatus] = mapped_column(
        SAEnum(ActionItemStatus, values_callable=_enum_values, native_enum=False),
        default=ActionItemStatus.PENDING,
        nullable=False,
    )
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)
