from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from rootpilot.infrastructure.database import get_async_db
from rootpilot.infrastructure.repositories.action_item_repository import ActionItemRepository
from rootpilot.infrastructure.repositories.incident_repository import IncidentRepository
from rootpilot.infrastructure.repositories.project_repository import ProjectRepository
from rootpilot.infrastructure.repositories.rca_repository import RcaResultRepository
from rootpilot.infrastructure.repositories.user_repository import UserRepository
from rootpilot.services.analysis_engine import AnalysisEngine
from rootpilot.services.incident_service import IncidentService
from rootpilot.services.project_service import ProjectService


def get_user_repository(db: AsyncSession = Depends(get_async_db)) -> UserRepository:
    return UserRepository(db)


def get_project_repository(db: AsyncSession = Depends(get_async_db)) -> ProjectRepository:
    return ProjectRepository(db)


def get_incident_repository(db: AsyncSession = Depends(get_async_db)) -> IncidentRepository:
    return IncidentRepository(db)


def get_rca_result_repository(db: AsyncSession = Depends(get_async_db)) -> RcaResultRepository:
    return RcaResultRepository(db)


def get_action_item_repository(db: AsyncSession = Depends(get_async_db)) -> ActionItemRepository:
    return ActionItemRepository(db)


def get_analysis_engine(request: Request) -> AnalysisEngine:
    return request.app.state.analysis_engine


def get_project_service(
    project_repo: ProjectRepository = Depends(get_project_repository),
    engine: AnalysisEngine = Depends(get_analysis_engine),
) -> ProjectService:
    return ProjectService(project_repo, engine)


def get_incident_service(
    incident_repo: IncidentRepository = Depends(get_incident_repository),
    rca_repo: RcaResultRepository = Depends(get_rca_result_repository),
    action_item_repo: ActionItemRepository = Depends(get_action_item_repository),
    engine: AnalysisEngine = Depends(get_analysis_engine),
) -> IncidentService:
    return IncidentService(
        incident_repo,
        rca_repo=rca_repo,
        action_item_repo=action_item_repo,
        engine=engine,
    )
