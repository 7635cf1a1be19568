import logging
from typing import List

from rootpilot import auth
from rootpilot.api import schemas
from rootpilot.exceptions import NotFoundError
from rootpilot.infrastructure import sql_models as models
from rootpilot.infrastructure.repositories.project_repository import ProjectRepository
from rootpilot.services.analysis_engine import AnalysisEngine

logger = logging.getLogger(__name__)

PROJECT_NOT_FOUND = "Project not found"


class ProjectService:
    def __init__(self, project_repo: ProjectRepository, engine: AnalysisEngine) -> None:
        self.project_repo = project_repo
        self.engine = engine

    async def list_projects(self, user: schemas.TokenData) -> List[models.AnalysisProject]:
        return await self.project_repo.list_by_user(user.user_id)

    async def create_project(
        self, user: schemas.TokenData, data: schemas.ProjectCreate
    ) -> models.AnalysisProject:
        project = await self.project_repo.create(user.user_id, data)
        logger.info("User %s created project %s", user.user_id, project.id)
        return project

    async def get_project(self, user: schemas.TokenData, project_id: str) -> models.AnalysisProject:
        project = await self.project_repo.get_by_id(project_id)
        return auth.ensure_owner(project, user, PROJECT_NOT_FOUND)

    async def update_project(
        self, user: schemas.TokenData, project_id: str, data: schemas.ProjectUpdate
    ) -> models.AnalysisProject:
        await self.get_project(user, project_id)
        updated = await self.project_repo.update(project_id, data)
        return auth.ensure_owner(updated, user, PROJECT_NOT_FOUND)

    async def delete_project(self, user: schemas.TokenData, project_id: str) -> None:
        await self.get_project(user, project_id)
        if not await self.project_repo.delete(project_id):
            raise NotFoundError(PROJECT_NOT_FOUND)
        logger.info("User %s deleted project %s", user.user_id, project_id)

    async def analyze_project(
        self, user: schemas.TokenData, project_id: str, analysis_type: str
    ) -> dict:
        project = await self.get_project(user, project_id)
        logger.info(
            "Running %s analysis (%s) for project %s", self.engine.name, analysis_type, project_id
        )
        analysis_results = self.engine.analyze_project(project, analysis_type)
        await self.project_repo.set_analysis_results(
            project_id, analysis_results, status=models.ProjectStatus.COMPLETED
        )
        return analysis_results
