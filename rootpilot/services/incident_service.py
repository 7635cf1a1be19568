import logging
from typing import List, Tuple

from rootpilot import auth
from rootpilot.api import schemas
from rootpilot.exceptions import ConflictError, NotFoundError
from rootpilot.infrastructure import sql_models as models
from rootpilot.infrastructure.repositories.action_item_repository import ActionItemRepository
from rootpilot.infrastructure.repositories.incident_repository import IncidentRepository
from rootpilot.infrastructure.repositories.rca_repository import RcaResultRepository
from rootpilot.services.analysis_engine import AnalysisEngine

logger = logging.getLogger(__name__)

INCIDENT_NOT_FOUND = "Incident not found"
RCA_NOT_FOUND = "RCA result not found"
ACTION_ITEM_NOT_FOUND = "Action item not found"


class IncidentService:
    def __init__(
        self,
        incident_repo: IncidentRepository,
        *,
        rca_repo: RcaResultRepository,
        action_item_repo: ActionItemRepository,
        engine: AnalysisEngine,
    ) -> None:
        self.incident_repo = incident_repo
        self.rca_repo = rca_repo
        self.action_item_repo = action_item_repo
        self.engine = engine

    async def list_incidents(self, user: schemas.TokenData) -> List[models.Incident]:
        return await self.incident_repo.list_by_user(user.user_id)

    async def create_incident(
        self, user: schemas.TokenData, data: schemas.IncidentCreate
    ) -> models.Incident:
        incident = await self.incident_repo.create(user.user_id, data)
        logger.info("User %s reported incident %s", user.user_id, incident.id)
        return incident

    async def get_incident(self, user: schemas.TokenData, incident_id: str) -> models.Incident:
        incident = await self.incident_repo.get_by_id(incident_id)
        return auth.ensure_owner(incident, user, INCIDENT_NOT_FOUND)

    async def update_incident(
        self, user: schemas.TokenData, incident_id: str, data: schemas.IncidentUpdate
    ) -> models.Incident:
        incident = await self.get_incident(user, incident_id)
        if data.status is not None and incident.status in (
            models.IncidentStatus.ANALYZING,
            models.IncidentStatus.COMPLETED,
        ):
            raise ConflictError(
                f"Cannot move an incident that is {incident.status.value} back to {data.status}"
            )
        updated = await self.incident_repo.update(incident_id, data)
        return auth.ensure_owner(updated, user, INCIDENT_NOT_FOUND)

    async def delete_incident(self, user: schemas.TokenData, incident_id: str) -> None:
        await self.get_incident(user, incident_id)
        if not await self.incident_repo.delete(incident_id):
            raise NotFoundError(INCIDENT_NOT_FOUND)
        logger.info("User %s deleted incident %s", user.user_id, incident_id)

    async def analyze_incident(
        self, user: schemas.TokenData, incident_id: str
    ) -> Tuple[models.RcaResult, List[models.ActionItem]]:
        """Run the engine on an incident and persist its RCA result.

        Status moves draft/pending -> analyzing -> completed. If anything fails
        after the incident entered ``analyzing`` its previous status is restored.
        """
        incident = await self.get_incident(user, incident_id)
        if incident.status == models.IncidentStatus.ANALYZING:
            raise ConflictError("Incident analysis already in progress")
        if (
            incident.status == models.IncidentStatus.COMPLETED
            or await self.rca_repo.get_by_incident_id(incident_id) is not None
        ):
            raise ConflictError("Incident has already been analyzed")

        previous_status = incident.status
        await self.incident_repo.update_status(incident_id, models.IncidentStatus.ANALYZING)
        logger.info("Running %s analysis for incident %s", self.engine.name, incident_id)
        rca_result = None
        try:
            findings = self.engine.analyze_incident(incident)
            rca_result = await self.rca_repo.create(
                schemas.RcaResultCreate(
                    incident_id=incident_id,
                    primary_root_causes=findings.primary_root_causes,
                    causal_chain=findings.causal_chain,
                    recommended_actions=findings.recommended_actions,
                    supporting_documents=findings.supporting_documents,
                    risk_insights=findings.risk_insights,
                    confidence_rating=findings.confidence_rating,
                    ai_analysis_data=findings.metadata,
                )
            )
            action_items = await self.action_item_repo.create_many(
                schemas.ActionItemCreate(
                    rca_result_id=rca_result.id, **action.model_dump()
                )
                for action in findings.recommended_actions
            )
            await self.incident_repo.update_status(incident_id, models.IncidentStatus.COMPLETED)
        except ConflictError:
            # A concurrent request stored the result first; leave its status alone
            raise
        except Exception:
            logger.exception("Analysis failed for incident %s", incident_id)
            await self.incident_repo.db.rollback()
            if rca_result is not None:
                await self.rca_repo.delete(rca_result.id)
            await self.incident_repo.update_status(incident_id, previous_status)
            raise

        logger.info(
            "Incident %s analysed: confidence %s, %d action items",
            incident_id,
            rca_result.confidence_rating,
            len(action_items),
        )
        return rca_result, action_items

    async def get_rca_report(
        self, user: schemas.TokenData, incident_id: str
    ) -> Tuple[models.RcaResult, List[models.ActionItem]]:
        await self.get_incident(user, incident_id)
        rca_result = await self.rca_repo.get_by_incident_id(incident_id)
        if rca_result is None:
            raise NotFoundError(RCA_NOT_FOUND)
        action_items = await self.action_item_repo.list_by_rca_result(rca_result.id)
        return rca_result, action_items

    async def update_action_item_status(
        self,
        user: schemas.TokenData,
        action_item_id: str,
        status: models.ActionItemStatus,
    ) -> models.ActionItem:
        """Change an action item's status after walking item -> RCA -> incident -> owner."""
        item = await self.action_item_repo.get_by_id(action_item_id)
        if item is None:
            raise NotFoundError(ACTION_ITEM_NOT_FOUND)
        rca_result = await self.rca_repo.get_by_id(item.rca_result_id)
        incident = (
            await self.incident_repo.get_by_id(rca_result.incident_id)
            if rca_result is not None
            else None
        )
        # A broken chain (parent deleted) leaves no owner to authorise against
        auth.ensure_owner(incident, user, ACTION_ITEM_NOT_FOUND)
        if item.status == status:
            return item
        updated = await self.action_item_repo.update_status(action_item_id, status)
        if updated is None:
            raise NotFoundError(ACTION_ITEM_NOT_FOUND)
        return updated
