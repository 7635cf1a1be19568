from fastapi import APIRouter, Depends

from rootpilot import auth
from rootpilot.api import schemas
from rootpilot.api.dependencies import get_incident_service
from rootpilot.services.incident_service import IncidentService

router = APIRouter()


@router.put("/{action_item_id}", response_model=schemas.ActionItem)
async def update_action_item(
    action_item_id: str,
    body: schemas.ActionItemStatusUpdate,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.update_action_item_status(user, action_item_id, body.status)
