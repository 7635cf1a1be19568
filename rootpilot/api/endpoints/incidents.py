from typing import List

from fastapi import APIRouter, Depends, status

from rootpilot import auth
from rootpilot.api import schemas
from rootpilot.api.dependencies import get_incident_service
from rootpilot.services.incident_service import IncidentService

router = APIRouter()


@router.get("", response_model=List[schemas.Incident])
async def list_incidents(
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.list_incidents(user)


@router.post("", response_model=schemas.Incident, status_code=status.HTTP_201_CREATED)
async def create_incident(
    body: schemas.IncidentCreate,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.create_incident(user, body)


@router.get("/{incident_id}", response_model=schemas.Incident)
async def get_incident(
    incident_id: str,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.get_incident(user, incident_id)


@router.put("/{incident_id}", response_model=schemas.Incident)
async def update_incident(
    incident_id: str,
    body: schemas.IncidentUpdate,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.update_incident(user, incident_id, body)


@router.delete("/{incident_id}", response_model=schemas.MessageResponse)
async def delete_incident(
    incident_id: str,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    # RCA results and action items of the incident are left in place
    await service.delete_incident(user, incident_id)
    return {"message": "Incident deleted successfully"}


@router.post(
    "/{incident_id}/analyze",
    response_model=schemas.RcaReport,
    status_code=status.HTTP_201_CREATED,
)
async def analyze_incident(
    incident_id: str,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    rca_result, action_items = await service.analyze_incident(user, incident_id)
    return {"rca_result": rca_result, "action_items": action_items}


@router.get("/{incident_id}/rca", response_model=schemas.RcaReport)
async def get_rca_report(
    incident_id: str,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    rca_result, action_items = await service.get_rca_report(user, incident_id)
    return {"rca_result": rca_result, "action_items": action_items}
