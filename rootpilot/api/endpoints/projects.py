from typing import List

from fastapi import APIRouter, Depends, status

from rootpilot import auth
from rootpilot.api import schemas
from rootpilot.api.dependencies import get_project_service
from rootpilot.services.project_service import ProjectService

router = APIRouter()


@router.get("", response_model=List[schemas.Project])
async def list_projects(
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.list_projects(user)


@router.post("", response_model=schemas.Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: schemas.ProjectCreate,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.create_project(user, body)


@router.get("/{project_id}", response_model=schemas.Project)
async def get_project(
    project_id: str,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.get_project(user, project_id)


@router.put("/{project_id}", response_model=schemas.Project)
async def update_project(
    project_id: str,
    body: schemas.ProjectUpdate,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.update_project(user, project_id, body)


@router.delete("/{project_id}", response_model=schemas.MessageResponse)
async def delete_project(
    project_id: str,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    await service.delete_project(user, project_id)
    return {"message": "Project deleted successfully"}
