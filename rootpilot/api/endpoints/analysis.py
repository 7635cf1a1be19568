from fastapi import APIRouter, Depends

from rootpilot import auth
from rootpilot.api import schemas
from rootpilot.api.dependencies import get_project_service
from rootpilot.exceptions import ValidationError
from rootpilot.services.project_service import ProjectService

router = APIRouter()


@router.post("/analyze", response_model=schemas.AnalyzeProjectResponse)
async def analyze_project(
    body: schemas.AnalyzeProjectRequest,
    user: schemas.TokenData = Depends(auth.get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    """Run the analysis engine on a project and store the results on it."""
    if not body.project_id:
        raise ValidationError("Project ID is required")
    analysis_results = await service.analyze_project(
        user, body.project_id, body.analysis_type
    )
    return {
        "success": True,
        "analysis_results": analysis_results,
        "message": "Analysis completed successfully",
    }
