from fastapi import APIRouter, Depends

from app.core.auth import require_user
from app.schemas.user import CurrentUser, ReportsResponse

router = APIRouter()


@router.get("", response_model=ReportsResponse, summary="Reports page data")
async def get_reports(current_user: CurrentUser = Depends(require_user)) -> ReportsResponse:
    return ReportsResponse(user=current_user.user)
