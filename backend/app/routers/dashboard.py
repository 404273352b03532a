import logging

from fastapi import APIRouter, Depends

from app.core.auth import require_user
from app.schemas.dashboard import DashboardResponse
from app.schemas.user import CurrentUser
from app.services.backend_client import ApiServerError, BackendClient, get_backend_client
from app.services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter()

DASHBOARD_LOAD_ERROR = "Error al cargar los datos del dashboard. Por favor intente más tarde."


@router.get(
    "",
    response_model=DashboardResponse,
    summary="Get dashboard metrics",
    responses={303: {"description": "No valid session, redirected to /login"}},
)
async def get_dashboard(
    current_user: CurrentUser = Depends(require_user),
    client: BackendClient = Depends(get_backend_client),
) -> DashboardResponse:
    try:
        metrics = await DashboardService(client).get_metrics(current_user)
    except ApiServerError as exc:
        logger.warning("Dashboard load failed for %s: %s", current_user.user.identifier, exc.message)
        return DashboardResponse(metrics=None, error=DASHBOARD_LOAD_ERROR)
    return DashboardResponse(metrics=metrics)
