import logging

from fastapi import APIRouter, Depends

from app.core.auth import require_user
from app.schemas.user import CurrentUser, UserListResponse
from app.services.backend_client import ApiServerError, BackendClient, get_backend_client

logger = logging.getLogger(__name__)

router = APIRouter()

USERS_LOAD_ERROR = "Error al cargar usuarios. Por favor intenta de nuevo más tarde."


@router.get("", response_model=UserListResponse, summary="List company users")
async def list_users(
    current_user: CurrentUser = Depends(require_user),
    client: BackendClient = Depends(get_backend_client),
) -> UserListResponse:
    try:
        users = await client.fetch_users(current_user.access_token)
    except ApiServerError as exc:
        logger.warning("User list failed for %s: %s", current_user.user.identifier, exc.message)
        return UserListResponse(users=[], error=USERS_LOAD_ERROR)
    return UserListResponse(users=users)
