import logging

from fastapi import APIRouter, Depends, Query

from app.core.auth import require_user
from app.schemas.provider import ProviderListResponse
from app.schemas.user import CurrentUser
from app.services.backend_client import ApiServerError, BackendClient, get_backend_client

logger = logging.getLogger(__name__)

router = APIRouter()

PROVIDERS_LOAD_ERROR = "Error al cargar proveedores. Por favor intenta de nuevo más tarde."


@router.get(
    "",
    response_model=ProviderListResponse,
    summary="List providers",
    responses={303: {"description": "No valid session, redirected to /login"}},
)
async def list_providers(
    search: str = Query(default="", description="Matches name, RFC or email"),
    current_user: CurrentUser = Depends(require_user),
    client: BackendClient = Depends(get_backend_client),
) -> ProviderListResponse:
    try:
        providers = await client.fetch_providers(current_user.access_token)
    except ApiServerError as exc:
        logger.warning("Provider list failed for %s: %s", current_user.user.identifier, exc.message)
        return ProviderListResponse(providers=[], error=PROVIDERS_LOAD_ERROR)
    if search:
        providers = [provider for provider in providers if provider.matches(search)]
    return ProviderListResponse(providers=providers)
