from fastapi import APIRouter, Request
from docstore_lib.services.resolver import resolve_service
from .health import get_health

router = APIRouter()


@router.get('/health')
async def api_health(request: Request):
    cfg = resolve_service(request, 'server_config')
    store = resolve_service(request, 'document_store')
    return get_health(server_name=cfg.server_name, backend=cfg.backend, cached_folders=len(store.cache))
