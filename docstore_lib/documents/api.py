import asyncio
from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import BaseModel, Field

from docstore_lib.services.resolver import resolve_service
from docstore_lib.store import Document, StorePath, Text
from docstore_lib.errors import ConfigurationError

router = APIRouter()
logger = logging.getLogger(__name__)


class BatchItem(BaseModel):
    title: str
    value: Any = None


class BatchPayload(BaseModel):
    folder: str
    items: List[BatchItem] = Field(default_factory=list)
    max_concurrency: Optional[int] = None


def _not_found(path: str) -> HTTPException:
    return HTTPException(status_code=404, detail={'error': 'not_found', 'message': f'Nothing stored at {path}'})


def _split(path: str):
    """Split a document path into (folder, title)."""
    parsed = StorePath.parse(path)
    if parsed.parent is None:
        raise ConfigurationError('Documents must live inside a folder', path=path)
    return parsed.parent, parsed.name


@router.get('/documents/{path:path}')
async def api_get_document(request: Request, path: str):
    store = resolve_service(request, 'document_store')
    result = await asyncio.to_thread(store.get, path)
    if not result.present:
        raise _not_found(path)
    return result.get()


@router.put('/documents/{path:path}')
async def api_put_document(request: Request, path: str, payload: Any = Body(default=None)):
    store = resolve_service(request, 'document_store')
    folder, title = _split(path)
    logger.debug("Saving document %s under %s", title, folder)
    resource = await asyncio.to_thread(store.save_one, folder, Document(title, payload))
    return {'ok': True, 'resource': resource.to_dict()}


@router.delete('/documents/{path:path}')
async def api_delete_document(request: Request, path: str):
    store = resolve_service(request, 'document_store')
    await asyncio.to_thread(store.delete, path)
    return {'ok': True}


@router.get('/text/{path:path}')
async def api_get_text(request: Request, path: str):
    store = resolve_service(request, 'document_store')
    result = await asyncio.to_thread(store.string, path)
    if not result.present:
        raise _not_found(path)
    return {'path': path, 'content': result.get()}


@router.put('/text/{path:path}')
async def api_put_text(request: Request, path: str):
    store = resolve_service(request, 'document_store')
    folder, title = _split(path)
    body = await request.body()
    try:
        content = body.decode('utf-8')
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail={'error': 'bad_request', 'message': 'Body must be UTF-8 text'})
    resource = await asyncio.to_thread(store.save_one, folder, Text(title, content))
    return {'ok': True, 'resource': resource.to_dict()}


@router.get('/folders/{path:path}')
async def api_list_folder(request: Request, path: str):
    """List the resources in a folder. Optional `q` is a backend query."""
    store = resolve_service(request, 'document_store')
    query = request.query_params.get('q', '')
    resources = await asyncio.to_thread(store.list, path, query)
    return [r.to_dict() for r in resources]


@router.get('/collections/{path:path}')
async def api_list_documents(request: Request, path: str):
    store = resolve_service(request, 'document_store')
    query = request.query_params.get('q', '')
    return await asyncio.to_thread(store.documents, path, None, query)


@router.post('/batch')
async def api_batch_save(request: Request, payload: BatchPayload):
    store = resolve_service(request, 'document_store')
    cfg = resolve_service(request, 'server_config')
    max_concurrency = cfg.max_concurrency if payload.max_concurrency is None else payload.max_concurrency
    if max_concurrency < 1:
        raise HTTPException(status_code=400, detail={'error': 'bad_request', 'message': 'max_concurrency must be at least 1'})
    requests = [Document(item.title, item.value) for item in payload.items]
    logger.debug("Batch saving %d documents under %s", len(requests), payload.folder)
    await asyncio.to_thread(store.save, payload.folder, requests, max_concurrency)
    return {'ok': True, 'saved': len(requests)}


@router.post('/cache/clear')
async def api_clear_cache(request: Request):
    store = resolve_service(request, 'document_store')
    await asyncio.to_thread(store.clear_cache)
    return {'ok': True}
