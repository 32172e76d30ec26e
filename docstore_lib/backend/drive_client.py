"""Backend client for the Google Drive v3 REST API.

Only the calls the document store needs are implemented. Obtaining the
OAuth access token is the caller's job; the client just sends it as a
bearer token on every request.
"""
from __future__ import annotations
from typing import Dict, Iterable, Optional
import logging

import requests

from docstore_lib.errors import BackendError, ContentNotReadyError
from .interfaces import (
    MIME_TYPE_FOLDER,
    ChildPage,
    Resource,
    ResourceKind,
    RootKind,
    combine,
    quote,
)

logger = logging.getLogger(__name__)

API_URL = "https://www.googleapis.com/drive/v3"
UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3"

SPACE_APP_DATA = "appDataFolder"
SPACE_DRIVE = "drive"
SPACE_PHOTOS = "photos"

# Space a listing under each root has to search
ROOT_SPACES = {
    RootKind.APP_DATA: SPACE_APP_DATA,
    RootKind.DRIVE: SPACE_DRIVE,
}

FIELDS = "id,name,mimeType,parents,modifiedTime,size"
FILES_FIELDS = f"nextPageToken,files({FIELDS})"

# 403 reasons Drive reports while content is still being processed
NOT_READY_REASONS = ("fileNotDownloadable", "cannotDownloadFile")


class DriveBackendClient:
    def __init__(
        self,
        access_token: str,
        *,
        spaces: Optional[Iterable[str]] = None,
        page_size: int = 1000,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        if not access_token:
            raise RuntimeError("Drive access token not provided. Set DOCSTORE_ACCESS_TOKEN or pass access_token.")
        logger.info("Using DriveBackendClient")
        self.spaces = ",".join(spaces) if spaces else f"{SPACE_APP_DATA},{SPACE_DRIVE}"
        # id -> space, learned from roots and inherited by their descendants
        self._space_of: Dict[str, str] = {}
        self.page_size = page_size
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {access_token}"})

    def _to_resource(self, data: dict) -> Resource:
        mime = data.get("mimeType")
        parents = data.get("parents") or []
        size = data.get("size")
        return Resource(
            id=data["id"],
            name=data.get("name", ""),
            kind=ResourceKind.FOLDER if mime == MIME_TYPE_FOLDER else ResourceKind.FILE,
            parent_id=parents[0] if parents else None,
            media_type=mime,
            size=int(size) if size is not None else None,
            modified_time=data.get("modifiedTime"),
        )

    def _error_reason(self, response: requests.Response) -> Optional[str]:
        try:
            errors = response.json().get("error", {}).get("errors", [])
        except ValueError:
            return None
        for err in errors or []:
            if isinstance(err, dict) and err.get("reason"):
                return err["reason"]
        return None

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise BackendError(f"{method} {url} failed: {e}", cause=e) from e
        if response.status_code >= 400:
            reason = self._error_reason(response)
            if response.status_code == 403 and reason in NOT_READY_REASONS:
                raise ContentNotReadyError(status=response.status_code)
            raise BackendError(
                f"{method} {url} returned {response.status_code} ({reason or 'no reason'})",
                status=response.status_code,
            )
        return response

    def get_root_resource(self, kind: RootKind) -> Resource:
        response = self._request("GET", f"{API_URL}/files/{kind.value}", params={"fields": FIELDS})
        root = self._to_resource(response.json())
        self._space_of[root.id] = ROOT_SPACES[kind]
        return root

    def _remember(self, parent_id: str, resources: Iterable[Resource]) -> None:
        space = self._space_of.get(parent_id)
        if space is None:
            return
        for resource in resources:
            if resource.is_folder:
                self._space_of[resource.id] = space

    def list_children(self, parent_id: str, query: Optional[str] = None, page_token: Optional[str] = None) -> ChildPage:
        q = combine(f"{quote(parent_id)} in parents", "trashed = false", query)
        params = {
            "q": q,
            "spaces": self._space_of.get(parent_id, self.spaces),
            "fields": FILES_FIELDS,
            "pageSize": self.page_size,
        }
        if page_token:
            params["pageToken"] = page_token
        logger.debug("Listing children with q=%s", q)
        data = self._request("GET", f"{API_URL}/files", params=params).json()
        items = tuple(self._to_resource(f) for f in data.get("files") or [])
        self._remember(parent_id, items)
        return ChildPage(items=items, next_page_token=data.get("nextPageToken"))

    def create_resource(self, parent_id: str, name: str, kind: ResourceKind) -> Resource:
        metadata = {"name": name, "parents": [parent_id]}
        if kind is ResourceKind.FOLDER:
            metadata["mimeType"] = MIME_TYPE_FOLDER
        response = self._request("POST", f"{API_URL}/files", params={"fields": FIELDS}, json=metadata)
        resource = self._to_resource(response.json())
        self._remember(parent_id, (resource,))
        return resource

    def get_content(self, resource_id: str) -> bytes:
        response = self._request("GET", f"{API_URL}/files/{resource_id}", params={"alt": "media"})
        return response.content

    def update_content(self, resource_id: str, data: bytes, media_type: str = "application/octet-stream") -> None:
        self._request(
            "PATCH",
            f"{UPLOAD_URL}/files/{resource_id}",
            params={"uploadType": "media"},
            data=data,
            headers={"Content-Type": media_type},
        )

    def delete_resource(self, resource_id: str) -> None:
        self._request("DELETE", f"{API_URL}/files/{resource_id}")
        self._space_of.pop(resource_id, None)
