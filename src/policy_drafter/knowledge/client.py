from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
from loguru import logger


@dataclass(frozen=True)
class KnowledgeDocument:
    file_name: str
    file_type: str = ""
    status: str = ""


@dataclass(frozen=True)
class DocumentListResult:
    success: bool
    documents: list[KnowledgeDocument] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class OperationResult:
    success: bool
    error: str | None = None


class KnowledgeBaseClient:
    """HTTP client for the document collection that conditions the agent."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str = "",
        timeout_seconds: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._client = client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def list_documents(self, collection_id: str) -> DocumentListResult:
        try:
            response = await self._get_client().get("/api/rag", params={"ragId": collection_id})
        except httpx.HTTPError as ex:
            logger.warning(f"Listing documents failed: {ex}")
            return DocumentListResult(success=False, error=str(ex))

        body = _json_body(response)
        if response.status_code >= 400 or not body.get("success", True):
            return DocumentListResult(success=False, error=_error_text(response, body))

        raw_documents = body.get("documents")
        if not isinstance(raw_documents, list):
            return DocumentListResult(success=True)
        documents = [
            KnowledgeDocument(
                file_name=str(doc.get("fileName", "")),
                file_type=str(doc.get("fileType", "")),
                status=str(doc.get("status", "")),
            )
            for doc in raw_documents
            if isinstance(doc, dict) and doc.get("fileName")
        ]
        return DocumentListResult(success=True, documents=documents)

    async def upload(self, collection_id: str, path: str | Path) -> OperationResult:
        file_path = Path(path)
        content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        try:
            data = file_path.read_bytes()
            response = await self._get_client().post(
                "/api/rag",
                data={"ragId": collection_id},
                files={"file": (file_path.name, data, content_type)},
            )
        except OSError as ex:
            return OperationResult(success=False, error=f"Cannot read {file_path.name}: {ex.strerror or ex}")
        except httpx.HTTPError as ex:
            logger.warning(f"Uploading {file_path.name} failed: {ex}")
            return OperationResult(success=False, error=str(ex))

        body = _json_body(response)
        if response.status_code >= 400 or not body.get("success", True):
            return OperationResult(success=False, error=_error_text(response, body))
        logger.info(f"Uploaded {file_path.name} to knowledge base {collection_id}")
        return OperationResult(success=True)

    async def delete(self, collection_id: str, file_names: list[str]) -> OperationResult:
        try:
            response = await self._get_client().request(
                "DELETE",
                "/api/rag",
                json={"ragId": collection_id, "documentNames": list(file_names)},
            )
        except httpx.HTTPError as ex:
            logger.warning(f"Deleting {file_names} failed: {ex}")
            return OperationResult(success=False, error=str(ex))

        body = _json_body(response)
        if response.status_code >= 400 or not body.get("success", True):
            return OperationResult(success=False, error=_error_text(response, body))
        return OperationResult(success=True)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self._api_key:
                headers["x-api-key"] = self._api_key
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=self._timeout_seconds,
            )
        return self._client


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _error_text(response: httpx.Response, body: dict[str, Any]) -> str:
    error = body.get("error")
    if isinstance(error, str) and error:
        return error
    return f"HTTP {response.status_code}"
