from __future__ import annotations

import asyncio
from pathlib import Path

from loguru import logger

from policy_drafter.knowledge.client import KnowledgeBaseClient, KnowledgeDocument
from policy_drafter.knowledge.validation import validate_file

UPLOADING_STATUS = "Uploading..."
UPLOADED_STATUS = "Document uploaded and trained successfully."


class KnowledgeBaseService:
    """Document list and upload status for one knowledge-base collection.

    Upload outcomes are reported through ``upload_status``, which clears itself
    ``status_clear_seconds`` after the last upload attempt finished.
    """

    def __init__(
        self,
        client: KnowledgeBaseClient,
        collection_id: str,
        *,
        status_clear_seconds: float = 4.0,
    ):
        self._client = client
        self._collection_id = collection_id
        self._status_clear_seconds = status_clear_seconds
        self._clear_handle: asyncio.TimerHandle | None = None
        self.documents: list[KnowledgeDocument] = []
        self.loading = False
        self.upload_status = ""

    async def refresh(self) -> bool:
        self.loading = True
        try:
            result = await self._client.list_documents(self._collection_id)
        finally:
            self.loading = False
        if result.success:
            self.documents = list(result.documents)
        else:
            logger.warning(f"Could not load knowledge base documents: {result.error}")
        return result.success

    async def upload(self, path: str | Path) -> bool:
        validation = validate_file(path)
        if not validation.valid:
            self._set_transient_status(f"Error: {validation.reason}")
            return False

        self._cancel_clear()
        self.upload_status = UPLOADING_STATUS
        result = await self._client.upload(self._collection_id, path)
        if result.success:
            self.upload_status = UPLOADED_STATUS
            await self.refresh()
        else:
            self.upload_status = f"Error: {result.error or 'Upload failed'}"
        self._schedule_clear()
        return result.success

    async def delete(self, file_name: str) -> bool:
        result = await self._client.delete(self._collection_id, [file_name])
        if result.success:
            self.documents = [d for d in self.documents if d.file_name != file_name]
        else:
            logger.warning(f"Could not delete {file_name}: {result.error}")
        return result.success

    def _set_transient_status(self, status: str) -> None:
        self._cancel_clear()
        self.upload_status = status
        self._schedule_clear()

    def _schedule_clear(self) -> None:
        self._cancel_clear()
        loop = asyncio.get_running_loop()
        self._clear_handle = loop.call_later(self._status_clear_seconds, self._clear_status)

    def _cancel_clear(self) -> None:
        if self._clear_handle is not None:
            self._clear_handle.cancel()
            self._clear_handle = None

    def _clear_status(self) -> None:
        self._clear_handle = None
        self.upload_status = ""
