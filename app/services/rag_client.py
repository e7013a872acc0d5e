"""
HTTP client for Logos, the external RAG engine.

All calls share one ``httpx.AsyncClient`` and therefore one connection pool.
Failures are normalized: a non-success answer becomes ``RemoteServiceError``
carrying the remote status and ``detail``, and a request that never got an
answer becomes ``RemoteUnavailableError``.
"""
from typing import Any, AsyncIterator, Dict, List, Optional
import logging

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.exceptions import RemoteServiceError, RemoteUnavailableError
from app.schemas.logos import LogosDocument, LogosDocumentStatus, LogosUploadResult

logger = logging.getLogger(__name__)


class RagClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def upload(self, file_bytes: bytes, filename: str, content_type: str) -> LogosUploadResult:
        """Upload a file to Logos for processing"""
        response = await self._request(
            "POST",
            "/documents/upload",
            "Failed to upload document to Logos",
            files={"file": (filename, file_bytes, content_type)},
        )
        result = self._parse(LogosUploadResult, response)
        logger.info(f"Uploaded {filename} to Logos as {result.id}")
        return result

    async def get_status(self, remote_id: str) -> LogosDocumentStatus:
        """Get the processing status of a document"""
        response = await self._request(
            "GET",
            f"/documents/{remote_id}/status",
            "Failed to get document status from Logos",
        )
        return self._parse(LogosDocumentStatus, response)

    async def get_document(self, remote_id: str) -> LogosDocument:
        """Get the full document record"""
        response = await self._request(
            "GET",
            f"/documents/{remote_id}",
            "Failed to get document from Logos",
        )
        return self._parse(LogosDocument, response)

    async def delete(self, remote_id: str) -> None:
        """Delete a document from Logos"""
        await self._request(
            "DELETE",
            f"/documents/{remote_id}",
            "Failed to delete document from Logos",
        )
        logger.info(f"Deleted Logos document {remote_id}")

    async def open_chat_stream(
        self,
        remote_id: str,
        message: str,
        history: List[Dict[str, str]],
    ) -> AsyncIterator[bytes]:
        """
        Stream a chat answer from Logos.

        Yields raw byte chunks in arrival order until Logos closes the
        response. Closing the generator early releases the connection.
        """
        payload = {
            "document_id": remote_id,
            "message": message,
            "conversation_history": history,
        }
        # No read timeout: the model may pause between tokens
        timeout = httpx.Timeout(self.timeout, read=None)
        try:
            async with self.client.stream("POST", "/chat", json=payload, timeout=timeout) as response:
                if response.is_error:
                    await response.aread()
                    raise self._remote_error(response, "Failed to chat with document in Logos")
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.TransportError as e:
            logger.error(f"Logos chat stream for {remote_id} failed: {e}")
            raise RemoteUnavailableError() from e

    async def _request(self, method: str, path: str, error_message: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"{error_message}: {e}")
            raise RemoteUnavailableError() from e

        if response.is_error:
            raise self._remote_error(response, error_message)
        return response

    @staticmethod
    def _remote_error(response: httpx.Response, message: str) -> RemoteServiceError:
        detail = None
        try:
            body = response.json()
            if isinstance(body, dict):
                detail = body.get("detail")
        except ValueError:
            pass

        logger.error(f"{message}: {response.status_code} - {response.text[:500]}")
        if not isinstance(detail, str) or not detail:
            detail = message
        return RemoteServiceError(detail, status_code=response.status_code)

    @staticmethod
    def _parse(model, response: httpx.Response):
        try:
            return model.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            logger.error(f"Unexpected response from Logos {response.request.url}: {e}")
            raise RemoteServiceError("Unexpected response from Logos service", status_code=502) from e


_rag_client: Optional[RagClient] = None


def get_rag_client() -> RagClient:
    """Get the shared Logos client"""
    global _rag_client
    if _rag_client is None:
        _rag_client = RagClient(
            base_url=settings.LOGOS_BASE_URL,
            timeout=settings.LOGOS_TIMEOUT_SECONDS,
        )
    return _rag_client


async def close_rag_client() -> None:
    global _rag_client
    if _rag_client is not None:
        await _rag_client.aclose()
        _rag_client = None
