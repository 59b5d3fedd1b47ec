"""
Canonical Document Store — read client over the external document service.

Behavioral Contract:
- list() returns every document visible to the caller, in service order
- get(id) returns one document or raises DocumentNotFoundError
- set_governed() passes the governed-flag toggle through; nothing else is written
- Timeouts, transport failures and malformed responses surface as TransientIOError
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from continuum_kernel.errors import DocumentNotFoundError, TransientIOError
from continuum_kernel.logging import get_logger
from continuum_kernel.models.document import CanonicalDocument

logger = get_logger("documents.store")


class DocumentService(Protocol):
    """The external document service, as seen by the store."""

    def list_documents(self) -> List[CanonicalDocument]: ...

    def get_document(self, document_id: str) -> CanonicalDocument: ...

    def set_governed(self, document_id: str, governed: bool) -> CanonicalDocument: ...


class HttpDocumentService:
    """Document service reached over HTTP. Every request carries a bounded timeout."""

    SERVICE_NAME = "document-service"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TransientIOError(self.SERVICE_NAME, f"timed out: {e}") from e
        except httpx.TransportError as e:
            raise TransientIOError(self.SERVICE_NAME, f"unreachable: {e}") from e

        if response.status_code >= 500:
            raise TransientIOError(
                self.SERVICE_NAME, f"HTTP {response.status_code} for {method} {path}"
            )
        return response

    def _decode(self, response: httpx.Response, many: bool = False):
        try:
            payload = response.json()
            if many:
                return [CanonicalDocument.model_validate(d) for d in payload]
            return CanonicalDocument.model_validate(payload)
        except (ValueError, TypeError, PydanticValidationError) as e:
            raise TransientIOError(self.SERVICE_NAME, f"malformed response: {e}") from e

    def list_documents(self) -> List[CanonicalDocument]:
        response = self._request("GET", "/api/canonical-documents")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientIOError(self.SERVICE_NAME, str(e)) from e
        return self._decode(response, many=True)

    def get_document(self, document_id: str) -> CanonicalDocument:
        response = self._request("GET", f"/api/canonical-documents/{document_id}")
        if response.status_code == 404:
            raise DocumentNotFoundError(document_id, detail="No document with this id.")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientIOError(self.SERVICE_NAME, str(e)) from e
        return self._decode(response)

    def set_governed(self, document_id: str, governed: bool) -> CanonicalDocument:
        response = self._request(
            "PATCH",
            f"/api/canonical-documents/{document_id}",
            json={"governed": governed},
        )
        if response.status_code == 404:
            raise DocumentNotFoundError(document_id, detail="No document with this id.")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransientIOError(self.SERVICE_NAME, str(e)) from e
        return self._decode(response)

    def close(self) -> None:
        self._client.close()


class InMemoryDocumentService:
    """
    In-memory document service for local runs and tests.
    Preserves insertion order, which is the store iteration order.
    """

    def __init__(self, documents: Optional[List[CanonicalDocument]] = None):
        self._documents: Dict[str, CanonicalDocument] = {}
        for doc in documents or []:
            self.put(doc)

    def put(self, document: CanonicalDocument) -> None:
        self._documents[document.id] = document

    def list_documents(self) -> List[CanonicalDocument]:
        return [d.model_copy() for d in self._documents.values()]

    def get_document(self, document_id: str) -> CanonicalDocument:
        doc = self._documents.get(document_id)
        if doc is None:
            raise DocumentNotFoundError(document_id, detail="No document with this id.")
        return doc.model_copy()

    def set_governed(self, document_id: str, governed: bool) -> CanonicalDocument:
        doc = self._documents.get(document_id)
        if doc is None:
            raise DocumentNotFoundError(document_id, detail="No document with this id.")
        updated = doc.model_copy(
            update={"governed": governed, "updated_at": datetime.now(timezone.utc)}
        )
        self._documents[document_id] = updated
        return updated.model_copy()


class CanonicalDocumentStore:
    """Thin read client over a DocumentService."""

    def __init__(self, service: DocumentService):
        self._service = service

    def list(self) -> List[CanonicalDocument]:
        """All documents visible to the caller, in store iteration order."""
        return self._service.list_documents()

    def get(self, document_id: str) -> CanonicalDocument:
        """Fetch one document by id. Raises DocumentNotFoundError."""
        return self._service.get_document(document_id)

    def set_governed(self, document_id: str, governed: bool) -> CanonicalDocument:
        """Pass a governed-flag toggle through to the document service."""
        logger.info("Setting governed=%s on document %s", governed, document_id)
        return self._service.set_governed(document_id, governed)
