"""
Continuum Kernel API — FastAPI endpoints.

Exposes the kernel's produced interfaces:
- Canonical document lookup (by id and by key) and the governed-flag toggle
- Workspace operating mode and action checks
- Workspace representations with computed readiness/aiMode
- Model registry loading and invalidation
"""

from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from continuum_kernel.config import Settings, get_settings
from continuum_kernel.documents.resolver import KeyResolver
from continuum_kernel.documents.store import CanonicalDocumentStore, HttpDocumentService
from continuum_kernel.errors import DocumentNotFoundError, TransientIOError
from continuum_kernel.governance.gate import ActionGate
from continuum_kernel.governance.mode import GovernanceModeResolver
from continuum_kernel.governance.readiness import HttpReadinessService, ReadinessService
from continuum_kernel.governance.workspace import annotate_node, annotate_workspace
from continuum_kernel.logging import get_logger, setup_logging
from continuum_kernel.registry.loader import ModelRegistryLoader, RegistryCache

logger = get_logger("api")


# --- Request/Response Models ---

class GovernRequest(BaseModel):
    governed: bool = True


class ActionCheckRequest(BaseModel):
    action: str = "governed"


class WorkspaceAnnotateRequest(BaseModel):
    workspace: dict


class NodeAnnotateRequest(BaseModel):
    node: dict


# --- Application Factory ---

def create_app(
    document_store: Optional[CanonicalDocumentStore] = None,
    readiness_service: Optional[ReadinessService] = None,
    registry_cache: Optional[RegistryCache] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Continuum Kernel API",
        description="Governance and configuration resolution for Continuum workspaces",
        version="0.1.0",
    )

    # Initialize components
    store = document_store or CanonicalDocumentStore(
        HttpDocumentService(settings.DOCUMENT_SERVICE_URL, timeout=settings.HTTP_TIMEOUT_SECONDS)
    )
    readiness = readiness_service or HttpReadinessService(
        settings.READINESS_SERVICE_URL, timeout=settings.HTTP_TIMEOUT_SECONDS
    )
    resolver = KeyResolver(store)
    mode_resolver = GovernanceModeResolver(
        readiness, resolver, settings.GOVERNANCE_DOCUMENT_KEY
    )
    gate = ActionGate(mode_resolver)
    cache = registry_cache or RegistryCache(ttl_seconds=settings.REGISTRY_CACHE_TTL_SECONDS)
    registry_loader = ModelRegistryLoader(resolver, cache, settings.MODEL_REGISTRY_KEY)

    # Store components on app state for access in endpoints
    app.state.document_store = store
    app.state.key_resolver = resolver
    app.state.mode_resolver = mode_resolver
    app.state.action_gate = gate
    app.state.registry_loader = registry_loader

    # === CANONICAL DOCUMENTS ===

    @app.get("/canonical-documents")
    def list_documents():
        """All canonical documents, content omitted."""
        try:
            documents = store.list()
        except TransientIOError as e:
            raise HTTPException(503, str(e))
        return [
            d.model_dump(mode="json", by_alias=True, exclude={"content"})
            for d in documents
        ]

    @app.get("/canonical-documents/by-key/{key}")
    def find_document_by_key(key: str):
        """Tiered key lookup. 404 carries every available key."""
        result = resolver.lookup(key)
        if result.document is None:
            return JSONResponse(
                status_code=404,
                content=result.model_dump(mode="json", by_alias=True),
            )
        return result.model_dump(mode="json", by_alias=True)

    @app.get("/canonical-documents/{document_id}")
    def get_document(document_id: str):
        try:
            document = store.get(document_id)
        except DocumentNotFoundError:
            raise HTTPException(404, "Document not found")
        except TransientIOError as e:
            raise HTTPException(503, str(e))
        return document.model_dump(mode="json", by_alias=True)

    @app.post("/canonical-documents/{document_id}/govern")
    def set_document_governed(document_id: str, req: GovernRequest):
        """Pass the governed-flag toggle through to the document service."""
        try:
            current = store.get(document_id)
            if current.governed == req.governed:
                return {
                    **current.model_dump(mode="json", by_alias=True, exclude={"content"}),
                    "alreadyGoverned": req.governed,
                }
            updated = store.set_governed(document_id, req.governed)
        except DocumentNotFoundError:
            raise HTTPException(404, "Document not found")
        except TransientIOError as e:
            raise HTTPException(503, str(e))
        return {
            **updated.model_dump(mode="json", by_alias=True, exclude={"content"}),
            "alreadyGoverned": False,
        }

    # === WORKSPACE GOVERNANCE ===

    @app.get("/workspaces/{workspace_id}/ai-mode")
    def get_ai_mode(workspace_id: str):
        """Operating mode, recomputed on every request."""
        return mode_resolver.resolve(workspace_id).model_dump(mode="json", by_alias=True)

    @app.post("/workspaces/{workspace_id}/actions/check")
    def check_action(workspace_id: str, req: ActionCheckRequest):
        """Rule on one action against the workspace's current mode."""
        return gate.authorize(workspace_id, req.action).model_dump(mode="json", by_alias=True)

    @app.post("/workspaces/annotate")
    def annotate_workspace_record(req: WorkspaceAnnotateRequest):
        """Attach computed readiness/aiMode to a stored workspace record."""
        workspace_id = req.workspace.get("id")
        if not workspace_id:
            raise HTTPException(422, "Workspace record has no id")
        resolution = mode_resolver.resolve(str(workspace_id))
        return annotate_workspace(req.workspace, resolution)

    @app.post("/nodes/annotate")
    def annotate_node_record(req: NodeAnnotateRequest):
        """Attach computed readiness/aiMode to the workspace embedded in a node."""
        workspace_id = req.node.get("workspaceId") or (req.node.get("workspace") or {}).get("id")
        if not workspace_id:
            raise HTTPException(422, "Node record has no workspace id")
        resolution = mode_resolver.resolve(str(workspace_id))
        return annotate_node(req.node, resolution)

    # === MODEL REGISTRY ===

    @app.get("/model-registry")
    def get_model_registry():
        """Registry plus provenance (canonical or local-fallback)."""
        return registry_loader.load().model_dump(mode="json", by_alias=True)

    @app.post("/model-registry/invalidate")
    def invalidate_model_registry():
        registry_loader.invalidate()
        return {"status": "invalidated"}

    return app


# Default application instance
app = create_app()
