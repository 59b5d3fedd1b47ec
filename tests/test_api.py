"""Tests for the FastAPI API endpoints."""

import json
from datetime import datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from continuum_kernel.api.app import create_app
from continuum_kernel.config import Settings
from continuum_kernel.documents.store import (
    CanonicalDocumentStore,
    HttpDocumentService,
    InMemoryDocumentService,
)
from continuum_kernel.models.document import CanonicalDocument
from continuum_kernel.models.workspace import ReadinessStatus, WorkspaceReadiness
from continuum_kernel.registry.loader import RegistryCache


def _make_doc(doc_id: str, key: str, governed: bool = False, content: str = "") -> CanonicalDocument:
    now = datetime.now(timezone.utc)
    return CanonicalDocument(
        id=doc_id, key=key, governed=governed, content=content, created_at=now, updated_at=now,
    )


class _StaticReadiness:
    def __init__(self):
        self.by_workspace = {}

    def get_workspace_readiness(self, workspace_id: str) -> WorkspaceReadiness:
        status = self.by_workspace.get(workspace_id, ReadinessStatus.NOT_READY)
        reasons = [] if status == ReadinessStatus.READY else ["Workspace Canon missing"]
        return WorkspaceReadiness(status=status, reasons=reasons)


_REGISTRY_MD = "```json\n" + json.dumps({
    "providers": [{"id": "openai", "displayName": "OpenAI"}],
    "models": [{"id": "openai:gpt-5.2", "providerId": "openai", "displayName": "GPT-5.2"}],
}) + "\n```"


@pytest.fixture
def service():
    return InMemoryDocumentService([
        _make_doc("d1", "continuum-workspace-governance.md", governed=False, content="# Gov"),
        _make_doc("d2", "continuum-whitepaper-A.md", content="# A"),
    ])


@pytest.fixture
def readiness():
    return _StaticReadiness()


@pytest.fixture
def client(service, readiness):
    app = create_app(
        document_store=CanonicalDocumentStore(service),
        readiness_service=readiness,
        registry_cache=RegistryCache(),
        settings=Settings(),
    )
    return TestClient(app)


class TestDocumentEndpoints:
    def test_list_omits_content(self, client):
        response = client.get("/canonical-documents")
        assert response.status_code == 200
        data = response.json()
        assert [d["key"] for d in data] == [
            "continuum-workspace-governance.md",
            "continuum-whitepaper-A.md",
        ]
        assert "content" not in data[0]
        assert "createdAt" in data[0]

    def test_get_by_id(self, client):
        response = client.get("/canonical-documents/d2")
        assert response.status_code == 200
        assert response.json()["content"] == "# A"

    def test_get_missing(self, client):
        assert client.get("/canonical-documents/nope").status_code == 404

    def test_find_by_key(self, client):
        response = client.get("/canonical-documents/by-key/continuum-whitepaper-a.md")
        assert response.status_code == 200
        data = response.json()
        assert data["document"]["key"] == "continuum-whitepaper-A.md"
        assert data["matchedTier"] == "case_insensitive"

    def test_find_by_key_not_found_lists_keys(self, client):
        response = client.get("/canonical-documents/by-key/continuum-glossary.md")
        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "NotFound"
        assert data["availableKeys"] == [
            "continuum-workspace-governance.md",
            "continuum-whitepaper-A.md",
        ]

    def test_govern_toggle(self, client, service):
        response = client.post("/canonical-documents/d1/govern", json={"governed": True})
        assert response.status_code == 200
        assert response.json()["governed"] is True
        assert response.json()["alreadyGoverned"] is False
        assert service.get_document("d1").governed is True

        again = client.post("/canonical-documents/d1/govern", json={"governed": True})
        assert again.json()["alreadyGoverned"] is True

    def test_malformed_document_service_body(self, readiness):
        http_client = httpx.Client(
            base_url="http://docs.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="oops")),
        )
        app = create_app(
            document_store=CanonicalDocumentStore(
                HttpDocumentService("http://docs.test", client=http_client)
            ),
            readiness_service=readiness,
            registry_cache=RegistryCache(),
            settings=Settings(),
        )
        client = TestClient(app)

        by_key = client.get("/canonical-documents/by-key/x.md")
        assert by_key.status_code == 404
        assert by_key.json()["error"] == "NotFound"
        assert client.get("/canonical-documents").status_code == 503


class TestWorkspaceEndpoints:
    def test_not_ready_is_guarded(self, client):
        data = client.get("/workspaces/ws_1/ai-mode").json()
        assert data["mode"] == "GUARDED"
        assert data["reasons"] == ["Workspace Canon missing"]

    def test_mode_follows_governed_flag(self, client, readiness):
        readiness.by_workspace["ws_1"] = ReadinessStatus.READY
        assert client.get("/workspaces/ws_1/ai-mode").json()["mode"] == "ADVISORY"

        client.post("/canonical-documents/d1/govern", json={"governed": True})
        assert client.get("/workspaces/ws_1/ai-mode").json()["mode"] == "OPERATIONAL"

    def test_action_check(self, client, readiness):
        readiness.by_workspace["ws_1"] = ReadinessStatus.READY
        blocked = client.post("/workspaces/ws_1/actions/check", json={"action": "modify_canon_doc"})
        assert blocked.json()["allowed"] is False
        allowed = client.post("/workspaces/ws_1/actions/check", json={"action": "advisory"})
        assert allowed.json()["allowed"] is True

    def test_annotate_workspace_replaces_stale_mode(self, client):
        response = client.post("/workspaces/annotate", json={
            "workspace": {"id": "ws_1", "name": "Ops", "aiMode": "OPERATIONAL"},
        })
        data = response.json()
        assert data["aiMode"] == "GUARDED"
        assert data["readiness"] == "NOT_READY"
        assert data["name"] == "Ops"

    def test_annotate_node(self, client, readiness):
        readiness.by_workspace["ws_1"] = ReadinessStatus.READY
        response = client.post("/nodes/annotate", json={
            "node": {"id": "n1", "workspaceId": "ws_1", "workspace": {"id": "ws_1", "name": "Ops"}},
        })
        assert response.json()["workspace"]["aiMode"] == "ADVISORY"

    def test_annotate_requires_id(self, client):
        assert client.post("/workspaces/annotate", json={"workspace": {}}).status_code == 422


class TestModelRegistryEndpoints:
    def test_fallback_then_canonical_after_invalidate(self, client, service):
        first = client.get("/model-registry").json()
        assert first["source"] == "local-fallback"
        assert first["error"] is None

        service.put(_make_doc("d3", "continuum-llm-model-registry.md", content=_REGISTRY_MD))
        assert client.get("/model-registry").json()["source"] == "local-fallback"

        assert client.post("/model-registry/invalidate").status_code == 200
        second = client.get("/model-registry").json()
        assert second["source"] == "canonical"
        assert [m["id"] for m in second["registry"]["models"]] == ["openai:gpt-5.2"]
