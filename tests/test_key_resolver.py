"""Tests for tiered key resolution."""

from datetime import datetime, timezone

import httpx
import pytest

from continuum_kernel.documents.resolver import KeyResolver, match_canonical_key, whitepaper_key
from continuum_kernel.documents.store import (
    CanonicalDocumentStore,
    HttpDocumentService,
    InMemoryDocumentService,
)
from continuum_kernel.errors import DocumentNotFoundError, TransientIOError
from continuum_kernel.models.document import CanonicalDocument, MatchTier


def _make_doc(key: str, doc_id: str = None, content: str = None, governed: bool = False) -> CanonicalDocument:
    now = datetime.now(timezone.utc)
    return CanonicalDocument(
        id=doc_id or f"doc_{key}",
        key=key,
        governed=governed,
        content=content,
        created_at=now,
        updated_at=now,
    )


def _make_resolver(*docs: CanonicalDocument) -> KeyResolver:
    return KeyResolver(CanonicalDocumentStore(InMemoryDocumentService(list(docs))))


def _make_http_resolver(handler) -> KeyResolver:
    client = httpx.Client(
        base_url="http://docs.test", transport=httpx.MockTransport(handler), timeout=1.0
    )
    return KeyResolver(CanonicalDocumentStore(HttpDocumentService("http://docs.test", client=client)))


class _FailingService:
    def list_documents(self):
        raise TransientIOError("document-service", "timed out")

    def get_document(self, document_id):
        raise TransientIOError("document-service", "timed out")

    def set_governed(self, document_id, governed):
        raise TransientIOError("document-service", "timed out")


class TestMatchCanonicalKey:
    def test_exact_match(self):
        docs = [_make_doc("continuum-governance.md"), _make_doc("continuum-glossary.md")]
        match = match_canonical_key(docs, "continuum-glossary.md")
        assert match.document.key == "continuum-glossary.md"
        assert match.tier == MatchTier.EXACT

    def test_case_insensitive_match(self):
        docs = [_make_doc("continuum-whitepaper-A.md")]
        match = match_canonical_key(docs, "continuum-whitepaper-a.md")
        assert match.document.key == "continuum-whitepaper-A.md"
        assert match.tier == MatchTier.CASE_INSENSITIVE

    def test_substring_match(self):
        docs = [_make_doc("continuum-whitepaper-a-agent-cru.md")]
        match = match_canonical_key(docs, "continuum-whitepaper-a.md")
        assert match.document.key == "continuum-whitepaper-a-agent-cru.md"
        assert match.tier == MatchTier.SUBSTRING

    def test_substring_strips_md_suffix_case_insensitively(self):
        docs = [_make_doc("Continuum-Whitepaper-A-v2.txt")]
        match = match_canonical_key(docs, "continuum-whitepaper-a.MD")
        assert match is not None
        assert match.tier == MatchTier.SUBSTRING

    def test_no_match(self):
        docs = [_make_doc("continuum-glossary.md")]
        assert match_canonical_key(docs, "continuum-whitepaper-a.md") is None

    def test_empty_store(self):
        assert match_canonical_key([], "anything.md") is None

    def test_earlier_tier_wins_over_store_order(self):
        """A case-insensitive hit later in the list beats a substring hit earlier."""
        docs = [
            _make_doc("continuum-whitepaper-a-agent-cru.md"),
            _make_doc("CONTINUUM-WHITEPAPER-A.md"),
        ]
        match = match_canonical_key(docs, "continuum-whitepaper-a.md")
        assert match.document.key == "CONTINUUM-WHITEPAPER-A.md"
        assert match.tier == MatchTier.CASE_INSENSITIVE

    def test_exact_beats_case_insensitive(self):
        docs = [_make_doc("Registry.md", doc_id="upper"), _make_doc("registry.md", doc_id="lower")]
        match = match_canonical_key(docs, "registry.md")
        assert match.document.id == "lower"
        assert match.tier == MatchTier.EXACT

    def test_first_in_store_order_wins_within_tier(self):
        docs = [
            _make_doc("continuum-whitepaper-a-agent-cru.md"),
            _make_doc("continuum-whitepaper-a-draft.md"),
        ]
        match = match_canonical_key(docs, "continuum-whitepaper-a.md")
        assert match.document.key == "continuum-whitepaper-a-agent-cru.md"
        assert match.ambiguous
        assert match.other_candidates == ["continuum-whitepaper-a-draft.md"]

    def test_empty_key_matches_nothing(self):
        docs = [_make_doc("continuum-glossary.md")]
        assert match_canonical_key(docs, "") is None
        assert match_canonical_key(docs, ".md") is None


class TestKeyResolver:
    def test_find_by_key_case_insensitive(self):
        resolver = _make_resolver(_make_doc("continuum-whitepaper-A.md", content="# A"))
        doc = resolver.find_by_key("continuum-whitepaper-a.md")
        assert doc.key == "continuum-whitepaper-A.md"

    def test_find_by_key_substring(self):
        resolver = _make_resolver(_make_doc("continuum-whitepaper-a-agent-cru.md", content="# A"))
        doc = resolver.find_by_key("continuum-whitepaper-a.md")
        assert doc.key == "continuum-whitepaper-a-agent-cru.md"

    def test_not_found_lists_every_key(self):
        resolver = _make_resolver(
            _make_doc("continuum-glossary.md"),
            _make_doc("continuum-governance.md"),
        )
        with pytest.raises(DocumentNotFoundError) as exc_info:
            resolver.find_by_key("continuum-whitepaper-a.md")
        assert exc_info.value.available_keys == [
            "continuum-glossary.md",
            "continuum-governance.md",
        ]
        assert "continuum-glossary.md" in str(exc_info.value)
        assert "continuum-whitepaper-a.md" in str(exc_info.value)

    def test_fetches_content_when_listing_omits_it(self):
        service = InMemoryDocumentService([_make_doc("continuum-governance.md", content="body")])

        class _ListingWithoutContent(InMemoryDocumentService):
            def list_documents(self):
                return [d.model_copy(update={"content": None}) for d in service.list_documents()]

            def get_document(self, document_id):
                return service.get_document(document_id)

        resolver = KeyResolver(CanonicalDocumentStore(_ListingWithoutContent()))
        assert resolver.find_by_key("continuum-governance.md").content == "body"

    def test_store_failure_surfaces_as_not_found(self):
        resolver = KeyResolver(CanonicalDocumentStore(_FailingService()))
        with pytest.raises(DocumentNotFoundError) as exc_info:
            resolver.find_by_key("continuum-governance.md")
        assert isinstance(exc_info.value.__cause__, TransientIOError)
        assert exc_info.value.available_keys == []

    def test_non_json_listing_surfaces_as_not_found(self):
        resolver = _make_http_resolver(
            lambda request: httpx.Response(200, text="<html>proxy error</html>")
        )
        with pytest.raises(DocumentNotFoundError) as exc_info:
            resolver.find_by_key("continuum-workspace-governance.md")
        assert isinstance(exc_info.value.__cause__, TransientIOError)

        result = resolver.lookup("continuum-workspace-governance.md")
        assert result.error == "NotFound"
        assert result.available_keys == []

    def test_schema_invalid_listing_surfaces_as_not_found(self):
        resolver = _make_http_resolver(
            lambda request: httpx.Response(200, json=[{"id": "d1", "key": "x.md"}])
        )
        with pytest.raises(DocumentNotFoundError) as exc_info:
            resolver.find_by_key("x.md")
        assert isinstance(exc_info.value.__cause__, TransientIOError)

    def test_document_vanishing_before_content_fetch_lists_every_key(self):
        listed = [
            _make_doc("continuum-governance.md", doc_id="gone"),
            _make_doc("continuum-glossary.md", doc_id="kept"),
        ]

        class _VanishingService(InMemoryDocumentService):
            def list_documents(self):
                return [d.model_copy() for d in listed]

        resolver = KeyResolver(CanonicalDocumentStore(_VanishingService([listed[1]])))
        with pytest.raises(DocumentNotFoundError) as exc_info:
            resolver.find_by_key("continuum-governance.md")
        assert exc_info.value.key == "continuum-governance.md"
        assert exc_info.value.available_keys == [
            "continuum-governance.md",
            "continuum-glossary.md",
        ]

    def test_lookup_success_shape(self):
        resolver = _make_resolver(
            _make_doc("continuum-whitepaper-a-agent-cru.md", content="x"),
            _make_doc("continuum-whitepaper-a-draft.md", content="y"),
        )
        result = resolver.lookup("continuum-whitepaper-a.md")
        assert result.error is None
        assert result.document.key == "continuum-whitepaper-a-agent-cru.md"
        assert result.matched_tier == MatchTier.SUBSTRING
        assert result.ambiguous_keys == ["continuum-whitepaper-a-draft.md"]

    def test_lookup_not_found_shape(self):
        resolver = _make_resolver(_make_doc("continuum-glossary.md"))
        result = resolver.lookup("continuum-whitepaper-a.md")
        assert result.document is None
        assert result.error == "NotFound"
        assert result.available_keys == ["continuum-glossary.md"]
        dumped = result.model_dump(by_alias=True)
        assert dumped["availableKeys"] == ["continuum-glossary.md"]


class TestWhitepaperKey:
    def test_general_audience(self):
        assert whitepaper_key("A") == "continuum-whitepaper-a.md"

    def test_agent_cru_audience(self):
        assert whitepaper_key("D", "Agent Cru") == "continuum-whitepaper-d-agent-cru.md"
