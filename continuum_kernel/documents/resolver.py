"""
Key Resolver — tiered fallback matching of logical keys to canonical documents.

Matching order (first tier with any hit wins, no fallthrough once a tier hits):
  Tier 1: exact key equality
  Tier 2: case-insensitive equality
  Tier 3: case-insensitive substring, needle = key without a trailing ".md"

Within a tier the first document in store order wins. No match raises
DocumentNotFoundError listing every available key; a default document is
never substituted.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from continuum_kernel.documents.store import CanonicalDocumentStore
from continuum_kernel.errors import DocumentNotFoundError, TransientIOError
from continuum_kernel.logging import get_logger
from continuum_kernel.models.document import CanonicalDocument, KeyLookupResult, MatchTier

logger = get_logger("documents.resolver")

_MD_SUFFIX = re.compile(r"\.md$", re.IGNORECASE)


@dataclass
class KeyMatch:
    """A resolved match: the winning document plus the tier that produced it."""

    document: CanonicalDocument
    tier: MatchTier
    other_candidates: List[str] = field(default_factory=list)

    @property
    def ambiguous(self) -> bool:
        return bool(self.other_candidates)


def _first_tier_hits(
    documents: List[CanonicalDocument], key: str
) -> Optional[tuple]:
    exact = [d for d in documents if d.key == key]
    if exact:
        return MatchTier.EXACT, exact

    lowered = key.lower()
    folded = [d for d in documents if d.key.lower() == lowered]
    if folded:
        return MatchTier.CASE_INSENSITIVE, folded

    needle = _MD_SUFFIX.sub("", key).lower()
    if not needle:
        return None
    contained = [d for d in documents if needle in d.key.lower()]
    if contained:
        return MatchTier.SUBSTRING, contained

    return None


def match_canonical_key(
    documents: Iterable[CanonicalDocument], key: str
) -> Optional[KeyMatch]:
    """
    Pure tiered matcher. No I/O.

    Returns None when no tier produces a hit.
    """
    hits = _first_tier_hits(list(documents), key)
    if hits is None:
        return None
    tier, candidates = hits
    return KeyMatch(
        document=candidates[0],
        tier=tier,
        other_candidates=[d.key for d in candidates[1:]],
    )


def whitepaper_key(version: str, audience: str = "General") -> str:
    """Canonical key for a whitepaper version ("A", "D") and audience ("General", "Agent Cru")."""
    suffix = "-agent-cru" if audience == "Agent Cru" else ""
    return f"continuum-whitepaper-{version.lower()}{suffix}.md"


class KeyResolver:
    """Resolves logical keys against a CanonicalDocumentStore."""

    def __init__(self, store: CanonicalDocumentStore):
        self.store = store

    def find_by_key(self, key: str) -> CanonicalDocument:
        """
        Resolve a key to one document. Raises DocumentNotFoundError.

        A store failure also raises DocumentNotFoundError so that callers see a
        single failure shape; the underlying cause is chained.
        """
        return self._resolve(key).document

    def lookup(self, key: str) -> KeyLookupResult:
        """Non-raising variant returning the {document} / {error, availableKeys} shape."""
        try:
            match = self._resolve(key)
        except DocumentNotFoundError as e:
            return KeyLookupResult(
                key=key,
                error="NotFound",
                available_keys=e.available_keys,
            )
        return KeyLookupResult(
            key=key,
            document=match.document,
            matched_tier=match.tier,
            ambiguous_keys=match.other_candidates,
        )

    def _resolve(self, key: str) -> KeyMatch:
        try:
            documents = self.store.list()
        except TransientIOError as e:
            logger.warning("Document store unavailable while resolving %r: %s", key, e)
            raise DocumentNotFoundError(
                key, detail=f"Document store unavailable: {e}"
            ) from e

        match = match_canonical_key(documents, key)
        if match is None:
            available = [d.key for d in documents]
            logger.info(
                "No canonical document for key %r. Available keys: %s",
                key, ", ".join(available) or "none",
            )
            raise DocumentNotFoundError(key, available)

        if match.ambiguous:
            logger.warning(
                "Key %r matched %d documents in tier %s; using %r (also matched: %s)",
                key, len(match.other_candidates) + 1, match.tier.value,
                match.document.key, ", ".join(match.other_candidates),
            )

        if match.document.content is None:
            match.document = self._with_content(match.document, key, documents)
        return match

    def _with_content(
        self, document: CanonicalDocument, key: str, documents: List[CanonicalDocument]
    ) -> CanonicalDocument:
        """Listings may omit content; fetch the full document."""
        try:
            return self.store.get(document.id)
        except DocumentNotFoundError as e:
            logger.info("Document %r disappeared before its content was fetched", document.key)
            raise DocumentNotFoundError(key, [d.key for d in documents]) from e
        except TransientIOError as e:
            logger.warning("Could not fetch content for %r: %s", document.key, e)
            raise DocumentNotFoundError(
                key, detail=f"Document store unavailable: {e}"
            ) from e
