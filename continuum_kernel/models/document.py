"""Canonical Document — the authoritative stored document for a key."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from continuum_kernel.models.base import WireModel


class CanonicalDocument(WireModel):
    """
    A document as served by the external document service.

    Read-only from the kernel's point of view. The only mutation the kernel
    passes through is the governed-flag toggle.
    """

    id: str
    key: str                                # Unique within the store
    title: Optional[str] = None
    governed: bool = False
    content: Optional[str] = None           # Listings may omit content
    created_at: datetime
    updated_at: datetime


class MatchTier(str, Enum):
    EXACT = "exact"
    CASE_INSENSITIVE = "case_insensitive"
    SUBSTRING = "substring"


class KeyLookupResult(WireModel):
    """Outcome of a key lookup: either a document or NotFound with every available key."""

    key: str
    document: Optional[CanonicalDocument] = None
    error: Optional[str] = None             # "NotFound" when unresolved
    available_keys: List[str] = []
    matched_tier: Optional[MatchTier] = None
    ambiguous_keys: List[str] = []          # Other keys that matched in the winning tier
