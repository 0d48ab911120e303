"""Resolve a free-text product name onto the catalog.

Exact (normalized) equality wins outright. Otherwise candidates come from
the 3-char prefix index and are ranked by shared prefixes, then
Jaro-Winkler similarity, then catalog order. A weak best candidate is reported as matched=False
rather than raised.

A query with prefixes that hit nothing in the index is unmatched: it shares
no word stem with any product. Only a query too short to tokenize (every
word under 3 chars) is compared against the whole catalog.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from rapidfuzz.distance import JaroWinkler

from voice2product.config import MATCH_THRESHOLD
from voice2product.schemas.models import MatchResult
from voice2product.services.catalog_index import CatalogIndex, normalize_name, token_prefixes

log = logging.getLogger(__name__)


def similarity(a: str, b: str) -> float:
    return float(JaroWinkler.normalized_similarity(a, b))


def _candidates(query_prefixes, index: CatalogIndex) -> Iterable[str]:
    if not query_prefixes:
        # nothing to look up by, e.g. "eg" or "2 l"
        return index.exact.keys()
    keys = set()
    for p in query_prefixes:
        keys.update(index.prefixes.get(p, ()))
    return keys


def rank_candidates(query: str, index: CatalogIndex) -> List[Tuple[int, float, str]]:
    """(shared_prefixes, similarity, key) best-first. query must be normalized."""
    qp = token_prefixes(query)
    scored = []
    for key in _candidates(qp, index):
        shared = len(qp & index.entry_prefixes[key])
        scored.append((shared, similarity(query, key), key))
    scored.sort(key=lambda t: (-t[0], -t[1], index.positions[t[2]]))
    return scored


def match(query: str, index: CatalogIndex, threshold: Optional[float] = None) -> MatchResult:
    if threshold is None:
        threshold = MATCH_THRESHOLD
    q = normalize_name(query or "")
    if not q or len(index) == 0:
        return MatchResult(query=query or "", confidence=0.0, matched=False)

    hit = index.exact.get(q)
    if hit is not None:
        return MatchResult(query=query, matched_entry=hit, confidence=1.0, matched=True)

    ranked = rank_candidates(q, index)
    if not ranked:
        log.info("No catalog product shares a word stem with %r", query)
        return MatchResult(query=query, confidence=0.0, matched=False)
    shared, score, key = ranked[0]
    score = max(0.0, min(1.0, score))
    if score >= threshold:
        log.debug("Matched %r -> %r (%.3f, %d shared prefixes)", query, key, score, shared)
        return MatchResult(query=query, matched_entry=index.exact[key], confidence=score, matched=True)

    log.info("No confident match for %r (best %r at %.3f)", query, key, score)
    return MatchResult(query=query, matched_entry=None, confidence=score, matched=False)


def match_many(queries: Iterable[str], index: CatalogIndex) -> List[MatchResult]:
    return [match(q, index) for q in queries]
