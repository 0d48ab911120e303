import logging
import string
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Set, Tuple

from voice2product.schemas.models import CatalogEntry
from voice2product.utils.common import collapse_ws

log = logging.getLogger(__name__)

PREFIX_LEN = 3
MIN_TOKEN_LEN = 3


def normalize_name(s: str) -> str:
    return collapse_ws(s).lower()


def tokenize(name: str) -> List[str]:
    out = []
    for tok in normalize_name(name).split():
        tok = tok.strip(string.punctuation)
        if len(tok) >= MIN_TOKEN_LEN:
            out.append(tok)
    return out


def token_prefixes(name: str) -> Set[str]:
    return {tok[:PREFIX_LEN] for tok in tokenize(name)}


@dataclass(frozen=True)
class CatalogIndex:
    """Read-only lookup structure over the product catalog.

    exact:    normalized name -> entry
    prefixes: 3-char token prefix -> keys of the entries sharing it
    entry_prefixes: key -> that entry's own prefix set (for ranking)
    positions: key -> catalog order (final tie-break)

    Never mutated after build_index(); a reload builds a new instance.
    """
    exact: Mapping[str, CatalogEntry]
    prefixes: Mapping[str, Tuple[str, ...]]
    entry_prefixes: Mapping[str, frozenset]
    positions: Mapping[str, int]
    duplicates: Tuple[str, ...] = field(default=())

    def __len__(self) -> int:
        return len(self.exact)

    @property
    def entries(self) -> Tuple[CatalogEntry, ...]:
        return tuple(self.exact.values())

    def keys(self) -> Tuple[str, ...]:
        return tuple(self.exact.keys())


def build_index(entries: Iterable[CatalogEntry]) -> CatalogIndex:
    """Index catalog entries by exact name and by token prefix.

    Names that collide after normalization resolve last-write-wins: the later
    entry replaces the earlier one (keeping the earlier catalog position) and
    the collision is logged here, at build time, never at match time.
    """
    exact: Dict[str, CatalogEntry] = {}
    duplicates: List[str] = []

    for e in entries:
        key = normalize_name(e.canonical_name)
        if key in exact:
            log.warning(
                "Duplicate catalog name %r (was %r), keeping the later entry",
                e.canonical_name, exact[key].canonical_name,
            )
            duplicates.append(key)
        exact[key] = e

    prefixes: Dict[str, List[str]] = {}
    entry_prefixes: Dict[str, frozenset] = {}
    for key in exact:
        pset = token_prefixes(key)
        entry_prefixes[key] = frozenset(pset)
        for p in sorted(pset):
            prefixes.setdefault(p, []).append(key)

    log.info("Catalog index built: %d entries, %d prefixes", len(exact), len(prefixes))

    return CatalogIndex(
        exact=MappingProxyType(exact),
        prefixes=MappingProxyType({p: tuple(keys) for p, keys in prefixes.items()}),
        entry_prefixes=MappingProxyType(entry_prefixes),
        positions=MappingProxyType({k: i for i, k in enumerate(exact)}),
        duplicates=tuple(duplicates),
    )
