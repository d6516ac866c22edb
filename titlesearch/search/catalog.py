"""Catalogue immuable des libellés recherchables."""
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Tuple


@dataclass(frozen=True)
class CandidateEntry:
    """Paire (identifiant, texte) du catalogue."""
    id: int
    text: str


class Catalog:
    """
    Séquence ordonnée et figée de ``CandidateEntry``.

    Chargée une seule fois au démarrage puis partagée en lecture seule par
    toutes les requêtes. L'unicité des identifiants relève du stockage.
    """

    __slots__ = ('_entries',)

    def __init__(self, entries: Iterable[CandidateEntry] = ()):
        self._entries: Tuple[CandidateEntry, ...] = tuple(entries)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[int, str]]) -> 'Catalog':
        """Construit un catalogue depuis des tuples (id, texte)."""
        return cls(CandidateEntry(id=int(i), text=str(t)) for i, t in pairs)

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> 'Catalog':
        """Construit un catalogue depuis des lignes ``{'id': ..., 'title': ...}``."""
        return cls.from_pairs((row['id'], row['title']) for row in rows)

    @property
    def entries(self) -> Tuple[CandidateEntry, ...]:
        return self._entries

    def __iter__(self) -> Iterator[CandidateEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"Catalog({len(self._entries)} entries)"
