"""Sélection des meilleurs candidats du catalogue."""
import heapq
from typing import List, NamedTuple, Optional

from titlesearch.scoring.distance import WeightedDistance, weighted_distance
from titlesearch.search.catalog import Catalog


class ScoredCandidate(NamedTuple):
    """Candidat noté pendant une recherche (score croissant = meilleur)."""
    score: int
    id: int


class RetrievalSelector:
    """Classement top-K et meilleur candidat sur un catalogue en lecture seule."""

    def __init__(self, catalog: Catalog, distance: WeightedDistance = weighted_distance):
        self.catalog = catalog
        self.distance = distance

    def rank(self, query: str, k: int) -> List[ScoredCandidate]:
        """
        Retourne les ``k`` candidats de plus petit score, du meilleur au moins bon.

        À score égal, l'entrée la plus tôt dans le catalogue passe devant.

        Args:
            query: Requête saisie
            k: Nombre maximal de candidats (>= 1)

        Returns:
            Liste de ``ScoredCandidate`` triée
        """
        if k < 1:
            raise ValueError(f"k must be a positive integer, got {k}")

        # Tas max borné : le plus mauvais candidat conservé est au sommet.
        heap = []
        for position, entry in enumerate(self.catalog):
            score = self.distance.score(query, entry.text)
            heapq.heappush(heap, (-score, -position, entry.id))
            if len(heap) > k:
                heapq.heappop(heap)

        kept = sorted(heap, key=lambda item: (-item[0], -item[1]))
        return [ScoredCandidate(score=-neg_score, id=cid) for neg_score, _, cid in kept]

    def top_k(self, query: str, k: int) -> List[int]:
        """Identifiants des ``k`` meilleurs candidats, meilleur en premier."""
        return [candidate.id for candidate in self.rank(query, k)]

    def best_match(self, query: str) -> Optional[int]:
        """
        Identifiant du meilleur candidat, ``None`` si le catalogue est vide.

        Balayage de gauche à droite, mise à jour sur amélioration stricte :
        le premier candidat du catalogue gagne les égalités.
        """
        best: Optional[ScoredCandidate] = None
        for entry in self.catalog:
            score = self.distance.score(query, entry.text)
            if best is None or score < best.score:
                best = ScoredCandidate(score=score, id=entry.id)
        return best.id if best is not None else None
