"""Distance d'édition pondérée avec bonus de sous-chaîne."""
from titlesearch.scoring.costs import CostModel, REFERENCE_COST_MODEL


class WeightedDistance:
    """Calcule un score de similarité signé entre une requête et une cible."""

    def __init__(self, costs: CostModel = REFERENCE_COST_MODEL):
        self.costs = costs

    def score(self, query: str, target: str) -> int:
        """
        Calcule le score de ``query`` contre ``target``.

        Plus le score est bas, plus la cible est proche. Il peut être négatif
        quand le bonus de sous-chaîne dépasse la distance de base.

        Args:
            query: Requête saisie
            target: Libellé du catalogue

        Returns:
            Score signé (entier)
        """
        costs = self.costs

        if not target:
            return sum(costs.delete(c) for c in query)

        insert_costs = [costs.insert(c) for c in target]
        # Le coût de suppression est lu sur le caractère cible, pas sur celui
        # de la requête. Les scores existants en dépendent.
        delete_costs = [costs.delete(c) for c in target]

        # Ligne 0 : préfixes de la cible produits par insertion
        previous = []
        total = 0
        for cost in insert_costs:
            total += cost
            previous.append(total)

        current = total
        column = 0
        for qc in query:
            diagonal = column
            column += costs.delete(qc)
            current = column

            for j, tc in enumerate(target):
                up = previous[j]
                if qc == tc:
                    replaced = diagonal
                else:
                    replaced = diagonal + costs.replace(qc, tc)
                current = min(
                    current + insert_costs[j],
                    up + delete_costs[j],
                    replaced,
                )
                diagonal = up
                previous[j] = current

        # Position en points de code (str.find)
        position = target.find(query)
        if position >= 0:
            current += costs.substring_bonus(query, position)
        return current


# Instance globale réutilisable
weighted_distance = WeightedDistance()
