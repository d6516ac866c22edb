"""Modèle de coûts de la distance d'édition pondérée.

Un ``CostModel`` regroupe quatre fonctions pures :

- ``insert(c)`` : coût pour produire le caractère ``c`` de la cible ;
- ``delete(c)`` : coût de suppression ;
- ``replace(q, t)`` : coût de remplacement du caractère de requête ``q``
  par le caractère cible ``t`` (la direction compte) ;
- ``substring_bonus(query, position)`` : ajustement signé appliqué quand la
  requête apparaît telle quelle dans la cible.

Le moteur de distance ne connaît que cette interface : changer de réglage
revient à passer un autre ``CostModel``.
"""
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Tuple

# Espace, tabulation, LF, FF, CR (pas de tabulation verticale)
ASCII_WHITESPACE = frozenset(" \t\n\x0c\r")

SIGN_CHARS = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

# (caractère de requête, caractère cible)
LEET_PAIRS: FrozenSet[Tuple[str, str]] = frozenset({
    ('e', '3'),
    ('o', '0'),
    ('a', 'V'),
})


@dataclass(frozen=True)
class CostModel:
    """Ensemble de fonctions de coût interchangeable."""
    insert: Callable[[str], int]
    delete: Callable[[str], int]
    replace: Callable[[str, str], int]
    substring_bonus: Callable[[str, int], int]


def _ascii_upper(c: str) -> str:
    if 'a' <= c <= 'z':
        return chr(ord(c) - 32)
    return c


def _ascii_lower(c: str) -> str:
    if 'A' <= c <= 'Z':
        return chr(ord(c) + 32)
    return c


def query_insert(c: str) -> int:
    """Coût d'insertion de référence."""
    if c in ASCII_WHITESPACE:
        return 1
    if c in SIGN_CHARS:
        return 2
    return 7


def query_delete(c: str) -> int:
    """Coût de suppression de référence."""
    if c in ASCII_WHITESPACE:
        return 2
    return 10


def make_replace(
        leet_pairs: FrozenSet[Tuple[str, str]] = LEET_PAIRS,
        case_insensitive: bool = True) -> Callable[[str, str], int]:
    """
    Construit une fonction de remplacement.

    Args:
        leet_pairs: Paires (requête, cible) facturées 3
        case_insensitive: Si False, une différence de casse coûte le prix plein

    Returns:
        Fonction ``replace(query_char, target_char) -> int``
    """
    def replace(qc: str, tc: str) -> int:
        if qc == tc:
            return 0
        if case_insensitive:
            if _ascii_upper(qc) == tc:
                return 1
            if _ascii_lower(qc) == tc:
                return 2
        if (qc, tc) in leet_pairs:
            return 3
        return 4

    return replace


query_replace = make_replace()


def query_substring(query: str, position: int) -> int:
    """Bonus de sous-chaîne : -20 par caractère, atténué par la position."""
    return len(query) * -20 + position // 2


REFERENCE_COST_MODEL = CostModel(
    insert=query_insert,
    delete=query_delete,
    replace=query_replace,
    substring_bonus=query_substring,
)

COST_PROFILES: Dict[str, CostModel] = {
    'reference': REFERENCE_COST_MODEL,
    'no_leet': CostModel(
        insert=query_insert,
        delete=query_delete,
        replace=make_replace(leet_pairs=frozenset()),
        substring_bonus=query_substring,
    ),
    'case_sensitive': CostModel(
        insert=query_insert,
        delete=query_delete,
        replace=make_replace(case_insensitive=False),
        substring_bonus=query_substring,
    ),
}


def get_cost_model(profile: str) -> CostModel:
    """Retourne le modèle de coûts d'un profil nommé."""
    try:
        return COST_PROFILES[profile]
    except KeyError as e:
        known = ", ".join(sorted(COST_PROFILES))
        raise KeyError(f"Unknown cost profile '{profile}' (known: {known})") from e
