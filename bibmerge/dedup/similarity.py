"""Similaridade de títulos baseada na distância de Levenshtein."""

from rapidfuzz.distance import Levenshtein

from bibmerge.dedup.normalize import normalize_title


def edit_distance(a: str, b: str) -> int:
    """Distância de Levenshtein (inserção, remoção e substituição com custo 1)."""
    return Levenshtein.distance(a, b)


def normalized_similarity(norm_a: str, norm_b: str) -> float:
    """
    Similaridade em [0, 1] entre duas strings já normalizadas.

    1 - distância / maior comprimento. Strings iguais (inclusive ambas vazias)
    valem 1.0; apenas uma vazia vale 0.0.
    """
    if norm_a == norm_b:
        return 1.0
    if not norm_a or not norm_b:
        return 0.0
    distance = edit_distance(norm_a, norm_b)
    return 1.0 - distance / max(len(norm_a), len(norm_b))


def title_similarity(title_a: str, title_b: str, transliterate: bool = True) -> float:
    """Normaliza os dois títulos e calcula a similaridade entre eles."""
    return normalized_similarity(
        normalize_title(title_a, transliterate), normalize_title(title_b, transliterate)
    )


def can_reach_threshold(len_a: int, len_b: int, threshold: float) -> bool:
    """
    Indica se um par com estes comprimentos ainda pode atingir o limiar.

    A distância nunca é menor que a diferença de comprimento, portanto o par
    pode ser descartado sem calcular a distância.
    """
    longest = max(len_a, len_b)
    if longest == 0:
        return True
    return 1.0 - abs(len_a - len_b) / longest >= threshold
