"""Agrupamento de registros por identificador exato e por similaridade de título.

Os grupos são devolvidos como listas de posições na lista de entrada, nunca
como referências aos registros: dois registros distintos podem ser idênticos
campo a campo.
"""

import logging
from typing import Callable, Dict, List, Sequence

from bibmerge.dedup.normalize import normalize_doi, normalize_pmid, normalize_title
from bibmerge.dedup.similarity import can_reach_threshold, normalized_similarity
from bibmerge.models import RawRecord

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.85
CLUSTERING_STRATEGIES = ("greedy", "union_find")


def match_exact(
    records: Sequence[RawRecord],
    key: Callable[[RawRecord], str],
) -> List[List[int]]:
    """
    Agrupa registros que compartilham o mesmo identificador normalizado.

    Registros com chave vazia ficam de fora. Apenas grupos com 2 ou mais
    registros são devolvidos; os demais continuam disponíveis para as
    próximas fases.
    """
    groups: Dict[str, List[int]] = {}
    for i, rec in enumerate(records):
        value = key(rec)
        if value:
            groups.setdefault(value, []).append(i)

    return [indices for indices in groups.values() if len(indices) > 1]


def match_by_doi(records: Sequence[RawRecord], strip_prefixes: bool = True) -> List[List[int]]:
    return match_exact(records, lambda r: normalize_doi(r.doi, strip_prefixes))


def match_by_pmid(records: Sequence[RawRecord]) -> List[List[int]]:
    return match_exact(records, lambda r: normalize_pmid(r.pmid))


def validate_similarity_params(threshold: float, clustering: str) -> None:
    """Levanta ValueError para limiar fora de [0, 1] ou estratégia desconhecida."""
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"Limiar de similaridade fora de [0, 1]: {threshold}")
    if clustering not in CLUSTERING_STRATEGIES:
        raise ValueError(
            f"Estratégia de agrupamento desconhecida: {clustering}. "
            f"Opções: {', '.join(CLUSTERING_STRATEGIES)}"
        )


def _is_similar(title_a: str, title_b: str, threshold: float) -> bool:
    if not can_reach_threshold(len(title_a), len(title_b), threshold):
        return False
    return normalized_similarity(title_a, title_b) >= threshold


def _greedy_clusters(titles: List[str], candidates: List[int], threshold: float) -> List[List[int]]:
    """Agrupamento guloso por âncora: compara cada candidato apenas com a âncora."""
    assigned = set()
    clusters = []

    for idx, i in enumerate(candidates):
        if i in assigned:
            continue
        assigned.add(i)
        cluster = [i]

        for j in candidates[idx + 1:]:
            if j in assigned:
                continue
            if _is_similar(titles[i], titles[j], threshold):
                cluster.append(j)
                assigned.add(j)

        clusters.append(cluster)

    return clusters


def _union_find_clusters(titles: List[str], candidates: List[int], threshold: float) -> List[List[int]]:
    """Componentes conexas do grafo de pares acima do limiar (fecho transitivo)."""
    parent = {i: i for i in candidates}

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(a: int, b: int) -> None:
        ra = find(a)
        rb = find(b)
        if ra != rb:
            # A raiz é sempre o menor índice, para manter a ordem original
            parent[max(ra, rb)] = min(ra, rb)

    for idx, i in enumerate(candidates):
        for j in candidates[idx + 1:]:
            if _is_similar(titles[i], titles[j], threshold):
                union(i, j)

    clusters: Dict[int, List[int]] = {}
    for i in candidates:
        clusters.setdefault(find(i), []).append(i)
    return list(clusters.values())


def match_by_similarity(
    records: Sequence[RawRecord],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    clustering: str = "greedy",
    transliterate: bool = True,
) -> List[List[int]]:
    """
    Particiona os registros em grupos de títulos semelhantes.

    Todo registro aparece em exatamente um grupo, inclusive grupos unitários.
    Registros cujo título normalizado é vazio nunca são comparados e viram
    grupos unitários.

    clustering:
      - "greedy": cada registro não atribuído abre um grupo e recebe os
        candidatos seguintes com similaridade >= threshold em relação a ele.
        Dois membros do mesmo grupo podem não ser semelhantes entre si.
      - "union_find": une todos os pares acima do limiar; os grupos são as
        componentes conexas resultantes.
    """
    validate_similarity_params(threshold, clustering)
    if not records:
        return []

    titles = [normalize_title(rec.title, transliterate) for rec in records]
    candidates = [i for i, title in enumerate(titles) if title]
    untitled = [i for i, title in enumerate(titles) if not title]
    if untitled:
        logger.warning(
            "%d registro(s) sem título utilizável; mantidos como únicos", len(untitled)
        )

    if clustering == "union_find":
        clusters = _union_find_clusters(titles, candidates, threshold)
    else:
        clusters = _greedy_clusters(titles, candidates, threshold)

    clusters.extend([i] for i in untitled)
    clusters.sort(key=lambda cluster: cluster[0])
    return clusters
