"""Deduplicação de registros bibliográficos por DOI, PMID e similaridade de título."""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Set, Tuple

from bibmerge.dedup.matchers import (
    DEFAULT_SIMILARITY_THRESHOLD,
    match_by_doi,
    match_by_pmid,
    match_by_similarity,
    validate_similarity_params,
)
from bibmerge.dedup.merger import merge_group
from bibmerge.models import RawRecord, UnifiedRecord

logger = logging.getLogger(__name__)


@dataclass
class DedupStats:
    """Contagens de uma execução da deduplicação, por fase."""

    total_records: int = 0
    doi_groups: int = 0
    doi_duplicates: int = 0
    pmid_groups: int = 0
    pmid_duplicates: int = 0
    title_groups: int = 0
    title_duplicates: int = 0
    singletons: int = 0
    leftovers: int = 0
    unified_records: int = 0

    @property
    def duplicates_removed(self) -> int:
        return self.total_records - self.unified_records


def _remaining(total: int, consumed: Set[int]) -> List[int]:
    return [i for i in range(total) if i not in consumed]


def deduplicate_with_stats(
    records: Sequence[RawRecord],
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    clustering: str = "greedy",
    strip_doi_prefixes: bool = True,
    transliterate: bool = True,
) -> Tuple[List[UnifiedRecord], DedupStats]:
    """
    Deduplica registros em quatro fases:
    1. Match exato por DOI
    2. Match exato por PMID (registros restantes)
    3. Agrupamento por similaridade de título (registros restantes)
    4. Registros ainda não consumidos viram registros unitários

    O consumo é controlado pela posição de cada registro na lista original.
    Retorna (registros_unificados, estatísticas).
    """
    validate_similarity_params(similarity_threshold, clustering)
    stats = DedupStats(total_records=len(records))
    if not records:
        return [], stats

    consumed: Set[int] = set()
    unified: List[UnifiedRecord] = []

    # === Fase 1: DOI exato ===
    for group in match_by_doi(records, strip_prefixes=strip_doi_prefixes):
        unified.append(merge_group([records[i] for i in group], match_method="doi"))
        consumed.update(group)
        stats.doi_groups += 1
        stats.doi_duplicates += len(group) - 1

    logger.info(
        "Fase 1 (DOI): %d grupos, %d duplicatas", stats.doi_groups, stats.doi_duplicates
    )

    # === Fase 2: PMID exato ===
    remaining = _remaining(len(records), consumed)
    for local_group in match_by_pmid([records[i] for i in remaining]):
        group = [remaining[k] for k in local_group]
        unified.append(merge_group([records[i] for i in group], match_method="pmid"))
        consumed.update(group)
        stats.pmid_groups += 1
        stats.pmid_duplicates += len(group) - 1

    logger.info(
        "Fase 2 (PMID): %d grupos, %d duplicatas", stats.pmid_groups, stats.pmid_duplicates
    )

    # === Fase 3: similaridade de título ===
    remaining = _remaining(len(records), consumed)
    title_groups = match_by_similarity(
        [records[i] for i in remaining],
        threshold=similarity_threshold,
        clustering=clustering,
        transliterate=transliterate,
    )
    for local_group in title_groups:
        group = [remaining[k] for k in local_group]
        method = "title" if len(group) > 1 else "single"
        unified.append(merge_group([records[i] for i in group], match_method=method))
        consumed.update(group)
        if len(group) > 1:
            stats.title_groups += 1
            stats.title_duplicates += len(group) - 1
        else:
            stats.singletons += 1

    logger.info(
        "Fase 3 (título, %s, limiar=%.2f): %d grupos, %d duplicatas, %d únicos",
        clustering,
        similarity_threshold,
        stats.title_groups,
        stats.title_duplicates,
        stats.singletons,
    )

    # === Fase 4: sobras ===
    leftovers = _remaining(len(records), consumed)
    if leftovers:
        logger.warning("%d registro(s) não consumidos pela fase de título", len(leftovers))
    for i in leftovers:
        unified.append(merge_group([records[i]]))
        consumed.add(i)
    stats.leftovers = len(leftovers)

    stats.unified_records = len(unified)
    logger.info(
        "Deduplicação concluída: %d registros -> %d únicos (%d duplicatas removidas)",
        stats.total_records,
        stats.unified_records,
        stats.duplicates_removed,
    )

    return unified, stats


def deduplicate(
    records: Sequence[RawRecord],
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    clustering: str = "greedy",
    strip_doi_prefixes: bool = True,
    transliterate: bool = True,
) -> List[UnifiedRecord]:
    """Deduplica registros brutos e devolve apenas os registros unificados."""
    unified, _ = deduplicate_with_stats(
        records,
        similarity_threshold=similarity_threshold,
        clustering=clustering,
        strip_doi_prefixes=strip_doi_prefixes,
        transliterate=transliterate,
    )
    return unified
