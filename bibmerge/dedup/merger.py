"""Fusão de um grupo de registros duplicados em um único registro unificado."""

from typing import List, Optional, Sequence

from bibmerge.models import RawRecord, UnifiedRecord


def _first_non_empty(values) -> Optional[str]:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None


def _merge_authors(records: Sequence[RawRecord]) -> List[str]:
    """União das listas de autores, sem repetição, na ordem em que aparecem."""
    seen = set()
    authors = []
    for rec in records:
        for author in rec.authors:
            if author and author not in seen:
                seen.add(author)
                authors.append(author)
    return authors


def merge_group(records: Sequence[RawRecord], match_method: str = "single") -> UnifiedRecord:
    """
    Funde um grupo não vazio de registros em um UnifiedRecord.

    Regras, sempre na ordem dos membros:
      - primary_id: primeiro DOI, senão primeiro PMID, senão source_id do primeiro
      - doi/pmid/journal: primeiro valor não vazio
      - title/abstract: o mais longo (empate: o primeiro)
      - authors: união sem duplicatas
      - year: primeiro ano definido
      - citation_count: o maior entre os definidos
      - sources/member_ids: um item por registro, sem deduplicar
    """
    if not records:
        raise ValueError("Não é possível unificar um grupo vazio de registros")

    doi = _first_non_empty(r.doi for r in records)
    pmid = _first_non_empty(r.pmid for r in records)
    primary_id = doi or pmid or records[0].source_id

    # max() devolve o primeiro elemento máximo, o que resolve os empates
    title = max((r.title or "" for r in records), key=len)
    abstract = max((r.abstract or "" for r in records), key=len)

    year = next((r.year for r in records if r.year is not None), None)

    counts = [r.citation_count for r in records if r.citation_count is not None]
    citation_count = max(counts) if counts else None

    return UnifiedRecord(
        primary_id=primary_id,
        title=title,
        abstract=abstract,
        doi=doi,
        pmid=pmid,
        authors=tuple(_merge_authors(records)),
        year=year,
        journal=_first_non_empty(r.journal for r in records),
        citation_count=citation_count,
        sources=tuple(r.source for r in records),
        member_ids=tuple(r.source_id for r in records),
        match_method=match_method,
    )
