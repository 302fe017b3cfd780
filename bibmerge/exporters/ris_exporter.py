"""Exportador de registros unificados para formato RIS."""

import logging
from pathlib import Path
from typing import List

import rispy

from bibmerge.dedup.normalize import strip_doi_prefix
from bibmerge.models import UnifiedRecord

logger = logging.getLogger(__name__)


def _record_to_ris_entry(rec: UnifiedRecord) -> dict:
    """Converte UnifiedRecord para dicionário no formato rispy."""
    entry = {
        "type_of_reference": "JOUR",
        "title": rec.title,
    }

    if rec.authors:
        entry["authors"] = list(rec.authors)

    if rec.journal:
        entry["secondary_title"] = rec.journal

    if rec.year is not None:
        entry["year"] = str(rec.year)

    if rec.abstract:
        entry["abstract"] = rec.abstract

    doi = strip_doi_prefix(rec.doi) if rec.doi else ""
    if doi:
        entry["doi"] = doi
        entry["urls"] = [f"https://doi.org/{doi}"]

    # C1 guarda o PMID; o AN leva o primary_id, que pode ser um DOI
    if rec.pmid:
        entry["custom1"] = rec.pmid

    if rec.primary_id:
        entry["accession_number"] = rec.primary_id

    if rec.sources:
        entry["name_of_database"] = "; ".join(dict.fromkeys(rec.sources))

    return entry


def export_ris(records: List[UnifiedRecord], output_path: str) -> str:
    """
    Exporta registros para arquivo RIS (importável em Zotero, Mendeley, EndNote).

    Retorna o caminho do arquivo gerado.
    """
    entries = [_record_to_ris_entry(rec) for rec in records]

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        rispy.dump(entries, f)

    logger.info("RIS exportado: %s (%d registros)", output_path, len(records))
    return output_path
