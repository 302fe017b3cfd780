"""Exportador de registros unificados para CSV e Excel."""

import csv
import logging
import re
from collections import Counter
from pathlib import Path
from typing import List

import pandas as pd

from bibmerge.models import UnifiedRecord

logger = logging.getLogger(__name__)

# Limite de caracteres por célula no Excel
_EXCEL_CELL_LIMIT = 32_767

# Caracteres ilegais em XML 1.0 (usados internamente pelo xlsx)
_ILLEGAL_XML_RE = re.compile(
    r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x84\x86-\x9F]"
)

COLUMNS = [
    "primary_id",
    "doi",
    "pmid",
    "title",
    "authors",
    "journal",
    "year",
    "citation_count",
    "sources",
    "source_count",
    "match_method",
    "member_ids",
    "abstract",
]


def _sanitize_for_excel(value):
    """Remove caracteres ilegais e trunca para o limite do Excel."""
    if not isinstance(value, str):
        return value
    clean = _ILLEGAL_XML_RE.sub("", value)
    if len(clean) > _EXCEL_CELL_LIMIT:
        clean = clean[: _EXCEL_CELL_LIMIT - 3] + "..."
    return clean


def _sanitize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Aplica _sanitize_for_excel às colunas de texto (object ou StringDtype)."""
    clean = df.copy()
    for name in list(clean.columns):
        col = clean[name]
        if col.dtype == object or pd.api.types.is_string_dtype(col):
            clean[name] = col.map(_sanitize_for_excel)
    return clean


def _build_dataframe(records: List[UnifiedRecord]) -> pd.DataFrame:
    """Converte lista de UnifiedRecord em DataFrame padronizado."""
    rows = []
    for rec in records:
        rows.append({
            "primary_id": rec.primary_id,
            "doi": rec.doi or "",
            "pmid": rec.pmid or "",
            "title": rec.title,
            "authors": "; ".join(rec.authors),
            "journal": rec.journal or "",
            "year": rec.year if rec.year is not None else "",
            "citation_count": rec.citation_count if rec.citation_count is not None else "",
            "sources": "; ".join(rec.sources),
            "source_count": rec.source_count,
            "match_method": rec.match_method,
            "member_ids": "; ".join(rec.member_ids),
            "abstract": rec.abstract,
        })
    return pd.DataFrame(rows, columns=COLUMNS)


def _build_source_stats(records: List[UnifiedRecord]) -> pd.DataFrame:
    """Gera a tabela de cobertura por fonte: total, exclusivos e compartilhados."""
    total = len(records)
    if total == 0:
        return pd.DataFrame()

    found_by: Counter = Counter()
    exclusive: Counter = Counter()
    for rec in records:
        distinct = set(rec.sources)
        for source in distinct:
            found_by[source] += 1
        if len(distinct) == 1:
            exclusive[next(iter(distinct))] += 1

    def pct(n: int) -> str:
        return f"{n / total * 100:.1f}%"

    rows = []
    for source, count in found_by.most_common():
        rows.append({
            "Fonte": source,
            "Registros": count,
            "%": pct(count),
            "Exclusivos": exclusive[source],
        })

    shared = sum(1 for rec in records if len(set(rec.sources)) > 1)
    rows.append({"Fonte": "", "Registros": "", "%": "", "Exclusivos": ""})
    rows.append({"Fonte": "Total de registros únicos", "Registros": total, "%": "100.0%", "Exclusivos": ""})
    rows.append({"Fonte": "Encontrados por 2+ fontes", "Registros": shared, "%": pct(shared), "Exclusivos": ""})

    return pd.DataFrame(rows)


def export_csv(records: List[UnifiedRecord], output_path: str) -> str:
    """
    Exporta registros para CSV com encoding UTF-8-BOM (compatível com Excel Windows).

    Retorna o caminho do arquivo gerado.
    """
    df = _build_dataframe(records)

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, index=False, encoding="utf-8-sig", sep=";",
              quoting=csv.QUOTE_ALL)

    logger.info("CSV exportado: %s (%d registros)", output_path, len(records))
    return output_path


def export_excel(records: List[UnifiedRecord], output_path: str) -> str:
    """
    Exporta registros para Excel (.xlsx) com duas abas:
      - Registros: dados bibliográficos unificados
      - Fontes: cobertura de cada fonte de busca

    Retorna o caminho do arquivo gerado.
    """
    df_results = _build_dataframe(records)
    df_stats = _build_source_stats(records)

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    # Sanitizar strings para compatibilidade com Excel/XML
    df_clean = _sanitize_frame(df_results)

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        df_clean.to_excel(writer, sheet_name="Registros", index=False)
        if not df_stats.empty:
            _sanitize_frame(df_stats).to_excel(writer, sheet_name="Fontes", index=False)

    logger.info("Excel exportado: %s (%d registros)", output_path, len(records))
    return output_path
