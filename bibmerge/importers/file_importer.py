"""Importação de resultados de busca exportados pelos clientes de cada fonte.

Formatos suportados:
  - .json  — lista de objetos (um por resultado)
  - .jsonl — um objeto JSON por linha
  - .ris   — exportação RIS (Zotero, EndNote, bases de dados)

As chaves JSON são aceitas em snake_case ou no camelCase usado pelos clientes
de busca (id, citationCount).
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional

import rispy

from bibmerge.models import RawRecord

logger = logging.getLogger(__name__)

ENCODINGS = ["utf-8-sig", "utf-8", "latin-1", "cp1252"]

_DOI_IN_TEXT_RE = re.compile(r"10\.\d{4,}/[^\s]+")

# Bases cujo accession number (AN) é o PMID
_PUBMED_DATABASES = ("pubmed", "medline")


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        logger.debug("Valor numérico inválido ignorado: %r", value)
        return None


def _to_year(value: Any) -> Optional[int]:
    """Ano a partir de 2021, "2021" ou datas como "2021/03/15"."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if not value:
        return None
    return _to_int(str(value).strip()[:4])


def _to_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, list):
        value = value[0] if value else None
        if value is None:
            return None
    text = str(value).strip()
    return text or None


def _to_authors(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [a.strip() for a in value.split(";") if a.strip()]
    return [str(a).strip() for a in value if a and str(a).strip()]


def record_from_dict(entry: dict, default_source: str = "") -> RawRecord:
    """Converte um objeto JSON de um cliente de busca em RawRecord."""
    source_id = entry.get("source_id", entry.get("id", ""))
    citation_count = entry.get("citation_count", entry.get("citationCount"))

    return RawRecord(
        source=_to_str(entry.get("source")) or default_source,
        source_id="" if source_id is None else str(source_id),
        doi=_to_str(entry.get("doi")),
        pmid=_to_str(entry.get("pmid")),
        title=_to_str(entry.get("title")) or "",
        abstract=_to_str(entry.get("abstract")),
        authors=_to_authors(entry.get("authors")),
        year=_to_year(entry.get("year")),
        journal=_to_str(entry.get("journal")),
        citation_count=_to_int(citation_count),
    )


def _read_text(path: Path) -> str:
    for encoding in ENCODINGS:
        try:
            with open(path, "r", encoding=encoding) as f:
                return f.read()
        except (UnicodeDecodeError, UnicodeError):
            continue
    raise ValueError(f"Não foi possível ler {path} com nenhum encoding suportado")


def _records_from_entries(entries: Iterable[Any], path: Path, default_source: str) -> List[RawRecord]:
    records = []
    for n, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            logger.warning("%s: item %d não é um objeto JSON; ignorado", path.name, n)
            continue
        records.append(record_from_dict(entry, default_source))
    return records


def _import_json(path: Path, default_source: str) -> List[RawRecord]:
    """Importa uma lista JSON de resultados."""
    data = json.loads(_read_text(path))
    if not isinstance(data, list):
        raise ValueError(f"{path.name}: esperado um array JSON de resultados")

    records = _records_from_entries(data, path, default_source)
    logger.info("JSON: %d registros importados de %s", len(records), path.name)
    return records


def _import_jsonl(path: Path, default_source: str) -> List[RawRecord]:
    """Importa um resultado JSON por linha, ignorando linhas em branco."""
    entries = []
    for lineno, line in enumerate(_read_text(path).splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise ValueError(f"{path.name}: JSON inválido na linha {lineno}: {e}") from e

    records = _records_from_entries(entries, path, default_source)
    logger.info("JSONL: %d registros importados de %s", len(records), path.name)
    return records


def _import_ris(path: Path, source: Optional[str]) -> List[RawRecord]:
    """Importa registros de arquivo RIS."""
    entries = rispy.loads(_read_text(path))

    records = []
    for entry in entries:
        doi = entry.get("doi")
        if not doi:
            for u in entry.get("urls", []):
                doi_match = _DOI_IN_TEXT_RE.search(u)
                if doi_match:
                    doi = doi_match.group(0)
                    break

        # DB pode listar várias fontes ("pubmed; semantic_scholar"); vale a primeira
        raw_database = entry.get("name_of_database") or ""
        databases = [db.strip().lower() for db in raw_database.split(";")]
        database = next((db for db in databases if db), "")
        accession = _to_str(entry.get("accession_number"))

        # C1 é onde o exportador do bibmerge grava o PMID
        custom1 = _to_str(entry.get("custom1"))
        pmid = custom1 if custom1 and custom1.isdigit() else None
        if (
            not pmid
            and accession
            and accession.isdigit()
            and any(name in db for db in databases for name in _PUBMED_DATABASES)
        ):
            pmid = accession

        rec = RawRecord(
            source=source or database or path.stem,
            source_id=accession or _to_str(entry.get("id")) or "",
            doi=_to_str(doi),
            pmid=pmid,
            title=entry.get("title", entry.get("primary_title", "")) or "",
            abstract=_to_str(entry.get("abstract")),
            authors=_to_authors(entry.get("authors", entry.get("first_authors", []))),
            year=_to_year(entry.get("year", entry.get("publication_year"))),
            journal=_to_str(entry.get("secondary_title", entry.get("journal_name"))),
        )
        records.append(rec)

    logger.info("RIS: %d registros importados de %s", len(records), path.name)
    return records


def import_from_file(file_path: str, source: Optional[str] = None) -> List[RawRecord]:
    """
    Importa registros brutos de um arquivo exportado.

    A fonte de cada registro é, por ordem: o campo do próprio registro (JSON),
    o argumento `source` (no RIS, antes do campo DB) e, por fim, o nome do
    arquivo sem extensão.
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Arquivo não encontrado: {file_path}")

    default_source = source or path.stem
    suffix = path.suffix.lower()
    if suffix == ".json":
        return _import_json(path, default_source)
    elif suffix == ".jsonl":
        return _import_jsonl(path, default_source)
    elif suffix == ".ris":
        return _import_ris(path, source)
    else:
        raise ValueError(
            f"Formato não suportado: {suffix}. Use .json, .jsonl ou .ris."
        )


def import_many(file_paths: Iterable[str], default_source: Optional[str] = None) -> List[RawRecord]:
    """Importa vários arquivos, concatenando os registros na ordem dada."""
    records: List[RawRecord] = []
    for file_path in file_paths:
        records.extend(import_from_file(file_path, default_source))
    return records
