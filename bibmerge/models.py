"""Modelos de dados para registros brutos e registros unificados."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# Etiquetas das fontes de busca conhecidas (o conjunto é aberto)
KNOWN_SOURCES = ("pubmed", "semantic_scholar", "cochrane")


@dataclass
class RawRecord:
    """Um resultado de busca, tal como devolvido por uma única fonte."""

    # Identidade
    source: str = ""               # "pubmed", "semantic_scholar", "cochrane"
    source_id: str = ""            # identificador local da fonte
    doi: Optional[str] = None
    pmid: Optional[str] = None

    # Dados bibliográficos
    title: str = ""
    abstract: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    year: Optional[int] = None
    journal: Optional[str] = None
    citation_count: Optional[int] = None


@dataclass(frozen=True)
class UnifiedRecord:
    """Um artigo real, possivelmente sustentado por vários RawRecord.

    Construído uma única vez pelo merger e imutável depois disso.
    """

    primary_id: str
    title: str
    abstract: str = ""
    doi: Optional[str] = None
    pmid: Optional[str] = None
    authors: Tuple[str, ...] = ()
    year: Optional[int] = None
    journal: Optional[str] = None
    citation_count: Optional[int] = None

    # Rastreamento da deduplicação
    sources: Tuple[str, ...] = ()
    member_ids: Tuple[str, ...] = ()
    match_method: str = "single"   # "doi", "pmid", "title" ou "single"

    @property
    def source_count(self) -> int:
        """Número de registros brutos que contribuíram para este registro."""
        return len(self.sources)

    @property
    def is_merged(self) -> bool:
        return len(self.sources) > 1
