"""Normalização de títulos e identificadores para comparação."""

import re
from typing import Optional

from unidecode import unidecode

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
# Sem transliteração: mantém letras acentuadas, remove pontuação e "_"
_NON_WORD_RE = re.compile(r"[^\w\s]|_")
_WHITESPACE_RE = re.compile(r"\s+")

# Prefixos de resolvedor que não fazem parte do DOI
DOI_PREFIXES = (
    "https://doi.org/",
    "http://doi.org/",
    "https://dx.doi.org/",
    "http://dx.doi.org/",
    "doi.org/",
    "doi:",
)


def normalize_title(title: Optional[str], transliterate: bool = True) -> str:
    """
    Normaliza título: translitera, lowercase, remove pontuação e colapsa espaços.

    Com transliterate=False o texto não passa pelo unidecode: "Café" vira
    "café" em vez de "cafe".
    """
    if not title:
        return ""
    if transliterate:
        text = unidecode(title).lower().strip()
        text = _NON_ALNUM_RE.sub("", text)
    else:
        text = title.lower().strip()
        text = _NON_WORD_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def strip_doi_prefix(doi: str) -> str:
    """Remove um prefixo de resolvedor (sem diferenciar maiúsculas), preservando o DOI."""
    doi = doi.strip()
    lowered = doi.lower()
    for prefix in DOI_PREFIXES:
        if lowered.startswith(prefix):
            return doi[len(prefix):].strip()
    return doi


def normalize_doi(doi: Optional[str], strip_prefixes: bool = True) -> str:
    """Normaliza DOI: lowercase, trim e, opcionalmente, remove prefixos de URL."""
    if not doi:
        return ""
    if strip_prefixes:
        doi = strip_doi_prefix(doi)
    return doi.strip().lower()


def normalize_pmid(pmid: Optional[str]) -> str:
    """PMIDs são numéricos: basta remover espaços nas pontas."""
    if not pmid:
        return ""
    return str(pmid).strip()
