"""Fixtures compartilhadas pelos testes do bibmerge."""

import json
import logging
from pathlib import Path
from typing import Callable, List

import pytest

from bibmerge.models import RawRecord


def make_record(source: str = "pubmed", source_id: str = "R1", **fields) -> RawRecord:
    """Cria um RawRecord com valores padrão razoáveis para testes."""
    fields.setdefault("title", "Untitled study")
    return RawRecord(source=source, source_id=source_id, **fields)


@pytest.fixture
def record_factory() -> Callable[..., RawRecord]:
    return make_record


@pytest.fixture
def mixed_records() -> List[RawRecord]:
    """Resultados de três fontes com duplicatas por DOI, PMID e título."""
    return [
        make_record("pubmed", "PM1", pmid="111", doi="10.1000/ABC",
                    title="Statins for primary prevention", year=2019, citation_count=5),
        make_record("semantic_scholar", "SS1", doi="10.1000/abc",
                    title="Statins for primary prevention of cardiovascular disease",
                    citation_count=42, authors=["Smith J", "Doe A"]),
        make_record("pubmed", "PM2", pmid="222", title="Exercise and depression"),
        make_record("cochrane", "CO1", pmid=" 222 ", title="Exercise for depression",
                    journal="Cochrane Database Syst Rev"),
        make_record("semantic_scholar", "SS2", title="Diabetes Management"),
        make_record("cochrane", "CO2", title="Diabetes Managment"),
        make_record("cochrane", "CO3", title="Heart Failure"),
    ]


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, object], Path]:
    """Grava um objeto como JSON em tmp_path e devolve o caminho."""
    def _write(name: str, data) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def restore_root_logging():
    """setup_logging() substitui os handlers do root logger; restaura ao final."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
