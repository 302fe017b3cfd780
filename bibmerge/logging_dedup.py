"""Logging estruturado e contadores da deduplicação para rastreabilidade da revisão."""

import json
import logging
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List

from bibmerge.dedup.deduplicator import DedupStats


@dataclass
class InputStats:
    """Registros lidos de um arquivo de entrada."""
    file_path: str = ""
    source: str = ""
    records_imported: int = 0


@dataclass
class DedupLog:
    """Registro completo de uma execução: entradas, fases e saídas."""
    execution_start: str = ""
    execution_end: str = ""
    inputs: List[InputStats] = field(default_factory=list)
    similarity_threshold: float = 0.0
    clustering: str = ""
    total_records: int = 0
    duplicates_removed_doi: int = 0
    duplicates_removed_pmid: int = 0
    duplicates_removed_title: int = 0
    total_duplicates_removed: int = 0
    records_after_dedup: int = 0
    merged_records: int = 0
    outputs: List[str] = field(default_factory=list)

    def apply_stats(self, stats: DedupStats) -> None:
        """Copia as contagens por fase de uma execução da deduplicação."""
        self.total_records = stats.total_records
        self.duplicates_removed_doi = stats.doi_duplicates
        self.duplicates_removed_pmid = stats.pmid_duplicates
        self.duplicates_removed_title = stats.title_duplicates
        self.total_duplicates_removed = stats.duplicates_removed
        self.records_after_dedup = stats.unified_records
        self.merged_records = stats.doi_groups + stats.pmid_groups + stats.title_groups


def setup_logging(log_file: str, verbose: bool = False) -> None:
    """Configura logging com handler de arquivo e console."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Limpar handlers existentes
    root_logger.handlers.clear()

    # Handler de arquivo (detalhado)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_fmt)
    root_logger.addHandler(file_handler)

    # Handler de console
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S")
    console_handler.setFormatter(console_fmt)
    root_logger.addHandler(console_handler)


def save_dedup_log(dedup_log: DedupLog, output_path: str) -> str:
    """Salva o log da deduplicação como JSON."""
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(asdict(dedup_log), f, ensure_ascii=False, indent=2)
    logging.getLogger(__name__).info("Log de deduplicação salvo: %s", output_path)
    return output_path


def print_summary(dedup_log: DedupLog) -> None:
    """Imprime resumo formatado no console."""
    print("\n" + "=" * 60)
    print("  RESUMO DA DEDUPLICAÇÃO")
    print("=" * 60)

    for item in dedup_log.inputs:
        print(f"\n  {item.file_path} ({item.source or 'fonte por registro'}):")
        print(f"    Importados: {item.records_imported}")

    print(f"\n  {'─' * 40}")
    print(f"  Total de registros:      {dedup_log.total_records}")
    print(f"  Duplicatas (DOI):        {dedup_log.duplicates_removed_doi}")
    print(f"  Duplicatas (PMID):       {dedup_log.duplicates_removed_pmid}")
    print(f"  Duplicatas (título):     {dedup_log.duplicates_removed_title}")
    print(f"  Total duplicatas:        {dedup_log.total_duplicates_removed}")
    print(f"  Registros únicos:        {dedup_log.records_after_dedup}")
    print(f"  Registros fundidos:      {dedup_log.merged_records}")

    if dedup_log.outputs:
        print("\n  Arquivos gerados:")
        for path in dedup_log.outputs:
            print(f"    {path}")

    print("=" * 60 + "\n")
