"""
bibmerge — Deduplicação e fusão de resultados de busca bibliográfica

Lê os resultados exportados por cada fonte de busca (PubMed, Semantic Scholar,
Cochrane, ...), agrupa os registros que descrevem o mesmo artigo por DOI, PMID
e similaridade de título, funde seus metadados e exporta a lista de artigos
únicos em CSV, RIS e/ou Excel.

Uso:
    python main.py pubmed.json s2.json cochrane.ris   # Arquivos de entrada
    python main.py                                    # Arquivos de config.yaml
    python main.py --threshold 0.9 dados.jsonl        # Limiar de similaridade
    python main.py --clustering union_find dados.json # Agrupamento transitivo
    python main.py --source pubmed export.ris         # Força a etiqueta da fonte
    python main.py --skip-dedup dados.json            # Exporta sem deduplicação
    python main.py --verbose dados.json               # Logs detalhados no console
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from bibmerge.config import load_config, validate_config
from bibmerge.dedup.deduplicator import DedupStats, deduplicate_with_stats
from bibmerge.dedup.matchers import CLUSTERING_STRATEGIES
from bibmerge.dedup.merger import merge_group
from bibmerge.exporters.csv_exporter import export_csv, export_excel
from bibmerge.exporters.ris_exporter import export_ris
from bibmerge.importers.file_importer import import_from_file
from bibmerge.logging_dedup import (
    DedupLog,
    InputStats,
    print_summary,
    save_dedup_log,
    setup_logging,
)

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Deduplica e funde resultados de busca bibliográfica "
        "vindos de várias fontes.",
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        metavar="ARQUIVO",
        help="Arquivos .json, .jsonl ou .ris (padrão: input.files do config.yaml)",
    )
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Caminho para o arquivo de configuração YAML (padrão: config.yaml)",
    )
    parser.add_argument(
        "--source",
        default=None,
        help="Etiqueta de fonte para registros que não a informam",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Diretório de saída (sobrescreve config.yaml)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Similaridade mínima de título, entre 0 e 1 (sobrescreve config.yaml)",
    )
    parser.add_argument(
        "--clustering",
        choices=CLUSTERING_STRATEGIES,
        default=None,
        help="Estratégia de agrupamento por título (sobrescreve config.yaml)",
    )
    parser.add_argument(
        "--skip-dedup",
        action="store_true",
        help="Exporta cada registro bruto como único, sem deduplicação",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Ativa logs detalhados (DEBUG) no console",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    # Carregar configuração
    try:
        config = load_config(args.config)
        if args.threshold is not None:
            config.dedup.similarity_threshold = args.threshold
        if args.clustering:
            config.dedup.clustering = args.clustering
        validate_config(config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Erro de configuração: {e}", file=sys.stderr)
        return 1

    input_files = args.inputs or config.input.files
    if not input_files:
        print("Nenhum arquivo de entrada informado (argumentos ou input.files).", file=sys.stderr)
        return 1

    # Preparar diretório de saída
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = Path(args.output_dir or config.output.directory)
    if config.output.timestamp:
        output_dir = output_dir / timestamp
    output_dir.mkdir(parents=True, exist_ok=True)

    # Configurar logging
    log_file = str(output_dir / f"dedup_log_{timestamp}.log")
    setup_logging(log_file, verbose=args.verbose)

    logger.info("Iniciando deduplicação bibliográfica")
    logger.info("Diretório de saída: %s", output_dir)

    dedup_log = DedupLog(
        execution_start=datetime.now().isoformat(),
        similarity_threshold=config.dedup.similarity_threshold,
        clustering=config.dedup.clustering,
    )

    # === Importação ===
    source = args.source or config.input.default_source or None
    all_records = []
    for file_path in input_files:
        try:
            records = import_from_file(file_path, source)
        except (FileNotFoundError, ValueError) as e:
            logger.error("Falha ao importar %s: %s", file_path, e)
            print(f"Erro de entrada: falha ao importar {file_path}: {e}", file=sys.stderr)
            return 1
        all_records.extend(records)
        dedup_log.inputs.append(InputStats(
            file_path=str(file_path),
            source=source or "",
            records_imported=len(records),
        ))

    logger.info("Total de registros importados: %d", len(all_records))

    # === Deduplicação ===
    if args.skip_dedup:
        unified = [merge_group([rec]) for rec in all_records]
        stats = DedupStats(total_records=len(all_records), singletons=len(unified),
                           unified_records=len(unified))
        logger.info("Deduplicação ignorada (--skip-dedup)")
    else:
        unified, stats = deduplicate_with_stats(
            all_records,
            similarity_threshold=config.dedup.similarity_threshold,
            clustering=config.dedup.clustering,
            strip_doi_prefixes=config.dedup.strip_doi_prefixes,
            transliterate=config.dedup.transliterate,
        )
    dedup_log.apply_stats(stats)

    # === Exportação ===
    if "csv" in config.output.formats:
        csv_path = str(output_dir / f"results_{timestamp}.csv")
        dedup_log.outputs.append(export_csv(unified, csv_path))

    if "ris" in config.output.formats:
        ris_path = str(output_dir / f"results_{timestamp}.ris")
        dedup_log.outputs.append(export_ris(unified, ris_path))

    if "xlsx" in config.output.formats:
        xlsx_path = str(output_dir / f"results_{timestamp}.xlsx")
        dedup_log.outputs.append(export_excel(unified, xlsx_path))

    # === Log da deduplicação ===
    dedup_log.execution_end = datetime.now().isoformat()
    save_dedup_log(dedup_log, str(output_dir / f"dedup_log_{timestamp}.json"))

    # === Resumo ===
    print_summary(dedup_log)

    logger.info("Deduplicação concluída com sucesso.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
