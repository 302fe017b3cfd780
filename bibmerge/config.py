"""Carregador de configuração YAML com resolução de variáveis de ambiente."""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import yaml

from bibmerge.dedup.matchers import CLUSTERING_STRATEGIES, DEFAULT_SIMILARITY_THRESHOLD

SUPPORTED_FORMATS = ("csv", "ris", "xlsx")


@dataclass
class InputConfig:
    files: List[str] = field(default_factory=list)
    default_source: str = ""


@dataclass
class DedupConfig:
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    clustering: str = "greedy"
    strip_doi_prefixes: bool = True
    transliterate: bool = True


@dataclass
class OutputConfig:
    directory: str = "output"
    formats: List[str] = field(default_factory=lambda: ["csv", "ris"])
    timestamp: bool = True


@dataclass
class Config:
    input: InputConfig = field(default_factory=InputConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)\}")


def _resolve_env_vars(value: str) -> str:
    """Substitui referências ${VAR_NAME} pelo valor da variável de ambiente."""
    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, "")
    return ENV_VAR_PATTERN.sub(replacer, value)


def _resolve_dict(d: dict) -> dict:
    """Resolve variáveis de ambiente recursivamente em um dicionário."""
    resolved = {}
    for k, v in d.items():
        if isinstance(v, str):
            resolved[k] = _resolve_env_vars(v)
        elif isinstance(v, dict):
            resolved[k] = _resolve_dict(v)
        elif isinstance(v, list):
            resolved[k] = [
                _resolve_env_vars(item) if isinstance(item, str) else item
                for item in v
            ]
        else:
            resolved[k] = v
    return resolved


def validate_config(config: Config) -> None:
    """Valida os valores carregados; levanta ValueError na primeira inconsistência."""
    threshold = config.dedup.similarity_threshold
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ValueError(f"dedup.similarity_threshold deve ser numérico: {threshold!r}")
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"dedup.similarity_threshold fora de [0, 1]: {threshold}")

    if config.dedup.clustering not in CLUSTERING_STRATEGIES:
        raise ValueError(
            f"dedup.clustering inválido: {config.dedup.clustering}. "
            f"Opções: {', '.join(CLUSTERING_STRATEGIES)}"
        )

    for name in ("strip_doi_prefixes", "transliterate"):
        value = getattr(config.dedup, name)
        if not isinstance(value, bool):
            raise ValueError(f"dedup.{name} deve ser true ou false: {value!r}")

    if not isinstance(config.output.timestamp, bool):
        raise ValueError(f"output.timestamp deve ser true ou false: {config.output.timestamp!r}")

    if not isinstance(config.output.formats, list):
        raise ValueError(f"output.formats deve ser uma lista: {config.output.formats!r}")

    unknown = [f for f in config.output.formats if f not in SUPPORTED_FORMATS]
    if unknown:
        raise ValueError(
            f"Formato(s) de saída não suportado(s): {', '.join(unknown)}. "
            f"Opções: {', '.join(SUPPORTED_FORMATS)}"
        )


def load_config(config_path: str = "config.yaml") -> Config:
    """Carrega e valida a configuração a partir de um arquivo YAML."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Arquivo de configuração não encontrado: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    raw = _resolve_dict(raw)

    config = Config()

    # Input
    in_raw = raw.get("input", {}) or {}
    config.input = InputConfig(
        files=in_raw.get("files", []) or [],
        default_source=in_raw.get("default_source", "") or "",
    )

    # Dedup
    dedup_raw = raw.get("dedup", {}) or {}
    config.dedup = DedupConfig(
        similarity_threshold=dedup_raw.get("similarity_threshold", DEFAULT_SIMILARITY_THRESHOLD),
        clustering=dedup_raw.get("clustering", "greedy"),
        strip_doi_prefixes=dedup_raw.get("strip_doi_prefixes", True),
        transliterate=dedup_raw.get("transliterate", True),
    )

    # Output
    out_raw = raw.get("output", {}) or {}
    config.output = OutputConfig(
        directory=out_raw.get("directory", "output") or "output",
        formats=out_raw.get("formats", ["csv", "ris"]),
        timestamp=out_raw.get("timestamp", True),
    )

    validate_config(config)
    return config
