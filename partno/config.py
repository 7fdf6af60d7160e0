"""Configuration loader for PartNoDoctor."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .catalog import CatalogColumns, DEFAULT_COLUMNS
from .catalog_matcher import DEFAULT_THRESHOLD
from .line_parser import DEFAULT_HEADER_KEYWORDS, DEFAULT_NAME_SUBSTITUTIONS, DEFAULT_NOISE_MARKERS
from .similarity import Scorer, get_scorer

logger = logging.getLogger(__name__)

ENV_THRESHOLD = 'PARTNO_THRESHOLD'
ENV_CATALOG = 'PARTNO_CATALOG'
ENV_SCORER = 'PARTNO_SCORER'
ENV_WORKERS = 'PARTNO_WORKERS'


@dataclass
class MatchingConfig:
    # 0.45 is the other value seen in the field; both are on the 0-1 scale
    threshold: float = DEFAULT_THRESHOLD
    scorer: str = 'dice'
    workers: int = 1

    def __post_init__(self):
        self.threshold = float(self.threshold)
        self.workers = int(self.workers)
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {self.threshold}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        get_scorer(self.scorer)

    @property
    def scorer_fn(self) -> Scorer:
        return get_scorer(self.scorer)


@dataclass
class ParsingConfig:
    substitutions: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_NAME_SUBSTITUTIONS))
    header_keywords: List[List[str]] = field(
        default_factory=lambda: [list(group) for group in DEFAULT_HEADER_KEYWORDS]
    )
    noise_markers: List[str] = field(default_factory=lambda: list(DEFAULT_NOISE_MARKERS))


@dataclass
class CatalogConfig:
    path: Optional[str] = None
    name_column: str = DEFAULT_COLUMNS.name
    material_column: str = DEFAULT_COLUMNS.material
    spec_column: str = DEFAULT_COLUMNS.spec
    part_number_column: str = DEFAULT_COLUMNS.part_number

    @property
    def columns(self) -> CatalogColumns:
        return CatalogColumns(
            name=self.name_column,
            material=self.material_column,
            spec=self.spec_column,
            part_number=self.part_number_column,
        )


@dataclass
class ReportConfig:
    output_format: str = 'json'  # json, csv or both


@dataclass
class PartNoConfig:
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


def default_search_paths() -> List[Path]:
    return [
        Path.cwd() / 'config' / 'partno_config.yaml',
        Path.home() / '.partno' / 'config.yaml',
    ]


def _from_dict(raw: Dict[str, Any]) -> PartNoConfig:
    return PartNoConfig(
        matching=MatchingConfig(**(raw.get('matching') or {})),
        parsing=ParsingConfig(**(raw.get('parsing') or {})),
        catalog=CatalogConfig(**(raw.get('catalog') or {})),
        report=ReportConfig(**(raw.get('report') or {})),
    )


def _apply_env(raw: Dict[str, Any]) -> Dict[str, Any]:
    overrides: Tuple[Tuple[str, str, str], ...] = (
        (ENV_THRESHOLD, 'matching', 'threshold'),
        (ENV_SCORER, 'matching', 'scorer'),
        (ENV_WORKERS, 'matching', 'workers'),
        (ENV_CATALOG, 'catalog', 'path'),
    )
    for env_name, section, key in overrides:
        value = os.environ.get(env_name)
        if value:
            raw.setdefault(section, {})
            raw[section] = dict(raw[section] or {}, **{key: value})
            logger.debug(f"{env_name} overrides {section}.{key}")
    return raw


def load_config(config_path: Optional[str] = None, use_env: bool = True) -> PartNoConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, looks in default locations
            and falls back to built-in defaults when none exists.
        use_env: Apply PARTNO_* environment overrides on top of the file

    Returns:
        PartNoConfig object

    Raises:
        FileNotFoundError: an explicit config_path does not exist
        ValueError: a value is out of range or a scorer name is unknown
    """
    raw: Dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        path = next((p for p in default_search_paths() if p.exists()), None)

    if path is not None:
        with open(path, encoding='utf-8') as f:
            raw = yaml.safe_load(f) or {}
        logger.debug(f"Loaded config from {path}")

    if use_env:
        raw = _apply_env(raw)

    return _from_dict(raw)
