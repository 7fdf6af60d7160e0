"""
Parts Catalog - reference workbook for part-number lookup

The catalog is a workbook with one or more sheets. Rows have no fixed
schema; only a handful of columns take part in matching, and any of them
may be missing. A loaded Catalog is read-only: reloading means building a
new Catalog and swapping the reference.
"""

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

logger = logging.getLogger(__name__)

CatalogRow = Mapping[str, Any]

EXCEL_SUFFIXES = {'.xlsx', '.xlsm', '.xls'}


@dataclass(frozen=True)
class CatalogColumns:
    """Column headers used when building a row's comparison string."""
    name: str = '자재명'
    material: str = '재질'
    spec: str = '규격'
    part_number: str = '품번'

    @property
    def comparison(self) -> Tuple[str, str, str, str]:
        return (self.name, self.material, self.spec, self.part_number)


DEFAULT_COLUMNS = CatalogColumns()


def row_value(row: CatalogRow, column: str) -> str:
    """
    Read a cell as text.

    Missing keys, None and NaN cells read as "". Whole floats lose their
    trailing ".0" so 12.0 reads as "12".
    """
    value = row.get(column)
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def part_number_of(row: CatalogRow, columns: CatalogColumns = DEFAULT_COLUMNS) -> str:
    return row_value(row, columns.part_number)


def row_comparison_text(row: CatalogRow, columns: CatalogColumns = DEFAULT_COLUMNS) -> str:
    """Name, material, spec and part number joined for similarity scoring."""
    return ' '.join(row_value(row, column) for column in columns.comparison)


class Catalog:
    """
    Immutable mapping of sheet name -> ordered rows.

    Sheets iterate in workbook order and rows in sheet order; matching
    tie-breaks depend on that order.
    """

    def __init__(self, sheets: Optional[Mapping[str, Sequence[Mapping[str, Any]]]] = None,
                 source: Optional[str] = None):
        frozen: Dict[str, Tuple[CatalogRow, ...]] = {}
        for sheet_name, rows in (sheets or {}).items():
            frozen[str(sheet_name)] = tuple(MappingProxyType(dict(row)) for row in rows)
        self._sheets = MappingProxyType(frozen)
        self.source = source

    @property
    def sheets(self) -> Mapping[str, Tuple[CatalogRow, ...]]:
        return self._sheets

    @property
    def sheet_names(self) -> List[str]:
        return list(self._sheets)

    @property
    def row_count(self) -> int:
        return sum(len(rows) for rows in self._sheets.values())

    def items(self):
        return self._sheets.items()

    def is_empty(self) -> bool:
        return self.row_count == 0

    def __getitem__(self, sheet_name: str) -> Tuple[CatalogRow, ...]:
        return self._sheets[sheet_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sheets)

    def __len__(self):
        return len(self._sheets)

    def __repr__(self):
        return f"Catalog(sheets={len(self)}, rows={self.row_count}, source={self.source!r})"

    @classmethod
    def from_excel(cls, path: Path) -> 'Catalog':
        """Load every sheet of a workbook, first row as headers, cells as text."""
        frames = pd.read_excel(path, sheet_name=None, dtype=str)
        sheets = {name: _frame_rows(frame) for name, frame in frames.items()}
        return cls(sheets, source=str(path))

    @classmethod
    def from_csv(cls, path: Path) -> 'Catalog':
        """Load a CSV as a single sheet named after the file."""
        frame = pd.read_csv(path, encoding='utf-8', dtype=str)
        return cls({path.stem: _frame_rows(frame)}, source=str(path))

    @classmethod
    def from_json(cls, path: Path) -> 'Catalog':
        """Load {"sheet name": [row, ...], ...}."""
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"Catalog JSON must be an object of sheet -> rows: {path}")
        return cls(raw, source=str(path))


def _frame_rows(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    # Blank cells come back as NaN; row_value() reads them as ""
    frame = frame.dropna(how='all')
    frame.columns = [str(c).strip() for c in frame.columns]
    return frame.to_dict(orient='records')


def load_catalog(path: Union[str, Path]) -> Catalog:
    """
    Load a catalog file by extension (.xlsx/.xls, .csv or .json).

    Raises:
        FileNotFoundError: path does not exist
        ValueError: unsupported extension or malformed JSON layout
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        catalog = Catalog.from_excel(path)
    elif suffix == '.csv':
        catalog = Catalog.from_csv(path)
    elif suffix == '.json':
        catalog = Catalog.from_json(path)
    else:
        raise ValueError(f"Unsupported catalog format: {path.suffix}")

    logger.info(f"Loaded catalog {path.name}: {len(catalog)} sheets, {catalog.row_count} rows")
    return catalog


def load_catalog_or_empty(path: Optional[Union[str, Path]]) -> Catalog:
    """
    Startup loader: fall back to an empty catalog when the file is unusable.

    Every item reconciled against an empty catalog ends up unmatched.
    """
    if not path:
        logger.error("No catalog path configured, using empty catalog")
        return Catalog()
    try:
        return load_catalog(path)
    except Exception as e:
        logger.error(f"Catalog load failed ({path}): {e}; using empty catalog")
        return Catalog(source=str(path))
