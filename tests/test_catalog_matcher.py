"""
Tests for fuzzy catalog lookup

Tests scoring, threshold handling, tie-breaking and parallel sheet scans.
"""

import pytest
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from partno.catalog import Catalog, CatalogColumns
from partno.catalog_matcher import (
    find_best_match, find_best_name_match, scan_catalog,
    item_key, row_key, DEFAULT_THRESHOLD,
)
from partno.line_parser import ParsedItem
from partno.similarity import sequence_ratio


@pytest.fixture
def catalog():
    return Catalog({
        "볼트": [
            {"자재명": "HEX BOLT", "재질": "STEEL", "규격": "M10x30", "품번": "HB-1030"},
            {"자재명": "HEX BOLT", "재질": "SUS304", "규격": "M8x20", "품번": "HB-0820"},
        ],
        "와셔": [
            {"자재명": "SW (SPRING WASHER)", "재질": "SUS304", "규격": "M10", "품번": "SW-10"},
            {"자재명": "PW (PLAIN WASHER)", "재질": "SUS304", "규격": "M10", "품번": "PW-10"},
        ],
        "너트": [
            {"자재명": "NUT", "재질": "SUS304", "규격": "M8", "품번": "NT-08"},
        ],
    })


def bolt():
    return ParsedItem(name="HEX BOLT", material="STEEL", quantity="10", spec="M10x30")


class TestKeys:
    """Tests for comparison keys."""

    def test_item_key(self):
        assert item_key(bolt()) == "HEXBOLTSTEELM10X30"

    def test_row_key_includes_part_number(self, catalog):
        assert row_key(catalog["볼트"][0]) == "HEXBOLTSTEELM10X30HB1030"


class TestFindBestMatch:
    """Tests for single-item lookup."""

    def test_best_row(self, catalog):
        match = find_best_match(bolt(), catalog)
        assert match is not None
        assert match.sheet_name == "볼트"
        assert match.row["품번"] == "HB-1030"
        assert match.score == pytest.approx(0.85)

    def test_identical_key_scores_one(self):
        catalog = Catalog({"S": [{"자재명": "HEX BOLT", "재질": "STEEL", "규격": "M10x30"}]})
        match = find_best_match(bolt(), catalog)
        assert match.score == 1.0

    def test_washer(self, catalog):
        item = ParsedItem(name="SW (SPRING WASHER)", material="SUS304", quantity="20", spec="M10")
        match = find_best_match(item, catalog)
        assert match.row["품번"] == "SW-10"

    def test_below_threshold(self, catalog):
        item = ParsedItem(name="FLANGE", material="FC200", quantity="1", spec="150A")
        assert find_best_match(item, catalog) is None

    def test_threshold_is_inclusive(self, catalog):
        assert find_best_match(bolt(), catalog, threshold=0.85) is not None
        assert find_best_match(bolt(), catalog, threshold=0.86) is None

    def test_default_threshold(self):
        assert DEFAULT_THRESHOLD == 0.40

    def test_empty_catalog(self):
        assert find_best_match(bolt(), Catalog()) is None

    def test_empty_key_never_matches(self, catalog):
        item = ParsedItem(name="--", material="/", quantity="1", spec=".")
        assert find_best_match(item, catalog, threshold=0.0) is None

    def test_zero_threshold_needs_positive_score(self):
        catalog = Catalog({"S": [{"자재명": "QQQQ", "품번": "Q-1"}]})
        assert find_best_match(bolt(), catalog, threshold=0.0) is None

    def test_sequence_scorer(self, catalog):
        match = find_best_match(bolt(), catalog, scorer=sequence_ratio)
        assert match.row["품번"] == "HB-1030"

    def test_custom_columns(self):
        columns = CatalogColumns(name="name", material="mat", spec="size", part_number="pn")
        catalog = Catalog({"S": [{"name": "HEX BOLT", "mat": "STEEL", "size": "M10x30", "pn": "X"}]})
        match = find_best_match(bolt(), catalog, columns=columns)
        assert match.row["pn"] == "X"

    def test_missing_columns_read_as_empty(self):
        catalog = Catalog({"S": [{"자재명": "HEX BOLT", "other": "ignored"}]})
        match = find_best_match(bolt(), catalog)
        assert match is not None
        assert "품번" not in match.row


class TestTieBreaking:
    """The first row reaching the best score keeps it."""

    def test_first_row_in_sheet(self):
        row = {"자재명": "HEX BOLT", "재질": "STEEL", "규격": "M10x30"}
        catalog = Catalog({"S": [row, dict(row)]})
        match = find_best_match(bolt(), catalog)
        assert match.row is catalog["S"][0]

    def test_first_sheet(self):
        row = {"자재명": "HEX BOLT", "재질": "STEEL", "규격": "M10x30"}
        catalog = Catalog({"A": [row], "B": [dict(row)]})
        assert find_best_match(bolt(), catalog).sheet_name == "A"

    def test_first_sheet_with_workers(self):
        row = {"자재명": "HEX BOLT", "재질": "STEEL", "규격": "M10x30"}
        catalog = Catalog({"A": [row], "B": [dict(row)], "C": [dict(row)]})
        assert find_best_match(bolt(), catalog, workers=3).sheet_name == "A"


class TestParallelScan:
    """Parallel sheet scans return the same winner as the sequential scan."""

    @pytest.mark.parametrize("item", [
        bolt(),
        ParsedItem(name="NUT", material="SUS304", quantity="4", spec="M8"),
        ParsedItem(name="PW (PLAIN WASHER)", material="SUS304", quantity="4", spec="M10"),
        ParsedItem(name="HEX BOLT", material="SUS", quantity="4", spec="M8"),
    ])
    def test_workers_agree(self, catalog, item):
        sequential = scan_catalog(item_key(item), catalog, workers=1)
        parallel = scan_catalog(item_key(item), catalog, workers=4)
        assert parallel.sheet_name == sequential.sheet_name
        assert parallel.row is sequential.row
        assert parallel.score == sequential.score

    def test_deterministic(self, catalog):
        scores = {find_best_match(bolt(), catalog, workers=2).score for _ in range(5)}
        assert len(scores) == 1

    def test_shared_executor(self, catalog):
        with ThreadPoolExecutor(max_workers=2) as pool:
            shared = [find_best_match(bolt(), catalog, executor=pool) for _ in range(3)]
        sequential = find_best_match(bolt(), catalog)
        assert all(m.row is sequential.row for m in shared)
        assert all(m.score == sequential.score for m in shared)


class TestNameMatch:
    """Tests for description-only lookup against the name column."""

    def test_case_insensitive(self, catalog):
        match = find_best_name_match("hex bolt", catalog)
        assert match.score == 1.0
        # First of the two HEX BOLT rows
        assert match.row["품번"] == "HB-1030"

    def test_no_match(self, catalog):
        assert find_best_name_match("zzzz", catalog) is None

    def test_empty_description(self, catalog):
        assert find_best_name_match("", catalog, threshold=0.0) is None

    def test_rows_without_name_skipped(self):
        catalog = Catalog({"S": [{"재질": "hex bolt"}, {"자재명": "HEX BOLT", "품번": "HB"}]})
        assert find_best_name_match("hex bolt", catalog).row["품번"] == "HB"
