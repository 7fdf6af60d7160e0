"""
Tests for JSON/CSV report writers
"""

import csv
import json
import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from partno.reconcile import MatchedItem, UnmatchedItem, ReconcileResult
from partno.report import build_report, write_reports, write_csv_report, CSV_FIELDNAMES


@pytest.fixture
def result():
    return ReconcileResult(
        matched=[
            MatchedItem(seq=1, pn="HB-1030", name="HEX BOLT", spec="M10x30",
                        quantity="10", score=0.85, sheet="볼트"),
            MatchedItem(seq=3, pn="NT-08", name="NUT", spec="M8",
                        quantity="4", score=0.8333, sheet="너트"),
        ],
        unmatched=[
            UnmatchedItem(seq=2, name="BOLT M10", spec="-", quantity="-",
                          reason="parse error (insufficient tokens)"),
        ],
    )


class TestBuildReport:
    """Tests for the response-shaped report dict."""

    def test_sections(self, result):
        report = build_report(result, source="po_0412.png")
        assert len(report["matchedItems"]) == 2
        assert len(report["unmatchedItems"]) == 1
        assert report["summary"]["total"] == 3
        assert report["summary"]["matched"] == 2
        assert report["summary"]["source"] == "po_0412.png"
        assert "generated_at" in report["summary"]

    def test_no_source(self):
        assert build_report(ReconcileResult())["summary"]["source"] == ""


class TestWriteReports:
    """Tests for writing report files."""

    def test_json(self, result, tmp_path):
        written = write_reports(result, tmp_path, stem="po_0412")
        assert set(written) == {"json"}
        path = Path(written["json"])
        assert path.name == "po_0412_partno.json"

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["matchedItems"][0]["pn"] == "HB-1030"
        assert data["matchedItems"][0]["sheet"] == "볼트"
        assert data["unmatchedItems"][0]["reason"] == "parse error (insufficient tokens)"

    def test_json_keeps_hangul(self, result, tmp_path):
        path = Path(write_reports(result, tmp_path, stem="po")["json"])
        assert "볼트" in path.read_text(encoding="utf-8")

    def test_both(self, result, tmp_path):
        written = write_reports(result, tmp_path / "out", stem="po", output_format="both")
        assert set(written) == {"json", "csv"}
        assert all(Path(p).exists() for p in written.values())

    def test_unknown_format(self, result, tmp_path):
        with pytest.raises(ValueError):
            write_reports(result, tmp_path, stem="po", output_format="xml")

    def test_csv_rows_in_sequence_order(self, result, tmp_path):
        path = write_csv_report(result, tmp_path / "po.csv")
        with open(path, newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            assert reader.fieldnames == CSV_FIELDNAMES
            rows = list(reader)

        assert [r["Seq"] for r in rows] == ["1", "2", "3"]
        assert [r["Matched"] for r in rows] == ["Yes", "No", "Yes"]
        assert rows[0]["Match Rate"] == "85%"
        assert rows[1]["Reason"] == "parse error (insufficient tokens)"
        assert rows[1]["Part No"] == ""
