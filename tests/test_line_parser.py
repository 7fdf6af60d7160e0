"""
Tests for the OCR line parser and text normalization

Covers noise filtering, tokenizing, compound-name fan-out, name
substitution and quantity extraction.
"""

import logging
import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from partno.normalize import normalize_str, extract_digits, split_name_parts
from partno.line_parser import (
    ParsedItem, parse_ocr_text, parse_line, tokenize_line,
    is_header_line, is_noise_line, substitute_name, split_name,
    REASON_INSUFFICIENT_TOKENS,
)


class TestNormalize:
    """Tests for comparison-key normalization."""

    def test_strips_spaces_and_punctuation(self):
        assert normalize_str("hex bolt, M10 x 30") == "HEXBOLTM10X30"

    def test_keeps_hangul(self):
        assert normalize_str("육각 볼트 (SUS)") == "육각볼트SUS"

    def test_empty(self):
        assert normalize_str("") == ""
        assert normalize_str(None) == ""

    def test_symbols_only(self):
        assert normalize_str("-- / ,") == ""

    @pytest.mark.parametrize("token,expected", [
        ("10", "10"),
        ("5pcs", "5"),
        ("1,000", "1000"),
        ("abc", "0"),
        ("", "0"),
    ])
    def test_extract_digits(self, token, expected):
        assert extract_digits(token) == expected

    def test_split_name_parts_drops_empty(self):
        assert split_name_parts("SW,,PW/") == ["SW", "PW"]
        assert split_name_parts(",/") == []


class TestNoiseLines:
    """Tests for header and remark row detection."""

    def test_korean_header(self):
        assert is_header_line("명칭 재질 수량 규격")

    def test_english_header(self):
        assert is_header_line("NAME MATERIAL QTY SPEC")

    def test_mixed_header(self):
        assert is_header_line("Description 재료 Quantity Size")

    def test_partial_header_is_not_header(self):
        assert not is_header_line("명칭 재질 수량")

    def test_no_header_keywords(self):
        assert not is_header_line("명칭 재질 수량 규격", header_keywords=[])

    def test_item_line_is_not_noise(self):
        assert not is_noise_line("HEX BOLT STEEL 10 M10x30")

    @pytest.mark.parametrize("line", [
        "P.NO 1234-567",
        "p.no: A-01",
        "비고: 도장 후 납품",
        "REMARKS see drawing",
    ])
    def test_markers(self, line):
        assert is_noise_line(line)


class TestSubstitution:
    """Tests for name substitution."""

    def test_known_abbreviation(self):
        assert substitute_name("SW") == "SW (SPRING WASHER)"
        assert substitute_name("PW") == "PW (PLAIN WASHER)"

    def test_case_insensitive(self):
        assert substitute_name("sw") == "SW (SPRING WASHER)"
        assert substitute_name("Pw") == "PW (PLAIN WASHER)"

    def test_identity_entry(self):
        assert substitute_name("nut") == "NUT"

    def test_unknown_name_unchanged(self):
        assert substitute_name("Flange") == "Flange"

    def test_custom_table(self):
        assert substitute_name("fw", {"FW": "FLAT WASHER"}) == "FLAT WASHER"

    def test_split_name(self):
        assert split_name("SW/PW") == ["SW (SPRING WASHER)", "PW (PLAIN WASHER)"]


class TestTokenize:
    """Tests for line tokenizing."""

    def test_plain_whitespace(self):
        assert tokenize_line("NUT  SUS\t4 M8") == ["NUT", "SUS", "4", "M8"]

    def test_phrase_kept_together(self):
        tokens = tokenize_line("HEX SOCKET HEAD BOLT STEEL 10 M10x30")
        assert tokens == ["HEX SOCKET HEAD BOLT", "STEEL", "10", "M10x30"]

    def test_phrase_case_insensitive(self):
        tokens = tokenize_line("hex socket head bolt steel 10 m10x30")
        assert tokens[0] == "hex socket head bolt"
        assert len(tokens) == 4

    def test_phrase_with_glued_name(self):
        tokens = tokenize_line("HEX SOCKET HEAD BOLT,SW STEEL 10 M10")
        assert tokens == ["HEX SOCKET HEAD BOLT,SW", "STEEL", "10", "M10"]

    def test_phrase_prefix_of_longer_word_not_collapsed(self):
        tokens = tokenize_line("HEX SOCKET HEAD BOLTS STEEL 10 M10")
        assert tokens[0] == "HEX"


class TestParseLine:
    """Tests for single-line parsing."""

    def test_simple_item(self):
        items = parse_line("NUT SUS304 4 M8")
        assert items == [ParsedItem(name="NUT", material="SUS304", quantity="4", spec="M8")]

    def test_multi_token_spec(self):
        items = parse_line("BOLT STEEL 10 M10 x 30")
        assert items[0].spec == "M10 x 30"

    def test_too_few_tokens(self):
        items = parse_line("BOLT M10")
        assert len(items) == 1
        assert items[0].parse_error
        assert items[0].raw_line == "BOLT M10"
        assert items[0].reason == REASON_INSUFFICIENT_TOKENS

    def test_compound_name_comma(self):
        items = parse_line("SW,PW SUS304 20 M10")
        assert [i.name for i in items] == ["SW (SPRING WASHER)", "PW (PLAIN WASHER)"]
        assert all(i.material == "SUS304" for i in items)
        assert all(i.quantity == "20" for i in items)
        assert all(i.spec == "M10" for i in items)

    def test_compound_name_slash(self):
        items = parse_line("SW/PW SUS304 20 M10")
        assert len(items) == 2

    def test_lowercase_abbreviation(self):
        items = parse_line("sw SUS 5pcs M10")
        assert items[0].name == "SW (SPRING WASHER)"
        assert items[0].quantity == "5"

    def test_quantity_without_digits(self):
        items = parse_line("BOLT SS abc M10")
        assert items[0].quantity == "0"

    def test_delimiter_only_name_yields_nothing(self):
        assert parse_line(",/ SUS 3 M8") == []

    def test_dropped_name_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="partno.line_parser"):
            parse_line(",/ SUS 3 M8")
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert ",/ SUS 3 M8" in warnings[0].getMessage()

    def test_quantity_without_digits_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="partno.line_parser"):
            items = parse_line("BOLT SS abc M10")
        assert items[0].quantity == "0"
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "'abc'" in warnings[0].getMessage()

    def test_clean_line_not_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="partno.line_parser"):
            parse_line("NUT SUS304 4 M8")
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_hex_socket_head_bolt(self):
        items = parse_line("HEX SOCKET HEAD BOLT STEEL 10 M10x30")
        assert items == [ParsedItem(name="HEX BOLT", material="STEEL", quantity="10", spec="M10x30")]

    def test_phrase_compound(self):
        items = parse_line("HEX SOCKET HEAD BOLT,SW STEEL 10 M10")
        assert [i.name for i in items] == ["HEX BOLT", "SW (SPRING WASHER)"]


class TestParseOcrText:
    """Tests for whole-text parsing."""

    @pytest.fixture
    def table_text(self):
        return "\n".join([
            "명칭 재질 수량 규격",
            "HEX SOCKET HEAD BOLT STEEL 10 M10x30",
            "",
            "   ",
            "SW,PW SUS304 20 M10",
            "BOLT M10",
            "P.NO 1234-567",
            "NUT SUS304 4 M8",
        ])

    def test_order_and_fanout(self, table_text):
        items = parse_ocr_text(table_text)
        names = [i.name if not i.parse_error else i.raw_line for i in items]
        assert names == [
            "HEX BOLT",
            "SW (SPRING WASHER)",
            "PW (PLAIN WASHER)",
            "BOLT M10",
            "NUT",
        ]

    def test_parse_error_kept_in_place(self, table_text):
        items = parse_ocr_text(table_text)
        assert [i.parse_error for i in items] == [False, False, False, True, False]

    def test_empty_text(self):
        assert parse_ocr_text("") == []
        assert parse_ocr_text(None) == []

    def test_only_noise(self):
        assert parse_ocr_text("명칭 재질 수량 규격\n비고\n") == []

    def test_crlf_lines(self):
        items = parse_ocr_text("NUT SUS 4 M8\r\nBOLT SS 2 M6\r\n")
        assert [i.name for i in items] == ["NUT", "BOLT"]
        assert items[0].spec == "M8"

    def test_header_detection_disabled(self):
        items = parse_ocr_text("NUT SUS304 4 M8\nBOLT SS 2 M6", header_keywords=[])
        assert [i.name for i in items] == ["NUT", "BOLT"]

    def test_custom_noise_markers(self):
        items = parse_ocr_text("NUT SUS 4 M8\nTOTAL SUS 4 M8", noise_markers=["total"])
        assert len(items) == 1

    def test_custom_substitutions(self):
        items = parse_ocr_text("FW SUS 4 M8", substitutions={"FW": "FLAT WASHER"})
        assert items[0].name == "FLAT WASHER"

    def test_comparison_text(self):
        item = parse_ocr_text("NUT SUS 4 M8")[0]
        assert item.comparison_text == "NUT SUS M8"

    def test_to_dict(self):
        item = parse_ocr_text("BOLT M10")[0]
        assert item.to_dict() == {
            'parseError': True,
            'rawLine': 'BOLT M10',
            'reason': REASON_INSUFFICIENT_TOKENS,
        }
