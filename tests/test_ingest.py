"""
Unit tests for pick_risk.ingest

Covers the CSV scanner and stage-by time normalisation:
- Quoting, escaped quotes and embedded delimiters
- CRLF / LF handling and the terminal-newline rule
- Export validation (not tabular data)
- Full timestamps vs. bare clock times
- Time-left formatting
"""

import unittest
from datetime import datetime, timedelta, timezone

from pick_risk.ingest import (
    NotTabularDataError,
    cell,
    format_clock,
    format_time_left,
    looks_tabular,
    minutes_until,
    parse_clock,
    parse_csv,
    parse_instant,
    read_table,
)
from tests.fixtures.sample_data import REFERENCE_NOW, to_csv_text


class TestParseCsv(unittest.TestCase):
    """Test suite for the quote-aware scanner."""

    def test_simple_rows(self):
        self.assertEqual(
            parse_csv("a,b,c\n1,2,3\n"),
            [["a", "b", "c"], ["1", "2", "3"]],
        )

    def test_crlf_matches_lf(self):
        self.assertEqual(parse_csv("a,b\r\n1,2\r\n"), parse_csv("a,b\n1,2\n"))

    def test_last_row_flushed_without_newline(self):
        self.assertEqual(parse_csv("a,b\n1,2"), [["a", "b"], ["1", "2"]])

    def test_empty_text_has_no_rows(self):
        self.assertEqual(parse_csv(""), [])

    def test_only_one_trailing_empty_row_dropped(self):
        self.assertEqual(parse_csv("a\n\n"), [["a"], [""]])

    def test_quoted_comma(self):
        self.assertEqual(parse_csv('x,"a,b",y'), [["x", "a,b", "y"]])

    def test_doubled_quote_is_literal(self):
        self.assertEqual(parse_csv('"say ""hi""",z'), [['say "hi"', "z"]])

    def test_newline_inside_quotes_is_literal(self):
        self.assertEqual(parse_csv('"line1\nline2",b\n'), [["line1\nline2", "b"]])

    def test_quote_inside_unquoted_field_starts_quoting(self):
        self.assertEqual(parse_csv('ab"c,d"e'), [["abc,de"]])

    def test_empty_fields_preserved(self):
        self.assertEqual(parse_csv(",,\n"), [["", "", ""]])

    def test_ragged_rows_tolerated(self):
        rows = parse_csv("a,b,c\n1\n1,2,3,4\n")
        self.assertEqual([len(r) for r in rows], [3, 1, 4])

    def test_round_trip_plain_fields(self):
        fields = ["PL1", "08:00", "In Progress", "alice"]
        self.assertEqual(parse_csv(",".join(fields)), [fields])

    def test_round_trip_special_fields(self):
        header = ["Associate", "Note"]
        rows = [["alice, bob", 'said "rush"'], ['a""b', "plain"]]
        parsed = parse_csv(to_csv_text(header, rows))
        self.assertEqual(parsed, [header] + rows)


class TestReadTable(unittest.TestCase):
    """Test suite for export validation."""

    def test_splits_header(self):
        header, rows = read_table("h1,h2\nv1,v2\n")
        self.assertEqual(header, ["h1", "h2"])
        self.assertEqual(rows, [["v1", "v2"]])

    def test_rejects_empty_text(self):
        with self.assertRaises(NotTabularDataError):
            read_table("")

    def test_rejects_text_without_separators(self):
        with self.assertRaises(NotTabularDataError):
            read_table("just some words")

    def test_rejects_non_string(self):
        with self.assertRaises(NotTabularDataError):
            read_table(None)

    def test_not_tabular_is_value_error(self):
        self.assertTrue(issubclass(NotTabularDataError, ValueError))

    def test_looks_tabular(self):
        self.assertTrue(looks_tabular("a;b"))
        self.assertTrue(looks_tabular("a\nb"))
        self.assertFalse(looks_tabular("ab"))
        self.assertFalse(looks_tabular(b"a,b"))


class TestCell(unittest.TestCase):
    """Test suite for positional cell access."""

    def test_in_range(self):
        self.assertEqual(cell(["a", "b"], 1), "b")

    def test_out_of_range(self):
        self.assertEqual(cell(["a"], 3), "")

    def test_not_found_sentinel(self):
        self.assertEqual(cell(["a"], -1), "")

    def test_none_value(self):
        self.assertEqual(cell([None], 0), "")


class TestParseClock(unittest.TestCase):
    """Test suite for the strict clock pattern."""

    def test_hour_minute(self):
        self.assertEqual(parse_clock("8:00"), (8, 0, 0))

    def test_with_seconds_and_padding(self):
        self.assertEqual(parse_clock(" 23:59:59 "), (23, 59, 59))

    def test_rejects_out_of_range(self):
        self.assertIsNone(parse_clock("24:00"))
        self.assertIsNone(parse_clock("7:60"))
        self.assertIsNone(parse_clock("7:30:60"))

    def test_rejects_other_formats(self):
        self.assertIsNone(parse_clock("8:0"))
        self.assertIsNone(parse_clock("08:00 AM"))
        self.assertIsNone(parse_clock(""))
        self.assertIsNone(parse_clock(None))


class TestParseInstant(unittest.TestCase):
    """Test suite for stage-by normalisation."""

    def test_bare_clock_lands_on_reference_day(self):
        self.assertEqual(parse_instant("08:00", REFERENCE_NOW), datetime(2024, 5, 1, 8, 0, 0))

    def test_bare_clock_with_seconds(self):
        self.assertEqual(parse_instant("8:05:30", REFERENCE_NOW), datetime(2024, 5, 1, 8, 5, 30))

    def test_full_timestamp(self):
        self.assertEqual(
            parse_instant("2024-05-02 06:15:00", REFERENCE_NOW),
            datetime(2024, 5, 2, 6, 15, 0),
        )

    def test_microseconds_not_inherited_from_now(self):
        now = REFERENCE_NOW.replace(microsecond=123456)
        self.assertEqual(parse_instant("08:00", now).microsecond, 0)

    def test_aware_timestamp_becomes_naive_local(self):
        instant = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
        parsed = parse_instant("2024-05-01T08:00:00+00:00", REFERENCE_NOW)
        self.assertIsNone(parsed.tzinfo)
        self.assertEqual(parsed, instant.astimezone().replace(tzinfo=None))

    def test_offset_out_of_range_is_dropped(self):
        self.assertIsNone(parse_instant("2024-05-01 08:00 +99:00", REFERENCE_NOW))
        self.assertIsNone(parse_instant("-,1a-25T4/9", REFERENCE_NOW))

    def test_needs_clock_time_or_full_date(self):
        for text in ("Sunday", "8", "8.00", "Mar", "May 3"):
            with self.subTest(text=text):
                self.assertIsNone(parse_instant(text, REFERENCE_NOW))

    def test_full_date_without_time_is_midnight(self):
        self.assertEqual(parse_instant("2024-05-02", REFERENCE_NOW), datetime(2024, 5, 2, 0, 0))

    def test_unparseable(self):
        self.assertIsNone(parse_instant("N/A", REFERENCE_NOW))
        self.assertIsNone(parse_instant("25:00", REFERENCE_NOW))

    def test_blank(self):
        self.assertIsNone(parse_instant("", REFERENCE_NOW))
        self.assertIsNone(parse_instant("   ", REFERENCE_NOW))
        self.assertIsNone(parse_instant(None, REFERENCE_NOW))

    def test_identical_text_gives_identical_instants(self):
        self.assertEqual(parse_instant("08:00", REFERENCE_NOW), parse_instant("8:00", REFERENCE_NOW))


class TestTimeFormatting(unittest.TestCase):
    """Test suite for time-left display."""

    def test_minutes_until(self):
        self.assertEqual(minutes_until(REFERENCE_NOW, REFERENCE_NOW + timedelta(minutes=30)), 30.0)

    def test_minutes_until_floors_at_zero(self):
        self.assertEqual(minutes_until(REFERENCE_NOW, REFERENCE_NOW - timedelta(hours=1)), 0.0)

    def test_format_time_left(self):
        self.assertEqual(format_time_left(30), "0:30:00")
        self.assertEqual(format_time_left(90.5), "1:30:30")
        self.assertEqual(format_time_left(125), "2:05:00")

    def test_format_time_left_floors_seconds(self):
        self.assertEqual(format_time_left(59.9 / 60), "0:00:59")

    def test_format_time_left_exact_seconds(self):
        minutes = minutes_until(REFERENCE_NOW, REFERENCE_NOW + timedelta(seconds=100))
        self.assertEqual(format_time_left(minutes), "0:01:40")

    def test_past_marker(self):
        self.assertEqual(format_time_left(0, is_past=True), "PAST")

    def test_format_clock(self):
        self.assertEqual(format_clock(datetime(2024, 5, 1, 8, 5)), "08:05")


if __name__ == '__main__':
    unittest.main()
