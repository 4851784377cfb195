from __future__ import annotations

import datetime as dt
import unittest

from gplanner.util.dates import (
    add_days,
    diff_in_days,
    format_mdy,
    normalize_date_input,
    now_iso_utc,
    resolve_tz,
    today_iso,
)


class TestDatesContract(unittest.TestCase):
    def test_diff_in_days(self) -> None:
        self.assertEqual(diff_in_days("2024-01-01", "2024-01-04"), 3)
        self.assertEqual(diff_in_days("2024-01-01", "2024-02-01"), 31)
        self.assertEqual(diff_in_days("2024-01-01", "2024-01-01"), 0)
        self.assertEqual(diff_in_days("2024-01-05", "2024-01-01"), -4)

    def test_add_days(self) -> None:
        self.assertEqual(add_days("2024-01-01", 31), "2024-02-01")
        self.assertEqual(add_days("2024-02-28", 1), "2024-02-29")

    def test_normalize_accepts_common_shapes(self) -> None:
        self.assertEqual(normalize_date_input("2024-01-04"), "2024-01-04")
        self.assertEqual(normalize_date_input(" 2/1/2024 "), "2024-02-01")
        self.assertEqual(normalize_date_input("13/2/2024"), "2024-02-13")
        self.assertEqual(normalize_date_input("1.2.24"), "2024-01-02")
        self.assertEqual(normalize_date_input("2024-01-04T10:00:00Z"), "2024-01-04")
        self.assertEqual(normalize_date_input("2024-01-04T10:00:00+02:00"), "2024-01-04")

    def test_normalize_rejects_garbage(self) -> None:
        for v in ("", None, "soon", "2024-02-30", "13/13/2024", "2024/99/99"):
            self.assertIsNone(normalize_date_input(v), v)

    def test_format_mdy(self) -> None:
        self.assertEqual(format_mdy("2024-02-01"), "02/01/2024")
        self.assertEqual(format_mdy("not a date"), "not a date")

    def test_timezones(self) -> None:
        self.assertEqual(resolve_tz("UTC"), dt.timezone.utc)
        self.assertEqual(resolve_tz("+05:30").utcoffset(None), dt.timedelta(hours=5, minutes=30))
        with self.assertRaises(ValueError):
            resolve_tz("No/Such_Zone")
        dt.date.fromisoformat(today_iso("UTC"))

    def test_now_iso_utc_shape(self) -> None:
        s = now_iso_utc()
        self.assertTrue(s.endswith("Z"), s)
        self.assertIn("T", s)


if __name__ == "__main__":
    unittest.main(verbosity=2)
