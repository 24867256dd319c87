"""Tests for the hijri module."""

import datetime
import unittest

from salat.hijri import HIJRI_EPOCH, HijriDate, to_hijri


class TestToHijri(unittest.TestCase):
    def test_ramadan_1445(self):
        # Announced as 1 Ramadan 1445 in Saudi Arabia.
        hijri = to_hijri(datetime.date(2024, 3, 11))
        self.assertEqual((hijri.year, hijri.month), (1445, 9))
        self.assertIn(hijri.day, (1, 2))
        self.assertEqual(hijri.month_name, "Ramadan")

    def test_new_year_1445(self):
        hijri = to_hijri(datetime.date(2023, 7, 19))
        self.assertEqual((hijri.year, hijri.month), (1445, 1))
        self.assertIn(hijri.day, (1, 2))

    def test_epoch(self):
        self.assertEqual(to_hijri(HIJRI_EPOCH), HijriDate(1, 1, 1))

    def test_before_epoch_raises(self):
        with self.assertRaises(ValueError):
            to_hijri(HIJRI_EPOCH - datetime.timedelta(days=1))

    def test_adjustment_shifts_by_days(self):
        date = datetime.date(2024, 3, 11)
        self.assertEqual(to_hijri(date, 1), to_hijri(date + datetime.timedelta(days=1)))
        self.assertEqual(to_hijri(date, -2), to_hijri(date - datetime.timedelta(days=2)))

    def test_accepts_datetime(self):
        moment = datetime.datetime(2024, 3, 11, 23, 30)
        self.assertEqual(to_hijri(moment), to_hijri(moment.date()))

    def test_days_advance_one_at_a_time(self):
        date = datetime.date(2022, 1, 1)
        previous = to_hijri(date)
        for _ in range(3 * 366):
            date += datetime.timedelta(days=1)
            current = to_hijri(date)
            if current.day != 1:
                self.assertEqual(current.day, previous.day + 1)
                self.assertEqual((current.month, current.year), (previous.month, previous.year))
            elif current.month == 1:
                self.assertEqual((previous.month, current.year), (12, previous.year + 1))
            else:
                self.assertEqual(current.month, previous.month + 1)
            self.assertIn(previous.day, range(1, 31))
            previous = current


class TestHijriDate(unittest.TestCase):
    def test_str(self):
        self.assertEqual(str(HijriDate(2, 9, 1445)), "2 Ramadan 1445 AH")

    def test_rejects_invalid_fields(self):
        with self.assertRaises(ValueError):
            HijriDate(31, 1, 1445)
        with self.assertRaises(ValueError):
            HijriDate(1, 13, 1445)
        with self.assertRaises(ValueError):
            HijriDate(1, 1, 0)


if __name__ == "__main__":
    unittest.main()
