"""Tests for the location module."""

import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import requests

import salat.location as loc_mod
from salat.location import (
    DEFAULT_LOCATION,
    FixedLocationProvider,
    IpLocationProvider,
    Location,
    SavedLocationProvider,
    clear_manual_location,
    load_manual_location,
    locate_coordinate,
    reverse_geocode,
    save_manual_location,
)
from salat.solar import GeoCoordinate


def _response(payload):
    mock_resp = MagicMock()
    mock_resp.json.return_value = payload
    mock_resp.raise_for_status = MagicMock()
    return mock_resp


class TestIpLocationProvider(unittest.TestCase):
    @patch("salat.location.requests.get")
    def test_returns_location_on_success(self, mock_get):
        mock_get.return_value = _response({
            "status": "success",
            "city": "Jakarta",
            "regionName": "Jakarta",
            "country": "Indonesia",
            "lat": -6.2,
            "lon": 106.8,
            "timezone": "Asia/Jakarta",
        })

        loc = IpLocationProvider().get_location()
        self.assertEqual(loc.city, "Jakarta")
        self.assertAlmostEqual(loc.coordinate.latitude, -6.2)
        self.assertEqual(loc.timezone, "Asia/Jakarta")

    @patch("salat.location.requests.get")
    def test_falls_back_on_failure(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("Network error")
        with self.assertLogs("salat.location", level="WARNING"):
            loc = IpLocationProvider().get_location()
        self.assertEqual(loc, DEFAULT_LOCATION)

    @patch("salat.location.requests.get")
    def test_falls_back_on_api_error_status(self, mock_get):
        mock_get.return_value = _response({"status": "fail", "message": "reserved range"})
        with self.assertLogs("salat.location", level="WARNING") as logs:
            loc = IpLocationProvider().get_location()
        self.assertEqual(loc.city, DEFAULT_LOCATION.city)
        self.assertIn("reserved range", logs.output[0])

    @patch("salat.location.requests.get")
    def test_falls_back_on_bad_coordinates(self, mock_get):
        mock_get.return_value = _response({"status": "success", "lat": 123.0, "lon": 0.0})
        with self.assertLogs("salat.location", level="WARNING"):
            loc = IpLocationProvider().get_location()
        self.assertEqual(loc, DEFAULT_LOCATION)


class TestReverseGeocode(unittest.TestCase):
    @patch("salat.location.requests.get")
    def test_prefers_city_then_town(self, mock_get):
        mock_get.return_value = _response({
            "address": {"town": "Ciseeng", "state": "Jawa Barat", "country": "Indonesia"}
        })
        names = reverse_geocode(GeoCoordinate(-6.5567, 106.5614))
        self.assertEqual(names, {"city": "Ciseeng", "region": "Jawa Barat", "country": "Indonesia"})
        self.assertIn("User-Agent", mock_get.call_args.kwargs["headers"])

    @patch("salat.location.requests.get")
    def test_unknown_on_failure(self, mock_get):
        mock_get.side_effect = requests.Timeout("slow")
        with self.assertLogs("salat.location", level="WARNING"):
            names = reverse_geocode(GeoCoordinate(0.0, 0.0))
        self.assertEqual(names["city"], "Unknown")

    @patch("salat.location.requests.get")
    def test_locate_coordinate(self, mock_get):
        mock_get.return_value = _response({"address": {"city": "Mecca", "country": "Saudi Arabia"}})
        coordinate = GeoCoordinate(21.4225, 39.8262)
        loc = locate_coordinate(coordinate, "Asia/Riyadh")
        self.assertEqual(loc.city, "Mecca")
        self.assertEqual(loc.region, "")
        self.assertEqual(loc.coordinate, coordinate)
        self.assertEqual(loc.timezone, "Asia/Riyadh")


class TestManualLocation(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.mkdtemp()
        self._orig_config_dir = loc_mod.CONFIG_DIR
        self._orig_config_file = loc_mod.CONFIG_FILE
        loc_mod.CONFIG_DIR = self._tmpdir
        loc_mod.CONFIG_FILE = os.path.join(self._tmpdir, "location.json")

    def tearDown(self):
        loc_mod.CONFIG_DIR = self._orig_config_dir
        loc_mod.CONFIG_FILE = self._orig_config_file
        shutil.rmtree(self._tmpdir, ignore_errors=True)

    def test_save_and_load_manual_location(self):
        loc = Location("Ciseeng", "Bogor", "ID", GeoCoordinate(-6.5567, 106.5614, 120), "Asia/Jakarta")
        save_manual_location(loc)
        loaded = load_manual_location()
        self.assertEqual(loaded, loc)

    def test_load_returns_none_when_no_file(self):
        self.assertIsNone(load_manual_location())

    def test_clear_manual_location(self):
        save_manual_location(Location("Test", "Test", "ID", GeoCoordinate(0.0, 0.0), "UTC"))
        self.assertIsNotNone(load_manual_location())
        clear_manual_location()
        self.assertIsNone(load_manual_location())

    def test_load_returns_none_for_invalid_json(self):
        with open(loc_mod.CONFIG_FILE, "w") as f:
            f.write("not valid json")
        with self.assertLogs("salat.location", level="WARNING"):
            self.assertIsNone(load_manual_location())

    def test_load_returns_none_for_missing_keys(self):
        with open(loc_mod.CONFIG_FILE, "w") as f:
            json.dump({"city": "Test"}, f)
        with self.assertLogs("salat.location", level="WARNING"):
            self.assertIsNone(load_manual_location())

    def test_load_returns_none_for_out_of_range_coordinates(self):
        with open(loc_mod.CONFIG_FILE, "w") as f:
            json.dump({
                "city": "X", "region": "", "country": "", "lat": 99, "lon": 0, "timezone": "UTC",
            }, f)
        with self.assertLogs("salat.location", level="WARNING"):
            self.assertIsNone(load_manual_location())

    def test_saved_provider_prefers_saved_location(self):
        fallback = MagicMock()
        loc = Location("Test", "", "", GeoCoordinate(1.0, 2.0), "UTC")
        save_manual_location(loc)
        self.assertEqual(SavedLocationProvider(fallback).get_location(), loc)
        fallback.get_location.assert_not_called()

    def test_saved_provider_uses_fallback(self):
        provider = SavedLocationProvider(FixedLocationProvider(DEFAULT_LOCATION))
        self.assertEqual(provider.get_location(), DEFAULT_LOCATION)


if __name__ == "__main__":
    unittest.main()
