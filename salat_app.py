#!/usr/bin/env python3
"""
Prayer times in the terminal.

Shows, for the saved / detected / given location:
  - Gregorian and Hijri date
  - the six daily schedule entries with the current and next prayer marked
  - countdown to the next prayer
With --watch it keeps running, refreshes the status every minute,
recomputes at midnight and (optionally) sends desktop reminders.
"""

import argparse
import datetime
import logging
import sys

import pytz

from salat.display import format_hijri, render_schedule, render_status
from salat.errors import PrayerTimeError
from salat.hijri import to_hijri
from salat.location import (
    FixedLocationProvider,
    Location,
    SavedLocationProvider,
    clear_manual_location,
    locate_coordinate,
    save_manual_location,
)
from salat.log import setup_logging
from salat.methods import CalculationMethod, Madhab
from salat.notifier import NotificationScheduler
from salat.prayer_times import compute_schedule, sunnah_times
from salat.settings import load_settings, save_settings
from salat.solar import GeoCoordinate
from salat.status import evaluate
from salat.tracker import PrayerTracker

logger = logging.getLogger("salat_app")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Islamic prayer times for your location.")
    parser.add_argument("--lat", type=float, help="latitude in decimal degrees")
    parser.add_argument("--lon", type=float, help="longitude in decimal degrees")
    parser.add_argument("--tz", help="IANA timezone, e.g. Asia/Jakarta (default: UTC for --lat/--lon)")
    parser.add_argument("--city", help="name to show instead of reverse geocoding")
    parser.add_argument("--date", type=datetime.date.fromisoformat, help="YYYY-MM-DD (default: today)")
    parser.add_argument(
        "--method",
        help="calculation method: " + ", ".join(m.value for m in CalculationMethod),
    )
    parser.add_argument("--madhab", choices=[m.name.lower() for m in Madhab])
    parser.add_argument("--fajr-angle", type=float, help="custom Fajr depression angle (required for Other)")
    parser.add_argument("--isha-angle", type=float, help="custom Isha depression angle (required for Other)")
    parser.add_argument("--save-location", action="store_true", help="remember --lat/--lon/--tz")
    parser.add_argument("--forget-location", action="store_true", help="drop the saved location")
    parser.add_argument("--save-settings", action="store_true", help="remember --method/--madhab and custom angles")
    parser.add_argument("--watch", action="store_true", help="keep tracking until Ctrl+C")
    parser.add_argument("--notify", action="store_true", help="desktop reminders while watching")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING (default: $SALAT_LOG_LEVEL)")
    return parser


def _location_from_args(args) -> Location:
    if (args.lat is None) != (args.lon is None):
        raise SystemExit("--lat and --lon must be given together")
    if args.forget_location:
        clear_manual_location()
    if args.lat is None:
        return SavedLocationProvider().get_location()

    coordinate = GeoCoordinate(args.lat, args.lon)
    timezone = args.tz or "UTC"
    if args.city:
        location = Location(args.city, "", "", coordinate, timezone)
    else:
        location = locate_coordinate(coordinate, timezone)
    if args.save_location:
        save_manual_location(location)
    return location


def _print_day(location: Location, date: datetime.date, params, settings, tz) -> None:
    schedule = compute_schedule(location.coordinate, date, params, tz)
    next_day = compute_schedule(location.coordinate, date + datetime.timedelta(days=1), params, tz)
    now = datetime.datetime.now(tz)
    status = evaluate(schedule, now, next_day) if date == now.date() else None

    print(f"📍 {location.city}, {location.country}  ({params.name})")
    print(f"📅 {date.strftime('%A, %d %B %Y')}")
    print(f"☪  {format_hijri(to_hijri(date, settings.hijri_adjustment))}")
    print()
    for line in render_schedule(schedule, status):
        print(line)
    sunnah = sunnah_times(schedule, next_day)
    print()
    print(f"   Middle of the night   {sunnah.middle_of_the_night:%H:%M}")
    print(f"   Last third of night   {sunnah.last_third_of_the_night:%H:%M}")
    if status is not None:
        print()
        print(render_status(status, now))


def _watch(location: Location, params, settings, notify: bool) -> None:
    notifier = None
    if notify or settings.notifications_enabled:
        notifier = NotificationScheduler(
            settings.reminder_minutes,
            callback=lambda title, message: print(f"\n🔔 {title}: {message}"),
        )

    def _on_update(schedule, status):
        now = datetime.datetime.now(tracker.tz)
        print(f"[{now:%H:%M}] {render_status(status, now)}", flush=True)

    tracker = PrayerTracker(
        FixedLocationProvider(location),
        params=params,
        on_update=_on_update,
        notifier=notifier,
    )
    thread = tracker.start()
    try:
        while thread.is_alive():
            thread.join(1.0)
    except KeyboardInterrupt:
        print()
    finally:
        tracker.stop(timeout=2.0)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    settings = load_settings()
    if args.method:
        settings.method = args.method
    if args.madhab:
        settings.madhab = args.madhab
    if args.fajr_angle is not None:
        settings.fajr_angle = args.fajr_angle
    if args.isha_angle is not None:
        settings.isha_angle = args.isha_angle

    try:
        params = settings.calculation_parameters()
        location = _location_from_args(args)
        tz = pytz.timezone(location.timezone)
    except (PrayerTimeError, ValueError, pytz.UnknownTimeZoneError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    if args.save_settings:
        save_settings(settings)

    date = args.date or datetime.datetime.now(tz).date()
    try:
        if args.watch:
            _watch(location, params, settings, args.notify)
        else:
            _print_day(location, date, params, settings, tz)
    except PrayerTimeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
