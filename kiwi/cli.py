"""CLI entry point for Kiwi Weather."""

import argparse
import asyncio
import logging

from pydantic import ValidationError

from kiwi.app.view_model import WeatherViewModel
from kiwi.config.loader import (
    ConfigError,
    config_hash,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from kiwi.config.schema import KiwiConfig
from kiwi.ingest.owm_client import OpenWeatherClient, OpenWeatherClientError
from kiwi.ingest.weather_service import WeatherService
from kiwi.notify.scheduler import NotificationScheduler
from kiwi.reporting.formatters import (
    format_current_text,
    format_forecast_text,
    format_notification_text,
    format_state_json,
    map_url,
)
from kiwi.storage.database import connect, run_migrations

DEFAULT_CONFIG = "config/kiwi.yaml"
DAILY_TITLE = "Kiwi Weather Daily Forecast"
DAILY_BODY = "Here's your weather forecast for today!"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="kiwi",
        description="Current conditions and 5-day forecasts from OpenWeatherMap",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument("--db", default=None, help="SQLite DB path")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # current
    cur_p = sub.add_parser("current", help="Show current weather and forecast")
    cur_p.add_argument("--city", help="City name")
    cur_p.add_argument("--lat", type=float, help="Latitude")
    cur_p.add_argument("--lon", type=float, help="Longitude")
    cur_p.add_argument("--json", action="store_true", help="JSON output")
    cur_p.add_argument(
        "--fahrenheit", action="store_true", help="Show °F instead of °C"
    )

    # map
    map_p = sub.add_parser("map", help="Print a map link for a location")
    map_p.add_argument("--lat", type=float, required=True)
    map_p.add_argument("--lon", type=float, required=True)

    # notify ...
    notify_p = sub.add_parser("notify", help="Notification operations")
    notify_sub = notify_p.add_subparsers(dest="notify_command")
    notify_sub.add_parser("enable", help="Enable notifications")
    notify_sub.add_parser("disable", help="Disable notifications")
    daily_p = notify_sub.add_parser("daily", help="Schedule the daily forecast reminder")
    daily_p.add_argument("--hour", type=int, default=None)
    daily_p.add_argument("--minute", type=int, default=None)
    notify_sub.add_parser("list", help="List pending notifications")
    notify_sub.add_parser("deliver", help="Deliver due notifications")
    notify_sub.add_parser("clear", help="Cancel pending notifications")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(
        logging.DEBUG if args.verbose else logging.WARNING
    )
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    try:
        config = load_config(args.config)
    except (ConfigError, ValidationError) as e:
        print(f"Error: invalid config {args.config}: {e}")
        return 1
    if args.db is None:
        args.db = config.ops.db_path

    if args.command == "current":
        return _cmd_current(config, args)
    elif args.command == "map":
        print(map_url(args.lat, args.lon))
        return 0
    elif args.command == "notify":
        return _cmd_notify(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_current(config: KiwiConfig, args) -> int:
    if (args.lat is None) != (args.lon is None):
        print("Error: --lat and --lon must be given together")
        return 1
    try:
        client = OpenWeatherClient(
            api_key=config.api.api_key,
            base_url=config.api.base_url,
            units=config.api.units,
            timeout=config.api.timeout_seconds,
        )
    except OpenWeatherClientError as e:
        print(f"Error: {e}")
        return 1

    conn = connect(args.db)
    run_migrations(conn)
    try:
        view_model = WeatherViewModel(
            WeatherService(
                client,
                day_timezone=config.forecast.day_timezone.value,
                max_days=config.forecast.max_days,
            ),
            scheduler=NotificationScheduler(conn, enabled=config.notifications.enabled),
            alerts_enabled=config.notifications.weather_alerts,
            alert_delay_hours=config.notifications.alert_delay_hours,
            drop_stale_results=config.ops.drop_stale_results,
        )
        if args.lat is not None:
            asyncio.run(view_model.search_location(args.lat, args.lon))
        else:
            city = args.city or config.display.default_city
            asyncio.run(view_model.search_city(city))
    finally:
        conn.close()

    state = view_model.store.state
    if args.json:
        print(format_state_json(state))
        return 0 if state.error_message is None else 1
    if state.error_message is not None:
        print(state.error_message)
        return 1
    if state.current is None:
        print("Error: no data received")
        return 1

    use_celsius = config.display.celsius and not args.fahrenheit
    print(format_current_text(state.current, use_celsius))
    print(format_forecast_text(state.forecast, use_celsius))
    return 0


def _cmd_notify(config: KiwiConfig, args) -> int:
    cmd = args.notify_command
    if cmd is None:
        print("Use: notify enable | disable | daily | list | deliver | clear")
        return 1

    if cmd in ("enable", "disable"):
        enabled = cmd == "enable"
        new_config = set_config_value(config, "notifications.enabled", enabled)
        save_config(new_config, args.config)
        conn = connect(args.db)
        run_migrations(conn)
        scheduler = NotificationScheduler(conn, enabled=enabled)
        if enabled:
            scheduler.request_permission()
        else:
            scheduler.cancel_all()
            scheduler.revoke_permission()
        conn.close()
        print(f"Notifications {'enabled' if enabled else 'disabled'}")
        return 0

    conn = connect(args.db)
    run_migrations(conn)
    scheduler = NotificationScheduler(conn, enabled=config.notifications.enabled)
    try:
        if cmd == "daily":
            return _notify_daily(config, scheduler, args)
        elif cmd == "list":
            pending = scheduler.pending()
            print(f"Pending notifications: {len(pending)}")
            for n in pending:
                print(f"  {format_notification_text(n)}")
            return 0
        elif cmd == "deliver":
            due = scheduler.deliver_due()
            for n in due:
                print(format_notification_text(n))
            if not due:
                print("No notifications due")
            return 0
        elif cmd == "clear":
            count = scheduler.cancel_all()
            print(f"Cancelled {count} notification(s)")
            return 0
        print("Use: notify enable | disable | daily | list | deliver | clear")
        return 1
    finally:
        conn.close()


def _notify_daily(config: KiwiConfig, scheduler: NotificationScheduler, args) -> int:
    hour = args.hour if args.hour is not None else config.notifications.daily_hour
    minute = args.minute if args.minute is not None else config.notifications.daily_minute
    try:
        updated = set_config_value(config, "notifications.daily_hour", hour)
        updated = set_config_value(updated, "notifications.daily_minute", minute)
        updated = set_config_value(updated, "notifications.daily_forecast", True)
    except Exception as e:
        print(f"Error: {e}")
        return 1

    notification = scheduler.schedule_daily(DAILY_TITLE, DAILY_BODY, hour, minute)
    if notification is None:
        print("Notifications are disabled. Run: kiwi notify enable")
        return 1
    save_config(updated, args.config)
    print(f"Daily forecast reminder at {hour:02d}:{minute:02d}")
    return 0


def _cmd_config(config: KiwiConfig, args) -> int:
    if args.config_command == "show":
        masked = "***" if config.api.api_key else ""
        shown = config.model_copy(
            update={"api": config.api.model_copy(update={"api_key": masked})}
        )
        print(f"Config hash: {config_hash(config)}")
        print(shown.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
            save_config(new_config, args.config)
            print(f"Set {key} = {get_config_value(new_config, key.strip())}")
            return 0
        except Exception as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config set key=value")
        return 1
