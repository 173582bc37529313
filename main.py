"""
Birthday Calendar Sync orchestrator.
Flow: load config → fetch Outlook contacts → reconcile birthday events → mail digests.
"""

import os
import sys
import time
import logging
import argparse
import yaml
from datetime import date, datetime
from pathlib import Path
from dotenv import load_dotenv

from birthdays.config import SyncConfig
from birthdays.report import ChangeReport, has_any_change, merge

load_dotenv()

SENDER_NAME = "Birthday Calendar Sync"

log = logging.getLogger(__name__)


def setup_logging():
    log_path = Path(os.environ.get(
        "BIRTHDAY_SYNC_LOG", "~/Library/Logs/birthday-calendar-sync.log"
    )).expanduser()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.FileHandler(log_path),
            logging.StreamHandler(sys.stdout),
        ],
    )


def load_config(path: Path | None = None) -> SyncConfig:
    config_path = path or Path(os.environ.get("BIRTHDAY_SYNC_CONFIG", Path(__file__).parent / "config.yaml"))
    with open(config_path) as f:
        return SyncConfig.from_dict(yaml.safe_load(f))


def fetch_all_contacts(config: SyncConfig):
    from sources import ms_graph
    from sources.contacts import fetch_contacts

    folders = ms_graph.get_contact_folders()
    return fetch_contacts(
        ms_graph.GraphDirectory(folder_ids=list(folders)),
        ms_graph.GraphLabelResolver(folders),
        label_filter=config.contacts.label_filter,
        use_label_filter=config.contacts.use_label_filter,
        max_retries=config.contacts.max_retries,
    )


def reconcile_calendar(config: SyncConfig, contacts, calendar, today: date,
                       sleep=time.sleep) -> ChangeReport:
    """Run the enabled reconcilers against `calendar` and merge their results."""
    from birthdays.calendar_sync import IndividualEventReconciler, MonthlySummaryReconciler

    settings = config.calendar
    individual = summary = None
    if settings.create_individual_events:
        individual = IndividualEventReconciler(
            calendar,
            language=config.language,
            rate_limit_every=settings.rate_limit_every,
            rate_limit_pause=settings.rate_limit_pause_seconds,
            sleep=sleep,
        ).reconcile(contacts, today, settings.look_ahead_months,
                    settings.reminder_minutes, settings.reminder_method)
    if settings.create_monthly_summaries:
        summary = MonthlySummaryReconciler(
            calendar,
            language=config.language,
            reminder_minutes=settings.summary_reminder_minutes,
        ).reconcile(contacts, today, settings.look_ahead_months)

    report = merge(individual, summary)
    log.info(f"Individual: {report.individual.summary()}")
    log.info(f"Summaries: {report.summary.summary()}")
    return report


def deliver(digest, config: SyncConfig, me: dict, mailer) -> bool:
    if digest is None:
        return False
    to = config.digest.recipient or me["mail"]
    return mailer.send(to, me["mail"], SENDER_NAME, digest.subject, digest.text, digest.html)


def _today(config: SyncConfig) -> date:
    return datetime.now(config.tz).date()


def cmd_sync(config: SyncConfig, args):
    from sources import ms_graph
    from digest.composer import compose_change_notification
    from delivery.mail_sender import GraphMailer

    contacts = fetch_all_contacts(config)
    calendar = ms_graph.GraphCalendar(config.calendar.calendar_id, config.timezone)
    calendar.ensure_exists()

    report = reconcile_calendar(config, contacts, calendar, _today(config))
    if has_any_change(report):
        me = ms_graph.get_me()
        notification = compose_change_notification(report, config.language, me["given_name"])
        deliver(notification, config, me, GraphMailer())
        log.info("✓ Change notification sent.")
    elif report.errors:
        log.warning(f"No calendar changes, but {report.errors} event(s) failed; see errors above.")
    else:
        log.info("Calendar already up to date.")


def cmd_daily(config: SyncConfig, args):
    from sources import ms_graph
    from digest.composer import compose_daily_digest
    from delivery.mail_sender import GraphMailer

    day = args.date or _today(config)
    contacts = fetch_all_contacts(config)
    me = ms_graph.get_me()
    digest = compose_daily_digest(contacts, day, config.digest.daily_preview_days,
                                  config.language, me["given_name"])
    if deliver(digest, config, me, GraphMailer()):
        log.info(f"✓ Daily digest for {day} sent.")
    else:
        log.info(f"No birthdays on {day}, nothing to send.")


def next_month(today: date) -> tuple[int, int]:
    if today.month == 12:
        return 1, today.year + 1
    return today.month + 1, today.year


def cmd_monthly(config: SyncConfig, args):
    from sources import ms_graph
    from digest.composer import compose_monthly_digest
    from delivery.mail_sender import GraphMailer

    month, year = next_month(_today(config))
    month = args.month or month
    year = args.year or year
    contacts = fetch_all_contacts(config)
    me = ms_graph.get_me()
    digest = compose_monthly_digest(contacts, month, year, config.language, me["given_name"])
    if deliver(digest, config, me, GraphMailer()):
        log.info(f"✓ Monthly digest for {month:02d}/{year} sent.")
    else:
        log.info(f"No birthdays in {month:02d}/{year}, nothing to send.")


def cmd_list(config: SyncConfig, args):
    from birthdays import contact as facts

    today = _today(config)
    contacts = fetch_all_contacts(config)
    if args.upcoming is not None:
        contacts = facts.upcoming(contacts, today, args.upcoming)
    if not contacts:
        log.info("No contacts to display")
    for c in contacts:
        log.info(f"{facts.describe(c, today)}\n------------------------")


def cmd_delete_events(config: SyncConfig, args):
    from sources import ms_graph
    from birthdays.calendar_sync import delete_events_by_title

    calendar = ms_graph.GraphCalendar(config.calendar.calendar_id, config.timezone)
    calendar.ensure_exists()
    deleted = delete_events_by_title(calendar, args.title, args.start, args.end)
    log.info(f"✓ {deleted} event(s) deleted.")


def build_parser() -> argparse.ArgumentParser:
    iso = date.fromisoformat
    parser = argparse.ArgumentParser(description="Sync Outlook contact birthdays into a calendar")
    parser.add_argument("--config", type=Path, help="path to config.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("sync", help="create/update birthday events and monthly summaries")

    daily = sub.add_parser("daily", help="mail today's birthdays")
    daily.add_argument("--date", type=iso, help="YYYY-MM-DD, defaults to today")

    monthly = sub.add_parser("monthly", help="mail a month's birthdays (default: next month)")
    monthly.add_argument("--month", type=int, choices=range(1, 13))
    monthly.add_argument("--year", type=int)

    listing = sub.add_parser("list", help="log contacts with birthdays")
    listing.add_argument("--upcoming", type=int, metavar="DAYS")

    delete = sub.add_parser("delete-events", help="delete events with an exact title in a date range")
    delete.add_argument("--title", required=True)
    delete.add_argument("--start", type=iso, required=True)
    delete.add_argument("--end", type=iso, required=True)
    return parser


COMMANDS = {
    "sync": cmd_sync,
    "daily": cmd_daily,
    "monthly": cmd_monthly,
    "list": cmd_list,
    "delete-events": cmd_delete_events,
}


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging()
    log.info(f"=== Birthday Calendar Sync: {args.command} ===")
    try:
        config = load_config(args.config)
        log.info("Config loaded.")
        COMMANDS[args.command](config, args)
    except Exception as e:
        log.error(f"{args.command} failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
