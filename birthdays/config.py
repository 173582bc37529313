"""
Typed view over config.yaml.

main.py reads the YAML into a dict; SyncConfig.from_dict turns that dict
into the value object handed to ingestion, reconcilers and the digest
composer. Missing keys take the defaults below.
"""

from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from birthdays.errors import ConfigurationError
from birthdays.text import LOCALES

REMINDER_METHODS = ("none", "email", "popup")


@dataclass(frozen=True)
class CalendarSettings:
    calendar_id: str = ""
    look_ahead_months: int = 12
    create_individual_events: bool = True
    create_monthly_summaries: bool = True
    reminder_method: str = "popup"
    reminder_minutes: int = 60 * 12
    summary_reminder_minutes: int = 60 * 24 * 4
    rate_limit_every: int = 20
    rate_limit_pause_seconds: float = 1.0


@dataclass(frozen=True)
class ContactSettings:
    use_label_filter: bool = False
    label_filter: frozenset = frozenset()
    max_retries: int = 5


@dataclass(frozen=True)
class DigestSettings:
    daily_preview_days: int = 5
    recipient: str = ""


@dataclass(frozen=True)
class SyncConfig:
    calendar: CalendarSettings = field(default_factory=CalendarSettings)
    contacts: ContactSettings = field(default_factory=ContactSettings)
    digest: DigestSettings = field(default_factory=DigestSettings)
    language: str = "de"
    timezone: str = "Europe/Berlin"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_dict(cls, raw: dict | None) -> "SyncConfig":
        raw = raw or {}
        cal = raw.get("calendar") or {}
        con = raw.get("contacts") or {}
        dig = raw.get("digest") or {}
        gen = raw.get("general") or {}

        defaults = CalendarSettings()
        calendar_settings = CalendarSettings(
            calendar_id=str(cal.get("calendar_id") or ""),
            look_ahead_months=_int(cal, "look_ahead_months", defaults.look_ahead_months, minimum=1),
            create_individual_events=bool(cal.get("create_individual_events", True)),
            create_monthly_summaries=bool(cal.get("create_monthly_summaries", True)),
            reminder_method=str(cal.get("reminder_method", defaults.reminder_method)).lower(),
            reminder_minutes=_int(cal, "reminder_minutes", defaults.reminder_minutes, minimum=0),
            summary_reminder_minutes=_int(
                cal, "summary_reminder_minutes", defaults.summary_reminder_minutes, minimum=0
            ),
            rate_limit_every=_int(cal, "rate_limit_every", defaults.rate_limit_every, minimum=1),
            rate_limit_pause_seconds=float(
                cal.get("rate_limit_pause_seconds", defaults.rate_limit_pause_seconds)
            ),
        )
        if calendar_settings.reminder_method not in REMINDER_METHODS:
            raise ConfigurationError(
                f"calendar.reminder_method must be one of {', '.join(REMINDER_METHODS)}, "
                f"got '{calendar_settings.reminder_method}'"
            )

        label_filter = con.get("label_filter") or []
        if isinstance(label_filter, str):
            label_filter = [label_filter]
        contact_settings = ContactSettings(
            use_label_filter=bool(con.get("use_label_filter", False)),
            label_filter=frozenset(str(label) for label in label_filter if str(label).strip()),
            max_retries=_int(con, "max_retries", ContactSettings.max_retries, minimum=0),
        )

        digest_settings = DigestSettings(
            daily_preview_days=_int(dig, "daily_preview_days", DigestSettings.daily_preview_days, minimum=0),
            recipient=str(dig.get("recipient") or ""),
        )

        language = str(gen.get("language", "de"))
        if language not in LOCALES:
            raise ConfigurationError(f"general.language '{language}' is not supported")
        timezone = str(gen.get("timezone", "Europe/Berlin"))
        try:
            ZoneInfo(timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConfigurationError(f"general.timezone '{timezone}' is not a known time zone")

        return cls(
            calendar=calendar_settings,
            contacts=contact_settings,
            digest=digest_settings,
            language=language,
            timezone=timezone,
        )


def _int(section: dict, key: str, default: int, minimum: int) -> int:
    value = section.get(key, default)
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{key} must be >= {minimum}, got {value}")
    return value
