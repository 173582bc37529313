"""
Contact model and the birthday facts derived from it.

Everything here is pure: "today" is always passed in, so the same
contact list renders the same strings on every run. The calendar
reconcilers diff on these strings, which makes their stability a
correctness requirement.
"""

import calendar
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from birthdays import text
from birthdays.errors import UnknownYearError, ValidationError

WHATSAPP_BASE = "https://wa.me/"
INSTAGRAM_BASE = "https://www.instagram.com/"


@dataclass(frozen=True)
class Birthday:
    """Month and day of a birthday, with the year only if the source knew it."""
    month: int
    day: int
    year: Optional[int] = None

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValidationError(f"Invalid birthday month: {self.month}")
        # 2000 is a leap year, so Feb 29 passes when the year is unknown
        days_in_month = calendar.monthrange(self.year or 2000, self.month)[1]
        if not 1 <= self.day <= days_in_month:
            raise ValidationError(f"Invalid birthday day: {self.day}.{self.month}.")

    def in_year(self, year: int) -> date:
        """The occurrence in `year`; Feb 29 falls back to Feb 28 in common years."""
        if self.month == 2 and self.day == 29 and not calendar.isleap(year):
            return date(year, 2, 28)
        return date(year, self.month, self.day)


@dataclass(frozen=True)
class GroupMembership:
    """Membership of a contact in a directory group (folder) by opaque id."""
    group_id: str


@dataclass(frozen=True)
class Contact:
    name: str
    birthday: Birthday
    labels: tuple = ()
    email: Optional[str] = None
    city: Optional[str] = None
    phone_number: Optional[str] = None
    social_handles: tuple = field(default_factory=tuple)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValidationError("Contact requires a name")
        if self.birthday is None:
            raise ValidationError(f"Contact '{self.name}' requires a birthday")
        object.__setattr__(self, "labels", tuple(self.labels or ()))
        object.__setattr__(self, "social_handles", tuple(self.social_handles or ()))


# === FACTS ===

def has_known_year(contact: Contact) -> bool:
    return contact.birthday.year is not None


def _require_year(contact: Contact) -> int:
    if contact.birthday.year is None:
        raise UnknownYearError(f"Birth year is missing for '{contact.name}'")
    return contact.birthday.year


def age_turning_this_year(contact: Contact, today: date) -> int:
    """Age reached on the birthday in `today`'s year."""
    return today.year - _require_year(contact)


def calculate_age(contact: Contact, today: date) -> int:
    """Age as of `today`."""
    age = today.year - _require_year(contact)
    if (today.month, today.day) < (contact.birthday.month, contact.birthday.day):
        age -= 1
    return age


def age_in_days(contact: Contact, today: date) -> int:
    year = _require_year(contact)
    return (today - contact.birthday.in_year(year)).days


def is_birthday_on(contact: Contact, day: date) -> bool:
    return contact.birthday.in_year(day.year) == day


def is_birthday_in_month(contact: Contact, month: int) -> bool:
    return contact.birthday.month == month


def was_birthday_this_year(contact: Contact, today: date) -> bool:
    return contact.birthday.in_year(today.year) < today


def next_occurrence(contact: Contact, from_date: date) -> date:
    """Soonest occurrence on or after `from_date`."""
    candidate = contact.birthday.in_year(from_date.year)
    if candidate < from_date:
        candidate = contact.birthday.in_year(from_date.year + 1)
    return candidate


def next_occurrence_in_range(contact: Contact, start: date, end: date) -> Optional[date]:
    """Next occurrence within the half-open window [start, end), or None."""
    for year in (start.year, start.year + 1):
        candidate = contact.birthday.in_year(year)
        if start <= candidate < end:
            return candidate
    return None


def days_until_next_occurrence(contact: Contact, from_date: date) -> int:
    return (next_occurrence(contact, from_date) - from_date).days


def messaging_link(contact: Contact) -> Optional[str]:
    """wa.me link built from the digits of the phone number."""
    if not contact.phone_number:
        return None
    digits = re.sub(r"\D", "", contact.phone_number)
    return f"{WHATSAPP_BASE}{digits}" if digits else None


def social_link(handle: str) -> str:
    return f"{INSTAGRAM_BASE}{handle.lstrip('@')}"


# === RENDERING ===

def short_date(contact: Contact) -> str:
    return f"{contact.birthday.day:02d}.{contact.birthday.month:02d}."


def long_date(contact: Contact) -> str:
    if not has_known_year(contact):
        return short_date(contact)
    return f"{short_date(contact)}{contact.birthday.year}"


def long_month_date(contact: Contact, language: str = text.DEFAULT_LANGUAGE) -> str:
    """`DD. Mon`, e.g. `05. Mär`."""
    return f"{contact.birthday.day:02d}. {text.month_name(contact.birthday.month, language, short=True)}"


def event_description(contact: Contact, occurrence: date,
                      language: str = text.DEFAULT_LANGUAGE) -> str:
    """Body of the individual birthday event on `occurrence`."""
    s = text.strings(language)
    if has_known_year(contact):
        age = age_turning_this_year(contact, occurrence)
        body = s["event_age"].format(name=contact.name, age=age) + "\n"
        body += s["event_birthday"].format(date=long_date(contact)) + "\n\n"
    else:
        body = s["event_no_year"].format(name=contact.name) + "\n\n"

    link = messaging_link(contact)
    if link:
        body += f"WhatsApp: {link}\n"
    for handle in contact.social_handles:
        body += f"Instagram: {social_link(handle)}\n"

    if contact.labels:
        if link or contact.social_handles:
            body += "\n"
        body += ", ".join(contact.labels) + "\n"
    return body


def summary_line(contact: Contact, year: int, language: str = text.DEFAULT_LANGUAGE) -> str:
    """One line of a monthly summary event: `DD. Mon: Name (age)`."""
    line = f"{long_month_date(contact, language)}: {contact.name}"
    if has_known_year(contact):
        line += f" ({year - contact.birthday.year})"
    return line


def mail_date(contact: Contact, language: str = text.DEFAULT_LANGUAGE) -> str:
    """`DD. Month`, e.g. `05. März`."""
    return f"{contact.birthday.day:02d}. {text.month_name(contact.birthday.month, language)}"


def mail_turns(contact: Contact, year: int, language: str = text.DEFAULT_LANGUAGE) -> Optional[str]:
    if not has_known_year(contact):
        return None
    return text.strings(language)["mail_turns"].format(age=year - contact.birthday.year)


def mail_line(contact: Contact, year: int, language: str = text.DEFAULT_LANGUAGE) -> str:
    """Line of the monthly digest email: `DD. Month: 🎂 Name (turns N)`."""
    line = f"{mail_date(contact, language)}: 🎂 {contact.name}"
    turns = mail_turns(contact, year, language)
    if turns:
        line += f" ({turns})"
    return line


def describe(contact: Contact, today: date) -> str:
    """Multi-line summary used by the `list` command."""
    lines = [f"Name: {contact.name}", f"Birthday: {long_date(contact)}"]
    if has_known_year(contact):
        lines.append(f"Age: {calculate_age(contact, today)}")
    lines.append(f"Days until next birthday: {days_until_next_occurrence(contact, today)}")
    if contact.phone_number:
        lines.append(f"Phone: {contact.phone_number}")
    if contact.email:
        lines.append(f"Email: {contact.email}")
    if contact.city:
        lines.append(f"City: {contact.city}")
    for handle in contact.social_handles:
        lines.append(f"Instagram: {social_link(handle)}")
    if contact.labels:
        lines.append(f"Labels: {', '.join(contact.labels)}")
    return "\n".join(lines)


# === QUERIES ===

def sort_key(contact: Contact) -> tuple:
    return (contact.birthday.month, contact.birthday.day)


def find_by_name(contacts: Iterable[Contact], name: str) -> Optional[Contact]:
    wanted = name.lower()
    return next((c for c in contacts if c.name.lower() == wanted), None)


def with_any_label(contacts: Iterable[Contact], labels: Iterable[str]) -> list[Contact]:
    wanted = set(labels)
    return [c for c in contacts if wanted.intersection(c.labels)]


def without_labels(contacts: Iterable[Contact]) -> list[Contact]:
    return [c for c in contacts if not c.labels]


def in_age_range(contacts: Iterable[Contact], today: date, min_age: int, max_age: int) -> list[Contact]:
    """Contacts with a known year whose current age is within [min_age, max_age]."""
    return [
        c for c in contacts
        if has_known_year(c) and min_age <= calculate_age(c, today) <= max_age
    ]


def in_month(contacts: Iterable[Contact], month: int) -> list[Contact]:
    """Contacts born in `month`, ordered by day then name."""
    return sorted(
        (c for c in contacts if is_birthday_in_month(c, month)),
        key=lambda c: (c.birthday.day, c.name),
    )


def born_on(contacts: Iterable[Contact], day: date) -> list[Contact]:
    return sorted((c for c in contacts if is_birthday_on(c, day)), key=lambda c: c.name)


def upcoming(contacts: Iterable[Contact], today: date, days: int) -> list[Contact]:
    """Contacts whose next birthday is within `days` days of `today` (inclusive)."""
    found = [c for c in contacts if days_until_next_occurrence(c, today) <= days]
    return sorted(found, key=lambda c: (days_until_next_occurrence(c, today), c.name))
