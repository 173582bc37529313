"""
Builds the digest emails from contact data alone.

Nothing here touches the calendar: the daily and monthly digests look
only at the contact list and a reference date, and the change
notification only at a ChangeReport. Each composer returns None when
there is nothing worth sending. HTML bodies come from the Jinja2
templates in digest/templates.py; the plain-text bodies are built here.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence

from birthdays import contact as facts
from birthdays import text
from birthdays.contact import Contact
from birthdays.report import ChangeReport, has_any_change
from digest import templates


@dataclass(frozen=True)
class Digest:
    subject: str
    text: str
    html: str


def _age_suffix(contact: Contact, year: int, phrase: str) -> str:
    if not facts.has_known_year(contact):
        return ""
    return phrase.format(age=year - contact.birthday.year)


def _day_label(day: date, language: str) -> str:
    return f"{day.day:02d}. {text.month_name(day.month, language)}"


def compose_daily_digest(contacts: Sequence[Contact], day: date, preview_days: int,
                         language: str = text.DEFAULT_LANGUAGE,
                         recipient_name: str = "") -> Optional[Digest]:
    """Today's birthdays plus those in (day, day + preview_days]; None on a day without birthdays."""
    s = text.strings(language)
    todays = facts.born_on(contacts, day)
    if not todays:
        return None

    horizon = day + timedelta(days=preview_days)
    upcoming = sorted(
        ((facts.next_occurrence(c, day + timedelta(days=1)), c) for c in contacts),
        key=lambda pair: (pair[0], pair[1].name),
    )
    upcoming = [(when, c) for when, c in upcoming if when <= horizon]

    greeting = templates.greeting(recipient_name, s)
    intro = (s["daily_intro"].format(count=len(todays)) if len(todays) > 1
             else s["daily_intro_one"])
    upcoming_intro = ""
    if upcoming:
        upcoming_intro = (
            s["daily_upcoming_intro"].format(days=preview_days, count=len(upcoming))
            if len(upcoming) > 1 else s["daily_upcoming_intro_one"].format(days=preview_days)
        )

    today_items = [
        {
            "contact": c,
            "age": _age_suffix(c, day.year, s["daily_turns_today"]),
            "messaging_link": facts.messaging_link(c),
            "social": [(h, facts.social_link(h)) for h in c.social_handles],
        }
        for c in todays
    ]
    upcoming_items = [{"contact": c, "when": _day_label(when, language)} for when, c in upcoming]
    body = templates.render(
        "daily.html", s,
        title=s["daily_title"],
        subtitle=f"{day.day}. {text.month_name(day.month, language)} {day.year}",
        greeting=greeting,
        intro=intro,
        today=today_items,
        upcoming=upcoming_items,
        upcoming_intro=upcoming_intro,
    )

    lines = [greeting, "", intro, ""]
    for item in today_items:
        name, age = item["contact"].name, item["age"]
        lines.append(f"🎂 {name} - {age}" if age else f"🎂 {name}")
    if upcoming:
        lines += ["", upcoming_intro]
        lines += [f"- {item['contact'].name}: {item['when']}" for item in upcoming_items]
    return Digest(subject=s["daily_subject"], text="\n".join(lines), html=body)


def compose_monthly_digest(contacts: Sequence[Contact], month: int, year: int,
                           language: str = text.DEFAULT_LANGUAGE,
                           recipient_name: str = "") -> Optional[Digest]:
    """All birthdays of `month`, by day then name; None when the month has none."""
    s = text.strings(language)
    month_contacts = facts.in_month(contacts, month)
    if not month_contacts:
        return None

    month_long = text.month_name(month, language)
    greeting = templates.greeting(recipient_name, s)
    count = (s["monthly_count"].format(count=len(month_contacts)) if len(month_contacts) > 1
             else s["monthly_count_one"])
    intro = s["monthly_intro"].format(month=month_long, year=year)
    items = [
        {
            "date": facts.mail_date(c, language),
            "name": c.name,
            "turns": facts.mail_turns(c, year, language),
        }
        for c in month_contacts
    ]
    body = templates.render(
        "monthly.html", s,
        title=s["monthly_title"].format(month=month_long),
        greeting=greeting,
        intro=intro,
        count=count,
        items=items,
    )

    lines = [greeting, "", intro, count]
    lines += [f"- {facts.mail_line(c, year, language)}" for c in month_contacts]
    return Digest(subject=s["monthly_subject"], text="\n".join(lines), html=body)


def compose_change_notification(report: ChangeReport, language: str = text.DEFAULT_LANGUAGE,
                                recipient_name: str = "") -> Optional[Digest]:
    """Lists created/updated events; None for a run that changed nothing."""
    if not has_any_change(report):
        return None
    s = text.strings(language)
    greeting = templates.greeting(recipient_name, s)
    sections = [(s["changes_individual"], report.individual),
                (s["changes_summary"], report.summary)]
    body = templates.render(
        "changes.html", s,
        title=s["changes_title"],
        greeting=greeting,
        sections=sections,
    )

    lines = [greeting, "", s["changes_intro"]]
    for title, changes in sections:
        if not changes.has_changes():
            continue
        lines += ["", title]
        for label, identifiers in ((s["changes_created"], changes.created),
                                   (s["changes_updated"], changes.updated)):
            if identifiers:
                lines.append(f"{label}:")
                lines += [f"- {i}" for i in identifiers]
    return Digest(subject=s["changes_subject"], text="\n".join(lines), html=body)
