"""
Reconciles birthday events in the calendar with the contact list.

Two reconcilers share one create-or-update routine: look for an event
with the exact title in the target day span, create it when missing,
otherwise rewrite it only where the stored state differs from the
freshly rendered one. Running a reconciler twice with the same inputs
leaves the calendar untouched the second time.
"""

import calendar as _calendar
import logging
import time
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Optional, Protocol, Sequence

from birthdays import contact as facts
from birthdays import text
from birthdays.contact import Contact
from birthdays.errors import ProviderError, ProviderFatalError
from birthdays.report import ReconciliationResult, SectionChanges

log = logging.getLogger(__name__)

SUMMARY_REMINDER_METHOD = "email"


@dataclass(frozen=True)
class Reminder:
    method: str
    minutes: int


@dataclass
class CalendarEvent:
    """An all-day event as seen by the reconcilers."""
    event_id: str
    title: str
    start: date
    description: str = ""
    reminders: tuple = ()


class CalendarPort(Protocol):
    def get_events(self, start: date, end: date) -> list[CalendarEvent]: ...

    def create_all_day_event(self, title: str, day: date, description: str,
                             reminders: Sequence[Reminder]) -> CalendarEvent: ...

    def update_event(self, event: CalendarEvent, description: Optional[str] = None,
                     reminders: Optional[Sequence[Reminder]] = None) -> CalendarEvent: ...

    def delete_event(self, event: CalendarEvent) -> None: ...


@dataclass(frozen=True)
class IndividualBirthdayTarget:
    contact: Contact
    occurrence: date


@dataclass(frozen=True)
class MonthlySummaryTarget:
    year: int
    month: int
    contacts: tuple = field(default_factory=tuple)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)


def reminders_for(method: str, minutes: int) -> tuple:
    if method == "none":
        return ()
    return (Reminder(method, minutes),)


def add_months(day: date, months: int) -> date:
    """Shift by whole calendar months, clamping the day to the target month's length."""
    index = day.month - 1 + months
    year, month = day.year + index // 12, index % 12 + 1
    return date(year, month, min(day.day, _calendar.monthrange(year, month)[1]))


def find_event(calendar: CalendarPort, title: str, day: date) -> Optional[CalendarEvent]:
    """Event titled exactly `title` in the all-day span of `day`."""
    matches = [e for e in calendar.get_events(day, day + timedelta(days=1)) if e.title == title]
    if len(matches) > 1:
        log.warning(f"Found {len(matches)} events '{title}' on {day.isoformat()}, using the first")
    return matches[0] if matches else None


class _Reconciler:

    def __init__(self, calendar: CalendarPort, language: str = text.DEFAULT_LANGUAGE):
        self.calendar = calendar
        self.language = language

    def _ensure(self, identifier: str, title: str, day: date, description: str,
                reminders: tuple, compare_reminders: bool) -> ReconciliationResult:
        event = find_event(self.calendar, title, day)
        if event is None:
            self.calendar.create_all_day_event(title, day, description, reminders)
            log.info(f"Event '{title}' for {identifier} created")
            return ReconciliationResult.created(identifier)

        reminders_match = set(event.reminders) == set(reminders)
        if event.description != description:
            if compare_reminders:
                self.calendar.update_event(event, description=description, reminders=reminders)
            else:
                self.calendar.update_event(event, description=description)
            log.info(f"Event '{title}' for {identifier} updated")
            return ReconciliationResult.updated(identifier)
        if compare_reminders and not reminders_match:
            self.calendar.update_event(event, reminders=reminders)
            log.info(f"Reminders of '{title}' for {identifier} updated")
            return ReconciliationResult.updated(identifier)

        log.debug(f"Event '{title}' for {identifier} already up to date")
        return ReconciliationResult.unchanged(identifier)

    def _guarded(self, identifier: str, action: Callable[[], ReconciliationResult]) -> ReconciliationResult:
        try:
            return action()
        except ProviderFatalError:
            raise
        except ProviderError as e:
            log.error(f"Error creating/updating event for {identifier}: {e}")
            return ReconciliationResult.failed(identifier, e)


class IndividualEventReconciler(_Reconciler):
    """One all-day event per contact on its next birthday inside the window."""

    def __init__(self, calendar: CalendarPort, language: str = text.DEFAULT_LANGUAGE,
                 rate_limit_every: int = 20, rate_limit_pause: float = 1.0,
                 sleep: Callable[[float], None] = time.sleep):
        super().__init__(calendar, language)
        self.rate_limit_every = rate_limit_every
        self.rate_limit_pause = rate_limit_pause
        self._sleep = sleep

    def identifier(self, target: IndividualBirthdayTarget) -> str:
        return f"{target.contact.name} ({target.occurrence.strftime('%d.%m.%Y')})"

    def reconcile(self, contacts: Sequence[Contact], today: date, look_ahead_months: int,
                  reminder_minutes: int, reminder_method: str) -> SectionChanges:
        end = add_months(today, look_ahead_months)
        reminders = reminders_for(reminder_method, reminder_minutes)
        changes = SectionChanges()

        log.info(f"Creating/Updating birthday events from {today} to {end} for {len(contacts)} contacts...")
        for index, contact in enumerate(contacts, start=1):
            occurrence = facts.next_occurrence_in_range(contact, today, end)
            if occurrence is None:
                changes.record(ReconciliationResult.skipped(contact.name, "no occurrence in window"))
            else:
                target = IndividualBirthdayTarget(contact, occurrence)
                changes.record(self._guarded(
                    self.identifier(target),
                    lambda: self._reconcile_target(target, reminders),
                ))
            if self.rate_limit_pause and index % self.rate_limit_every == 0 and index < len(contacts):
                self._sleep(self.rate_limit_pause)

        log.info(f"Individual birthday events: {changes.summary()}")
        return changes

    def _reconcile_target(self, target: IndividualBirthdayTarget, reminders: tuple) -> ReconciliationResult:
        return self._ensure(
            self.identifier(target),
            text.event_title(target.contact.name, self.language),
            target.occurrence,
            facts.event_description(target.contact, target.occurrence, self.language),
            reminders,
            compare_reminders=True,
        )


class MonthlySummaryReconciler(_Reconciler):
    """One roll-up event on the 1st of every month in the window."""

    def __init__(self, calendar: CalendarPort, language: str = text.DEFAULT_LANGUAGE,
                 reminder_minutes: int = 60 * 24 * 4):
        super().__init__(calendar, language)
        self.summary_reminders = reminders_for(SUMMARY_REMINDER_METHOD, reminder_minutes)

    def targets(self, contacts: Sequence[Contact], today: date, look_ahead_months: int) -> list[MonthlySummaryTarget]:
        first = today.replace(day=1)
        months = [add_months(first, offset) for offset in range(look_ahead_months)]
        return [
            MonthlySummaryTarget(m.year, m.month, tuple(facts.in_month(contacts, m.month)))
            for m in months
        ]

    def identifier(self, target: MonthlySummaryTarget) -> str:
        return f"{text.month_name(target.month, self.language)} {target.year}"

    def description(self, target: MonthlySummaryTarget) -> str:
        header = text.strings(self.language)["summary_header"].format(
            month=text.month_name(target.month, self.language)
        )
        lines = [facts.summary_line(c, target.year, self.language) for c in target.contacts]
        return f"{header}\n\n" + "\n".join(lines)

    def reconcile(self, contacts: Sequence[Contact], today: date, look_ahead_months: int,
                  reminder_minutes: Optional[int] = None,
                  reminder_method: Optional[str] = None) -> SectionChanges:
        """Summaries carry one fixed reminder; the per-contact reminder arguments are ignored."""
        changes = SectionChanges()
        log.info(f"Creating/Updating birthday summary events for {look_ahead_months} months...")
        for target in self.targets(contacts, today, look_ahead_months):
            identifier = self.identifier(target)
            if not target.contacts:
                changes.record(ReconciliationResult.skipped(identifier, "no birthdays in month"))
                continue
            changes.record(self._guarded(identifier, lambda: self._ensure(
                identifier,
                text.summary_title(self.language),
                target.first_day,
                self.description(target),
                self.summary_reminders,
                compare_reminders=False,
            )))

        log.info(f"Monthly summary events: {changes.summary()}")
        return changes


def delete_events_by_title(calendar: CalendarPort, title: str, start: date, end: date) -> int:
    """Delete every event titled exactly `title` within [start, end)."""
    doomed = [e for e in calendar.get_events(start, end) if e.title == title]
    log.info(f"Found {len(doomed)} events '{title}' between {start} and {end}, deleting...")
    for event in doomed:
        calendar.delete_event(event)
        log.info(f"'{event.title}' on {event.start} deleted")
    return len(doomed)
