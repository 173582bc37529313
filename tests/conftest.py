"""
Shared pytest fixtures and in-memory fakes of the provider ports.
"""

import itertools
from datetime import date

import pytest

from birthdays.calendar_sync import CalendarEvent
from birthdays.contact import Birthday, Contact
from birthdays.errors import ProviderTransientError
from sources.contacts import ContactPage


class FakeCalendar:
    """Calendar port backed by a list; titles in `fail_titles` raise on create."""

    def __init__(self, events=None):
        self.events = list(events or [])
        self.created = []
        self.updates = []
        self.fail_titles = set()
        self.fail_with = ProviderTransientError
        self._ids = itertools.count(1)

    def get_events(self, start, end):
        return [e for e in self.events if start <= e.start < end]

    def create_all_day_event(self, title, day, description, reminders):
        if title in self.fail_titles:
            raise self.fail_with(f"cannot create {title}")
        event = CalendarEvent(f"evt-{next(self._ids)}", title, day, description, tuple(reminders))
        self.events.append(event)
        self.created.append(event)
        return event

    def update_event(self, event, description=None, reminders=None):
        self.updates.append((event.event_id, description, reminders))
        if description is not None:
            event.description = description
        if reminders is not None:
            event.reminders = tuple(reminders)
        return event

    def delete_event(self, event):
        self.events.remove(event)

    def titled(self, title):
        return [e for e in self.events if e.title == title]


class FakeDirectory:
    """Serves `pages` in order; `failures` maps page index -> errors to raise first."""

    def __init__(self, pages, failures=None):
        self.pages = pages
        self.failures = dict(failures or {})
        self.requested = []

    def list_contacts(self, page_token=None):
        index = int(page_token) if page_token else 0
        self.requested.append(index)
        pending = self.failures.get(index)
        if pending:
            self.failures[index] = pending[1:]
            raise pending[0]
        next_token = str(index + 1) if index + 1 < len(self.pages) else None
        return ContactPage(self.pages[index], next_token)


class FakeResolver:

    def __init__(self, names):
        self.names = names

    def resolve_names(self, group_ids):
        return [self.names[g] for g in group_ids if g in self.names]


class FakeMailer:

    def __init__(self):
        self.sent = []

    def send(self, to, from_addr, sender_name, subject, text_body, html_body):
        self.sent.append({
            "to": to, "from": from_addr, "sender_name": sender_name,
            "subject": subject, "text": text_body, "html": html_body,
        })
        return True


@pytest.fixture
def calendar():
    return FakeCalendar()


@pytest.fixture
def ann():
    return Contact("Ann", Birthday(1, 15, 1990), labels=("Family",), phone_number="+49 170 1234567")


@pytest.fixture
def contacts():
    return [
        Contact("Bob", Birthday(1, 3)),
        Contact("Ann", Birthday(1, 15, 1990), labels=("Family",)),
        Contact("Carl", Birthday(2, 1, 1985), email="carl@example.com"),
        Contact("Dora", Birthday(7, 20, 2000), social_handles=("dora.d",)),
    ]


@pytest.fixture
def today():
    return date(2024, 1, 15)
