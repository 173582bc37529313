"""
Pulls contacts with birthdays out of the directory provider.

Pages until the continuation token runs out, retrying a failing page
with exponential backoff. Either the whole list comes back or the error
propagates: a partial list would silently drop birthdays downstream.
"""

import logging
import random
import re
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Protocol

from birthdays.contact import Birthday, Contact, GroupMembership, sort_key
from birthdays.errors import ProviderTransientError, ValidationError

log = logging.getLogger(__name__)

SOCIAL_PREFIXES = ("Instagram:", "@")


@dataclass
class RawContact:
    """A directory record, already decoded from the provider's wire format."""
    display_name: str
    birthday: Optional[Birthday]
    memberships: list[GroupMembership] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    notes: str = ""


@dataclass
class ContactPage:
    records: list[RawContact]
    next_page_token: Optional[str] = None


class DirectoryPort(Protocol):
    def list_contacts(self, page_token: Optional[str] = None) -> ContactPage: ...


class LabelResolver(Protocol):
    def resolve_names(self, group_ids: list[str]) -> list[str]: ...


def extract_social_handles(notes: str) -> list[str]:
    """Instagram handles from free-text notes: `Instagram: name` or `@name` chunks."""
    handles = []
    for chunk in re.split(r"\.\s+|\n", notes or ""):
        chunk = chunk.strip()
        prefix = next((p for p in SOCIAL_PREFIXES if chunk.startswith(p)), None)
        if prefix is None:
            continue
        rest = chunk[len(prefix):].strip().split()
        if not rest:
            continue
        handle = rest[0].lstrip("@").rstrip(".,;")
        if handle and handle not in handles:
            handles.append(handle)
    return handles


def matches_filter(labels: Iterable[str], label_filter: frozenset, use_label_filter: bool) -> bool:
    if not use_label_filter or not label_filter:
        return True
    return bool(label_filter.intersection(labels))


def to_contact(raw: RawContact, labels: list[str]) -> Contact:
    return Contact(
        name=raw.display_name,
        birthday=raw.birthday,
        labels=tuple(labels),
        email=raw.email or None,
        city=raw.city or None,
        phone_number=raw.phone or None,
        social_handles=tuple(extract_social_handles(raw.notes)),
    )


def _fetch_page(directory: DirectoryPort, page_token: Optional[str], max_retries: int,
                sleep: Callable[[float], None]) -> ContactPage:
    attempt = 0
    while True:
        try:
            return directory.list_contacts(page_token)
        except ProviderTransientError as e:
            if attempt >= max_retries:
                log.error(f"Fetching contacts failed after {attempt + 1} attempts: {e}")
                raise
            delay = 2 ** attempt + random.uniform(0, 1)
            attempt += 1
            log.warning(f"Fetching contacts failed ({e}), retry {attempt}/{max_retries} in {delay:.1f}s")
            sleep(delay)


def fetch_contacts(directory: DirectoryPort, resolver: LabelResolver,
                   label_filter: Iterable[str] = (), use_label_filter: bool = False,
                   max_retries: int = 5, sleep: Callable[[float], None] = time.sleep) -> list[Contact]:
    """All contacts with a birthday, sorted by (month, day)."""
    label_filter = frozenset(label_filter)
    if use_label_filter and label_filter:
        log.info(f"Fetching contacts with any label of {sorted(label_filter)}...")
    else:
        log.info("Fetching all contacts...")

    contacts = []
    page_token = None
    pages = 0
    while True:
        page = _fetch_page(directory, page_token, max_retries, sleep)
        pages += 1
        for raw in page.records:
            if raw.birthday is None:
                continue
            labels = resolver.resolve_names([m.group_id for m in raw.memberships])
            labels += [c for c in raw.categories if c not in labels]
            if not matches_filter(labels, label_filter, use_label_filter):
                continue
            try:
                contacts.append(to_contact(raw, labels))
            except ValidationError as e:
                log.warning(f"Skipping contact record: {e}")
        page_token = page.next_page_token
        if not page_token:
            break

    contacts.sort(key=sort_key)
    log.info(f"Got {len(contacts)} contacts with birthdays from {pages} page(s)")
    return contacts
