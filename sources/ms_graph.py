"""
Microsoft Graph bindings: Outlook contacts, contact folders, the birthday
calendar and the mailbox owner's profile.
"""

import os
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional, Sequence
from urllib.parse import urlencode
from zoneinfo import ZoneInfo

import requests

from auth.graph_auth import get_access_token
from birthdays.calendar_sync import CalendarEvent, Reminder
from birthdays.contact import Birthday, GroupMembership
from birthdays.errors import ProviderError, ProviderFatalError, ProviderTransientError
from sources.contacts import ContactPage, RawContact

GRAPH_BASE = "https://graph.microsoft.com/v1.0"
TIMEOUT = 30

# Outlook stores a birthday without year as 1604; some clients write year 1
NO_YEAR_SENTINELS = (1, 1604)

# PS_PUBLIC_STRINGS named property holding the reminder method we set
REMINDER_METHOD_PROPERTY = (
    "String {00020329-0000-0000-C000-000000000046} Name BirthdaySyncReminderMethod"
)

CONTACT_FIELDS = ",".join([
    "displayName", "birthday", "emailAddresses", "mobilePhone", "homePhones",
    "businessPhones", "homeAddress", "businessAddress", "otherAddress",
    "personalNotes", "categories", "parentFolderId",
])
EVENT_FIELDS = "subject,body,start,isAllDay,isReminderOn,reminderMinutesBeforeStart"


class GraphNotFoundError(ProviderError):
    pass


def user_base() -> str:
    return f"{GRAPH_BASE}/users/{os.environ['MS_USER_ID']}"


def _headers(extra: Optional[dict] = None) -> dict:
    try:
        token = get_access_token()
    except RuntimeError as e:
        raise ProviderFatalError(str(e)) from e
    headers = {"Authorization": f"Bearer {token}"}
    if extra:
        headers.update(extra)
    return headers


def _request(method: str, url: str, params=None, json=None, headers=None) -> dict:
    try:
        r = requests.request(method, url, headers=_headers(headers), params=params,
                             json=json, timeout=TIMEOUT)
    except requests.RequestException as e:
        raise ProviderTransientError(f"{method} {url}: {e}") from e

    if r.status_code == 429 or r.status_code >= 500:
        raise ProviderTransientError(f"{method} {url}: HTTP {r.status_code} {r.text[:200]}")
    if r.status_code in (401, 403):
        raise ProviderFatalError(f"{method} {url}: HTTP {r.status_code} {r.text[:200]}")
    if r.status_code == 404:
        raise GraphNotFoundError(f"{method} {url}: not found")
    if r.status_code >= 400:
        raise ProviderError(f"{method} {url}: HTTP {r.status_code} {r.text[:200]}")
    if not r.content:
        return {}
    try:
        return r.json()
    except ValueError as e:
        raise ProviderTransientError(f"{method} {url}: unreadable response body") from e


def _get(url, params=None, headers=None) -> dict:
    return _request("GET", url, params=params, headers=headers)


def post(url, payload: dict) -> dict:
    return _request("POST", url, json=payload)


def _paged(url, params=None, headers=None) -> Iterator[dict]:
    data = _get(url, params=params, headers=headers)
    while True:
        yield from data.get("value", [])
        next_link = data.get("@odata.nextLink")
        if not next_link:
            return
        data = _get(next_link, headers=headers)


# === CONTACTS ===

def _parse_birthday(value: Optional[str]) -> Optional[Birthday]:
    if not value:
        return None
    day = date.fromisoformat(value[:10])
    year = None if day.year in NO_YEAR_SENTINELS else day.year
    return Birthday(day.month, day.day, year)


def parse_contact(c: dict) -> RawContact:
    """Decode one Graph contact resource."""
    emails = c.get("emailAddresses") or []
    phones = [c.get("mobilePhone")] + (c.get("homePhones") or []) + (c.get("businessPhones") or [])
    addresses = [c.get(key) or {} for key in ("homeAddress", "businessAddress", "otherAddress")]
    folder = c.get("parentFolderId")
    return RawContact(
        display_name=(c.get("displayName") or "").strip(),
        birthday=_parse_birthday(c.get("birthday")),
        memberships=[GroupMembership(folder)] if folder else [],
        categories=list(c.get("categories") or []),
        email=emails[0].get("address") if emails else None,
        phone=next((p for p in phones if p), None),
        city=next((a["city"] for a in addresses if a.get("city")), None),
        notes=c.get("personalNotes") or "",
    )


def get_contact_folders() -> dict[str, str]:
    """Top-level contact folders, id -> display name."""
    return {
        f["id"]: f.get("displayName", "")
        for f in _paged(f"{user_base()}/contactFolders", params={"$select": "id,displayName"})
    }


class GraphDirectory:
    """Pages through the default contact folder, then every other top-level folder.

    The page token is "<folder index> <url>": the folder's `@odata.nextLink`
    while it has more pages, then the first page of the following folder.
    """

    def __init__(self, folder_ids: Sequence[str] = (), page_size: int = 100):
        query = urlencode({"$select": CONTACT_FIELDS, "$top": page_size})
        base = user_base()
        self._starts = [f"{base}/contacts?{query}"] + [
            f"{base}/contactFolders/{fid}/contacts?{query}" for fid in folder_ids
        ]

    def list_contacts(self, page_token: Optional[str] = None) -> ContactPage:
        if page_token:
            index, url = page_token.split(" ", 1)
            index = int(index)
        else:
            index, url = 0, self._starts[0]
        data = _get(url)
        records = [parse_contact(c) for c in data.get("value", [])]

        next_link = data.get("@odata.nextLink")
        if next_link:
            next_token = f"{index} {next_link}"
        elif index + 1 < len(self._starts):
            next_token = f"{index + 1} {self._starts[index + 1]}"
        else:
            next_token = None
        return ContactPage(records, next_token)


class GraphLabelResolver:
    """Maps contact folder ids to names; the default folder and unknown ids are dropped."""

    def __init__(self, folders: dict[str, str]):
        self.folders = folders

    def resolve_names(self, group_ids: list[str]) -> list[str]:
        return [self.folders[gid] for gid in group_ids if self.folders.get(gid)]


# === CALENDAR ===

class GraphCalendar:

    def __init__(self, calendar_id: str = "", timezone: str = "Europe/Berlin"):
        self.calendar_id = calendar_id
        self.timezone = timezone
        self.tz = ZoneInfo(timezone)

    def _base(self) -> str:
        if self.calendar_id:
            return f"{user_base()}/calendars/{self.calendar_id}"
        return f"{user_base()}/calendar"

    def ensure_exists(self) -> None:
        try:
            _get(self._base(), params={"$select": "id,name"})
        except GraphNotFoundError as e:
            raise ProviderFatalError(f"Calendar not found: {self.calendar_id or 'default'}") from e

    def _local(self, day: date) -> str:
        return datetime.combine(day, time.min, tzinfo=self.tz).isoformat()

    def _event_from_graph(self, e: dict) -> CalendarEvent:
        reminders = ()
        if e.get("isReminderOn"):
            props = {p["id"].lower(): p.get("value") for p in e.get("singleValueExtendedProperties", [])}
            method = props.get(REMINDER_METHOD_PROPERTY.lower()) or "popup"
            reminders = (Reminder(method, int(e.get("reminderMinutesBeforeStart", 0))),)
        body = (e.get("body") or {}).get("content") or ""
        return CalendarEvent(
            event_id=e["id"],
            title=e.get("subject") or "",
            start=date.fromisoformat(e["start"]["dateTime"][:10]),
            description=body.replace("\r\n", "\n"),
            reminders=reminders,
        )

    def get_events(self, start: date, end: date) -> list[CalendarEvent]:
        headers = {"Prefer": f'outlook.timezone="{self.timezone}", outlook.body-content-type="text"'}
        params = {
            "startDateTime": self._local(start),
            "endDateTime": self._local(end),
            "$select": EVENT_FIELDS,
            "$expand": f"singleValueExtendedProperties($filter=id eq '{REMINDER_METHOD_PROPERTY}')",
            "$top": 100,
        }
        try:
            raw = list(_paged(f"{self._base()}/calendarView", params=params, headers=headers))
        except GraphNotFoundError as e:
            raise ProviderFatalError(f"Calendar not found: {self.calendar_id or 'default'}") from e
        return [self._event_from_graph(e) for e in raw]

    @staticmethod
    def _reminder_payload(reminders: Sequence[Reminder]) -> dict:
        if not reminders:
            return {"isReminderOn": False}
        reminder = reminders[0]
        return {
            "isReminderOn": True,
            "reminderMinutesBeforeStart": reminder.minutes,
            "singleValueExtendedProperties": [
                {"id": REMINDER_METHOD_PROPERTY, "value": reminder.method},
            ],
        }

    def create_all_day_event(self, title: str, day: date, description: str,
                             reminders: Sequence[Reminder]) -> CalendarEvent:
        payload = {
            "subject": title,
            "body": {"contentType": "text", "content": description},
            "isAllDay": True,
            "start": {"dateTime": f"{day.isoformat()}T00:00:00", "timeZone": self.timezone},
            "end": {"dateTime": f"{(day + timedelta(days=1)).isoformat()}T00:00:00",
                    "timeZone": self.timezone},
            "showAs": "free",
            **self._reminder_payload(reminders),
        }
        created = post(f"{self._base()}/events", payload)
        return CalendarEvent(
            event_id=created.get("id", ""),
            title=title,
            start=day,
            description=description,
            reminders=tuple(reminders),
        )

    def update_event(self, event: CalendarEvent, description: Optional[str] = None,
                     reminders: Optional[Sequence[Reminder]] = None) -> CalendarEvent:
        payload = {}
        if description is not None:
            payload["body"] = {"contentType": "text", "content": description}
            event.description = description
        if reminders is not None:
            payload.update(self._reminder_payload(reminders))
            event.reminders = tuple(reminders)
        if payload:
            _request("PATCH", f"{user_base()}/events/{event.event_id}", json=payload)
        return event

    def delete_event(self, event: CalendarEvent) -> None:
        _request("DELETE", f"{user_base()}/events/{event.event_id}")


# === PROFILE ===

def get_me() -> dict:
    """Mailbox owner's first name and address."""
    data = _get(user_base(), params={"$select": "givenName,mail,userPrincipalName,displayName"})
    return {
        "given_name": data.get("givenName") or "",
        "display_name": data.get("displayName") or "",
        "mail": data.get("mail") or data.get("userPrincipalName") or "",
    }
