"""
Tests for contact ingestion (sources/contacts.py): paging, filtering, retries.
"""

import pytest

from birthdays.contact import Birthday, GroupMembership
from birthdays.errors import ProviderError, ProviderTransientError
from sources.contacts import RawContact, extract_social_handles, fetch_contacts, matches_filter

from conftest import FakeDirectory, FakeResolver


def raw(name, birthday, groups=(), **kwargs):
    return RawContact(
        display_name=name,
        birthday=birthday,
        memberships=[GroupMembership(g) for g in groups],
        **kwargs,
    )


RESOLVER = FakeResolver({"g-family": "Family", "g-friends": "Friends"})


class TestSocialHandles:

    def test_prefixed_and_at_handles(self):
        assert extract_social_handles("Met at uni. Instagram: @ann.s. Likes cats") == ["ann.s"]
        assert extract_social_handles("@bob\n@carl") == ["bob", "carl"]

    def test_no_handles(self):
        assert extract_social_handles("") == []
        assert extract_social_handles("Email me at ann@example.com") == []

    def test_duplicates_collapse(self):
        assert extract_social_handles("@bob. Instagram: bob") == ["bob"]


class TestFetch:

    def test_pages_until_token_runs_out(self):
        directory = FakeDirectory([
            [raw("Ann", Birthday(5, 1, 1990))],
            [raw("Bob", Birthday(2, 3))],
            [raw("Carl", Birthday(9, 9, 1970))],
        ])
        contacts = fetch_contacts(directory, RESOLVER)
        assert directory.requested == [0, 1, 2]
        assert [c.name for c in contacts] == ["Bob", "Ann", "Carl"]

    def test_sorts_by_month_and_day_not_year(self):
        directory = FakeDirectory([[
            raw("Old", Birthday(3, 20, 1940)),
            raw("Young", Birthday(3, 2, 2010)),
            raw("Jan", Birthday(1, 30, 2000)),
        ]])
        assert [c.name for c in fetch_contacts(directory, RESOLVER)] == ["Jan", "Young", "Old"]

    def test_skips_records_without_birthday_or_name(self):
        directory = FakeDirectory([[
            raw("Ann", None),
            raw("", Birthday(1, 1)),
            raw("Bob", Birthday(1, 2)),
        ]])
        assert [c.name for c in fetch_contacts(directory, RESOLVER)] == ["Bob"]

    def test_maps_fields(self):
        directory = FakeDirectory([[raw(
            "Ann", Birthday(1, 15, 1990), groups=["g-family", "unknown"],
            categories=["Tennis"], email="ann@example.com", phone="+49 1", city="Berlin",
            notes="Instagram: ann.s",
        )]])
        [ann] = fetch_contacts(directory, RESOLVER)
        assert ann.labels == ("Family", "Tennis")
        assert ann.email == "ann@example.com"
        assert ann.phone_number == "+49 1"
        assert ann.city == "Berlin"
        assert ann.social_handles == ("ann.s",)


class TestLabelFilter:

    def family_directory(self):
        return FakeDirectory([[raw("Ann", Birthday(1, 15), groups=["g-family"])]])

    def test_filter_disabled_includes_everyone(self):
        contacts = fetch_contacts(self.family_directory(), RESOLVER,
                                  label_filter={"Friends"}, use_label_filter=False)
        assert [c.name for c in contacts] == ["Ann"]

    def test_filter_enabled_excludes_non_matching(self):
        contacts = fetch_contacts(self.family_directory(), RESOLVER,
                                  label_filter={"Friends"}, use_label_filter=True)
        assert contacts == []

    def test_filter_enabled_includes_matching(self):
        contacts = fetch_contacts(self.family_directory(), RESOLVER,
                                  label_filter={"Friends", "Family"}, use_label_filter=True)
        assert [c.name for c in contacts] == ["Ann"]

    def test_empty_filter_matches_everything(self):
        assert matches_filter([], frozenset(), True)
        assert matches_filter(["Work"], frozenset(), True)
        assert not matches_filter([], frozenset({"Work"}), True)


class TestRetries:

    def test_transient_errors_are_retried_on_same_page(self):
        sleeps = []
        directory = FakeDirectory(
            [[raw("Ann", Birthday(1, 1))], [raw("Bob", Birthday(2, 2))]],
            failures={1: [ProviderTransientError("429"), ProviderTransientError("503")]},
        )
        contacts = fetch_contacts(directory, RESOLVER, max_retries=3, sleep=sleeps.append)
        assert [c.name for c in contacts] == ["Ann", "Bob"]
        assert directory.requested == [0, 1, 1, 1]
        assert len(sleeps) == 2
        assert 1 <= sleeps[0] <= 2
        assert 2 <= sleeps[1] <= 3

    def test_exhausted_retries_abort_ingestion(self):
        sleeps = []
        directory = FakeDirectory(
            [[raw("Ann", Birthday(1, 1))]],
            failures={0: [ProviderTransientError("down")] * 3},
        )
        with pytest.raises(ProviderTransientError):
            fetch_contacts(directory, RESOLVER, max_retries=2, sleep=sleeps.append)
        assert len(sleeps) == 2

    def test_non_transient_errors_are_not_retried(self):
        sleeps = []
        directory = FakeDirectory(
            [[raw("Ann", Birthday(1, 1))]],
            failures={0: [ProviderError("bad request")]},
        )
        with pytest.raises(ProviderError):
            fetch_contacts(directory, RESOLVER, sleep=sleeps.append)
        assert sleeps == []
