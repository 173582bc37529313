"""
Tests for the contact model and derived birthday facts (birthdays/contact.py).
"""

from datetime import date

import pytest

from birthdays import contact as facts
from birthdays import text
from birthdays.contact import Birthday, Contact
from birthdays.errors import UnknownYearError, ValidationError


class TestConstruction:

    def test_requires_name(self):
        with pytest.raises(ValidationError):
            Contact("", Birthday(1, 1, 1990))
        with pytest.raises(ValidationError):
            Contact("   ", Birthday(1, 1, 1990))

    def test_requires_birthday(self):
        with pytest.raises(ValidationError):
            Contact("Ann", None)

    def test_rejects_impossible_dates(self):
        with pytest.raises(ValidationError):
            Birthday(13, 1)
        with pytest.raises(ValidationError):
            Birthday(4, 31)
        with pytest.raises(ValidationError):
            Birthday(2, 29, 2023)

    def test_leap_day_without_year_is_valid(self):
        assert Birthday(2, 29).day == 29

    def test_labels_and_handles_become_tuples(self):
        c = Contact("Ann", Birthday(1, 1), labels=["Family"], social_handles=["ann"])
        assert c.labels == ("Family",)
        assert c.social_handles == ("ann",)


class TestAge:

    def test_unknown_year_is_explicit(self):
        bob = Contact("Bob", Birthday(5, 1))
        assert not facts.has_known_year(bob)
        with pytest.raises(UnknownYearError):
            facts.calculate_age(bob, date(2024, 6, 1))
        with pytest.raises(UnknownYearError):
            facts.age_turning_this_year(bob, date(2024, 6, 1))

    def test_born_this_year_is_a_known_year(self):
        baby = Contact("Baby", Birthday(3, 1, 2024))
        assert facts.has_known_year(baby)
        assert facts.age_turning_this_year(baby, date(2024, 5, 1)) == 0
        assert facts.calculate_age(baby, date(2024, 5, 1)) == 0

    def test_calculate_age_before_and_on_birthday(self):
        c = Contact("Ann", Birthday(6, 15, 1990))
        assert facts.calculate_age(c, date(2024, 6, 14)) == 33
        assert facts.calculate_age(c, date(2024, 6, 15)) == 34
        assert facts.age_turning_this_year(c, date(2024, 1, 1)) == 34

    def test_age_in_days(self):
        c = Contact("Ann", Birthday(1, 1, 2024))
        assert facts.age_in_days(c, date(2024, 1, 11)) == 10


class TestOccurrences:

    def test_next_occurrence_rolls_to_next_year(self):
        c = Contact("Ann", Birthday(3, 10, 1980))
        assert facts.next_occurrence(c, date(2024, 6, 1)) == date(2025, 3, 10)
        assert facts.next_occurrence(c, date(2024, 1, 1)) == date(2024, 3, 10)

    def test_next_occurrence_on_the_day_itself(self):
        c = Contact("Ann", Birthday(3, 10))
        assert facts.next_occurrence(c, date(2024, 3, 10)) == date(2024, 3, 10)

    def test_next_occurrence_in_range_is_half_open(self):
        start, end = date(2024, 6, 1), date(2024, 9, 1)
        assert facts.next_occurrence_in_range(Contact("A", Birthday(8, 1)), start, end) == date(2024, 8, 1)
        assert facts.next_occurrence_in_range(Contact("B", Birthday(9, 1)), start, end) is None
        assert facts.next_occurrence_in_range(Contact("C", Birthday(3, 10)), start, end) is None
        assert facts.next_occurrence_in_range(Contact("D", Birthday(6, 1)), start, end) == date(2024, 6, 1)

    def test_next_occurrence_in_range_across_new_year(self):
        c = Contact("Ann", Birthday(1, 5))
        assert facts.next_occurrence_in_range(c, date(2024, 12, 1), date(2025, 2, 1)) == date(2025, 1, 5)

    def test_leap_day_falls_back_to_feb_28(self):
        c = Contact("Leo", Birthday(2, 29, 2000))
        assert facts.next_occurrence(c, date(2025, 1, 1)) == date(2025, 2, 28)
        assert facts.next_occurrence(c, date(2024, 1, 1)) == date(2024, 2, 29)
        assert facts.is_birthday_on(c, date(2025, 2, 28))
        assert not facts.is_birthday_on(c, date(2024, 2, 28))

    def test_days_until_next_occurrence(self):
        assert facts.days_until_next_occurrence(Contact("A", Birthday(1, 20)), date(2024, 1, 15)) == 5
        assert facts.days_until_next_occurrence(Contact("B", Birthday(1, 10)), date(2024, 1, 15)) == 361

    def test_month_and_day_checks_ignore_year(self):
        c = Contact("Ann", Birthday(1, 15, 1990))
        assert facts.is_birthday_on(c, date(2031, 1, 15))
        assert facts.is_birthday_in_month(c, 1)
        assert not facts.is_birthday_in_month(c, 2)
        assert facts.was_birthday_this_year(c, date(2024, 2, 1))
        assert not facts.was_birthday_this_year(c, date(2024, 1, 15))


class TestRendering:

    def test_date_formats(self):
        assert facts.short_date(Contact("A", Birthday(3, 5, 1990))) == "05.03."
        assert facts.long_date(Contact("A", Birthday(3, 5, 1990))) == "05.03.1990"
        assert facts.long_date(Contact("A", Birthday(3, 5))) == "05.03."
        assert facts.long_month_date(Contact("A", Birthday(3, 5))) == "05. Mär"
        assert facts.long_month_date(Contact("A", Birthday(3, 5)), "en") == "05. Mar"

    def test_event_description_with_everything(self, ann):
        ann = Contact(ann.name, ann.birthday, labels=ann.labels,
                      phone_number=ann.phone_number, social_handles=("ann.s",))
        assert facts.event_description(ann, date(2024, 1, 15)) == (
            "Ann wird heute 34\n"
            "Geburtstag: 15.01.1990\n\n"
            "WhatsApp: https://wa.me/491701234567\n"
            "Instagram: https://www.instagram.com/ann.s\n"
            "\n"
            "Family\n"
        )

    def test_event_description_age_follows_occurrence_year(self, ann):
        assert "wird heute 35" in facts.event_description(ann, date(2025, 1, 15))

    def test_event_description_without_year(self):
        bob = Contact("Bob", Birthday(5, 1))
        assert facts.event_description(bob, date(2024, 5, 1)) == "Bob hat heute Geburtstag\n\n"

    def test_event_description_labels_only(self):
        c = Contact("Eve", Birthday(5, 1), labels=("Work", "Tennis"))
        assert facts.event_description(c, date(2024, 5, 1)) == "Eve hat heute Geburtstag\n\nWork, Tennis\n"

    def test_summary_and_mail_lines(self):
        c = Contact("Ann", Birthday(3, 5, 1990))
        assert facts.summary_line(c, 2024) == "05. Mär: Ann (34)"
        assert facts.summary_line(Contact("Bob", Birthday(3, 5)), 2024) == "05. Mär: Bob"
        assert facts.mail_line(c, 2024) == "05. März: 🎂 Ann (wird 34 Jahre)"
        assert facts.mail_line(Contact("Bob", Birthday(3, 5)), 2024) == "05. März: 🎂 Bob"

    def test_mail_parts(self):
        c = Contact("Ann", Birthday(3, 5, 1990))
        assert facts.mail_date(c) == "05. März"
        assert facts.mail_date(c, "en") == "05. March"
        assert facts.mail_turns(c, 2025, "en") == "turns 35"
        assert facts.mail_turns(Contact("Bob", Birthday(3, 5)), 2025) is None

    def test_messaging_link_needs_digits(self):
        assert facts.messaging_link(Contact("A", Birthday(1, 1), phone_number="n/a")) is None
        assert facts.messaging_link(Contact("A", Birthday(1, 1))) is None

    def test_titles(self):
        assert text.event_title("Ann") == "🎂 Ann hat Geburtstag"
        assert text.event_title("Ann", "en") == "🎂 Ann's birthday"
        assert text.summary_title() == "🎉🎂 GEBURTSTAGE 🎂🎉"


class TestQueries:

    def test_find_by_name_is_case_insensitive(self, contacts):
        assert facts.find_by_name(contacts, "ann").name == "Ann"
        assert facts.find_by_name(contacts, "nobody") is None

    def test_label_queries(self, contacts):
        assert [c.name for c in facts.with_any_label(contacts, ["Family", "Work"])] == ["Ann"]
        assert "Ann" not in [c.name for c in facts.without_labels(contacts)]

    def test_in_age_range_skips_unknown_years(self, contacts, today):
        assert [c.name for c in facts.in_age_range(contacts, today, 30, 40)] == ["Ann", "Carl"]

    def test_upcoming_orders_by_distance(self, contacts, today):
        assert [c.name for c in facts.upcoming(contacts, today, 20)] == ["Ann", "Carl"]

    def test_in_month_orders_by_day_then_name(self):
        people = [Contact("Zoe", Birthday(4, 2)), Contact("Al", Birthday(4, 9)), Contact("Ben", Birthday(4, 2))]
        assert [c.name for c in facts.in_month(people, 4)] == ["Ben", "Zoe", "Al"]
