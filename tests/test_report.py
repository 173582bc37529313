"""
Tests for reconciliation bookkeeping (birthdays/report.py).
"""

from birthdays.errors import ProviderError
from birthdays.report import (
    ChangeReport,
    Outcome,
    ReconciliationResult,
    SectionChanges,
    has_any_change,
    merge,
)


class TestSectionChanges:

    def test_record_routes_each_outcome(self):
        changes = SectionChanges()
        changes.record(ReconciliationResult.created("a"))
        changes.record(ReconciliationResult.updated("b"))
        changes.record(ReconciliationResult.unchanged("c"))
        changes.record(ReconciliationResult.skipped("d", "no birthdays in month"))
        changes.record(ReconciliationResult.failed("e", ProviderError("boom")))

        assert changes.created == ["a"]
        assert changes.updated == ["b"]
        assert (changes.unchanged, changes.skipped, changes.errors) == (1, 1, 1)
        assert changes.processed == 5
        assert changes.summary() == "processed=5 created=1 updated=1 unchanged=1 skipped=1 errors=1"

    def test_failed_result_keeps_error(self):
        error = ProviderError("quota")
        result = ReconciliationResult.failed("Ann", error)
        assert result.outcome is Outcome.FAILED
        assert result.error is error
        assert result.reason == "quota"

    def test_only_created_or_updated_count_as_changes(self):
        changes = SectionChanges(unchanged=3, skipped=2, errors=1)
        assert not changes.has_changes()
        changes.record(ReconciliationResult.updated("x"))
        assert changes.has_changes()


class TestChangeReport:

    def test_merge_treats_disabled_sections_as_empty(self):
        report = merge(None, None)
        assert report.individual.processed == 0
        assert report.summary.processed == 0
        assert not has_any_change(report)

    def test_either_section_makes_a_change(self):
        assert has_any_change(merge(SectionChanges(created=["a"]), None))
        assert has_any_change(merge(None, SectionChanges(updated=["Januar 2024"])))

    def test_errors_sum_both_sections(self):
        report = ChangeReport(SectionChanges(errors=2), SectionChanges(errors=1))
        assert report.errors == 3
        assert not has_any_change(report)
