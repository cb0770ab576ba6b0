"""
Tests for the results page rules (filter, sort, paging, display helpers).
"""

from datetime import date

import pytest

from naloxone_finder.schemas.results import ResultsViewRequest
from naloxone_finder.schemas.search import ResultEntry
from naloxone_finder.services.presentation import (
    build_results_view,
    filter_entries,
    is_free,
    is_online,
    latest_date,
    paginate,
    parse_entry_date,
    short_distance,
    short_location,
    sort_entries,
    upcoming_entries,
)

TODAY = date(2025, 3, 1)


def _entry(title, **kwargs):
    kwargs.setdefault("description", f"{title} description")
    return ResultEntry(title=title, **kwargs)


class TestParseEntryDate:

    @pytest.mark.parametrize("value, expected", [
        ("2025-03-15", date(2025, 3, 15)),
        ("2025-03-15 (Saturday)", date(2025, 3, 15)),
        ("03/15/2025", date(2025, 3, 15)),
        ("March 15, 2025", date(2025, 3, 15)),
        ("Mar 15, 2025", date(2025, 3, 15)),
    ])
    def test_supported_formats(self, value, expected):
        assert parse_entry_date(value) == expected

    @pytest.mark.parametrize("value", ["", None, "Every Tuesday", "2025-13-45"])
    def test_unparseable_returns_none(self, value):
        assert parse_entry_date(value) is None


class TestFilters:

    def test_upcoming_drops_past_and_keeps_undated(self):
        entries = [
            _entry("Past", date="2025-02-01"),
            _entry("Today", date="2025-03-01"),
            _entry("Future", date="2025-04-01"),
            _entry("Undated", date=""),
            _entry("Weekly", date="Every Tuesday"),
        ]
        titles = [entry.title for entry in upcoming_entries(entries, TODAY)]

        assert titles == ["Today", "Future", "Undated", "Weekly"]

    def test_is_free_from_description_or_tags(self):
        assert is_free(_entry("A", description="Free naloxone kits"))
        assert is_free(_entry("B", description="Walk in", tags=["No Cost"]))
        assert not is_free(_entry("C", description="Covered by most insurance plans"))

    def test_classification_reads_title_but_not_location(self):
        assert is_free(_entry("Free Naloxone Clinic", description="Walk-in hours"))
        assert not is_free(_entry("Store", description="Walk-in hours", location="1 Free St"))
        assert is_online(_entry("Online Narcan Program", description="Ships kits", location="Statewide"))

    def test_is_online(self):
        assert is_online(_entry("Mail", description="Mail-order naloxone program", location="Statewide"))
        assert is_online(_entry("Nowhere", description="Call for details"))
        assert not is_online(_entry("Store", description="Pharmacy counter", location="1 Main St"))

    def test_filter_entries_combines_cost_and_access(self):
        entries = [
            _entry("Free store", description="Free kits at the counter", location="1 Main St"),
            _entry("Free mail", description="Free kits by mail", location="Online"),
            _entry("Paid store", description="Low-cost Narcan, $45", location="2 Main St"),
        ]

        assert [e.title for e in filter_entries(entries, cost="free")] == ["Free store", "Free mail"]
        assert [e.title for e in filter_entries(entries, cost="paid")] == ["Paid store"]
        assert [e.title for e in filter_entries(entries, cost="free", access="physical")] == ["Free store"]
        assert [e.title for e in filter_entries(entries, access="online")] == ["Free mail"]
        assert filter_entries(entries) == entries


class TestSorting:

    def test_sort_by_date_undated_last(self):
        entries = [
            _entry("Undated"),
            _entry("Later", date="2025-05-01"),
            _entry("Sooner", date="2025-03-10"),
        ]
        assert [e.title for e in sort_entries(entries, "date")] == ["Sooner", "Later", "Undated"]

    def test_sort_by_distance_unknown_last(self):
        entries = [
            _entry("Unknown", distance="nearby"),
            _entry("Far", distance="12 miles"),
            _entry("Near", distance="0.8 miles"),
        ]
        assert [e.title for e in sort_entries(entries, "distance")] == ["Near", "Far", "Unknown"]

    def test_sort_by_relevance(self):
        entries = [
            _entry("Other", relevance_score="Low"),
            _entry("General", relevance_score="General"),
            _entry("High", relevance_score="High"),
            _entry("Medium", relevance_score="Medium"),
            _entry("Missing"),
        ]
        assert [e.title for e in sort_entries(entries, "relevance")] == [
            "High", "Medium", "General", "Other", "Missing"
        ]

    def test_unknown_sort_option(self):
        with pytest.raises(ValueError):
            sort_entries([], "alphabetical")


class TestPaging:

    def test_paginate(self):
        entries = [_entry(str(i)) for i in range(25)]

        first, has_more = paginate(entries, page=1, page_size=10)
        assert len(first) == 10 and has_more

        last, has_more = paginate(entries, page=3, page_size=10)
        assert len(last) == 25 and not has_more

    def test_latest_date(self):
        entries = [_entry("A", date="2025-03-10"), _entry("B", date="2025-06-01"), _entry("C")]
        assert latest_date(entries) == date(2025, 6, 1)

    def test_latest_date_none_without_dates(self):
        assert latest_date([_entry("A")]) is None


class TestDisplayHelpers:

    def test_short_location(self):
        assert short_location("Civic Center, San Francisco, CA") == "San Francisco"
        assert short_location("Downtown") == "Downtown"
        assert short_location(None) is None
        assert short_location("  ") is None

    def test_short_distance(self):
        assert short_distance("3 miles from 94103") == "3 mi"
        assert short_distance("12 miles") == "12 mi"
        assert short_distance(None) is None


class TestBuildResultsView:

    def test_view_applies_all_rules(self):
        request = ResultsViewRequest(
            results=[
                _entry("Past", date="2025-01-01", relevance_score="High"),
                _entry("Medium", date="2025-03-05", relevance_score="Medium"),
                _entry("High", date="2025-04-05", relevance_score="High"),
                _entry("General", relevance_score="General"),
            ],
            sortBy="relevance",
            pageSize=2,
        )

        view = build_results_view(request, today=TODAY)

        assert [e.title for e in view.results] == ["High", "Medium"]
        assert view.total == 3
        assert view.has_more is True
        assert view.next_after_date == date(2025, 4, 5)

    def test_view_entries_carry_short_labels(self):
        request = ResultsViewRequest(results=[
            _entry("Clinic", location="1 Main St, Oakland, CA", distance="4 miles from 94103"),
            _entry("Mail order"),
        ])

        view = build_results_view(request, today=TODAY)

        clinic, mail_order = view.results
        assert clinic.short_location == "Oakland"
        assert clinic.short_distance == "4 mi"
        assert clinic.location == "1 Main St, Oakland, CA"
        assert mail_order.short_location is None
        assert mail_order.short_distance is None
