"""Tests for the pure aggregation functions."""
from datetime import date
from types import SimpleNamespace

import pytest
from django.test import SimpleTestCase

from apps.clients.models import calculate_age
from apps.reports.aggregation import (
    PYRAMID_BRACKETS,
    activity_item_totals,
    age_bracket,
    as_name_value,
    as_share_rows,
    average_age,
    clients_served,
    count_by,
    ethnicity_distribution,
    flatten_count_by,
    navigation_distribution,
    navigation_item_count,
    percent_of_total,
    population_pyramid,
    pyramid_scale,
    region_distribution,
    report_age_groups,
    service_item_count,
    services_distribution,
    top_n,
    workforce_summary,
)

AS_OF = date(2024, 7, 1)


def _client(sex="", birth_date=None, **kwargs):
    client = SimpleNamespace(sex=sex, birth_date=birth_date, **kwargs)
    client.age_on = lambda as_of: calculate_age(client.birth_date, as_of)
    return client


def _activity(navigation=(), services=(), is_discharge=False, client_id="C1", **kwargs):
    return SimpleNamespace(
        navigation_assistance=list(navigation), services_accessed=list(services),
        is_discharge=is_discharge, client_id=client_id, **kwargs,
    )


class CountingTest(SimpleTestCase):

    def test_count_by_sums_to_record_count(self):
        records = ["a", "b", "a", "c", "a", "b"]
        result = count_by(records, lambda r: r)
        self.assertEqual(sum(result.values()), len(records))
        self.assertEqual(list(result.items()), [("a", 3), ("b", 2), ("c", 1)])

    def test_ties_keep_first_seen_order(self):
        result = count_by(["z", "y", "x"], lambda r: r)
        self.assertEqual(list(result), ["z", "y", "x"])

    def test_flatten_counts_each_tag_once_per_record(self):
        records = [["Dental", "Dental", "GP / Primary Care"], ["Dental"], []]
        result = flatten_count_by(records, lambda r: r)
        self.assertEqual(result, {"Dental": 2, "GP / Primary Care": 1})
        self.assertEqual(sum(result.values()), sum(len(set(r)) for r in records))

    def test_flatten_tolerates_missing_lists(self):
        self.assertEqual(flatten_count_by([None, ["a"]], lambda r: r), {"a": 1})

    def test_flatten_accumulates_across_many_records(self):
        records = [["a", "b"], ["b"], ["b", "a"], ["c"]]
        result = flatten_count_by(records, lambda r: r)
        self.assertEqual(list(result.items()), [("b", 3), ("a", 2), ("c", 1)])

    def test_share_rows(self):
        rows = as_share_rows({"Somali": 2, "Vietnamese": 1}, 3)
        self.assertEqual(rows, [
            {"name": "Somali", "value": 2, "percent": 66.7},
            {"name": "Vietnamese", "value": 1, "percent": 33.3},
        ])
        self.assertEqual(as_share_rows({}, 0), [])

    def test_percent_of_total(self):
        self.assertEqual(percent_of_total(0, 0), 0)
        self.assertEqual(percent_of_total(1, 3), 33.3)
        self.assertEqual(percent_of_total(3, 3), 100.0)

    def test_top_n_and_name_value(self):
        distribution = {"a": 5, "b": 3, "c": 1}
        self.assertEqual(top_n(distribution, 2), {"a": 5, "b": 3})
        self.assertEqual(as_name_value(top_n(distribution, 1)), [{"name": "a", "value": 5}])

    def test_distributions_fall_back_to_unknown(self):
        clients = [SimpleNamespace(region="North", ethnicity=""), SimpleNamespace(region="")]
        self.assertEqual(region_distribution(clients), {"North": 1, "Unknown": 1})
        self.assertEqual(ethnicity_distribution(clients), {"Unknown": 2})


@pytest.mark.parametrize("age,bracket", [
    (None, None), (0, "0-9"), (9, "0-9"), (10, "10-19"), (34, "30-39"),
    (69, "60-69"), (70, "70+"), (101, "70+"),
])
def test_age_bracket(age, bracket):
    assert age_bracket(age) == bracket


def test_age_bracket_rejects_negative():
    with pytest.raises(ValueError):
        age_bracket(-1)


class PyramidTest(SimpleTestCase):

    def setUp(self):
        self.clients = [
            _client("Male", date(1990, 3, 1)),    # 34
            _client("Female", date(1988, 1, 15)),  # 36
            _client("Male", None),
        ]

    def test_rows_in_bracket_order(self):
        rows = population_pyramid(self.clients, AS_OF)
        self.assertEqual([row["age_group"] for row in rows], PYRAMID_BRACKETS)

    def test_male_counts_are_negative(self):
        rows = {row["age_group"]: row for row in population_pyramid(self.clients, AS_OF)}
        self.assertEqual(rows["30-39"], {"age_group": "30-39", "male": -1, "female": 1})
        self.assertEqual(sum(-row["male"] + row["female"] for row in rows.values()), 2)

    def test_age_depends_on_as_of(self):
        rows = {row["age_group"]: row for row in population_pyramid(self.clients, date(1999, 1, 1))}
        self.assertEqual(rows["0-9"]["male"], -1)
        self.assertEqual(rows["10-19"]["female"], 1)

    def test_other_sexes_are_left_out(self):
        rows = population_pyramid([_client("Intersex", date(1990, 1, 1))], AS_OF)
        self.assertTrue(all(row["male"] == 0 and row["female"] == 0 for row in rows))

    def test_plain_age_attribute(self):
        rows = population_pyramid([SimpleNamespace(sex="Female", age=72)], AS_OF)
        self.assertEqual(rows[-1]["female"], 1)

    def test_scale(self):
        rows = population_pyramid(self.clients, AS_OF)
        self.assertEqual(pyramid_scale(rows), 2)
        self.assertEqual(pyramid_scale([]), 0)
        self.assertEqual(pyramid_scale([{"male": -10, "female": 4}]), 11)


class AgeGroupsTest(SimpleTestCase):

    def test_groups_and_unknown(self):
        clients = [
            _client(birth_date=date(2010, 1, 1)),  # 14
            _client(birth_date=date(2006, 7, 1)),  # 18
            _client(birth_date=date(1974, 1, 1)),  # 50
            _client(birth_date=date(1950, 1, 1)),  # 74
            _client(),
        ]
        self.assertEqual(
            report_age_groups(clients, AS_OF),
            {"0-17": 1, "18-30": 1, "31-50": 1, "51-65": 0, "65+": 1, "Unknown": 1},
        )

    def test_average_age_ignores_missing(self):
        clients = [_client(birth_date=date(1990, 3, 1)), _client(birth_date=date(1988, 1, 15)), _client()]
        self.assertEqual(average_age(clients, AS_OF), 35.0)
        self.assertEqual(average_age([_client()], AS_OF), 0)


class ActivityTotalsTest(SimpleTestCase):

    def test_item_totals(self):
        activities = [
            _activity(navigation=["Care Coordination", "Transport Assistance"], services=["Dental"]),
            _activity(services=["Mental Health"], is_discharge=True, client_id="C2"),
        ]
        self.assertEqual(activity_item_totals(activities), {
            "total_navigation_items": 2,
            "total_service_items": 2,
            "total_discharges": 1,
            "total_items": 5,
        })
        self.assertEqual(clients_served(activities), 2)

    def test_empty(self):
        self.assertEqual(activity_item_totals([])["total_items"], 0)
        self.assertEqual(clients_served([]), 0)

    def test_navigation_distribution(self):
        activities = [_activity(navigation=["Care Coordination"]), _activity(navigation=["Care Coordination"])]
        self.assertEqual(navigation_distribution(activities), {"Care Coordination": 2})

    def test_described_other_counts_as_an_item(self):
        activity = _activity(
            navigation=["Other Navigation Assistance"], other_assistance="Housing paperwork",
            services=["Dental"], other_education="Diabetes diet",
        )
        self.assertEqual(navigation_item_count(activity), 2)
        self.assertEqual(service_item_count(activity), 2)
        totals = activity_item_totals([activity])
        self.assertEqual(totals["total_navigation_items"], 2)
        self.assertEqual(totals["total_items"], 4)

    def test_blank_other_text_adds_nothing(self):
        activity = _activity(navigation=["Care Coordination"], other_assistance="  ", other_education="")
        self.assertEqual(navigation_item_count(activity), 1)
        self.assertEqual(service_item_count(activity), 0)

    def test_repeated_tag_counted_once_everywhere(self):
        activities = [_activity(navigation=["Care Coordination", "Care Coordination"], services=["Dental", "Dental"])]
        totals = activity_item_totals(activities)
        self.assertEqual(totals["total_navigation_items"], sum(navigation_distribution(activities).values()))
        self.assertEqual(totals["total_service_items"], sum(services_distribution(activities).values()))
        self.assertEqual(totals["total_items"], 2)


def test_workforce_summary():
    partitioned = {
        "north": [
            SimpleNamespace(fte=1.0, languages=["Arabic", "English"]),
            SimpleNamespace(fte=0.6, languages=["Dari"]),
        ],
        "south": [SimpleNamespace(fte=0.8, languages=["English", "Somali"])],
    }
    summary = workforce_summary(partitioned)
    assert summary["north_fte"] == 1.6
    assert summary["south_fte"] == 0.8
    assert summary["total_fte"] == 2.4
    assert summary["headcount"] == 3
    assert summary["languages"] == ["Arabic", "English", "Dari", "Somali"]


def test_workforce_summary_empty():
    assert workforce_summary({}) == {
        "north_fte": 0, "south_fte": 0, "total_fte": 0, "headcount": 0, "languages": [],
    }
