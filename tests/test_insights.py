"""Tests for narrative request shaping and insight validation."""
from datetime import date

import pytest
from django.test import SimpleTestCase

from apps.reports.insights import build_narrative_request, validate_insights
from multinav.ai import ContractViolationError


class NarrativeRequestTest(SimpleTestCase):

    def setUp(self):
        self.client_summary = {
            "total": 40,
            "average_age": 37.5,
            "ethnicities": {f"Group {i}": 10 - i for i in range(8)},
            "regions": {"North": 25, "South": 15},
            "names": ["Amina Yusuf"],
        }
        self.activity_summary = {
            "total": 90,
            "total_items": 140,
            "services_accessed": {"Dental": 20, "Mental Health": 12},
            "activities": [{"client_id": "C000001"}],
        }
        self.workforce_summary = {"total_fte": 4.2, "headcount": 5, "languages": ["Somali", "Dari"]}

    def _build(self, **kwargs):
        return build_narrative_request(
            self.client_summary, self.activity_summary, self.workforce_summary,
            (date(2024, 6, 1), date(2024, 6, 30)), **kwargs,
        )

    def test_unknown_keys_are_dropped(self):
        request = self._build()
        self.assertNotIn("names", request["client_summary"])
        self.assertNotIn("activities", request["activity_summary"])

    def test_distributions_cut_to_top_k(self):
        request = self._build(top_k=3)
        self.assertEqual(list(request["client_summary"]["ethnicities"]), ["Group 0", "Group 1", "Group 2"])
        self.assertEqual(request["client_summary"]["regions"], {"North": 25, "South": 15})

    def test_scalars_and_lists_kept(self):
        request = self._build()
        self.assertEqual(request["client_summary"]["total"], 40)
        self.assertEqual(request["activity_summary"]["total_items"], 140)
        self.assertEqual(request["workforce_summary"]["languages"], ["Somali", "Dari"])

    def test_date_range_is_iso(self):
        self.assertEqual(self._build()["date_range"], {"start": "2024-06-01", "end": "2024-06-30"})

    def test_open_date_range(self):
        request = build_narrative_request({}, {}, {}, None)
        self.assertEqual(request["date_range"], {"start": "", "end": ""})
        self.assertEqual(request["client_summary"], {})


class ValidateInsightsTest(SimpleTestCase):

    def test_valid_list(self):
        payload = [
            {"title": "T", "insight": "I", "recommendation": "R"},
            {"title": "T2", "insight": "I2"},
        ]
        self.assertEqual(validate_insights(payload), payload)

    def test_extra_keys_dropped(self):
        result = validate_insights([{"title": "T", "insight": "I", "score": 9}])
        self.assertEqual(result, [{"title": "T", "insight": "I"}])

    def test_empty_list_is_valid(self):
        self.assertEqual(validate_insights([]), [])


@pytest.mark.parametrize("payload", [
    {"title": "T", "insight": "I"},
    "text",
    ["not an object"],
    [{"title": "T"}],
    [{"title": "  ", "insight": "I"}],
    [{"title": "T", "insight": 5}],
    [{"title": "T", "insight": "I", "recommendation": ["a", "b"]}],
], ids=["object", "string", "item-string", "no-insight", "blank-title", "numeric-insight", "list-recommendation"])
def test_invalid_payload_rejected(payload):
    with pytest.raises(ContractViolationError):
        validate_insights(payload)
