import unittest

from cosmic_events.errors import RecordValidationError
from cosmic_events.validation import (
    DASHBOARD_REQUIRED_MESSAGE,
    EVENT_REQUIRED_FIELDS,
    EVENT_REQUIRED_MESSAGE,
    missing_fields,
    validate_dashboard,
    validate_event,
)


class ValidationTests(unittest.TestCase):
    def test_complete_event_passes(self):
        validate_event(
            {"eventPurpose": "Wedding", "guests": "50", "date": "2025-06-01", "budget": "5000"}
        )

    def test_missing_event_fields_are_reported(self):
        with self.assertRaises(RecordValidationError) as ctx:
            validate_event({"guests": "50"})
        self.assertEqual(ctx.exception.message, EVENT_REQUIRED_MESSAGE)
        self.assertEqual(ctx.exception.missing, ["eventPurpose", "date", "budget"])

    def test_falsy_values_count_as_missing(self):
        record = {"eventPurpose": "", "guests": 0, "date": None, "budget": False}
        self.assertEqual(missing_fields(record, EVENT_REQUIRED_FIELDS), list(EVENT_REQUIRED_FIELDS))

    def test_zero_as_string_is_present(self):
        record = {"eventPurpose": "Party", "guests": "0", "date": "2025-01-01", "budget": 1}
        self.assertEqual(missing_fields(record, EVENT_REQUIRED_FIELDS), [])

    def test_dashboard_requires_every_field(self):
        entry = {
            "eventName": "Launch",
            "organizer": "Ana",
            "venue": "Hall",
            "date": "2025-03-03",
            "attendees": "120",
        }
        with self.assertRaises(RecordValidationError) as ctx:
            validate_dashboard(entry)
        self.assertEqual(ctx.exception.message, DASHBOARD_REQUIRED_MESSAGE)
        self.assertEqual(ctx.exception.missing, ["budget"])

        entry["budget"] = "900"
        validate_dashboard(entry)


if __name__ == "__main__":
    unittest.main()
