import unittest
from unittest.mock import MagicMock

from bson import ObjectId
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from cosmic_events.db import (
    InMemoryEventStore,
    MongoEventStore,
    SqlEventStore,
    build_mongo_query,
    normalize_filters,
)
from cosmic_events.errors import (
    RecordValidationError,
    StorageReadError,
    StorageWriteError,
    StoreUnavailableError,
)

WEDDING = {
    "eventPurpose": "Wedding",
    "guests": "50",
    "date": "2025-06-01",
    "budget": "5000",
}


class EventStoreContract:
    """Behaviour shared by every event store implementation."""

    def make_store(self):
        raise NotImplementedError

    def setUp(self):
        self.store = self.make_store()

    def test_insert_then_find_all(self):
        saved = self.store.insert(WEDDING)
        self.assertTrue(saved["_id"])
        events = self.store.find({})
        self.assertEqual(len(events), 1)
        event = events[0]
        self.assertEqual(event["_id"], saved["_id"])
        for key, value in WEDDING.items():
            self.assertEqual(event[key], value)

    def test_missing_required_field_writes_nothing(self):
        with self.assertRaises(RecordValidationError):
            self.store.insert({"guests": "50"})
        self.assertEqual(self.store.find({}), [])

    def test_schema_rejection_is_a_storage_error(self):
        bad = dict(WEDDING, guests={"count": 50})
        with self.assertRaises(StorageWriteError):
            self.store.insert(bad)
        self.assertEqual(self.store.find({}), [])

    def test_unknown_fields_are_dropped_and_numbers_coerced(self):
        saved = self.store.insert(dict(WEDDING, guests=50, color="red"))
        self.assertEqual(saved["guests"], "50")
        self.assertNotIn("color", saved)

    def test_case_insensitive_substring_filter(self):
        self.store.insert(WEDDING)
        self.store.insert(dict(WEDDING, eventPurpose="Birthday"))
        events = self.store.find({"eventPurpose": "wed"})
        self.assertEqual([e["eventPurpose"] for e in events], ["Wedding"])
        events = self.store.find({"eventPurpose": "DAY", "guests": "5"})
        self.assertEqual([e["eventPurpose"] for e in events], ["Birthday"])

    def test_filters_are_literal(self):
        self.store.insert(dict(WEDDING, theme="a.b"))
        self.store.insert(dict(WEDDING, theme="axb"))
        self.assertEqual([e["theme"] for e in self.store.find({"theme": "a.b"})], ["a.b"])
        self.assertEqual(self.store.find({"theme": ".*"}), [])

    def test_empty_filter_values_are_ignored(self):
        self.store.insert(WEDDING)
        self.assertEqual(len(self.store.find({"eventPurpose": "", "venue": ""})), 1)

    def test_unknown_filter_field_matches_nothing(self):
        self.store.insert(WEDDING)
        self.assertEqual(self.store.find({"colour": "red"}), [])

    def test_list_field_matches_any_element(self):
        self.store.insert(dict(WEDDING, entertainment=["DJ", "Magician"]))
        self.store.insert(dict(WEDDING, entertainment="Live Band"))
        events = self.store.find({"entertainment": "magic"})
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0]["entertainment"], ["DJ", "Magician"])
        band = self.store.find({"entertainment": "band"})
        self.assertEqual(band[0]["entertainment"], ["Live Band"])


class InMemoryEventStoreTests(EventStoreContract, unittest.TestCase):
    def make_store(self):
        return InMemoryEventStore()

    def test_returned_records_are_copies(self):
        self.store.insert(WEDDING)
        self.store.find({})[0]["eventPurpose"] = "changed"
        self.assertEqual(self.store.find({})[0]["eventPurpose"], "Wedding")

    def test_reset(self):
        self.store.insert(WEDDING)
        self.store.reset()
        self.assertEqual(self.store.find({}), [])


class SqlEventStoreTests(EventStoreContract, unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL store.
    """

    def make_store(self):
        return SqlEventStore("sqlite+pysqlite:///:memory:")

    def test_like_wildcards_are_literal(self):
        self.store.insert(dict(WEDDING, venue="50% off_hall"))
        self.store.insert(dict(WEDDING, venue="500 offxhall"))
        events = self.store.find({"venue": "0% OFF_"})
        self.assertEqual([e["venue"] for e in events], ["50% off_hall"])

    def test_ping(self):
        self.store.ping()


class FilterBuildingTests(unittest.TestCase):
    def test_normalize_drops_non_strings_and_empty_values(self):
        filters = {"a": "x", "b": "", "c": None, "d": ["y"]}
        self.assertEqual(normalize_filters(filters), {"a": "x"})

    def test_mongo_query_escapes_pattern_characters(self):
        query = build_mongo_query({"eventPurpose": "wed", "theme": "a.b*(c"})
        self.assertEqual(query["eventPurpose"], {"$regex": "wed", "$options": "i"})
        self.assertEqual(query["theme"], {"$regex": r"a\.b\*\(c", "$options": "i"})


class MongoEventStoreTests(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.collection = self.client.__getitem__.return_value.__getitem__.return_value
        self.store = MongoEventStore(
            "mongodb://unused", database="Cosmic", collection="events", client=self.client
        )

    def test_uses_configured_collection(self):
        self.client.__getitem__.assert_called_with("Cosmic")
        self.client.__getitem__.return_value.__getitem__.assert_called_with("events")

    def test_insert_returns_string_id(self):
        object_id = ObjectId()
        self.collection.insert_one.side_effect = lambda doc: doc.__setitem__("_id", object_id)
        saved = self.store.insert(WEDDING)
        self.assertEqual(saved["_id"], str(object_id))
        inserted = self.collection.insert_one.call_args[0][0]
        self.assertEqual(inserted["eventPurpose"], "Wedding")
        self.assertEqual(inserted["entertainment"], [])

    def test_insert_validates_before_writing(self):
        with self.assertRaises(RecordValidationError):
            self.store.insert({"guests": "50"})
        self.collection.insert_one.assert_not_called()

    def test_insert_failure_is_storage_write_error(self):
        self.collection.insert_one.side_effect = PyMongoError("write rejected")
        with self.assertRaises(StorageWriteError):
            self.store.insert(WEDDING)

    def test_find_builds_escaped_query(self):
        object_id = ObjectId()
        self.collection.find.return_value = [dict(WEDDING, _id=object_id)]
        events = self.store.find({"eventPurpose": "wed", "venue": ""})
        self.collection.find.assert_called_once_with(
            {"eventPurpose": {"$regex": "wed", "$options": "i"}}
        )
        self.assertEqual(events, [dict(WEDDING, _id=str(object_id))])

    def test_find_unknown_field_skips_query(self):
        self.assertEqual(self.store.find({"colour": "red"}), [])
        self.collection.find.assert_not_called()

    def test_find_failure_is_storage_read_error(self):
        self.collection.find.side_effect = PyMongoError("query failed")
        with self.assertRaises(StorageReadError):
            self.store.find({})

    def test_ping_failure(self):
        self.client.admin.command.side_effect = ServerSelectionTimeoutError("down")
        with self.assertRaises(StoreUnavailableError):
            self.store.ping()


if __name__ == "__main__":
    unittest.main()
