import unittest

from services.event_type_service import EventTypeServiceImpl


class FakeClock:
    def __init__(self, start: float = 1700000000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


class TestEventTypeService(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.service = EventTypeServiceImpl(clock=self.clock)

    def test_add_generates_unique_ids(self):
        first = self.service.add("  Gym  ", "bg-red-500")
        second = self.service.add("Dentist", "bg-cyan-500")
        self.assertEqual(first.id, "evt_1700000000000")
        self.assertEqual(second.id, "evt_1700000000001")
        self.assertEqual(first.title, "Gym")
        self.assertEqual([t.title for t in self.service.list()], ["Gym", "Dentist"])

    def test_blank_title_rejected(self):
        self.assertIsNone(self.service.add("   ", "bg-red-500"))
        self.assertEqual(self.service.list(), [])

    def test_add_suggestion_is_case_insensitive_and_idempotent(self):
        birthday = self.service.add_suggestion("birthday")
        self.assertEqual(birthday.title, "Birthday")
        self.assertEqual(birthday.color, "bg-pink-500")
        self.clock.now += 5
        self.assertEqual(self.service.add_suggestion("BIRTHDAY"), birthday)
        self.assertEqual(len(self.service.list()), 1)
        self.assertIsNone(self.service.add_suggestion("Party"))

    def test_delete_notifies_listeners(self):
        deleted = []
        self.service.on_deleted(deleted.append)
        meeting = self.service.add_suggestion("Meeting")
        self.assertTrue(self.service.delete(meeting.id))
        self.assertFalse(self.service.delete(meeting.id))
        self.assertEqual(deleted, [meeting.id])
        self.assertIsNone(self.service.get(meeting.id))


if __name__ == "__main__":
    unittest.main()
