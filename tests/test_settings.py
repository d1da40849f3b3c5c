import datetime
import unittest

from recurrence import (
    Frequency,
    InvalidSettingsError,
    MonthlyOnThe,
    MonthlyType,
    default_settings,
    settings_from_dict,
    settings_to_dict,
    update_settings,
)
from recurrence.documents import load_schedule_document
from recurrence.models import EventAssignment


class TestSettingsParsing(unittest.TestCase):
    def test_camel_case_document(self):
        settings = settings_from_dict(
            {
                "frequency": "weekly",
                "interval": 2,
                "weeklyDays": {"0": False, "1": True, "3": True},
                "monthlyType": "onThe",
                "monthlyOnDay": 12,
                "monthlyOnThe": {"week": "last", "day": 5},
                "startDate": "2024-01-01",
                "endDate": None,
            }
        )
        self.assertEqual(settings.frequency, Frequency.WEEKLY)
        self.assertEqual(settings.interval, 2)
        self.assertEqual(settings.weekly_days, frozenset({1, 3}))
        self.assertEqual(settings.monthly_type, MonthlyType.ON_THE)
        self.assertEqual(settings.monthly_on_the, MonthlyOnThe(week="last", day=5))
        self.assertEqual(settings.start_date, datetime.date(2024, 1, 1))
        self.assertIsNone(settings.end_date)

    def test_snake_case_and_weekday_list(self):
        settings = settings_from_dict(
            {"frequency": "weekly", "weekly_days": [2, 4, 9], "start_date": "2024-05-01"}
        )
        self.assertEqual(settings.weekly_days, frozenset({2, 4}))

    def test_clamping(self):
        settings = settings_from_dict(
            {
                "interval": "0",
                "monthlyOnDay": 45,
                "monthlyOnThe": {"week": 7, "day": 9},
                "startDate": "2024-01-01",
            }
        )
        self.assertEqual(settings.interval, 1)
        self.assertEqual(settings.monthly_on_day, 31)
        self.assertEqual(settings.monthly_on_the, MonthlyOnThe(week=1, day=0))

        self.assertEqual(settings_from_dict({"interval": "abc"}).interval, 1)
        self.assertEqual(settings_from_dict({"interval": -3}).interval, 1)

    def test_empty_start_date(self):
        self.assertIsNone(settings_from_dict({"startDate": ""}).start_date)

    def test_invalid_date_raises(self):
        with self.assertRaises(InvalidSettingsError):
            settings_from_dict({"startDate": "2024-13-01"})
        with self.assertRaises(InvalidSettingsError):
            settings_from_dict(["daily"])

    def test_unknown_frequency_is_preserved(self):
        self.assertEqual(settings_from_dict({"frequency": "hourly"}).frequency, "hourly")

    def test_to_dict_round_trip(self):
        original = settings_from_dict(
            {
                "frequency": "monthly",
                "monthlyType": "onThe",
                "monthlyOnThe": {"week": 2, "day": 3},
                "weeklyDays": [1, 5],
                "startDate": "2024-03-01",
                "endDate": "2024-12-31",
            }
        )
        data = settings_to_dict(original)
        self.assertEqual(data["startDate"], "2024-03-01")
        self.assertEqual(data["weeklyDays"][5], True)
        self.assertEqual(data["weeklyDays"][0], False)
        self.assertEqual(settings_from_dict(data), original)


class TestDefaultsAndUpdates(unittest.TestCase):
    def test_default_settings(self):
        today = datetime.date(2024, 7, 17)  # a Wednesday
        settings = default_settings(today)
        self.assertEqual(settings.frequency, Frequency.DAILY)
        self.assertEqual(settings.interval, 1)
        self.assertEqual(settings.weekly_days, frozenset({1, 2, 3, 4, 5}))
        self.assertEqual(settings.monthly_on_day, 17)
        self.assertEqual(settings.monthly_on_the, MonthlyOnThe(week=1, day=3))
        self.assertEqual(settings.start_date, today)
        self.assertIsNone(settings.end_date)

    def test_update_settings_clamps_and_does_not_mutate(self):
        original = default_settings(datetime.date(2024, 1, 1))
        updated = update_settings(
            original,
            interval=0,
            frequency="monthly",
            monthly_on_the={"week": "last"},
            end_date="2024-06-30",
        )
        self.assertEqual(updated.interval, 1)
        self.assertEqual(updated.frequency, Frequency.MONTHLY)
        self.assertEqual(updated.monthly_on_the.week, "last")
        self.assertEqual(updated.monthly_on_the.day, original.monthly_on_the.day)
        self.assertEqual(updated.end_date, datetime.date(2024, 6, 30))
        self.assertEqual(original.frequency, Frequency.DAILY)

    def test_update_settings_rejects_unknown_fields(self):
        with self.assertRaises(TypeError):
            update_settings(default_settings(), colour="red")


class TestScheduleDocument(unittest.TestCase):
    def test_full_document(self):
        text = """
settings:
  frequency: monthly
  monthlyType: onDay
  monthlyOnDay: 15
  startDate: 2024-01-01
  endDate: 2024-03-31
events:
  2024-01-15: {typeId: evt_1, time: "08:30"}
  "2024-02-15": {typeId: evt_1, time: "0930"}
  "not-a-date": {typeId: evt_1, time: "10:00"}
  "2024-03-15": {typeId: evt_1, time: "25:00"}
customEventTypes:
  - {id: evt_1, title: Meeting, color: bg-blue-500}
  - {title: No id}
"""
        settings, events, event_types = load_schedule_document(text)
        self.assertEqual(settings.frequency, Frequency.MONTHLY)
        self.assertEqual(settings.start_date, datetime.date(2024, 1, 1))
        self.assertEqual(
            events,
            {
                "2024-01-15": EventAssignment(type_id="evt_1", time="08:30"),
                "2024-02-15": EventAssignment(type_id="evt_1", time="09:30"),
            },
        )
        self.assertEqual([t.id for t in event_types], ["evt_1"])

    def test_settings_only_document(self):
        settings, events, event_types = load_schedule_document(
            '{"frequency": "yearly", "startDate": "2024-05-05"}'
        )
        self.assertEqual(settings.frequency, Frequency.YEARLY)
        self.assertEqual(events, {})
        self.assertEqual(event_types, [])

    def test_malformed_document(self):
        with self.assertRaises(InvalidSettingsError):
            load_schedule_document("- just\n- a list\n")
        with self.assertRaises(InvalidSettingsError):
            load_schedule_document("settings: [unclosed")


if __name__ == "__main__":
    unittest.main()
