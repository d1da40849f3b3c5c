import datetime
import unittest

from containers import ApplicationContainer
from recurrence import RecurrenceExpander
from recurrence.models import ActiveReminder, EventMode
from services.config_service import ConfigServiceImpl
from services.event_type_service import EventTypeServiceImpl
from services.notification_service import LoggingNotificationService
from services.reminder_service import ReminderServiceImpl
from services.schedule_service import ScheduleServiceImpl


class RecordingNotifier:
    def __init__(self):
        self.reminders = []

    def notify(self, reminder):
        self.reminders.append(reminder)


class TestReminderService(unittest.TestCase):
    def setUp(self):
        config = ConfigServiceImpl({"REMINDER_POLL_SECONDS": "1"})
        self.event_types = EventTypeServiceImpl()
        self.schedule = ScheduleServiceImpl(RecurrenceExpander(), self.event_types, config)
        self.notifier = RecordingNotifier()
        self.reminders = ReminderServiceImpl(
            self.schedule, self.event_types, self.notifier, config
        )
        self.meeting = self.event_types.add_suggestion("Meeting")

    def _save_daily(self, time: str = "09:00"):
        session = self.schedule.create_new(datetime.date(2024, 1, 1))
        session.update_settings(end_date="2024-01-03")
        session.set_event_mode(EventMode.ALL)
        session.set_master_event(type_id=self.meeting.id, time=time)
        self.schedule.save(session.build_draft())

    def test_nothing_saved(self):
        self.assertIsNone(self.reminders.check_due(datetime.datetime(2024, 1, 1, 9, 0)))
        self.assertEqual(self.notifier.reminders, [])

    def test_fires_once_per_date_and_time(self):
        self._save_daily()
        self.assertIsNone(self.reminders.check_due(datetime.datetime(2024, 1, 1, 8, 59)))

        reminder = self.reminders.check_due(datetime.datetime(2024, 1, 1, 9, 0, 5))
        self.assertIsNotNone(reminder)
        self.assertEqual(reminder.date, "2024-01-01")
        self.assertEqual(reminder.time, "09:00")
        self.assertEqual(reminder.event_type, self.meeting)
        self.assertEqual(self.reminders.active_reminder(), reminder)

        # Still active: later polls in the same minute do nothing
        self.assertIsNone(self.reminders.check_due(datetime.datetime(2024, 1, 1, 9, 0, 15)))
        self.reminders.dismiss()
        # Already fired for this (date, time)
        self.assertIsNone(self.reminders.check_due(datetime.datetime(2024, 1, 1, 9, 0, 25)))
        self.assertEqual(len(self.notifier.reminders), 1)

        # Next day fires again
        self.assertIsNotNone(self.reminders.check_due(datetime.datetime(2024, 1, 2, 9, 0)))
        self.assertEqual(len(self.notifier.reminders), 2)

    def test_deleted_type_does_not_fire(self):
        self._save_daily()
        self.event_types.delete(self.meeting.id)
        self.assertIsNone(self.reminders.check_due(datetime.datetime(2024, 1, 1, 9, 0)))

    def test_upcoming_index_and_next_deadline(self):
        self._save_daily("18:30")
        now = datetime.datetime(2024, 1, 1, 12, 0)
        upcoming = self.reminders.upcoming(now)
        self.assertEqual(
            [r.at for r in upcoming],
            [
                datetime.datetime(2024, 1, 1, 18, 30),
                datetime.datetime(2024, 1, 2, 18, 30),
                datetime.datetime(2024, 1, 3, 18, 30),
            ],
        )
        self.reminders.check_due(datetime.datetime(2024, 1, 1, 18, 30))
        self.assertEqual(
            self.reminders.next_deadline(datetime.datetime(2024, 1, 1, 18, 30, 40)),
            datetime.datetime(2024, 1, 2, 18, 30),
        )
        self.assertIsNone(self.reminders.next_deadline(datetime.datetime(2024, 1, 4, 0, 0)))

    def test_unpadded_master_time_fires(self):
        self._save_daily("9:00")
        reminder = self.reminders.check_due(datetime.datetime(2024, 1, 1, 9, 0))
        self.assertIsNotNone(reminder)
        self.assertEqual(reminder.time, "09:00")

    def test_start_and_stop(self):
        self.reminders.start()
        self.reminders.start()  # second start is ignored
        self.reminders.stop()
        self.reminders.stop()


class TestApplicationWiring(unittest.TestCase):
    def setUp(self):
        container = ApplicationContainer()
        container.core.config_dict.override({})
        self.event_types = container.services.event_type_service()
        self.schedule = container.services.schedule_service()
        self.reminders = container.services.reminder_service()

    def test_log_notifications_dismiss_themselves(self):
        meeting = self.event_types.add_suggestion("Meeting")
        session = self.schedule.create_new(datetime.date(2024, 1, 1))
        session.update_settings(end_date="2024-01-03")
        session.set_event_mode(EventMode.ALL)
        session.set_master_event(type_id=meeting.id, time="09:00")
        self.schedule.save(session.build_draft())

        with self.assertLogs("services.notification_service", level="INFO"):
            self.assertIsNotNone(
                self.reminders.check_due(datetime.datetime(2024, 1, 1, 9, 0))
            )
        self.assertIsNone(self.reminders.active_reminder())

        reminder = self.reminders.check_due(datetime.datetime(2024, 1, 2, 9, 0))
        self.assertIsNotNone(reminder)
        self.assertEqual(reminder.date, "2024-01-02")


class TestLoggingNotificationService(unittest.TestCase):
    def test_sink_receives_message_and_errors_are_contained(self):
        received = []
        service = LoggingNotificationService(sink=received.append)
        event_types = EventTypeServiceImpl()
        meeting = event_types.add_suggestion("Meeting")
        reminder = ActiveReminder(event_type=meeting, time="09:00", date="2024-01-01")
        service.notify(reminder)
        self.assertEqual(received, ["Reminder: Meeting at 09:00 (2024-01-01)"])

        def broken(_message):
            raise RuntimeError("sink down")

        with self.assertLogs("services.notification_service", level="ERROR"):
            LoggingNotificationService(sink=broken).notify(reminder)


if __name__ == "__main__":
    unittest.main()
