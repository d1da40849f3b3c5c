# This file makes the 'recurrence' directory a Python package.

from .settings import (
    RecurringSettings,
    MonthlyOnThe,
    Frequency,
    MonthlyType,
    DayOverflow,
    InvalidSettingsError,
    default_settings,
    settings_from_dict,
    settings_to_dict,
    update_settings,
)
from .expander import (
    RecurrenceExpander,
    ExpansionResult,
    IterationCapExceeded,
    expand,
)
from .editing import EditingSession
from .documents import load_schedule_document

__all__ = [
    "RecurringSettings",
    "MonthlyOnThe",
    "Frequency",
    "MonthlyType",
    "DayOverflow",
    "InvalidSettingsError",
    "default_settings",
    "settings_from_dict",
    "settings_to_dict",
    "update_settings",
    "RecurrenceExpander",
    "ExpansionResult",
    "IterationCapExceeded",
    "expand",
    "EditingSession",
    "load_schedule_document",
]
