from dependency_injector import containers, providers
import logging

from config import load_app_config

# --- Interfaces ---
from services.interfaces import (
    IEventTypeService,
    IScheduleService,
    INotificationService,
    IReminderService,
)

# --- Service implementations ---
from services.config_service import ConfigServiceImpl
from services.event_type_service import EventTypeServiceImpl
from services.schedule_service import ScheduleServiceImpl
from services.notification_service import LoggingNotificationService
from services.reminder_service import ReminderServiceImpl

# --- Recurrence core ---
from recurrence import RecurrenceExpander

logger = logging.getLogger(__name__)

# --- Containers ---


class CoreContainer(containers.DeclarativeContainer):
    """Base singletons and configuration."""

    config_dict = providers.Singleton(load_app_config)
    config_service = providers.Singleton(ConfigServiceImpl, config_data=config_dict)

    expander = providers.Singleton(
        RecurrenceExpander,
        max_iterations=config_service.provided.get_expansion_max_iterations.call(),
        horizon_years=config_service.provided.get_expansion_horizon_years.call(),
        day_overflow=config_service.provided.get_monthly_day_overflow.call(),
    )


class ServicesContainer(containers.DeclarativeContainer):
    """Application services."""

    core = providers.Container(CoreContainer)

    config_service = core.config_service  # Proxy for convenience

    event_type_service: providers.Provider[IEventTypeService] = providers.Singleton(
        EventTypeServiceImpl
    )
    schedule_service: providers.Provider[IScheduleService] = providers.Singleton(
        ScheduleServiceImpl,
        expander=core.expander,
        event_type_service=event_type_service,
        config_service=config_service,
    )
    notification_service: providers.Provider[INotificationService] = (
        providers.Singleton(LoggingNotificationService)
    )
    reminder_service: providers.Provider[IReminderService] = providers.Singleton(
        ReminderServiceImpl,
        schedule_service=schedule_service,
        event_type_service=event_type_service,
        notification_service=notification_service,
        config_service=config_service,
        auto_dismiss=True,  # log notifications have nothing to close
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Main container assembling all components."""

    core = providers.Container(CoreContainer)
    services = providers.Container(ServicesContainer, core=core)


# --- Container access ---
_app_container_instance = None


def get_container() -> ApplicationContainer:
    """Returns the initialized application DI container."""
    global _app_container_instance
    if _app_container_instance is None:
        logger.info("Initializing DI container...")
        _app_container_instance = ApplicationContainer()
        logger.info("DI container initialized.")
    return _app_container_instance
