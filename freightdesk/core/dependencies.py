"""FastAPI providers for the core's collaborators; override them in tests."""
from fastapi import Depends

from freightdesk.core.config import settings
from freightdesk.services.deletion import DeletionLedger
from freightdesk.services.delivery_notes import DeliveryNoteStateMachine
from freightdesk.services.route_provider import RouteMeasurementProvider
from freightdesk.utils.clock import Clock, SystemClock


def get_clock() -> Clock:
    return SystemClock()


def get_route_provider() -> RouteMeasurementProvider:
    return RouteMeasurementProvider()


def get_state_machine(clock: Clock = Depends(get_clock)) -> DeliveryNoteStateMachine:
    return DeliveryNoteStateMachine(clock=clock)


def get_deletion_ledger(clock: Clock = Depends(get_clock)) -> DeletionLedger:
    return DeletionLedger(clock=clock)


def purge_allowed() -> bool:
    """Retention gate; the billing collaborator replaces this per tenant."""
    return settings.PURGE_ENABLED
