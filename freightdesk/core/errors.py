"""Domain error taxonomy.

Every failure raised by the pricing engine, the delivery-note state machine
or the route provider is a ``DomainError``. The HTTP layer maps the four
families to status codes in ``freightdesk.main``.
"""


class DomainError(Exception):
    """Base error for freightdesk failures."""

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or (self.__class__.__doc__ or "").strip()


class ValidationError(DomainError):
    """Bad input shape."""


class StateError(DomainError):
    """Illegal state transition."""


class DependencyError(DomainError):
    """External provider failure."""


class NotFoundError(DomainError):
    """Entity not found."""


class InvalidDistance(ValidationError):
    """Distance must be greater than zero."""


class InvalidExtras(ValidationError):
    """Extras cost must be a finite, non-negative amount."""


class NoActiveVehicle(ValidationError):
    """Vehicle type is missing or inactive."""


class MissingSignature(ValidationError):
    """A signature is required."""


class MissingProof(ValidationError):
    """A photo or a signature is required."""


class InvalidSignatureDocument(ValidationError):
    """Signer identity document is too short."""


class UnknownLeg(ValidationError):
    """Pickup leg index out of range."""


class InvalidNoteShape(ValidationError):
    """Pickup legs do not fit the delivery note shape."""


class AlreadySigned(StateError):
    """Already signed."""


class QuoteNotApproved(StateError):
    """Only approved quotes can become delivery notes."""


class QuoteAlreadyUsed(StateError):
    """Quote already has a delivery note."""


class NoteDeleted(StateError):
    """Delivery note is soft-deleted."""


class AlreadyDeleted(StateError):
    """Delivery note is already soft-deleted."""


class NotDeleted(StateError):
    """Delivery note is not soft-deleted."""


class PurgeNotAllowed(StateError):
    """Retention policy does not allow purging this note."""


class ConcurrentModification(StateError):
    """Delivery note was modified concurrently."""


class GeocodeFailed(DependencyError):
    """Address could not be geocoded."""


class RouteNotFound(DependencyError):
    """No drivable route between the two points."""
