"""Domain error taxonomy for reservations and check-ins.

Every error carries a stable ``code`` that the API layer exposes to
clients, and a ``kind`` that decides the HTTP status it maps to.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for errors raised by domain services."""

    code = "domain_error"
    kind = "invalid"
    default_message = "Operation cannot be completed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRange(DomainError):
    code = "invalid_range"
    default_message = "Reservation must end after it starts."


class PastStart(DomainError):
    code = "past_start"
    default_message = "Reservation cannot start in the past."


class OutsideBusinessHours(DomainError):
    code = "outside_business_hours"
    default_message = "Reservations are only allowed Monday to Friday between 9:00 and 18:00."


class ActorSelfOverlap(DomainError):
    code = "actor_self_overlap"
    kind = "conflict"
    default_message = "You already have a reservation in this pool that overlaps the requested time."


class NoResourceAvailable(DomainError):
    code = "no_resource_available"
    kind = "conflict"
    default_message = "No resource of this pool is free for the requested time."


class InvalidStateTransition(DomainError):
    code = "invalid_state_transition"
    kind = "conflict"
    default_message = "Only pending reservations can change status."


class InvalidRecurrenceRule(DomainError):
    code = "invalid_recurrence_rule"
    default_message = "Recurrence rule is malformed."


class InvalidOccurrence(DomainError):
    code = "invalid_occurrence"
    default_message = "The instant is not an occurrence of this recurring reservation."


class DeniedReasonRequired(DomainError):
    code = "denied_reason_required"
    default_message = "A reason is required to reject a reservation."


class ReservationNotFound(DomainError):
    code = "reservation_not_found"
    kind = "not_found"
    default_message = "Reservation does not exist."


class NotReservationOwner(DomainError):
    code = "not_reservation_owner"
    kind = "forbidden"
    default_message = "The reservation belongs to another actor."


class AlreadyCheckedIn(DomainError):
    code = "already_checked_in"
    kind = "conflict"
    default_message = "You already have an open check-in."


class ReservationNotApproved(DomainError):
    code = "reservation_not_approved"
    default_message = "Check-in requires an approved reservation of your own."


class OutsideReservationWindow(DomainError):
    code = "outside_reservation_window"
    default_message = "Check-in is only allowed within 30 minutes of the reservation start."


class NoActiveCheckIn(DomainError):
    code = "no_active_check_in"
    kind = "conflict"
    default_message = "There is no open check-in to close."
