"""API views for the reservation domain."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.api.permissions import IsActiveMember, IsFacilityAdmin

from .actors import acting_actor, actors_for_user
from .application.approval import approval_workflow
from .application.booking import CreateReservation, booking_service
from .filters import ReservationFilter
from .models import Reservation
from .serializers import (
    CancelOccurrenceSerializer,
    CancelSerializer,
    RejectSerializer,
    ReservationCreateSerializer,
    ReservationExceptionSerializer,
    ReservationSerializer,
)


def _is_admin(user) -> bool:
    return hasattr(user, "is_facility_admin") and user.is_facility_admin()


class ReservationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Booking requests of members and the admin approval queue."""

    serializer_class = ReservationSerializer
    permission_classes = [permissions.IsAuthenticated, IsActiveMember]
    filterset_class = ReservationFilter
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = Reservation.objects.select_related("resource").prefetch_related("exceptions")
        if _is_admin(user):
            return qs
        include_past = self.action != "list" or self.request.query_params.get("include_past") in ("1", "true")
        return booking_service.list_for_actors(actors_for_user(user), include_past=include_past).prefetch_related(
            "exceptions"
        )

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        reservation = booking_service.create(
            CreateReservation(
                actor=acting_actor(request.user, data.get("group")),
                pool=data["pool"],
                start=data["start"],
                end=data["end"],
                reason=data["reason"],
                event_type=data["event_type"],
                rrule=data["rrule"],
                recurrence_end=data["recurrence_end"],
                created_by=request.user,
            )
        )
        read_serializer = ReservationSerializer(reservation, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        actors = None if _is_admin(request.user) else actors_for_user(request.user)
        reservation = approval_workflow.cancel(int(pk), actors=actors, reason=serializer.validated_data["reason"])
        return Response(ReservationSerializer(reservation).data)

    @action(detail=True, methods=["post"], url_path="cancel-occurrence")
    def cancel_occurrence(self, request, pk=None):  # type: ignore
        serializer = CancelOccurrenceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        exception = booking_service.cancel_occurrence(
            actors_for_user(request.user),
            int(pk),
            serializer.validated_data["occurrence_start"],
            reason=serializer.validated_data["reason"],
        )
        return Response(ReservationExceptionSerializer(exception).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], permission_classes=[IsFacilityAdmin])
    def preview(self, request, pk=None):  # type: ignore
        return Response({"reservation": int(pk), "conflicts": approval_workflow.preview(int(pk))})

    @action(detail=True, methods=["post"], permission_classes=[IsFacilityAdmin])
    def approve(self, request, pk=None):  # type: ignore
        result = approval_workflow.approve(int(pk))
        return Response(
            {
                "reservation": ReservationSerializer(result.reservation).data,
                "auto_rejected": result.auto_rejected_ids,
            }
        )

    @action(detail=True, methods=["post"], permission_classes=[IsFacilityAdmin])
    def reject(self, request, pk=None):  # type: ignore
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation = approval_workflow.reject(int(pk), serializer.validated_data["denied_reason"])
        return Response(ReservationSerializer(reservation).data)
