"""API views for check-ins."""

from __future__ import annotations

from rest_framework import permissions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.value_objects import ACTOR_KINDS, PERSON, ActorRef

from apps.users.api.permissions import IsActiveMember, IsFacilityAdmin

from .serializers import CheckInCreateSerializer, CheckInSerializer
from .services import check_in_service


class CheckInView(APIView):
    """POST: check the authenticated member in."""

    permission_classes = [permissions.IsAuthenticated, IsActiveMember]

    def post(self, request):  # type: ignore
        serializer = CheckInCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        check_in = check_in_service.check_in(
            request.user.actor_ref,
            reservation_id=serializer.validated_data["reservation"],
        )
        return Response(CheckInSerializer(check_in).data, status=status.HTTP_201_CREATED)


class CurrentCheckInView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):  # type: ignore
        check_in = check_in_service.current_check_in(request.user.actor_ref)
        return Response({"check_in": CheckInSerializer(check_in).data if check_in else None})


class CheckOutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk: int):  # type: ignore
        check_in = check_in_service.check_out(request.user.actor_ref, pk)
        return Response(CheckInSerializer(check_in).data)


class OpenCheckInsView(APIView):
    """Admin: people currently in the facility (checked in today, not out)."""

    permission_classes = [IsFacilityAdmin]

    def get(self, request):  # type: ignore
        check_ins = check_in_service.open_check_ins()
        return Response(CheckInSerializer(check_ins, many=True).data)


class AdminCheckOutView(APIView):
    permission_classes = [IsFacilityAdmin]

    def post(self, request, actor_id: str):  # type: ignore
        actor_type = request.data.get("actor_type", PERSON)
        if actor_type not in ACTOR_KINDS:
            return Response({"actor_type": f"Must be one of {', '.join(ACTOR_KINDS)}."}, status=status.HTTP_400_BAD_REQUEST)
        check_in = check_in_service.check_out_by_actor(ActorRef(actor_type, actor_id))
        return Response(CheckInSerializer(check_in).data)
