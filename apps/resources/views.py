"""API views for the resource catalog."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.reservations.actors import acting_actor
from apps.reservations.availability import availability_index

from .models import ResourcePool
from .serializers import CalendarQuerySerializer, PoolCalendarSerializer, ResourcePoolSerializer


class ResourcePoolViewSet(viewsets.ReadOnlyModelViewSet):
    """Pools with their units; ``calendar`` returns availability for a window."""

    queryset = ResourcePool.objects.prefetch_related("resources").all()
    serializer_class = ResourcePoolSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["kind"]

    @action(detail=True, methods=["get"])
    def calendar(self, request, pk=None):  # type: ignore
        pool = self.get_object()
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        actor = acting_actor(request.user, query.validated_data.get("group"))
        calendar = availability_index.calendar(
            pool,
            actor,
            query.validated_data["start"],
            query.validated_data["end"],
        )
        return Response(PoolCalendarSerializer(calendar).data)
