"""API views for analytics.

Admins get facility-wide numbers (visits, people present, the approval
queue); members get the numbers for themselves and their groups.
"""

from __future__ import annotations

from rest_framework.permissions import IsAuthenticated  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.clock import system_clock

from apps.reservations.actors import actors_for_user

from .services import actor_overview, facility_overview


class OverviewAnalyticsView(APIView):
    """Return statistics for the facility or for the requesting member."""

    permission_classes = [IsAuthenticated]

    def get(self, request, format=None):  # type: ignore
        user = request.user
        now = system_clock.now()
        if hasattr(user, "is_facility_admin") and user.is_facility_admin():
            return Response({"scope": "facility", **facility_overview(now)})
        return Response({"scope": "member", **actor_overview(actors_for_user(user), now)})
