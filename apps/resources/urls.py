"""URL routing for the resource catalog."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ResourcePoolViewSet

router = DefaultRouter()
router.register(r"pools", ResourcePoolViewSet, basename="resource-pool")

urlpatterns = [
    path("", include(router.urls)),
]
