"""URL routing for check-ins."""

from django.urls import path  # type: ignore

from .views import AdminCheckOutView, CheckInView, CheckOutView, CurrentCheckInView, OpenCheckInsView


urlpatterns = [
    path('', CheckInView.as_view(), name='checkin-create'),
    path('current/', CurrentCheckInView.as_view(), name='checkin-current'),
    path('open/', OpenCheckInsView.as_view(), name='checkin-open'),
    path('<int:pk>/checkout/', CheckOutView.as_view(), name='checkin-checkout'),
    path('actors/<str:actor_id>/checkout/', AdminCheckOutView.as_view(), name='checkin-admin-checkout'),
]
