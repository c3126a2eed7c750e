"""Counter URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.sequences.views import CounterViewSet

router = DefaultRouter(trailing_slash=True)
router.register("counters", CounterViewSet, basename="counter")

urlpatterns = router.urls
