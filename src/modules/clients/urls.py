"""Client URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.clients.views import ClientViewSet, ContactPersonViewSet

router = DefaultRouter(trailing_slash=True)
router.register("clients", ClientViewSet, basename="client")
router.register("contact-persons", ContactPersonViewSet, basename="contact-person")

urlpatterns = router.urls
