"""
Crops application configuration.
"""

from django.apps import AppConfig


class CropsConfig(AppConfig):
    """Configuration for the crops Django application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "crops"
    verbose_name = "Crop Library"

    def ready(self):
        """
        Perform application initialization.

        Imports signal handlers so that approval status changes are
        pushed to the search index.
        """
        from crops import signals  # noqa: F401
