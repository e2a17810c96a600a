"""
Django project package for the Crop Library.

The Celery app is loaded here so that shared tasks bind to it
whenever Django starts.
"""

from .celery import app as celery_app

__all__ = ("celery_app",)
