"""
Celery configuration for the fruit shop backend.

``DJANGO_SETTINGS_MODULE`` is set before the app is created so that
Celery reads its options from the Django settings (``CELERY_`` prefix),
including the beat schedule for the expired-order sweep.
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("fruitshop")

# Read Django settings with the CELERY_ prefix
app.config_from_object("django.conf:settings", namespace="CELERY")

# Discover tasks.py in every installed app
app.autodiscover_tasks()
