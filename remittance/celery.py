"""
Celery application for background processing.
Run a worker with: celery -A remittance worker -l info
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "remittance.settings")

app = Celery("remittance")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks(lambda: ["apps.exchange.application"])
