"""
Celery application for the registry.

Outbound SMS (Termii) and agent status emails are queued on ``notifications``
so a slow gateway never holds up the default worker pool.
"""
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'core.settings')

app = Celery('registry')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
