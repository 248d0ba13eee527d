"""
Celery application factory.
"""

from celery import Celery

celery_app = Celery("enrollment")
celery_app.config_from_object("celeryconfig")

# Auto-discover tasks in these modules
celery_app.autodiscover_tasks([
    "portal.tasks.notification_tasks",
])
