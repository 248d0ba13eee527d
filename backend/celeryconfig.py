"""
Celery configuration for the enrollment notification workers.

Loaded by `celery_app.config_from_object("celeryconfig")` in portal/tasks/__init__.py.
Broker/result-backend URLs come from environment variables,
defaulting to localhost for local dev.
"""

import os

# ═══════════════════════════════════════════════════════════
#  Broker & Result Backend
# ═══════════════════════════════════════════════════════════

broker_url = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")

# ═══════════════════════════════════════════════════════════
#  Serialization — JSON only
# ═══════════════════════════════════════════════════════════

task_serializer = "json"
result_serializer = "json"
accept_content = ["json"]

# ═══════════════════════════════════════════════════════════
#  Timezone
# ═══════════════════════════════════════════════════════════

timezone = "Asia/Kolkata"
enable_utc = True

# ═══════════════════════════════════════════════════════════
#  Task Execution
# ═══════════════════════════════════════════════════════════

# Acknowledge after completion so a crashed worker does not drop an e-mail
task_acks_late = True
task_reject_on_worker_lost = True

worker_prefetch_multiplier = 4

# A single SendGrid call; anything slower than this is stuck
task_soft_time_limit = 60
task_time_limit = 90

# ═══════════════════════════════════════════════════════════
#  Retry Policy
# ═══════════════════════════════════════════════════════════

task_default_retry_delay = 60
task_max_retries = 5

# ═══════════════════════════════════════════════════════════
#  Result Expiry — auto-clean after 24h
# ═══════════════════════════════════════════════════════════

result_expires = 86400

# ═══════════════════════════════════════════════════════════
#  Worker Settings
# ═══════════════════════════════════════════════════════════

worker_max_tasks_per_child = 500

# Enable with: celery -A portal.tasks worker -E
worker_send_task_events = False
task_send_sent_event = False

# ═══════════════════════════════════════════════════════════
#  Task Routes
# ═══════════════════════════════════════════════════════════
#   celery -A portal.tasks worker -Q notifications

task_routes = {
    "portal.tasks.notification_tasks.*": {"queue": "notifications"},
}

task_default_queue = "default"
