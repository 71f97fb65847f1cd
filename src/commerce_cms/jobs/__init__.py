"""
commerce_cms.jobs

Background jobs package (Celery on Redis).

Responsibilities:
- Queue/job naming and the producer used by request handlers (`queues`).
- Celery app wiring (`celery_app`) and task bodies (`tasks`).
"""

# Package marker; importing `tasks` pulls in the Celery app, so keep it lazy.
