"""Celery tasks of the core module: outbox relay."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction

from modules.core.models import OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

MAX_RELAY_RETRIES = 5


def relay_pending_events(batch_size: int | None = None) -> dict[str, int]:
    """Publish relayable outbox rows to the in-process bus.

    Each row is handled in its own transaction under a row lock so two
    workers never publish the same event. A handler failure marks only that
    row as failed; the rest of the batch still goes out.
    """
    batch_size = batch_size or settings.OUTBOX_RELAY_BATCH_SIZE
    ids = list(
        OutboxEvent.objects.relayable(MAX_RELAY_RETRIES).values_list("id", flat=True)[
            :batch_size
        ]
    )
    published = failed = 0

    for event_id in ids:
        with transaction.atomic():
            row = (
                OutboxEvent.objects.select_for_update()
                .relayable(MAX_RELAY_RETRIES)
                .filter(id=event_id)
                .first()
            )
            if row is None:
                continue
            log = logger.bind(outbox_id=str(row.id), event_type=row.event_type)
            try:
                # savepoint keeps the row's block usable after a database error
                with transaction.atomic():
                    event = DomainEvent.from_payload(row.event_type, row.payload)
                    event_bus.publish(event)
            except Exception as exc:
                row.mark_as_failed(f"{type(exc).__name__}: {exc}")
                log.warning("outbox.relay_failed", error=str(exc))
                failed += 1
                continue
            row.mark_as_published()
            log.info("outbox.relayed")
            published += 1

    return {"published": published, "failed": failed}


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: int | None = None) -> dict[str, int]:
    result = relay_pending_events(batch_size)
    logger.info("outbox.relay_completed", **result)
    return result
