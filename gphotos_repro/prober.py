"""Periodic prober - creates an app-data marker file and reads storage quota on every tick."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gphotos_repro.scheduler import TaskResult

if TYPE_CHECKING:
    from gphotos_repro.config import AppContext

logger = logging.getLogger(__name__)

PROBE_TASK = "probe"


def probe(context: AppContext) -> TaskResult:
    """Run one tick. Errors are returned in the result, never raised."""
    drive, wire = context.drive, context.wire
    try:
        create_request = drive.create_marker_file_request()
        wire.outbound(create_request)
        created = create_request.execute()
        wire.inbound(created)

        quota_request = drive.storage_quota_request()
        wire.outbound(quota_request)
        about = quota_request.execute()
        wire.inbound(about)
    except Exception as exc:
        return TaskResult.failure(PROBE_TASK, exc)
    logger.debug("Probe tick done, marker file id=%s", created.get("id"))
    return TaskResult.success(PROBE_TASK)
