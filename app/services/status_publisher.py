"""Push analysis run updates to the brand owner's websocket connections.

Delivery is best-effort: the database row is the source of truth and
clients that miss a push converge by polling the same read model.
"""

import logging
import uuid

from app.models.analysis_run import AnalysisRun
from app.schemas.brand import AnalysisRunResponse

logger = logging.getLogger(__name__)


def run_update_message(brand_id: uuid.UUID, run: AnalysisRun) -> dict:
    return {
        "type": "analysis_run",
        "brand_id": str(brand_id),
        "run": AnalysisRunResponse.model_validate(run).model_dump(mode="json"),
    }


async def publish_run_update(user_id: uuid.UUID | str, brand_id: uuid.UUID, run: AnalysisRun) -> None:
    from app.api.v1.websocket import manager

    try:
        await manager.send_to_user(str(user_id), run_update_message(brand_id, run))
    except Exception as e:
        logger.warning("Realtime push failed for brand %s run %s: %s", brand_id, run.analyzer_type, e)
