"""
Celery tasks for the crop library.

- index_crop: push an approved crop to the search index
- deindex_crop: drop a crop from the search index
- reindex_approved_crops: nightly rebuild of every approved crop

Index updates are fire-and-forget: a search outage is logged and
reported, but never undoes the moderation change that triggered it.
"""

import logging
from typing import Any, Dict

from celery import shared_task

from crops.exceptions import SearchGatewayError
from crops.models import Crop
from crops.search import get_search_gateway

logger = logging.getLogger(__name__)


@shared_task(name="crops.tasks.index_crop")
def index_crop(crop_id: int) -> Dict[str, Any]:
    """
    Add or refresh a crop in the search index.

    Crops that were deleted or are no longer approved by the time the
    task runs are removed instead.
    """
    crop = Crop.objects.filter(pk=crop_id).first()
    gateway = get_search_gateway()

    try:
        if crop is None or not crop.is_approved:
            gateway.deindex(crop_id)
            return {"crop_id": crop_id, "status": "deindexed"}
        gateway.index(crop)
    except SearchGatewayError as e:
        logger.warning(f"Could not index crop {crop_id}: {e}")
        return {"crop_id": crop_id, "status": "failed", "error": str(e)}

    logger.info(f"Indexed crop {crop_id} ({crop.name})")
    return {"crop_id": crop_id, "status": "indexed"}


@shared_task(name="crops.tasks.deindex_crop")
def deindex_crop(crop_id: int) -> Dict[str, Any]:
    """Remove a crop from the search index."""
    try:
        get_search_gateway().deindex(crop_id)
    except SearchGatewayError as e:
        logger.warning(f"Could not remove crop {crop_id} from index: {e}")
        return {"crop_id": crop_id, "status": "failed", "error": str(e)}

    logger.info(f"Removed crop {crop_id} from search index")
    return {"crop_id": crop_id, "status": "deindexed"}


@shared_task(name="crops.tasks.reindex_approved_crops")
def reindex_approved_crops() -> Dict[str, Any]:
    """
    Re-send every approved crop to the search index.

    Runs nightly via Celery Beat to repair updates that were dropped
    while the index was unavailable.
    """
    gateway = get_search_gateway()
    indexed = 0
    failed = 0

    for crop in Crop.objects.approved().iterator():
        try:
            gateway.index(crop)
            indexed += 1
        except SearchGatewayError as e:
            logger.warning(f"Could not index crop {crop.pk}: {e}")
            failed += 1

    logger.info(f"Reindex complete: {indexed} indexed, {failed} failed")
    return {"indexed": indexed, "failed": failed}
