"""
Django signals for the crops application.

Keeps the search index in step with crop moderation:

- Crop saved into 'approved' (or created approved) -> index_crop
- Crop saved out of 'approved' -> deindex_crop
- Approved crop deleted -> deindex_crop

Tasks are queued once the surrounding transaction commits. A failure to
queue is logged and otherwise ignored so that moderation never fails
because the search index is unavailable.
"""

import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from crops.models import ApprovalStatus, Crop

logger = logging.getLogger(__name__)


def _queue_index_update(task, crop_id):
    def send():
        try:
            task.delay(crop_id)
        except Exception as e:
            logger.exception(f"Could not queue {task.name} for crop {crop_id}: {e}")

    transaction.on_commit(send)


@receiver(pre_save, sender=Crop)
def remember_previous_approval_status(sender, instance, raw=False, **kwargs):
    """Record the stored approval status before it is overwritten."""
    if raw or instance.pk is None:
        instance._previous_approval_status = None
        return
    instance._previous_approval_status = (
        Crop.objects.filter(pk=instance.pk)
        .values_list("approval_status", flat=True)
        .first()
    )


@receiver(post_save, sender=Crop)
def sync_search_index_on_save(sender, instance, created, raw=False, **kwargs):
    """Index or deindex a crop when it moves into or out of 'approved'."""
    if raw:
        return

    from crops.tasks import deindex_crop, index_crop

    was_approved = getattr(instance, "_previous_approval_status", None) == ApprovalStatus.APPROVED
    is_approved = instance.approval_status == ApprovalStatus.APPROVED

    if is_approved and not was_approved:
        logger.debug(f"Crop {instance.pk} approved, queueing index update")
        _queue_index_update(index_crop, instance.pk)
    elif was_approved and not is_approved:
        logger.debug(f"Crop {instance.pk} left approved, queueing removal from index")
        _queue_index_update(deindex_crop, instance.pk)


@receiver(post_delete, sender=Crop)
def remove_deleted_crop_from_index(sender, instance, **kwargs):
    """Drop an approved crop from the index when it is deleted."""
    if instance.approval_status != ApprovalStatus.APPROVED:
        return

    from crops.tasks import deindex_crop

    _queue_index_update(deindex_crop, instance.pk)
