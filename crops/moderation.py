"""
Crop moderation.

Crops move between pending, approved and rejected. Any status may move
to any other; who is allowed to moderate, and when, is decided by the
editorial workflow that calls these functions. Search index updates
that follow a status change are handled in crops.signals.
"""

import logging
from typing import Optional

from django.db import transaction

from crops.models import ApprovalStatus, Crop, RejectionReason

logger = logging.getLogger(__name__)

MODERATION_FIELDS = [
    "approval_status",
    "reason_for_rejection",
    "rejection_notes",
    "updated_at",
]


def rejection_explanation(crop: Crop) -> Optional[str]:
    """
    Human-readable reason a crop was rejected.

    Returns the rejection notes when the reason is 'other', the reason
    text otherwise, and None when no reason was recorded.
    """
    if not crop.reason_for_rejection:
        return None
    if crop.reason_for_rejection == RejectionReason.OTHER:
        return crop.rejection_notes or None
    return str(crop.reason_for_rejection)


def approve(crop: Crop) -> Crop:
    """Approve a crop, clearing any earlier rejection."""
    with transaction.atomic():
        crop.approval_status = ApprovalStatus.APPROVED
        crop.reason_for_rejection = ""
        crop.rejection_notes = ""
        crop.save(update_fields=MODERATION_FIELDS)
    logger.info(f"Approved crop {crop.pk} ({crop})")
    return crop


def reject(crop: Crop, reason: str, notes: Optional[str] = None) -> Crop:
    """
    Reject a crop with one of the RejectionReason codes.

    Notes are kept only for the 'other' reason, where they are the
    explanation shown to the requester.
    """
    reason = RejectionReason(reason)
    with transaction.atomic():
        crop.approval_status = ApprovalStatus.REJECTED
        crop.reason_for_rejection = reason
        crop.rejection_notes = (notes or "") if reason == RejectionReason.OTHER else ""
        crop.save(update_fields=MODERATION_FIELDS)
    logger.info(f"Rejected crop {crop.pk} ({crop}): {rejection_explanation(crop)}")
    return crop


def reset_to_pending(crop: Crop) -> Crop:
    """Send a crop back to the moderation queue."""
    with transaction.atomic():
        crop.approval_status = ApprovalStatus.PENDING
        crop.reason_for_rejection = ""
        crop.rejection_notes = ""
        crop.save(update_fields=MODERATION_FIELDS)
    logger.info(f"Crop {crop.pk} ({crop}) returned to pending")
    return crop
