"""
Tests for crop moderation: approval status transitions and rejection
explanations.
"""

import pytest

from crops.models import ApprovalStatus, Crop, RejectionReason
from crops.moderation import approve, reject, rejection_explanation, reset_to_pending


class TestRejectionExplanation:
    """rejection_explanation for rejected crops."""

    def test_gives_reason_if_a_default_option(self, make_crop):
        crop = make_crop(
            name="tomato",
            approval_status=ApprovalStatus.REJECTED,
            reason_for_rejection=RejectionReason.NOT_EDIBLE,
        )
        assert crop.rejection_explanation == "not edible"

    def test_shows_rejection_notes_if_reason_was_other(self, make_crop):
        crop = make_crop(
            name="tomato",
            approval_status=ApprovalStatus.REJECTED,
            reason_for_rejection=RejectionReason.OTHER,
            rejection_notes="blah blah blah",
        )
        assert crop.rejection_explanation == "blah blah blah"

    def test_none_without_reason(self, tomato):
        assert rejection_explanation(tomato) is None

    def test_none_for_other_without_notes(self, make_crop):
        crop = make_crop(
            approval_status=ApprovalStatus.REJECTED,
            reason_for_rejection=RejectionReason.OTHER,
        )
        assert crop.rejection_explanation is None

    def test_survives_reload(self, make_crop):
        crop = make_crop(
            approval_status=ApprovalStatus.REJECTED,
            reason_for_rejection=RejectionReason.ALREADY_IN_DATABASE,
        )
        assert Crop.objects.get(pk=crop.pk).rejection_explanation == "already in database"


class TestTransitions:
    """Moving crops between statuses."""

    @pytest.fixture
    def crop_request(self, make_crop):
        return make_crop(name="dragon fruit", approval_status=ApprovalStatus.PENDING)

    def test_approve(self, crop_request):
        approve(crop_request)
        crop_request.refresh_from_db()
        assert crop_request.is_approved

    def test_reject_with_reason(self, crop_request):
        reject(crop_request, RejectionReason.NOT_EDIBLE, notes="ignored")
        crop_request.refresh_from_db()
        assert crop_request.is_rejected
        assert crop_request.reason_for_rejection == "not edible"
        assert crop_request.rejection_notes == ""
        assert crop_request.rejection_explanation == "not edible"

    def test_reject_with_other_keeps_notes(self, crop_request):
        reject(crop_request, "other", notes="it is a cactus")
        crop_request.refresh_from_db()
        assert crop_request.rejection_explanation == "it is a cactus"

    def test_reject_with_unknown_reason(self, crop_request):
        with pytest.raises(ValueError):
            reject(crop_request, "too spicy")
        crop_request.refresh_from_db()
        assert crop_request.is_pending

    def test_rejected_crop_can_be_approved(self, crop_request):
        reject(crop_request, RejectionReason.OTHER, notes="duplicate request")
        approve(crop_request)
        crop_request.refresh_from_db()
        assert crop_request.is_approved
        assert crop_request.reason_for_rejection == ""
        assert crop_request.rejection_explanation is None

    def test_approved_crop_can_return_to_pending(self, tomato):
        reset_to_pending(tomato)
        tomato.refresh_from_db()
        assert tomato.is_pending

    def test_status_filters(self, make_crop):
        approved = make_crop(name="approved crop")
        pending = make_crop(name="pending crop", approval_status=ApprovalStatus.PENDING)
        rejected = make_crop(name="rejected crop", approval_status=ApprovalStatus.REJECTED)
        assert list(Crop.objects.approved()) == [approved]
        assert list(Crop.objects.pending()) == [pending]
        assert list(Crop.objects.rejected()) == [rejected]
