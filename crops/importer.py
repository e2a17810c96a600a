"""
Bulk crop import from CSV.

Each row describes one crop by position:

    name, en_wikipedia_url, parent name, scientific names, alternate names

Only the name is required; trailing fields may be missing or blank.
Scientific and alternate names are comma-separated lists inside their
(quoted) field. Importing is idempotent: a crop that already exists
under the same name is updated in place, and names or parent links it
already has are left alone.

Imported crops are recorded as created by the bot member named in
settings.CROPS_BOT_USERNAME.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from crops.exceptions import CropbotMissing, CropRowError
from crops.models import ApprovalStatus, Crop
from crops.names import add_alternate_names, add_scientific_names

logger = logging.getLogger(__name__)

CSV_COLUMNS = (
    "name",
    "en_wikipedia_url",
    "parent_name",
    "scientific_names",
    "alternate_names",
)


def clean_field(value) -> Optional[str]:
    """Strip a CSV value; missing and blank values both become None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass
class CropRow:
    """One CSV row with every optional field normalized."""

    name: str
    en_wikipedia_url: Optional[str] = None
    parent_name: Optional[str] = None
    scientific_names: Optional[str] = None
    alternate_names: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: Sequence[str]) -> "CropRow":
        values = [clean_field(value) for value in list(fields)[: len(CSV_COLUMNS)]]
        values += [None] * (len(CSV_COLUMNS) - len(values))
        row = dict(zip(CSV_COLUMNS, values))
        if row["name"] is None:
            raise CropRowError("crop name is missing")
        return cls(**row)


@dataclass
class ImportReport:
    """Outcome of importing a batch of rows."""

    created: List[Crop] = field(default_factory=list)
    updated: List[Crop] = field(default_factory=list)
    skipped: int = 0
    errors: List[CropRowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def get_cropbot():
    """
    The member recorded as creator of imported crops.

    Raises:
        CropbotMissing: if no member has settings.CROPS_BOT_USERNAME
    """
    username = settings.CROPS_BOT_USERNAME
    user_model = get_user_model()
    try:
        return user_model.objects.get(**{user_model.USERNAME_FIELD: username})
    except user_model.DoesNotExist:
        raise CropbotMissing(f"Crop import member '{username}' does not exist")


def _upsert_crop(row: CropRow, cropbot) -> Tuple[Crop, bool]:
    crop = Crop.objects.filter(name=row.name).order_by("id").first()
    created = crop is None
    changed = created

    if created:
        crop = Crop(name=row.name, creator=cropbot)
        if settings.CROPS_IMPORT_APPROVED:
            crop.approval_status = ApprovalStatus.APPROVED

    if row.en_wikipedia_url and crop.en_wikipedia_url != row.en_wikipedia_url:
        crop.en_wikipedia_url = row.en_wikipedia_url
        changed = True

    if row.parent_name:
        parents = Crop.objects.filter(name=row.parent_name).order_by("id")
        if crop.pk is not None:
            parents = parents.exclude(pk=crop.pk)
        parent = parents.first()
        if parent is None:
            logger.info(f"Parent crop '{row.parent_name}' not found for {row.name}, leaving unset")
        elif crop.parent_id != parent.pk:
            crop.parent = parent
            changed = True

    if changed:
        crop.save()

    add_scientific_names(crop, row.scientific_names, creator=cropbot)
    add_alternate_names(crop, row.alternate_names, creator=cropbot)
    return crop, created


def import_row(fields: Sequence[str], cropbot=None) -> Tuple[Crop, bool]:
    """
    Create or update the crop described by one CSV row.

    The crop, its parent link and its new names are written in a single
    transaction.

    Returns:
        (crop, created) where created is False if the crop already existed

    Raises:
        CropRowError: if the row is invalid or cannot be stored
    """
    row = CropRow.from_fields(fields)
    if cropbot is None:
        cropbot = get_cropbot()

    try:
        with transaction.atomic():
            return _upsert_crop(row, cropbot)
    except ValidationError as e:
        raise CropRowError(f"{row.name}: {'; '.join(e.messages)}") from e
    except DatabaseError as e:
        raise CropRowError(f"{row.name}: could not be saved ({e})") from e


def create_from_csv(fields: Sequence[str], cropbot=None) -> Crop:
    """Import one CSV row and return the crop it describes."""
    crop, _ = import_row(fields, cropbot=cropbot)
    return crop


def import_rows(rows: Iterable[Sequence[str]], cropbot=None, first_line: int = 1) -> ImportReport:
    """
    Import a batch of CSV rows.

    Each row is imported on its own, so a bad row is recorded in the
    report and the rest of the batch still goes in. Blank rows are
    skipped.

    Raises:
        CropbotMissing: before importing anything, if the bot member is missing
    """
    if cropbot is None:
        cropbot = get_cropbot()

    report = ImportReport()
    for line_number, fields in enumerate(rows, start=first_line):
        if not fields or all(clean_field(value) is None for value in fields):
            report.skipped += 1
            continue

        try:
            crop, created = import_row(fields, cropbot=cropbot)
        except CropRowError as e:
            e.line_number = line_number
            logger.warning(f"Skipping crop row: {e}")
            report.errors.append(e)
            continue

        if created:
            report.created.append(crop)
        else:
            report.updated.append(crop)

    logger.info(
        f"Crop import finished: {len(report.created)} created, "
        f"{len(report.updated)} updated, {report.skipped} skipped, "
        f"{len(report.errors)} errors"
    )
    return report
