"""
Name registry for crops.

A crop owns two independent lists of names: scientific names and
alternate (common) names. Names arrive as comma-separated text from the
CSV importer and are only ever appended; an entry that is already
present for the crop (exact, case-sensitive match after trimming) is
skipped.
"""

import logging
import re
from typing import List, Optional

from django.db import transaction

from crops.models import AlternateName, Crop, ScientificName

logger = logging.getLogger(__name__)

NAME_SEPARATOR = re.compile(r"\s*,\s*")


def split_names(raw_names: Optional[str]) -> List[str]:
    """
    Split comma-separated names into a clean list.

    Surrounding whitespace (including runs of spaces) is trimmed from
    each entry and empty entries are dropped.

    Example:
        >>> split_names("Baz,   Quux")
        ['Baz', 'Quux']
    """
    if not raw_names or not raw_names.strip():
        return []
    return [name for name in NAME_SEPARATOR.split(raw_names.strip()) if name]


def _add_names(crop: Crop, model, raw_names: Optional[str], creator=None) -> list:
    candidates = split_names(raw_names)
    if not candidates:
        return []

    # A name inserted concurrently by another writer counts as existing
    added = []
    with transaction.atomic():
        for name in dict.fromkeys(candidates):
            entry, created = model.objects.get_or_create(
                crop=crop, name=name, defaults={"creator": creator}
            )
            if created:
                added.append(entry)

    if added:
        logger.debug(
            f"Added {len(added)} {model._meta.verbose_name}(s) to {crop}: "
            f"{', '.join(entry.name for entry in added)}"
        )
    return added


def add_scientific_names(crop: Crop, raw_names: Optional[str], creator=None) -> List[ScientificName]:
    """
    Add scientific names from comma-separated text.

    Blank input adds nothing. When the crop ends up with no scientific
    name of its own or inherited from a parent, a warning is logged.

    Returns:
        The ScientificName rows that were created
    """
    added = _add_names(crop, ScientificName, raw_names, creator=creator)
    if not added and default_scientific_name(crop) is None:
        logger.warning(f"No scientific name (not even on parent crop) for {crop}")
    return added


def add_alternate_names(crop: Crop, raw_names: Optional[str], creator=None) -> List[AlternateName]:
    """
    Add alternate names from comma-separated text.

    Returns:
        The AlternateName rows that were created
    """
    return _add_names(crop, AlternateName, raw_names, creator=creator)


def default_scientific_name(crop: Crop) -> Optional[str]:
    """
    The crop's first scientific name, falling back to its ancestors'.

    Looked up from the database on every call so that names added to a
    parent show up on its varieties straight away.
    """
    seen = set()
    current = crop
    while current is not None and current.pk not in seen:
        seen.add(current.pk)
        first = (
            ScientificName.objects.filter(crop_id=current.pk)
            .order_by("id")
            .values_list("name", flat=True)
            .first()
        )
        if first is not None:
            return first
        current = Crop.objects.filter(pk=current.parent_id).first() if current.parent_id else None
    return None
