"""
Crop statistics derived from plantings and harvests.

Everything here is computed on demand from the related records with
ORM aggregates; nothing is cached or denormalized onto the crop. A crop
with no plantings or harvests yields empty results, never an error.
"""

from typing import Dict, List, Optional, Tuple

from django.db.models import Count, QuerySet

from crops.models import (
    Crop,
    CropOrder,
    Harvest,
    Photo,
    PlantPart,
    Planting,
    crop_ordering,
)

# A crop is "interesting" once members have planted it this often...
INTERESTING_MIN_PLANTINGS = 3
# ...and attached at least this many distinct photos to those plantings
INTERESTING_MIN_PHOTOS = 3


def popular(queryset: Optional[QuerySet] = None, order: CropOrder = CropOrder.NAME) -> QuerySet:
    """
    Crops by number of plantings, most planted first.

    Ties fall back to the given sort policy. Each crop is annotated with
    plantings_count.
    """
    crops = queryset if queryset is not None else Crop.objects.all()
    return crops.annotate(
        plantings_count=Count("plantings", distinct=True),
    ).order_by("-plantings_count", *crop_ordering(order))


def interesting(queryset: Optional[QuerySet] = None, order: CropOrder = CropOrder.NAME) -> QuerySet:
    """
    Approved crops with enough plantings and planting photos to feature.

    Photos are counted across all of a crop's plantings, not per
    planting. Both thresholds must be met.
    """
    crops = queryset if queryset is not None else Crop.objects.all()
    return (
        crops.approved()
        .annotate(
            plantings_count=Count("plantings", distinct=True),
            photos_count=Count("plantings__photos", distinct=True),
        )
        .filter(
            plantings_count__gte=INTERESTING_MIN_PLANTINGS,
            photos_count__gte=INTERESTING_MIN_PHOTOS,
        )
        .order_by(*crop_ordering(order))
    )


def _planting_distribution(crop: Crop, field: str) -> Dict[str, int]:
    if crop.pk is None:
        return {}
    rows = (
        Planting.objects.filter(crop=crop)
        .exclude(**{field: ""})
        .values(field)
        .annotate(count=Count("id"))
        .order_by(field)
    )
    return {row[field]: row["count"] for row in rows}


def sunniness(crop: Crop) -> Dict[str, int]:
    """
    Number of plantings per sunniness value.

    Example:
        {'sun': 2, 'semi-shade': 1}
    """
    return _planting_distribution(crop, "sunniness")


def planted_from(crop: Crop) -> Dict[str, int]:
    """
    Number of plantings per propagation method.

    Example:
        {'seed': 2, 'seedling': 1}
    """
    return _planting_distribution(crop, "planted_from")


def plant_parts(crop: Crop) -> List[PlantPart]:
    """Distinct plant parts harvested from this crop, by name."""
    if crop.pk is None:
        return []
    return list(PlantPart.objects.filter(harvests__crop=crop).distinct().order_by("name"))


def popular_plant_parts(crop: Crop) -> Dict[Tuple[int, str], int]:
    """
    Number of harvests per plant part, keyed by (part id, part name).

    Harvests that don't record a plant part are ignored.
    """
    if crop.pk is None:
        return {}
    rows = (
        Harvest.objects.filter(crop=crop, plant_part__isnull=False)
        .values("plant_part_id", "plant_part__name")
        .annotate(count=Count("id"))
        .order_by("plant_part__name")
    )
    return {
        (row["plant_part_id"], row["plant_part__name"]): row["count"]
        for row in rows
    }


def default_photo(crop: Crop) -> Optional[Photo]:
    """
    Photo to show for a crop.

    The first photo on any of its plantings wins; harvest photos are only
    used when no planting has one.
    """
    if crop.pk is None:
        return None
    photo = Photo.objects.filter(plantings__crop=crop).order_by("id").first()
    if photo is None:
        photo = Photo.objects.filter(harvests__crop=crop).order_by("id").first()
    return photo
