"""
Django models for the Crop Library.

Models: Crop, ScientificName, AlternateName, PlantPart, Photo,
        Planting, Harvest, Post

Crops form a self-referential taxonomy (a crop may have a parent and any
number of varieties), carry a moderation status, and own two lists of
names. Plantings and harvests are the member records that crop
statistics are computed from.
"""

from enum import Enum

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.db.models.functions import Lower
from django.utils import timezone
from django.utils.text import slugify

from crops.validators import validate_not_blank, validate_wikipedia_url


class ApprovalStatus(models.TextChoices):
    """Moderation status of a crop."""

    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class RejectionReason(models.TextChoices):
    """Reasons a crop request can be rejected."""

    ALREADY_IN_DATABASE = "already in database", "Already in database"
    NOT_EDIBLE = "not edible", "Not edible"
    NOT_ENOUGH_INFORMATION = "not enough information", "Not enough information"
    OTHER = "other", "Other"


class Sunniness(models.TextChoices):
    """How much sun a planting gets."""

    SUN = "sun", "Sun"
    SEMI_SHADE = "semi-shade", "Semi-shade"
    SHADE = "shade", "Shade"


class PlantedFrom(models.TextChoices):
    """Propagation method used for a planting."""

    SEED = "seed", "Seed"
    SEEDLING = "seedling", "Seedling"
    CUTTING = "cutting", "Cutting"
    ROOT_DIVISION = "root division", "Root division"
    RUNNER = "runner", "Runner"
    BULB = "bulb", "Bulb"
    ROOT_TUBER = "root/tuber", "Root/tuber"
    BARE_ROOT_PLANT = "bare root plant", "Bare root plant"
    ADVANCED_PLANT = "advanced plant", "Advanced plant"
    GRAFT = "graft", "Graft"
    LAYERING = "layering", "Layering"


class CropOrder(Enum):
    """Sort policies for crop listings."""

    NAME = "name"
    RECENT = "recent"


def crop_ordering(order=CropOrder.NAME):
    """
    Return order_by() arguments for a crop sort policy.

    NAME sorts case-insensitively by name; RECENT puts the newest crops
    first. Both end with the primary key so ties are stable.
    """
    if order == CropOrder.RECENT:
        return ("-created_at", "-id")
    return (Lower("name").asc(), "id")


class CropQuerySet(models.QuerySet):
    """
    Crop queries.

    Every listing takes its sort policy as an argument; Crop has no
    implicit default ordering.
    """

    def in_order(self, order=CropOrder.NAME):
        return self.order_by(*crop_ordering(order))

    def recent(self):
        return self.in_order(CropOrder.RECENT)

    def toplevel(self, order=CropOrder.NAME):
        """Crops that are not a variety of another crop."""
        return self.filter(parent__isnull=True).in_order(order)

    def approved(self):
        return self.filter(approval_status=ApprovalStatus.APPROVED)

    def pending(self):
        return self.filter(approval_status=ApprovalStatus.PENDING)

    def rejected(self):
        return self.filter(approval_status=ApprovalStatus.REJECTED)

    def popular(self, order=CropOrder.NAME):
        from crops.statistics import popular

        return popular(self, order=order)

    def interesting(self, order=CropOrder.NAME):
        from crops.statistics import interesting

        return interesting(self, order=order)

    def search(self, query):
        """Approved crops matching query, in search-index rank order."""
        from crops.search import search_crops

        return search_crops(query, queryset=self)


class Crop(models.Model):
    """
    A species or variety in the crop taxonomy.

    New crops start out pending; only approved crops are visible to
    search and to public listings such as interesting().
    """

    name = models.CharField(
        max_length=255,
        validators=[validate_not_blank],
        help_text="System name, e.g. 'tomato'",
    )
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    en_wikipedia_url = models.CharField(
        max_length=1000,
        blank=True,
        validators=[validate_wikipedia_url],
        help_text="Link to the English Wikipedia article",
    )

    # Hierarchy
    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="varieties",
    )

    # Moderation
    approval_status = models.CharField(
        max_length=20,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
    )
    reason_for_rejection = models.CharField(
        max_length=50, choices=RejectionReason.choices, blank=True
    )
    rejection_notes = models.TextField(
        blank=True, help_text="Explanation shown when the reason is 'other'"
    )
    request_notes = models.TextField(
        blank=True, help_text="Notes from the member who requested the crop"
    )

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_crops",
    )

    # Metadata
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    objects = CropQuerySet.as_manager()

    class Meta:
        db_table = "crops"
        indexes = [
            models.Index(fields=["name"], name="crops_name_idx"),
            models.Index(fields=["approval_status"], name="crops_approval_status_idx"),
            models.Index(fields=["created_at"], name="crops_created_at_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=~Q(name=""), name="crops_name_not_blank"),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.name:
            self.name = self.name.strip()
        if not self.slug and self.name:
            self.slug = self._unique_slug()
        self.updated_at = timezone.now()
        self.full_clean()
        super().save(*args, **kwargs)

    def _unique_slug(self):
        base = slugify(self.name)[:240] or "crop"
        candidate = base
        suffix = 2
        others = Crop.objects.exclude(pk=self.pk) if self.pk else Crop.objects.all()
        while others.filter(slug=candidate).exists():
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    # Hierarchy

    def ancestors(self):
        """
        Parent chain, nearest first.

        Nothing stops a crop from becoming its own ancestor, so the walk
        stops at the first crop it has already seen.
        """
        chain = []
        seen = {self.pk}
        current = self.parent
        while current is not None and current.pk not in seen:
            chain.append(current)
            seen.add(current.pk)
            current = current.parent
        return chain

    # Names

    def add_scientific_names_from_csv(self, raw_names, creator=None):
        from crops.names import add_scientific_names

        return add_scientific_names(self, raw_names, creator=creator)

    def add_alternate_names_from_csv(self, raw_names, creator=None):
        from crops.names import add_alternate_names

        return add_alternate_names(self, raw_names, creator=creator)

    @property
    def default_scientific_name(self):
        from crops.names import default_scientific_name

        return default_scientific_name(self)

    # Moderation

    @property
    def is_pending(self):
        return self.approval_status == ApprovalStatus.PENDING

    @property
    def is_approved(self):
        return self.approval_status == ApprovalStatus.APPROVED

    @property
    def is_rejected(self):
        return self.approval_status == ApprovalStatus.REJECTED

    @property
    def rejection_explanation(self):
        from crops.moderation import rejection_explanation

        return rejection_explanation(self)

    # Statistics

    def sunniness(self):
        from crops import statistics

        return statistics.sunniness(self)

    def planted_from(self):
        from crops import statistics

        return statistics.planted_from(self)

    def plant_parts(self):
        from crops import statistics

        return statistics.plant_parts(self)

    def popular_plant_parts(self):
        from crops import statistics

        return statistics.popular_plant_parts(self)

    def default_photo(self):
        from crops import statistics

        return statistics.default_photo(self)


class ScientificName(models.Model):
    """A botanical name for a crop, e.g. 'Solanum lycopersicum'."""

    crop = models.ForeignKey(
        Crop, on_delete=models.CASCADE, related_name="scientific_names"
    )
    name = models.CharField(max_length=255)
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "scientific_names"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["crop", "name"], name="unique_scientific_name_per_crop"
            ),
        ]

    def __str__(self):
        return self.name


class AlternateName(models.Model):
    """A common or regional name for a crop, e.g. 'love apple'."""

    crop = models.ForeignKey(
        Crop, on_delete=models.CASCADE, related_name="alternate_names"
    )
    name = models.CharField(max_length=255)
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "alternate_names"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(
                fields=["crop", "name"], name="unique_alternate_name_per_crop"
            ),
        ]

    def __str__(self):
        return self.name


class PlantPart(models.Model):
    """The part of a plant that was harvested (fruit, seed, root, ...)."""

    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "plant_parts"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Photo(models.Model):
    """A member photo that can be attached to plantings and harvests."""

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="photos",
    )
    title = models.CharField(max_length=255, blank=True)
    url = models.URLField(max_length=1000, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "photos"

    def __str__(self):
        return self.title or f"Photo {self.pk}"


class Planting(models.Model):
    """A member growing a crop."""

    crop = models.ForeignKey(
        Crop, on_delete=models.SET_NULL, null=True, related_name="plantings"
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="plantings",
    )
    planted_at = models.DateField(null=True, blank=True)
    quantity = models.IntegerField(null=True, blank=True)
    sunniness = models.CharField(max_length=20, choices=Sunniness.choices, blank=True)
    planted_from = models.CharField(
        max_length=30, choices=PlantedFrom.choices, blank=True
    )
    description = models.TextField(blank=True)
    photos = models.ManyToManyField(Photo, blank=True, related_name="plantings")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "plantings"
        indexes = [
            models.Index(fields=["crop", "created_at"], name="plantings_crop_created_idx"),
        ]

    def __str__(self):
        return f"{self.crop or 'unknown crop'} planting {self.pk}"


class Harvest(models.Model):
    """A member gathering part of a crop."""

    crop = models.ForeignKey(
        Crop, on_delete=models.SET_NULL, null=True, related_name="harvests"
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="harvests",
    )
    plant_part = models.ForeignKey(
        PlantPart,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="harvests",
    )
    harvested_at = models.DateField(null=True, blank=True)
    quantity = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    description = models.TextField(blank=True)
    photos = models.ManyToManyField(Photo, blank=True, related_name="harvests")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "harvests"
        indexes = [
            models.Index(fields=["crop", "created_at"], name="harvests_crop_created_idx"),
        ]

    def __str__(self):
        return f"{self.crop or 'unknown crop'} harvest {self.pk}"


class Post(models.Model):
    """
    A forum or blog post.

    Crops are linked to a post by mentioning them inline as
    ``[tomato](crop)``; the links are rebuilt from the body on save.
    """

    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="posts",
    )
    subject = models.CharField(max_length=255, blank=True)
    body = models.TextField(blank=True)
    crops = models.ManyToManyField(Crop, blank=True, related_name="posts")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "posts"

    def __str__(self):
        return self.subject or f"Post {self.pk}"

    def save(self, *args, **kwargs):
        from crops.mentions import sync_post_crops

        super().save(*args, **kwargs)
        sync_post_crops(self)
