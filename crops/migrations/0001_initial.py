"""
Migration: Initial crop library schema.

Creates crops with their scientific and alternate names, plant parts,
photos, plantings, harvests and posts.
"""

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import crops.validators


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Crop",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        help_text="System name, e.g. 'tomato'",
                        max_length=255,
                        validators=[crops.validators.validate_not_blank],
                    ),
                ),
                ("slug", models.SlugField(blank=True, max_length=255, unique=True)),
                (
                    "en_wikipedia_url",
                    models.CharField(
                        blank=True,
                        help_text="Link to the English Wikipedia article",
                        max_length=1000,
                        validators=[crops.validators.validate_wikipedia_url],
                    ),
                ),
                (
                    "approval_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "reason_for_rejection",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("already in database", "Already in database"),
                            ("not edible", "Not edible"),
                            ("not enough information", "Not enough information"),
                            ("other", "Other"),
                        ],
                        max_length=50,
                    ),
                ),
                (
                    "rejection_notes",
                    models.TextField(
                        blank=True,
                        help_text="Explanation shown when the reason is 'other'",
                    ),
                ),
                (
                    "request_notes",
                    models.TextField(
                        blank=True,
                        help_text="Notes from the member who requested the crop",
                    ),
                ),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "creator",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_crops",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="varieties",
                        to="crops.crop",
                    ),
                ),
            ],
            options={
                "db_table": "crops",
                "indexes": [
                    models.Index(fields=["name"], name="crops_name_idx"),
                    models.Index(
                        fields=["approval_status"], name="crops_approval_status_idx"
                    ),
                    models.Index(fields=["created_at"], name="crops_created_at_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("name", ""), _negated=True),
                        name="crops_name_not_blank",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PlantPart",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=100, unique=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "plant_parts",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Photo",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("title", models.CharField(blank=True, max_length=255)),
                ("url", models.URLField(blank=True, max_length=1000)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="photos",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "photos",
            },
        ),
        migrations.CreateModel(
            name="ScientificName",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "creator",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "crop",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="scientific_names",
                        to="crops.crop",
                    ),
                ),
            ],
            options={
                "db_table": "scientific_names",
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("crop", "name"), name="unique_scientific_name_per_crop"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AlternateName",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "creator",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "crop",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="alternate_names",
                        to="crops.crop",
                    ),
                ),
            ],
            options={
                "db_table": "alternate_names",
                "ordering": ["id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("crop", "name"), name="unique_alternate_name_per_crop"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Planting",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("planted_at", models.DateField(blank=True, null=True)),
                ("quantity", models.IntegerField(blank=True, null=True)),
                (
                    "sunniness",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("sun", "Sun"),
                            ("semi-shade", "Semi-shade"),
                            ("shade", "Shade"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "planted_from",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("seed", "Seed"),
                            ("seedling", "Seedling"),
                            ("cutting", "Cutting"),
                            ("root division", "Root division"),
                            ("runner", "Runner"),
                            ("bulb", "Bulb"),
                            ("root/tuber", "Root/tuber"),
                            ("bare root plant", "Bare root plant"),
                            ("advanced plant", "Advanced plant"),
                            ("graft", "Graft"),
                            ("layering", "Layering"),
                        ],
                        max_length=30,
                    ),
                ),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "crop",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="plantings",
                        to="crops.crop",
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="plantings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "photos",
                    models.ManyToManyField(
                        blank=True, related_name="plantings", to="crops.photo"
                    ),
                ),
            ],
            options={
                "db_table": "plantings",
                "indexes": [
                    models.Index(
                        fields=["crop", "created_at"], name="plantings_crop_created_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Harvest",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("harvested_at", models.DateField(blank=True, null=True)),
                (
                    "quantity",
                    models.DecimalField(
                        blank=True, decimal_places=2, max_digits=10, null=True
                    ),
                ),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "crop",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="harvests",
                        to="crops.crop",
                    ),
                ),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="harvests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "plant_part",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="harvests",
                        to="crops.plantpart",
                    ),
                ),
                (
                    "photos",
                    models.ManyToManyField(
                        blank=True, related_name="harvests", to="crops.photo"
                    ),
                ),
            ],
            options={
                "db_table": "harvests",
                "indexes": [
                    models.Index(
                        fields=["crop", "created_at"], name="harvests_crop_created_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Post",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("subject", models.CharField(blank=True, max_length=255)),
                ("body", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "author",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="posts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "crops",
                    models.ManyToManyField(
                        blank=True, related_name="posts", to="crops.crop"
                    ),
                ),
            ],
            options={
                "db_table": "posts",
            },
        ),
    ]
