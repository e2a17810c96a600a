"""
Pytest configuration and fixtures for the Crop Library test suite.
"""

import pytest
from django.contrib.auth import get_user_model


@pytest.fixture
def member(db):
    """Create an ordinary member."""
    return get_user_model().objects.create_user(
        username="gardener",
        email="gardener@example.com",
        password="pass1234",
    )


@pytest.fixture
def cropbot(db, settings):
    """Create the member that owns CSV-imported crops."""
    return get_user_model().objects.create_user(username=settings.CROPS_BOT_USERNAME)


@pytest.fixture
def make_crop(db, member):
    """Factory for approved crops created by `member`."""
    from crops.models import ApprovalStatus, Crop

    def _make_crop(name="magic bean", **kwargs):
        kwargs.setdefault("creator", member)
        kwargs.setdefault("approval_status", ApprovalStatus.APPROVED)
        return Crop.objects.create(name=name, **kwargs)

    return _make_crop


@pytest.fixture
def tomato(make_crop):
    return make_crop(
        name="tomato",
        en_wikipedia_url="http://en.wikipedia.org/wiki/Tomato",
    )


@pytest.fixture
def maize(make_crop):
    return make_crop(
        name="maize",
        en_wikipedia_url="http://en.wikipedia.org/wiki/Maize",
    )


@pytest.fixture
def make_planting(db, member):
    """Factory for plantings owned by `member`."""
    from crops.models import Planting

    def _make_planting(crop, **kwargs):
        kwargs.setdefault("owner", member)
        kwargs.setdefault("quantity", 3)
        return Planting.objects.create(crop=crop, **kwargs)

    return _make_planting


@pytest.fixture
def make_harvest(db, member):
    """Factory for harvests owned by `member`."""
    from crops.models import Harvest

    def _make_harvest(crop, **kwargs):
        kwargs.setdefault("owner", member)
        return Harvest.objects.create(crop=crop, **kwargs)

    return _make_harvest


@pytest.fixture
def make_photo(db, member):
    """Factory for photos owned by `member`."""
    from crops.models import Photo

    counter = {"n": 0}

    def _make_photo(**kwargs):
        counter["n"] += 1
        kwargs.setdefault("owner", member)
        kwargs.setdefault("title", f"Photo {counter['n']}")
        kwargs.setdefault("url", f"https://photos.example.com/{counter['n']}.jpg")
        return Photo.objects.create(**kwargs)

    return _make_photo


@pytest.fixture
def make_plant_part(db):
    """Factory for plant parts."""
    from crops.models import PlantPart

    def _make_plant_part(name="fruit"):
        return PlantPart.objects.create(name=name)

    return _make_plant_part
