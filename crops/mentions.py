"""
Crop mentions in posts.

Posts link to crops with inline markup such as ``[tomato](crop)``. The
post's crop list is rebuilt from that markup every time the post is
saved. Deleting a crop only removes its link rows; posts are kept.
"""

import re
from typing import List, Set

from crops.models import ApprovalStatus, Crop, Post

CROP_MENTION_PATTERN = re.compile(r"\[([^\[\]]+?)\]\(crop\)")


def mentioned_crop_names(body: str) -> List[str]:
    """
    Crop names mentioned in a post body, first mention first.

    Example:
        >>> mentioned_crop_names("[maize](crop)[tomato](crop)[tomato](crop)")
        ['maize', 'tomato']
    """
    names = []
    for match in CROP_MENTION_PATTERN.finditer(body or ""):
        name = match.group(1).strip()
        if name and name not in names:
            names.append(name)
    return names


def resolve_mentioned_crops(body: str) -> List[Crop]:
    """
    Crops for the names mentioned in body.

    When several crops share a name, the approved one is preferred, then
    the oldest. Names that match no crop are ignored.
    """
    names = mentioned_crop_names(body)
    if not names:
        return []

    by_name = {}
    candidates = Crop.objects.filter(name__in=names).order_by("id")
    for crop in candidates:
        current = by_name.get(crop.name)
        if current is None or (
            crop.approval_status == ApprovalStatus.APPROVED
            and current.approval_status != ApprovalStatus.APPROVED
        ):
            by_name[crop.name] = crop
    return [by_name[name] for name in names if name in by_name]


def sync_post_crops(post: Post) -> None:
    """Replace a saved post's crop links with the crops its body mentions."""
    post.crops.set(resolve_mentioned_crops(post.body))


def crops_mentioned_by(post: Post) -> Set[int]:
    """Ids of the crops currently linked to a post."""
    return set(post.crops.values_list("id", flat=True))
