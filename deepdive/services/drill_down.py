"""
Drill-down orchestration helpers.

Drilling into a row re-runs the whole pipeline one level down the fixed
hierarchy, with the parent's filter key narrowed to the selected id:

    team -> pic -> pid -> mid -> zone
    product -> zone

The child population is ranked and tiered on its own. A tier filter is only
ever applied to rows that have already been tiered.
"""

from typing import List, Optional, Sequence, Tuple

from pydantic import ValidationError

from deepdive.core.exceptions import InvalidParentId, InvalidPerspective
from deepdive.models import DeepDiveItem, DimensionFilters, DisplayTier, Perspective
from deepdive.models.perspectives import get_perspective_config


def child_perspective(parent: Perspective) -> Perspective:
    """
    Return the perspective one level below `parent`.

    Raises:
        InvalidPerspective: If `parent` is terminal (zone).
    """
    child = get_perspective_config(parent).child
    if child is None:
        raise InvalidPerspective(parent.value, "no child perspective to drill into")
    return child


def drill_down_scope(
    parent: Perspective,
    parent_id: str,
    filters: DimensionFilters,
) -> Tuple[Perspective, DimensionFilters]:
    """
    Resolve the child perspective and the narrowed filters of a drill-down.

    Args:
        parent: Perspective of the selected row.
        parent_id: Id of the selected row.
        filters: Filters in effect at the parent level.

    Returns:
        Tuple[Perspective, DimensionFilters]: Child perspective, and filters
        with the parent's key restricted to `parent_id`.

    Raises:
        InvalidPerspective: If `parent` is terminal (zone).
        InvalidParentId: If `parent_id` is not a valid value of the parent's
            filter key (pid and mid ids are numeric).
    """
    child = child_perspective(parent)
    key = get_perspective_config(parent).filter_key
    try:
        narrowed = filters.narrow(key, parent_id)
    except ValidationError as e:
        raise InvalidParentId(parent.value, parent_id, e.errors()[0]["msg"]) from None
    return child, narrowed


def filter_by_tier(
    items: Sequence[DeepDiveItem],
    tier_filter: Optional[DisplayTier],
) -> List[DeepDiveItem]:
    """Keep only rows whose display tier equals `tier_filter`."""
    if tier_filter is None:
        return list(items)
    return [item for item in items if item.display_tier == tier_filter]
