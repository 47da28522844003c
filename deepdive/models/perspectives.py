"""
Static perspective metadata for the deep-dive engine.

Each perspective describes how its entities are keyed in the warehouse fact
table, how a display name and hierarchy attributes are derived, which
perspective its rows drill down into, and which filter key narrows a
population to one of its entities.

Hierarchy (drill-down):
    team -> pic -> pid -> mid -> zone
    product -> zone
    zone is terminal

`team` has no warehouse column; its rows are synthesized from `pic` rows
through the membership mapping (see services.team_aggregation).
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from deepdive.models.enums import Perspective


# Warehouse column and BigQuery parameter type behind each filter key.
# `team` is resolved through the membership mapping and has no column.
FILTER_COLUMNS: Dict[str, Tuple[str, str]] = {
    "pic": ("pic", "STRING"),
    "pid": ("pid", "INT64"),
    "mid": ("mid", "INT64"),
    "product": ("product", "STRING"),
    "zone": ("zid", "INT64"),
}


@dataclass(frozen=True)
class PerspectiveConfig:
    """
    Static description of one perspective.

    Attributes:
        perspective: The perspective this config describes.
        display_name: Label shown in the UI.
        id_column: Warehouse column rows are grouped by (None for team).
        name_expression: SQL expression for the display name.
        parent_expression: SQL expression for the parent entity id, if any.
        attribute_expressions: (alias, SQL expression) pairs for hierarchy attributes.
        child: Perspective entered when drilling down from one of these rows.
        filter_key: DimensionFilters key that narrows to one entity.
    """
    perspective: Perspective
    display_name: str
    id_column: Optional[str]
    name_expression: str
    parent_expression: Optional[str]
    attribute_expressions: Tuple[Tuple[str, str], ...]
    child: Optional[Perspective]
    filter_key: str

    @property
    def is_leaf(self) -> bool:
        return self.child is None


PERSPECTIVE_CONFIGS: Dict[Perspective, PerspectiveConfig] = {
    Perspective.TEAM: PerspectiveConfig(
        perspective=Perspective.TEAM,
        display_name="Team Analysis",
        id_column=None,
        name_expression="",
        parent_expression=None,
        attribute_expressions=(),
        child=Perspective.PIC,
        filter_key="team",
    ),
    Perspective.PIC: PerspectiveConfig(
        perspective=Perspective.PIC,
        display_name="PIC (Person in Charge) Analysis",
        id_column="pic",
        name_expression="pic",
        parent_expression=None,
        attribute_expressions=(("publisher_count", "COUNT(DISTINCT pid)"),),
        child=Perspective.PID,
        filter_key="pic",
    ),
    Perspective.PID: PerspectiveConfig(
        perspective=Perspective.PID,
        display_name="Publisher Analysis",
        id_column="pid",
        name_expression="MAX(pubname)",
        parent_expression="MAX(pic)",
        attribute_expressions=(("media_count", "COUNT(DISTINCT mid)"),),
        child=Perspective.MID,
        filter_key="pid",
    ),
    Perspective.MID: PerspectiveConfig(
        perspective=Perspective.MID,
        display_name="Media Property Analysis",
        id_column="mid",
        name_expression="MAX(medianame)",
        parent_expression="MAX(pid)",
        attribute_expressions=(("zone_count", "COUNT(DISTINCT zid)"),),
        child=Perspective.ZONE,
        filter_key="mid",
    ),
    Perspective.PRODUCT: PerspectiveConfig(
        perspective=Perspective.PRODUCT,
        display_name="Product Analysis",
        id_column="product",
        name_expression="product",
        parent_expression=None,
        attribute_expressions=(
            ("publisher_count", "COUNT(DISTINCT pid)"),
            ("media_count", "COUNT(DISTINCT mid)"),
            ("zone_count", "COUNT(DISTINCT zid)"),
        ),
        child=Perspective.ZONE,
        filter_key="product",
    ),
    Perspective.ZONE: PerspectiveConfig(
        perspective=Perspective.ZONE,
        display_name="Zone Analysis",
        id_column="zid",
        name_expression="MAX(zonename)",
        parent_expression="MAX(mid)",
        attribute_expressions=(("product", "MAX(product)"),),
        child=None,
        filter_key="zone",
    ),
}


def get_perspective_config(perspective: Perspective) -> PerspectiveConfig:
    """Return the static config of a perspective."""
    return PERSPECTIVE_CONFIGS[perspective]
