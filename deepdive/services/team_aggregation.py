"""
Team aggregation adapter.

The warehouse has no team column. Team rows are synthesized by folding
account-owner (pic) rows into teams through the membership mapping:

1. Fetch the pic-level population for the requested periods and filters
2. Fetch the team -> [pic] membership snapshot
3. Per team, sum req / rev / paid of its member rows for each period
4. Derive the team's unit price from the summed totals

The resulting rows then go through the normal pipeline (derived metrics,
ranking, lifecycle, warnings) exactly like warehouse rows.

Pics that belong to no team are excluded from every team and logged. A team
none of whose members appear in the pic population is omitted entirely
rather than emitted with zero metrics.
"""

import logging
from typing import Dict, List, Optional, Sequence

from deepdive.models import EntityPeriodRow, MembershipGroup
from deepdive.services.derived_metrics import effective_ecpm

logger = logging.getLogger(__name__)


def resolve_team_members(
    groups: Sequence[MembershipGroup],
    team_ids: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Return the distinct member pics of the selected teams.

    Args:
        groups: Membership snapshot.
        team_ids: Selected team ids; all teams when None.

    Returns:
        List[str]: Member pic names in snapshot order, without duplicates.
    """
    selected = None if team_ids is None else set(team_ids)
    members: List[str] = []
    seen = set()
    for group in groups:
        if selected is not None and group.group_id not in selected:
            continue
        for member in group.member_ids:
            if member not in seen:
                seen.add(member)
                members.append(member)
    return members


def _team_unit_price(revenue: float, requests: int) -> Optional[float]:
    if requests <= 0:
        return None
    return effective_ecpm(revenue, requests)


def aggregate_teams(
    pic_rows: Sequence[EntityPeriodRow],
    groups: Sequence[MembershipGroup],
    team_ids: Optional[Sequence[str]] = None,
) -> List[EntityPeriodRow]:
    """
    Fold pic rows into team rows.

    Args:
        pic_rows: Pic-level population, one row per pic.
        groups: Membership snapshot, in display order.
        team_ids: Restrict the output to these teams; all teams when None.

    Returns:
        List[EntityPeriodRow]: One row per team with at least one member in
        `pic_rows`, in snapshot order. `attributes["pic_count"]` holds the
        number of contributing members.
    """
    rows_by_pic: Dict[str, EntityPeriodRow] = {row.id: row for row in pic_rows}

    mapped = set()
    for group in groups:
        mapped.update(group.member_ids)
    unmapped = [row.id for row in pic_rows if row.id not in mapped]
    if unmapped:
        logger.info(f"{len(unmapped)} PICs not mapped to any team: {unmapped}")

    selected = None if team_ids is None else set(team_ids)
    teams: List[EntityPeriodRow] = []

    for group in groups:
        if selected is not None and group.group_id not in selected:
            continue

        members = [rows_by_pic[pic] for pic in group.member_ids if pic in rows_by_pic]
        if not members:
            logger.info(f"Team {group.group_id} has no members with data, omitted")
            continue

        req_p1 = sum(row.req_p1 for row in members)
        req_p2 = sum(row.req_p2 for row in members)
        rev_p1 = sum(row.rev_p1 for row in members)
        rev_p2 = sum(row.rev_p2 for row in members)

        teams.append(EntityPeriodRow(
            id=group.group_id,
            name=group.group_name,
            attributes={"pic_count": len(members)},
            req_p1=req_p1,
            rev_p1=rev_p1,
            paid_p1=sum(row.paid_p1 for row in members),
            ecpm_p1=_team_unit_price(rev_p1, req_p1),
            req_p2=req_p2,
            rev_p2=rev_p2,
            paid_p2=sum(row.paid_p2 for row in members),
            ecpm_p2=_team_unit_price(rev_p2, req_p2),
        ))

    logger.info(f"Aggregated {len(pic_rows)} PICs into {len(teams)} teams")
    return teams
