"""
PostgreSQL (Supabase) implementation of the team membership adapter.

Reads team configurations and their account-owner mappings through the
shared asyncpg pool and returns them as MembershipGroup objects ordered by
display order. Each call returns a fresh snapshot; nothing is cached
between requests.

Tables:
    team_configurations (team_id, team_name, display_order, ...)
    team_pic_mappings   (team_id, pic_name, ...)
"""

import logging
from typing import Dict, List

import asyncpg

from deepdive.core.database import execute_query
from deepdive.core.exceptions import AdapterFailure
from deepdive.models import MembershipGroup

logger = logging.getLogger(__name__)


def get_membership_query(team_table: str, mapping_table: str) -> str:
    """Teams left-joined to their mapped pics, teams in display order."""
    return f"""
        SELECT
            t.team_id,
            t.team_name,
            m.pic_name
        FROM {team_table} t
        LEFT JOIN {mapping_table} m ON m.team_id = t.team_id
        ORDER BY t.display_order NULLS LAST, t.team_id, m.pic_name
    """


class PostgresMembershipAdapter:
    """Team -> pic membership read from Postgres."""

    def __init__(self, team_table: str, mapping_table: str) -> None:
        self.query = get_membership_query(team_table, mapping_table)

    async def list_groups(self) -> List[MembershipGroup]:
        try:
            rows = await execute_query(self.query)
        except (asyncpg.PostgresError, OSError) as e:
            logger.exception("Failed to load team membership")
            raise AdapterFailure("membership", str(e)) from e

        groups: Dict[str, MembershipGroup] = {}
        for row in rows:
            team_id = row["team_id"]
            if team_id not in groups:
                groups[team_id] = MembershipGroup(
                    group_id=team_id,
                    group_name=row["team_name"] or team_id,
                )
            if row["pic_name"]:
                groups[team_id].member_ids.append(row["pic_name"])

        logger.info(f"Loaded {len(groups)} teams from membership tables")
        return list(groups.values())
