"""
Pool sizing and pool construction.

Pools of 4 (6 matches) are preferred over pools of 5 (10 matches) to keep
the pool-play phase short. A pool of 1 is never produced unless only one
team is registered.
"""
from typing import List, Optional, Sequence

from poolplay.utils.schedule_types import Pool, PoolConfiguration, TeamSnapshot

PREFERRED_POOL_SIZE = 4


def rr_matches(n: int) -> int:
    """Round robin match count: n * (n-1) / 2"""
    if n < 2:
        return 0
    return (n * (n - 1)) // 2


def plan_pool_configuration(team_count: int) -> PoolConfiguration:
    """
    Decide how many pools to run and how many teams go in each.

    - 0 or fewer teams: no pools
    - up to 4 teams: a single pool
    - otherwise full pools of 4, with the remainder handled as:
        1 -> the last pool grows to 5
        2 -> one extra pool of 2
        3 -> one extra pool of 3
    """
    if team_count <= 0:
        return PoolConfiguration(num_pools=0, teams_per_pool=[], total_matches=0)

    if team_count <= PREFERRED_POOL_SIZE:
        return PoolConfiguration(num_pools=1, teams_per_pool=[team_count], total_matches=rr_matches(team_count))

    full_pools = team_count // PREFERRED_POOL_SIZE
    remainder = team_count % PREFERRED_POOL_SIZE

    if remainder == 0:
        teams_per_pool = [PREFERRED_POOL_SIZE] * full_pools
    elif remainder == 1:
        # full_pools >= 1 here since team_count > 4
        teams_per_pool = [PREFERRED_POOL_SIZE] * (full_pools - 1) + [PREFERRED_POOL_SIZE + 1]
    else:
        teams_per_pool = [PREFERRED_POOL_SIZE] * full_pools + [remainder]

    return PoolConfiguration(
        num_pools=len(teams_per_pool),
        teams_per_pool=teams_per_pool,
        total_matches=sum(rr_matches(size) for size in teams_per_pool),
    )


def pool_label(index: int) -> str:
    """0 -> "A", 25 -> "Z", 26 -> "AA", 27 -> "AB" ..."""
    label = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        label = chr(65 + rem) + label
    return label


def pool_name(index: int, skill_level: Optional[str] = None) -> str:
    base = pool_label(index)
    return f"{skill_level}-{base}" if skill_level else base


def build_pools(teams: Sequence[TeamSnapshot], skill_level: Optional[str] = None) -> List[Pool]:
    """
    Split teams into named pools following plan_pool_configuration.

    Teams are placed in input order; the caller decides seeding order.
    """
    config = plan_pool_configuration(len(teams))
    pools: List[Pool] = []

    team_index = 0
    for pool_index, size in enumerate(config.teams_per_pool):
        members = tuple(teams[team_index : team_index + size])
        team_index += size
        pools.append(Pool(name=pool_name(pool_index, skill_level), teams=members, skill_level=skill_level))

    return pools
