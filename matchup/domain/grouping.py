# matchup/domain/grouping.py
"""
Pure grouping logic: shuffle, partition, and eligibility.

No I/O here. The service layer fetches rosters and preferences and calls
these functions with plain lists and dicts.

Functions included:
- randomize
- partition_into_groups
- make_groups
- filter_opted_in
"""
import enum
import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, MutableSequence, Optional, TypeVar

from matchup.domain.models import Member

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RemainderPolicy(str, enum.Enum):
    DROP = "drop"
    MERGE = "merge"


@dataclass(frozen=True)
class GroupingOptions:
    group_size: int
    remainder_policy: RemainderPolicy = RemainderPolicy.MERGE

    def __post_init__(self):
        if self.group_size < 2:
            raise ValueError(f"group_size must be at least 2, got {self.group_size}")


def randomize(items: MutableSequence[T], rng: random.Random) -> MutableSequence[T]:
    """
    Shuffle items in place (Fisher-Yates) using the given random source.
    Returns the same sequence. Pass a seeded random.Random for repeatable
    output.
    """
    n = len(items)
    # For each spot, pick a random item from the rest to swap into it.
    for i in range(n - 1):
        j = rng.randint(i, n - 1)
        items[i], items[j] = items[j], items[i]
    return items


def partition_into_groups(members: List[T], options: GroupingOptions) -> List[List[T]]:
    """
    Slice an already shuffled list into consecutive groups of group_size.

    Leftovers follow options.remainder_policy:
    - DROP: leftovers are not grouped this run.
    - MERGE: leftovers join the last full group. With no full group to
      join, 2 or more leftovers form their own group.
    A group of one is never made: a lone member with no full group to
    join is dropped.

    Earlier groups come first; callers that cap the number of groups
    take them in this order.

    Example:
    >>> partition_into_groups([1, 2, 3, 4, 5, 6, 7], GroupingOptions(3))
    [[1, 2, 3], [4, 5, 6, 7]]
    >>> partition_into_groups([1, 2, 3, 4, 5, 6, 7], GroupingOptions(3, RemainderPolicy.DROP))
    [[1, 2, 3], [4, 5, 6]]
    """
    size = options.group_size
    groups = []
    idx = 0
    while idx + size <= len(members):
        groups.append(list(members[idx: idx + size]))
        idx += size

    leftover = list(members[idx:])
    if not leftover or options.remainder_policy is RemainderPolicy.DROP:
        return groups

    if groups:
        groups[-1].extend(leftover)
    elif len(leftover) >= 2:
        groups.append(leftover)
    return groups


def make_groups(members: Iterable[T], options: GroupingOptions, rng: random.Random) -> List[List[T]]:
    """Shuffle a copy of members and partition it."""
    shuffled = randomize(list(members), rng)
    groups = partition_into_groups(shuffled, options)

    if groups:
        logger.info("Made %d groups among %d users", len(groups), len(shuffled))
    else:
        logger.info("Groups could not be made because there are only %d users", len(shuffled))
    return groups


def filter_opted_in(roster: Iterable[Optional[Member]], opt_in_lookup: Dict[str, bool]) -> List[Member]:
    """
    Keep roster members who have not opted out.

    A member missing from the lookup counts as opted in. Empty entries
    are skipped and a member listed twice is kept once. Input order is
    kept.
    """
    seen = set()
    eligible = []
    for member in roster:
        if member is None or not member.id or member.id in seen:
            continue
        seen.add(member.id)
        if opt_in_lookup.get(member.id, True):
            eligible.append(member)
    return eligible
