"""
过期清理的纯函数步骤

清理分两个阶段，各自作用在不可变快照上：
1. select_stale_locations：从位置快照中挑出过期行，得到待清理的参与者候选
2. select_orphaned_participants：删除过期位置后重新取快照，
   候选中不再持有任何位置的参与者才会被删除
"""

from dataclasses import dataclass
from typing import Iterable, List, Set


@dataclass(frozen=True)
class LocationSnapshot:
    """位置行的只读快照"""
    location_id: int
    participant_id: int
    timestamp: int


def select_stale_locations(
    snapshot: Iterable[LocationSnapshot],
    now: int,
    max_age_ms: int
) -> List[LocationSnapshot]:
    """
    挑出时间戳早于 now - max_age_ms 的位置

    Args:
        snapshot: 位置快照
        now: 当前时间（毫秒）
        max_age_ms: 允许的最大时长（毫秒）

    Returns:
        过期的位置快照列表
    """
    threshold = now - max_age_ms
    return [location for location in snapshot if location.timestamp < threshold]


def select_orphaned_participants(
    candidate_ids: Iterable[int],
    live_participant_ids: Iterable[int]
) -> Set[int]:
    """
    候选参与者中没有存活位置的那部分

    Args:
        candidate_ids: 第一阶段记录的参与者 ID
        live_participant_ids: 第二阶段快照中仍有位置的参与者 ID

    Returns:
        需要删除的参与者 ID 集合
    """
    return set(candidate_ids) - set(live_participant_ids)
