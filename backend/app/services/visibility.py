"""
可见性过滤

纯函数，不访问数据库：
1. 位置可见性：自己的位置总是可见，其余按分组匹配
2. 消息受众解析：私信、广播、分组三类规则，任意一条命中即可见
3. 会话截止线：早于请求者本次登录的消息不可见
"""

from typing import Any, Callable, List, Optional, Sequence, Tuple

from app.core.config import ALL_GROUPS


def normalize_group(group: Optional[str]) -> Optional[str]:
    """调用方传入的空字符串视为未提供分组"""
    if group is None or group == "":
        return None
    return group


def group_key(group: Optional[str]) -> str:
    """比较分组时，缺失的分组按空字符串处理"""
    return group if group is not None else ""


def is_location_visible(
    location: Any,
    requester_id: Optional[int] = None,
    requester_group: Optional[str] = None
) -> bool:
    """
    判断位置对请求者是否可见（不含新鲜度判断）

    Args:
        location: 带 participant_id / group 属性的位置对象
        requester_id: 请求者 ID（可选）
        requester_group: 请求者分组（可选），None 表示不过滤

    Returns:
        是否可见
    """
    if requester_id is not None and location.participant_id == requester_id:
        return True
    if requester_group is None:
        return True
    return group_key(location.group) == requester_group


def message_cutoff(participant: Any) -> int:
    """
    计算请求者的消息截止时间

    优先使用 created_at（本次登录时间），缺失时回退到 last_seen，都缺失则为 0

    Args:
        participant: 请求者，不存在时传 None

    Returns:
        截止时间（毫秒）
    """
    if participant is None:
        return 0
    for value in (participant.created_at, participant.last_seen):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
    return 0


# ==================== 消息受众规则 ====================

def _is_direct(message: Any, requester_id: Optional[int], requester_group: Optional[str]) -> bool:
    # 收发双方始终可见，与当前分组无关
    return requester_id is not None and (
        message.receiver_id == requester_id or message.sender_id == requester_id
    )


def _is_unfiltered_broadcast(message: Any, requester_id: Optional[int], requester_group: Optional[str]) -> bool:
    return message.receiver_id is None and (
        requester_group is None or requester_group == ALL_GROUPS
    )


def _is_broadcast_in_group(message: Any, requester_id: Optional[int], requester_group: Optional[str]) -> bool:
    return (
        message.receiver_id is None
        and requester_group is not None
        and requester_group != ALL_GROUPS
        and group_key(message.group) == requester_group
    )


def _is_addressed_in_group(message: Any, requester_id: Optional[int], requester_group: Optional[str]) -> bool:
    return (
        message.receiver_id is not None
        and requester_group is not None
        and group_key(message.group) == requester_group
    )


AudienceRule = Callable[[Any, Optional[int], Optional[str]], bool]

AUDIENCE_RULES: Tuple[Tuple[str, AudienceRule], ...] = (
    ("direct", _is_direct),
    ("unfiltered_broadcast", _is_unfiltered_broadcast),
    ("broadcast_in_group", _is_broadcast_in_group),
    ("addressed_in_group", _is_addressed_in_group),
)


def matching_audience_rule(
    message: Any,
    requester_id: Optional[int] = None,
    requester_group: Optional[str] = None
) -> Optional[str]:
    """返回第一条命中的受众规则名，均未命中返回 None"""
    for name, rule in AUDIENCE_RULES:
        if rule(message, requester_id, requester_group):
            return name
    return None


def is_message_visible(
    message: Any,
    requester_id: Optional[int] = None,
    requester_group: Optional[str] = None
) -> bool:
    """
    判断消息对请求者是否可见（不含截止线判断）

    Args:
        message: 带 sender_id / receiver_id / group 属性的消息对象
        requester_id: 请求者 ID（可选）
        requester_group: 请求者分组（可选），"all" 表示广播不过滤

    Returns:
        是否可见
    """
    return matching_audience_rule(message, requester_id, requester_group) is not None


def select_visible_messages(
    recent: Sequence[Any],
    limit: int,
    cutoff: int = 0,
    requester_id: Optional[int] = None,
    requester_group: Optional[str] = None
) -> List[Any]:
    """
    从最近消息（最新在前）中挑出可见消息

    Args:
        recent: 按时间倒序排列的候选消息
        limit: 最多返回条数
        cutoff: 截止时间，早于它的消息丢弃
        requester_id: 请求者 ID（可选）
        requester_group: 请求者分组（可选）

    Returns:
        可见消息列表，按时间正序（最旧在前）
    """
    visible = [
        message for message in recent
        if message.timestamp >= cutoff
        and is_message_visible(message, requester_id, requester_group)
    ]
    selected = visible[:max(limit, 0)]
    selected.reverse()
    return selected
