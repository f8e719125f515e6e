"""
消息服务层

封装聊天消息的发送、按受众过滤读取和批量删除：
1. 发送：推进发送者 last_seen，分组取显式参数或发送者当前分组
2. 读取：多取一倍候选，按会话截止线和受众规则过滤，最后按时间正序返回
3. 删除：删除发给某参与者的全部消息
"""

from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.core.clock import Clock, SystemClock
from app.core.config import Settings, settings
from app.core.exceptions import ParticipantNotFound
from app.db.init_db import get_engine
from app.models.message import MessageRead
from app.repositories.message_repository import MessageRepository
from app.repositories.participant_repository import ParticipantRepository
from app.services.visibility import message_cutoff, normalize_group, select_visible_messages


class MessageService:
    """
    消息服务类

    使用示例：
        service = MessageService(engine)
        service.send(sender_id, "hello")
        messages = service.list_messages(limit=20, requester_id=sender_id, requester_group="blue")
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        clock: Optional[Clock] = None,
        config: Optional[Settings] = None
    ):
        self.engine = engine or get_engine()
        self.clock = clock or SystemClock()
        self.config = config or settings

    def send(
        self,
        sender_id: int,
        text: str,
        receiver_id: Optional[int] = None,
        group: Optional[str] = None
    ) -> None:
        """
        发送消息

        Args:
            sender_id: 发送者 ID
            text: 消息文本，超过软上限时截断
            receiver_id: 接收者 ID，None 表示广播
            group: 消息分组（可选），未提供时继承发送者当前分组

        Raises:
            ParticipantNotFound: 发送者不存在，事务回滚
        """
        group = normalize_group(group)
        max_length = self.config.message_max_length
        if len(text) > max_length:
            print(f"[MessageService] 消息过长 ({len(text)} > {max_length})，已截断")
            text = text[:max_length]

        with Session(self.engine) as session, session.begin():
            participants = ParticipantRepository(session)
            sender = participants.get_by_id(sender_id)
            if sender is None:
                print(f"[MessageService] 发送者不存在: {sender_id}")
                raise ParticipantNotFound(sender_id)

            # 在事务取得写锁之后读取时钟，消息时间戳随提交顺序单调不减
            now = self.clock.now()
            participants.touch(sender, now)

            MessageRepository(session).create(
                sender_id=sender.id,
                username=sender.username,
                text=text,
                timestamp=now,
                receiver_id=receiver_id,
                group=group if group is not None else sender.group
            )

    def list_messages(
        self,
        limit: Optional[int] = None,
        requester_id: Optional[int] = None,
        requester_group: Optional[str] = None
    ) -> List[MessageRead]:
        """
        获取对请求者可见的最近消息

        流程：
        1. 按时间倒序取 2 × limit 条候选（弥补过滤后的损耗）
        2. 计算截止线：请求者的 created_at，缺失时回退到 last_seen，无请求者为 0
        3. 丢弃早于截止线的消息，再按受众规则过滤
        4. 取前 limit 条并按时间正序返回

        Args:
            limit: 最多返回条数（默认 50）
            requester_id: 请求者 ID（可选）
            requester_group: 请求者分组（可选），"all" 表示广播不按分组过滤

        Returns:
            MessageRead 列表，最旧在前
        """
        if limit is None:
            limit = self.config.message_list_default_limit
        requester_group = normalize_group(requester_group)

        with Session(self.engine) as session, session.begin():
            recent = MessageRepository(session).list_recent(limit * 2)

            cutoff = 0
            if requester_id is not None:
                requester = ParticipantRepository(session).get_by_id(requester_id)
                cutoff = message_cutoff(requester)

            visible = select_visible_messages(
                recent,
                limit,
                cutoff=cutoff,
                requester_id=requester_id,
                requester_group=requester_group
            )
            return [MessageRead.model_validate(message) for message in visible]

    def delete_received(self, participant_id: int) -> int:
        """
        删除发给参与者的全部消息（幂等）

        Args:
            participant_id: 接收者 ID

        Returns:
            删除的消息数量
        """
        with Session(self.engine) as session, session.begin():
            count = MessageRepository(session).delete_by_receiver(participant_id)

        print(f"[MessageService] 已删除发给 {participant_id} 的 {count} 条消息")
        return count
