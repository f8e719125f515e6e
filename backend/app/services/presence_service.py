"""
在线状态服务层

封装参与者相关的业务逻辑：
1. 登录：按用户名复用参与者行，重置会话开始时间
2. 在线用户列表：最近活动时间在窗口内的参与者
"""

from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.core.clock import Clock, SystemClock
from app.core.config import Settings, settings
from app.db.init_db import get_engine
from app.models.participant import Participant, ParticipantRead
from app.repositories.participant_repository import ParticipantRepository
from app.services.visibility import normalize_group


class PresenceService:
    """
    在线状态服务类

    每个操作独占一个 Session 和一个事务，异常时整体回滚

    使用示例：
        service = PresenceService(engine)
        participant_id = service.login("alice", group="blue")
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

    def login(self, username: str, group: Optional[str] = None) -> int:
        """
        登录（或重新登录）

        已存在同名参与者时更新 last_seen 和 created_at，并在提供了非空分组时覆盖分组；
        否则创建新参与者。每次登录都会重置消息截止线

        Args:
            username: 用户名
            group: 分组（可选）

        Returns:
            参与者 ID
        """
        group = normalize_group(group)

        with Session(self.engine) as session, session.begin():
            repo = ParticipantRepository(session)
            participant = repo.get_by_username(username)
            # 在事务取得写锁之后读取时钟
            now = self.clock.now()

            if participant:
                repo.start_session(participant, now, group)
                print(f"[PresenceService] 用户 '{username}' 重新登录 (ID: {participant.id}, group: {participant.group})")
            else:
                participant = repo.create(username, now, group)
                print(f"[PresenceService] 新用户 '{username}' 已创建 (ID: {participant.id}, group: {group})")

            participant_id = participant.id

        return participant_id

    def list_active_participants(self) -> List[ParticipantRead]:
        """
        获取最近 5 分钟内有活动的参与者（窗口可配置）

        Returns:
            ParticipantRead 列表
        """
        with Session(self.engine) as session, session.begin():
            threshold = self.clock.now() - self.config.active_participant_window_ms
            participants = ParticipantRepository(session).list_seen_after(threshold)
            return [ParticipantRead.model_validate(p) for p in participants]

    def get_participant(self, participant_id: int) -> Optional[Participant]:
        """
        获取参与者（已脱离 Session，可直接读取属性）

        Args:
            participant_id: 参与者 ID

        Returns:
            Participant 对象，不存在则返回 None
        """
        with Session(self.engine) as session, session.begin():
            participant = ParticipantRepository(session).get_by_id(participant_id)
            if participant is not None:
                session.expunge(participant)
            return participant
