"""
参与者 Repository
提供 participants 表的增删改查操作

事务由调用方（Service 层）管理，这里只做 flush，不做 commit
"""

from typing import List, Optional, Iterable

from sqlmodel import Session, select, col

from app.models.participant import Participant


class ParticipantRepository:
    """
    参与者数据访问对象
    封装所有与 participants 表相关的数据库操作
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def get_by_id(self, participant_id: int) -> Optional[Participant]:
        """
        根据 ID 获取参与者

        Args:
            participant_id: 参与者 ID

        Returns:
            Participant 对象，不存在则返回 None
        """
        return self.session.get(Participant, participant_id)

    def get_by_username(self, username: str) -> Optional[Participant]:
        """
        根据用户名获取参与者（存在多行时取最早创建的一行）

        Args:
            username: 用户名

        Returns:
            Participant 对象，不存在则返回 None
        """
        statement = select(Participant).where(
            Participant.username == username
        ).order_by(col(Participant.id))
        return self.session.exec(statement).first()

    def create(self, username: str, now: int, group: Optional[str] = None) -> Participant:
        """
        创建新参与者，last_seen 与 created_at 均为 now

        Args:
            username: 用户名
            now: 当前时间（毫秒）
            group: 分组（可选）

        Returns:
            创建的 Participant 对象（已分配 ID）
        """
        participant = Participant(
            username=username,
            last_seen=now,
            created_at=now,
            group=group
        )
        self.session.add(participant)
        self.session.flush()
        return participant

    def start_session(
        self,
        participant: Participant,
        now: int,
        group: Optional[str] = None
    ) -> Participant:
        """
        重新登录：重置 last_seen 和 created_at，提供了分组时覆盖分组

        Args:
            participant: 已存在的参与者
            now: 当前时间（毫秒）
            group: 新分组，None 表示保持原分组

        Returns:
            更新后的 Participant 对象
        """
        participant.last_seen = now
        participant.created_at = now
        if group is not None:
            participant.group = group
        self.session.add(participant)
        self.session.flush()
        return participant

    def touch(self, participant: Participant, now: int) -> Participant:
        """
        推进 last_seen

        Args:
            participant: 参与者
            now: 当前时间（毫秒）

        Returns:
            更新后的 Participant 对象
        """
        participant.last_seen = now
        self.session.add(participant)
        self.session.flush()
        return participant

    def list_seen_after(self, threshold: int) -> List[Participant]:
        """
        获取 last_seen 严格晚于 threshold 的参与者

        Args:
            threshold: 时间阈值（毫秒）

        Returns:
            Participant 列表
        """
        statement = select(Participant).where(
            Participant.last_seen > threshold
        ).order_by(col(Participant.id))
        return list(self.session.exec(statement).all())

    def delete_many(self, participant_ids: Iterable[int]) -> int:
        """
        按 ID 批量删除参与者，不存在的 ID 忽略

        Args:
            participant_ids: 参与者 ID 集合

        Returns:
            实际删除的数量
        """
        ids = list(participant_ids)
        if not ids:
            return 0
        statement = select(Participant).where(col(Participant.id).in_(ids))
        participants = self.session.exec(statement).all()
        for participant in participants:
            self.session.delete(participant)
        self.session.flush()
        return len(participants)
