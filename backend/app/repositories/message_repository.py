"""
消息 Repository
提供 messages 表的追加、最近消息查询和按接收者删除
"""

from typing import List, Optional

from sqlmodel import Session, select, col

from app.models.message import Message


class MessageRepository:
    """
    消息数据访问对象
    消息只追加不修改
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def create(
        self,
        sender_id: int,
        username: str,
        text: str,
        timestamp: int,
        receiver_id: Optional[int] = None,
        group: Optional[str] = None
    ) -> Message:
        """
        追加一条消息

        Args:
            sender_id: 发送者 ID
            username: 发送者用户名快照
            text: 消息文本
            timestamp: 发送时间（毫秒）
            receiver_id: 接收者 ID，None 表示广播
            group: 消息分组

        Returns:
            创建的 Message 对象
        """
        message = Message(
            sender_id=sender_id,
            username=username,
            text=text,
            timestamp=timestamp,
            receiver_id=receiver_id,
            group=group
        )
        self.session.add(message)
        self.session.flush()
        return message

    def list_recent(self, count: int) -> List[Message]:
        """
        按时间倒序获取最近的消息

        Args:
            count: 最多返回条数

        Returns:
            Message 列表，最新的在前
        """
        if count <= 0:
            return []
        statement = select(Message).order_by(
            col(Message.timestamp).desc(),
            col(Message.id).desc()
        ).limit(count)
        return list(self.session.exec(statement).all())

    def delete_by_receiver(self, receiver_id: int) -> int:
        """
        删除发给指定接收者的全部消息

        Args:
            receiver_id: 接收者 ID

        Returns:
            删除的消息数量
        """
        statement = select(Message).where(Message.receiver_id == receiver_id)
        messages = self.session.exec(statement).all()
        count = len(messages)
        for message in messages:
            self.session.delete(message)
        self.session.flush()
        return count
