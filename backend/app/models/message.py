"""
在线状态域模型 - 聊天消息表
"""

from typing import Optional

from sqlalchemy import Index
from sqlmodel import SQLModel, Field


class Message(SQLModel, table=True):
    """
    聊天消息表
    写入后不可修改；receiver_id 为空表示广播
    参与者可能先于其消息被清理，因此 sender_id / receiver_id 不设外键
    """
    __tablename__ = "messages"
    __table_args__ = (
        # 按接收者查询和批量删除
        Index("ix_messages_receiver_timestamp", "receiver_id", "timestamp"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    sender_id: int = Field(nullable=False)

    # 发送时的用户名快照
    username: str = Field(nullable=False)

    text: str = Field(nullable=False)

    # 按时间倒序取最近消息的热点
    timestamp: int = Field(index=True, nullable=False)

    receiver_id: Optional[int] = Field(default=None)

    # 显式指定的分组，否则为发送者当时所在分组的快照
    group: Optional[str] = Field(default=None)


class MessageRead(SQLModel):
    """消息的对外视图"""
    id: int
    sender_id: int
    username: str
    text: str
    timestamp: int
    receiver_id: Optional[int] = None
    group: Optional[str] = None
