"""
在线状态域模型 - 参与者表
"""

from typing import Optional

from sqlmodel import SQLModel, Field


class Participant(SQLModel, table=True):
    """
    参与者表
    以用户名作为登录键，不设唯一约束；重复登录由 PresenceService 复用已有行
    """
    __tablename__ = "participants"

    # 主键：对外暴露的参与者 ID
    id: Optional[int] = Field(default=None, primary_key=True)

    # 登录键，按用户名查询的热点
    username: str = Field(index=True, nullable=False)

    # 最近活动时间（毫秒），登录、上报位置、发消息时推进
    last_seen: int = Field(nullable=False)

    # 本次会话开始时间（毫秒），每次登录重置，作为消息可见的截止线
    # 旧数据可能缺失，此时回退到 last_seen
    created_at: Optional[int] = Field(default=None)

    # 分组标签，None 表示未加入任何分组
    group: Optional[str] = Field(default=None)


class ParticipantRead(SQLModel):
    """在线用户列表的对外视图"""
    id: int
    username: str
    last_seen: int
