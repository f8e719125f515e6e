"""
在线状态域模型 - 位置表
"""

from typing import Optional

from sqlmodel import SQLModel, Field


class Location(SQLModel, table=True):
    """
    位置表
    每个参与者至多一行，由 LocationRepository.upsert 保证（非唯一约束）
    username 和 group 是写入时从参与者复制的快照
    """
    __tablename__ = "locations"

    id: Optional[int] = Field(default=None, primary_key=True)

    # 外键：所属参与者，upsert 时按此列查找已有行
    participant_id: int = Field(foreign_key="participants.id", index=True, nullable=False)

    username: str = Field(nullable=False)

    # 不做经纬度范围校验，原样存储
    latitude: float = Field(nullable=False)
    longitude: float = Field(nullable=False)

    # 最后一次上报时间（毫秒）
    timestamp: int = Field(nullable=False)

    group: Optional[str] = Field(default=None)


class LocationRead(SQLModel):
    """位置的对外视图"""
    id: int
    participant_id: int
    username: str
    latitude: float
    longitude: float
    timestamp: int
    group: Optional[str] = None
