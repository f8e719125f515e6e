"""
Repository (DAO) 模块
提供数据库操作的抽象层，封装 CRUD 逻辑
"""

from .participant_repository import ParticipantRepository
from .location_repository import LocationRepository
from .message_repository import MessageRepository

__all__ = [
    "ParticipantRepository",
    "LocationRepository",
    "MessageRepository"
]
