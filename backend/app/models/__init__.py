"""
数据库模型模块
导出所有表模型和对外视图
"""

from .participant import Participant, ParticipantRead
from .location import Location, LocationRead
from .message import Message, MessageRead

__all__ = [
    "Participant", "ParticipantRead",
    "Location", "LocationRead",
    "Message", "MessageRead"
]
