"""
服务层模块
封装在线状态、位置、消息和过期清理的业务逻辑
"""

from .presence_service import PresenceService
from .location_service import LocationService
from .message_service import MessageService
from .reaper_service import ReaperService, ReapResult

__all__ = [
    "PresenceService",
    "LocationService",
    "MessageService",
    "ReaperService",
    "ReapResult"
]
