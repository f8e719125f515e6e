"""
核心基础模块
提供时间源、运行配置和领域异常
"""

from .clock import Clock, SystemClock, ManualClock
from .config import Settings, settings, ALL_GROUPS
from .exceptions import PresenceError, ParticipantNotFound

__all__ = [
    "Clock", "SystemClock", "ManualClock",
    "Settings", "settings", "ALL_GROUPS",
    "PresenceError", "ParticipantNotFound"
]
