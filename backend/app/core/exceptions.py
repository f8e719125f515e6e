"""
领域异常
"""

from typing import Any


class PresenceError(Exception):
    """在线状态引擎的异常基类"""


class ParticipantNotFound(PresenceError):
    """引用的参与者 ID 在 participants 表中不存在"""

    def __init__(self, participant_id: Any):
        self.participant_id = participant_id
        super().__init__(f"Participant not found: {participant_id}")
