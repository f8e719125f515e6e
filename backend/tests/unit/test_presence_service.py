"""
PresenceService 单元测试
验证登录复用、会话重置和在线用户窗口
"""

import pytest
from app.models import Participant, ParticipantRead

SECOND = 1000
MINUTE = 60 * SECOND

pytestmark = pytest.mark.unit


class TestLogin:
    """测试登录"""

    def test_login_creates_participant(self, presence_service, clock):
        """测试首次登录创建参与者"""
        participant_id = presence_service.login("alice", group="blue")

        participant = presence_service.get_participant(participant_id)
        assert participant.username == "alice"
        assert participant.last_seen == clock.now()
        assert participant.created_at == clock.now()
        assert participant.group == "blue"

    def test_login_is_idempotent(self, presence_service, count_rows):
        """测试同名重复登录返回同一 ID 且只有一行"""
        first = presence_service.login("alice")
        second = presence_service.login("alice")

        assert first == second
        assert count_rows(Participant, Participant.username == "alice") == 1

    def test_relogin_resets_session(self, presence_service, clock):
        """测试重新登录重置 last_seen 和 created_at"""
        participant_id = presence_service.login("alice", group="blue")
        clock.advance(10 * MINUTE)

        presence_service.login("alice")

        participant = presence_service.get_participant(participant_id)
        assert participant.created_at == clock.now()
        assert participant.last_seen == clock.now()
        assert participant.group == "blue"

    def test_relogin_overwrites_group_only_when_given(self, presence_service):
        """测试只有非空分组才会覆盖原分组"""
        participant_id = presence_service.login("alice", group="blue")

        presence_service.login("alice", group="")
        assert presence_service.get_participant(participant_id).group == "blue"

        presence_service.login("alice", group="red")
        assert presence_service.get_participant(participant_id).group == "red"

    def test_get_participant_missing(self, presence_service):
        """测试获取不存在的参与者返回 None"""
        assert presence_service.get_participant(12345) is None


class TestActiveParticipants:
    """测试在线用户列表"""

    def test_five_minute_window(self, presence_service, clock):
        """测试超过 5 分钟未活动的参与者不在列表中"""
        presence_service.login("stale")
        clock.advance(4 * MINUTE)
        presence_service.login("fresh")
        clock.advance(1 * MINUTE + 1)

        active = presence_service.list_active_participants()

        assert [p.username for p in active] == ["fresh"]
        assert all(isinstance(p, ParticipantRead) for p in active)

    def test_listing_does_not_mutate(self, presence_service, clock):
        """测试读取在线列表不会推进 last_seen"""
        participant_id = presence_service.login("alice")
        before = presence_service.get_participant(participant_id).last_seen
        clock.advance(MINUTE)

        presence_service.list_active_participants()

        assert presence_service.get_participant(participant_id).last_seen == before
