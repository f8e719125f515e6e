"""
位置服务层

上报位置时推进参与者 last_seen 并 upsert 唯一的位置行；
读取时按新鲜度窗口和分组过滤
"""

from typing import List, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.core.clock import Clock, SystemClock
from app.core.config import Settings, settings
from app.core.exceptions import ParticipantNotFound
from app.db.init_db import get_engine
from app.models.location import LocationRead
from app.repositories.location_repository import LocationRepository
from app.repositories.participant_repository import ParticipantRepository
from app.services.visibility import is_location_visible, normalize_group


class LocationService:
    """位置服务类"""

    def __init__(
        self,
        engine: Optional[Engine] = None,
        clock: Optional[Clock] = None,
        config: Optional[Settings] = None
    ):
        self.engine = engine or get_engine()
        self.clock = clock or SystemClock()
        self.config = config or settings

    def report_location(self, participant_id: int, latitude: float, longitude: float) -> None:
        """
        上报位置

        Args:
            participant_id: 参与者 ID
            latitude: 纬度
            longitude: 经度

        Raises:
            ParticipantNotFound: 参与者不存在，事务回滚
        """
        with Session(self.engine) as session, session.begin():
            participants = ParticipantRepository(session)
            participant = participants.get_by_id(participant_id)
            if participant is None:
                print(f"[LocationService] 参与者不存在: {participant_id}")
                raise ParticipantNotFound(participant_id)

            now = self.clock.now()
            participants.touch(participant, now)

            location, created = LocationRepository(session).upsert(
                participant, latitude, longitude, now
            )
            action = "新建" if created else "更新"
            print(f"[LocationService] {action}位置 (participant: {participant_id}, location: {location.id})")

    def list_fresh_locations(self) -> List[LocationRead]:
        """
        获取最近 2 分钟内更新过的位置（窗口可配置）

        Returns:
            LocationRead 列表
        """
        with Session(self.engine) as session, session.begin():
            threshold = self.clock.now() - self.config.fresh_location_window_ms
            locations = LocationRepository(session).list_updated_after(threshold)
            return [LocationRead.model_validate(location) for location in locations]

    def list_fresh_locations_for_group(
        self,
        requester_id: Optional[int] = None,
        requester_group: Optional[str] = None
    ) -> List[LocationRead]:
        """
        获取对请求者可见的新鲜位置

        请求者自己的位置总是包含；未提供分组时不过滤；否则只保留同分组的位置

        Args:
            requester_id: 请求者 ID（可选）
            requester_group: 请求者分组（可选）

        Returns:
            LocationRead 列表
        """
        requester_group = normalize_group(requester_group)
        return [
            location for location in self.list_fresh_locations()
            if is_location_visible(location, requester_id, requester_group)
        ]
