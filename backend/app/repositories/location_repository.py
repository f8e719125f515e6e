"""
位置 Repository
提供 locations 表的查询、upsert 和删除操作
"""

from typing import List, Optional, Set, Tuple

from sqlmodel import Session, select, col

from app.models.location import Location
from app.models.participant import Participant


class LocationRepository:
    """
    位置数据访问对象
    每个参与者至多一行，写入一律走 upsert
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def get_by_participant(self, participant_id: int) -> Optional[Location]:
        """
        获取参与者的位置行

        Args:
            participant_id: 参与者 ID

        Returns:
            Location 对象，不存在则返回 None
        """
        statement = select(Location).where(Location.participant_id == participant_id)
        return self.session.exec(statement).first()

    def upsert(
        self,
        participant: Participant,
        latitude: float,
        longitude: float,
        now: int
    ) -> Tuple[Location, bool]:
        """
        更新或创建参与者的位置

        已存在：更新经纬度、时间戳和分组（用户名保持首次写入的值）
        不存在：以参与者当前的用户名和分组创建新行

        Args:
            participant: 位置所属参与者
            latitude: 纬度
            longitude: 经度
            now: 当前时间（毫秒）

        Returns:
            (Location 对象, 是否新建)
        """
        location = self.get_by_participant(participant.id)
        created = location is None

        if created:
            location = Location(
                participant_id=participant.id,
                username=participant.username,
                latitude=latitude,
                longitude=longitude,
                timestamp=now,
                group=participant.group
            )
        else:
            location.latitude = latitude
            location.longitude = longitude
            location.timestamp = now
            location.group = participant.group

        self.session.add(location)
        self.session.flush()
        return location, created

    def list_all(self) -> List[Location]:
        """
        获取所有位置行（清理任务的快照）

        Returns:
            Location 列表
        """
        statement = select(Location).order_by(col(Location.id))
        return list(self.session.exec(statement).all())

    def list_updated_after(self, threshold: int) -> List[Location]:
        """
        获取时间戳严格晚于 threshold 的位置

        Args:
            threshold: 时间阈值（毫秒）

        Returns:
            Location 列表
        """
        statement = select(Location).where(
            Location.timestamp > threshold
        ).order_by(col(Location.id))
        return list(self.session.exec(statement).all())

    def list_participant_ids(self) -> Set[int]:
        """
        获取仍持有位置行的参与者 ID 集合

        Returns:
            参与者 ID 集合
        """
        statement = select(Location.participant_id)
        return set(self.session.exec(statement).all())

    def delete_many(self, location_ids: List[int]) -> int:
        """
        按 ID 批量删除位置行

        Args:
            location_ids: 位置 ID 列表

        Returns:
            实际删除的数量
        """
        if not location_ids:
            return 0
        statement = select(Location).where(col(Location.id).in_(location_ids))
        locations = self.session.exec(statement).all()
        for location in locations:
            self.session.delete(location)
        self.session.flush()
        return len(locations)
