"""
过期清理服务

由外部调度器每分钟调用一次 run_pass()，本模块不负责定时
两个阶段各自是一个独立事务：
1. collect_stale_locations：删除超过 1 分钟未更新的位置，记录其参与者
2. evict_orphans：重新取位置快照，删除候选中已没有位置的参与者

第一阶段之后重新上报位置的参与者会重新生成位置行，第二阶段能看到它，因此不会被误删
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Set, Tuple

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.core.clock import Clock, SystemClock
from app.core.config import Settings, settings
from app.db.init_db import create_tables, get_engine
from app.repositories.location_repository import LocationRepository
from app.repositories.participant_repository import ParticipantRepository
from app.services.reaper import LocationSnapshot, select_orphaned_participants, select_stale_locations


@dataclass
class ReapResult:
    """一次清理的结果"""
    deleted_locations: int = 0
    deleted_participants: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ReaperService:
    """过期清理服务类，不在两次调用之间保存任何状态"""

    def __init__(
        self,
        engine: Optional[Engine] = None,
        clock: Optional[Clock] = None,
        config: Optional[Settings] = None
    ):
        self.engine = engine or get_engine()
        self.clock = clock or SystemClock()
        self.config = config or settings

    def collect_stale_locations(self) -> Tuple[Set[int], int]:
        """
        第一阶段：删除过期位置

        Returns:
            (候选参与者 ID 集合, 删除的位置数量)
        """
        with Session(self.engine) as session, session.begin():
            repo = LocationRepository(session)
            snapshot = [
                LocationSnapshot(
                    location_id=location.id,
                    participant_id=location.participant_id,
                    timestamp=location.timestamp
                )
                for location in repo.list_all()
            ]
            stale = select_stale_locations(
                snapshot, self.clock.now(), self.config.reaper_stale_location_ms
            )
            candidate_ids = {location.participant_id for location in stale}
            deleted = repo.delete_many([location.location_id for location in stale])

        return candidate_ids, deleted

    def evict_orphans(self, candidate_ids: Iterable[int]) -> int:
        """
        第二阶段：删除没有位置的候选参与者

        Args:
            candidate_ids: 第一阶段记录的参与者 ID

        Returns:
            删除的参与者数量
        """
        candidate_ids = set(candidate_ids)
        if not candidate_ids:
            return 0

        with Session(self.engine) as session, session.begin():
            live_ids = LocationRepository(session).list_participant_ids()
            orphans = select_orphaned_participants(candidate_ids, live_ids)
            return ParticipantRepository(session).delete_many(orphans)

    def run_pass(self) -> ReapResult:
        """
        执行一次完整清理，不向外抛出任何异常，错误记录在 ReapResult.error 中

        第一阶段失败时整个事务回滚，本次清理直接结束；
        第一阶段成功后一定执行第二阶段

        Returns:
            ReapResult
        """
        result = ReapResult()
        try:
            candidate_ids, result.deleted_locations = self.collect_stale_locations()
            result.deleted_participants = self.evict_orphans(candidate_ids)
        except Exception as e:
            result.error = str(e)
            print(f"[ReaperService] 清理失败: {e}")
            return result

        print(
            f"[ReaperService] 清理完成: 删除位置 {result.deleted_locations} 条, "
            f"删除参与者 {result.deleted_participants} 个"
        )
        return result


def main() -> ReapResult:
    """执行一次清理（供 cron 等外部调度器调用）"""
    engine = get_engine()
    create_tables(engine)
    return ReaperService(engine).run_pass()


if __name__ == "__main__":
    main()
