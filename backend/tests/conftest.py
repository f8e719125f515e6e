"""
Pytest 测试配置
提供测试数据库、手动时钟和各层实例等测试基础设施
"""

import sys
from pathlib import Path
from typing import Generator

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

# 添加项目根目录到 sys.path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.clock import ManualClock
from app.core.config import Settings
from app.db.init_db import create_tables, get_engine
from app.models import Participant


# 测试统一从这个时间点开始（毫秒）
T0 = 1_700_000_000_000
SECOND = 1000
MINUTE = 60 * SECOND


# ==================== 数据库 Fixtures ====================

@pytest.fixture(scope="function")
def test_db_engine():
    """
    创建测试用的内存数据库引擎
    每个测试函数都会获得一个全新的数据库；StaticPool 让所有 Session 共用同一个连接
    """
    engine = get_engine("sqlite:///:memory:", poolclass=StaticPool)

    # 创建所有表
    create_tables(engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """
    创建测试用的数据库会话（仅供 Repository 测试使用，
    与 Service 共用同一引擎时不要同时持有）
    """
    with Session(test_db_engine) as session:
        yield session


# ==================== 时钟与配置 Fixtures ====================

@pytest.fixture(scope="function")
def clock() -> ManualClock:
    """
    手动时钟，起点为 T0
    """
    return ManualClock(T0)


@pytest.fixture(scope="function")
def test_settings() -> Settings:
    """
    固定的时间窗口配置，不受环境变量影响
    """
    return Settings(
        _env_file=None,
        active_participant_window_ms=5 * MINUTE,
        fresh_location_window_ms=2 * MINUTE,
        reaper_stale_location_ms=1 * MINUTE,
        message_list_default_limit=50,
        message_max_length=2000
    )


# ==================== 测试数据 Fixtures ====================

@pytest.fixture(scope="function")
def test_participant(test_db_session: Session) -> Participant:
    """
    创建测试参与者
    """
    participant = Participant(username="alice", last_seen=T0, created_at=T0, group="blue")
    test_db_session.add(participant)
    test_db_session.commit()
    test_db_session.refresh(participant)
    return participant


# ==================== Repository Fixtures ====================

@pytest.fixture(scope="function")
def participant_repository(test_db_session: Session):
    """
    创建 ParticipantRepository 实例
    """
    from app.repositories.participant_repository import ParticipantRepository
    return ParticipantRepository(test_db_session)


@pytest.fixture(scope="function")
def location_repository(test_db_session: Session):
    """
    创建 LocationRepository 实例
    """
    from app.repositories.location_repository import LocationRepository
    return LocationRepository(test_db_session)


@pytest.fixture(scope="function")
def message_repository(test_db_session: Session):
    """
    创建 MessageRepository 实例
    """
    from app.repositories.message_repository import MessageRepository
    return MessageRepository(test_db_session)


# ==================== Service Fixtures ====================

@pytest.fixture(scope="function")
def presence_service(test_db_engine, clock, test_settings):
    """
    创建 PresenceService 实例
    """
    from app.services.presence_service import PresenceService
    return PresenceService(test_db_engine, clock, test_settings)


@pytest.fixture(scope="function")
def location_service(test_db_engine, clock, test_settings):
    """
    创建 LocationService 实例
    """
    from app.services.location_service import LocationService
    return LocationService(test_db_engine, clock, test_settings)


@pytest.fixture(scope="function")
def message_service(test_db_engine, clock, test_settings):
    """
    创建 MessageService 实例
    """
    from app.services.message_service import MessageService
    return MessageService(test_db_engine, clock, test_settings)


@pytest.fixture(scope="function")
def reaper_service(test_db_engine, clock, test_settings):
    """
    创建 ReaperService 实例
    """
    from app.services.reaper_service import ReaperService
    return ReaperService(test_db_engine, clock, test_settings)


@pytest.fixture(scope="function")
def count_rows(test_db_engine):
    """
    统计表行数的辅助函数，每次调用使用独立的短 Session
    """
    from sqlmodel import select

    def _count(model, *conditions) -> int:
        with Session(test_db_engine) as session:
            statement = select(model)
            for condition in conditions:
                statement = statement.where(condition)
            return len(session.exec(statement).all())

    return _count


# ==================== Pytest 配置 ====================

def pytest_configure(config):
    """
    Pytest 初始化配置
    """
    # 标记测试分类
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
