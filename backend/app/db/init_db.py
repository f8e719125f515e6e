"""
数据库初始化脚本
负责创建数据库引擎和表结构
"""

import os
from pathlib import Path
from typing import Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

# 导入模型以注册到 SQLModel.metadata
from app.models.participant import Participant  # noqa: F401
from app.models.location import Location  # noqa: F401
from app.models.message import Message  # noqa: F401


def get_database_url() -> str:
    """
    获取数据库连接 URL
    优先使用环境变量，否则使用默认的 SQLite 文件
    """
    db_path = os.environ.get("DATABASE_PATH", "database.db")
    # 确保路径是绝对路径
    if not os.path.isabs(db_path):
        # 从 backend 目录解析
        project_root = Path(__file__).parent.parent.parent
        db_path = str(project_root / db_path)
    return f"sqlite:///{db_path}"


def enable_immediate_transactions(engine: Engine) -> None:
    """
    让每个事务以 BEGIN IMMEDIATE 开始

    pysqlite 默认延迟到第一条写语句才加锁，读-改-写（如位置 upsert）
    可能交错执行；IMMEDIATE 在事务开始时就拿到写锁，事务之间串行
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # 关闭 pysqlite 自带的事务处理，由下面的 begin 钩子接管
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(connection):
        connection.exec_driver_sql("BEGIN IMMEDIATE")


def get_engine(database_url: Optional[str] = None, **kwargs) -> Engine:
    """
    创建并返回数据库引擎

    Args:
        database_url: 数据库 URL（可选，默认读取 DATABASE_PATH）
        **kwargs: 透传给 create_engine 的参数（如测试用的 poolclass）
    """
    engine = create_engine(
        database_url or get_database_url(),
        echo=False,  # 设置为 True 可查看 SQL 语句
        connect_args={"check_same_thread": False, "timeout": 30},  # SQLite 特有配置
        **kwargs
    )
    enable_immediate_transactions(engine)
    return engine


def create_tables(engine: Engine) -> None:
    """
    创建所有数据库表
    SQLModel 会自动根据模型创建表结构
    """
    SQLModel.metadata.create_all(engine)
    print(f"[init_db] Tables ready: {', '.join(sorted(SQLModel.metadata.tables))}")


def init_db() -> Engine:
    """
    完整的数据库初始化流程
    1. 创建数据库引擎
    2. 创建所有表结构

    参与者只通过登录产生，不预置默认数据
    """
    print("\n=== Initializing database ===")

    engine = get_engine()
    create_tables(engine)

    print(f"=== Database ready at {get_database_url()} ===\n")
    return engine


if __name__ == "__main__":
    # 直接运行此脚本时，执行数据库初始化
    init_db()
