"""
运行配置模块
所有时间窗口和上限均可通过环境变量覆盖，时间单位为毫秒
"""

from pydantic import PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

# 消息受众过滤中表示"不按分组过滤"的保留分组名
ALL_GROUPS = "all"


class Settings(BaseSettings):
    """
    时间窗口与容量配置

    - active_participant_window_ms: 在线用户判定窗口（lastSeen 距今）
    - fresh_location_window_ms: 位置可见窗口
    - reaper_stale_location_ms: 清理任务判定位置过期的阈值
    - message_list_default_limit: 消息列表默认条数
    - message_max_length: 消息文本软上限，超出部分截断
    """
    active_participant_window_ms: PositiveInt = 5 * 60 * 1000
    fresh_location_window_ms: PositiveInt = 2 * 60 * 1000
    reaper_stale_location_ms: PositiveInt = 60 * 1000
    message_list_default_limit: PositiveInt = 50
    message_max_length: PositiveInt = 2000

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        env_ignore_empty=True,  # 空字符串按未设置处理
        extra="ignore",
        frozen=True
    )


settings = Settings()
