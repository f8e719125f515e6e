"""
时间源模块
所有服务通过注入的 Clock 读取当前时间，统一使用毫秒级 epoch 整数
"""

import time
from typing import Protocol


class Clock(Protocol):
    """时间源协议：now() 返回毫秒级时间戳"""

    def now(self) -> int:
        ...


class SystemClock:
    """系统墙钟"""

    def now(self) -> int:
        return int(time.time() * 1000)


class ManualClock:
    """
    手动时钟
    测试中用于精确模拟"过期"场景，时间只在显式调用 set/advance 时变化
    """

    def __init__(self, start: int = 0):
        self._now = start

    def now(self) -> int:
        return self._now

    def set(self, value: int) -> None:
        self._now = value

    def advance(self, ms: int) -> int:
        self._now += ms
        return self._now
