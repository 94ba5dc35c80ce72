"""压缩管理器"""

import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..messages import Message
from ..utils.logger import logger
from .base import ChatReducer, ReducerMetadata
from .monitor import CompressionMonitor


@dataclass
class CompressionMetrics:
    """压缩指标"""
    reducer_name: str
    success_count: int = 0
    failure_count: int = 0
    total_messages_removed: int = 0
    total_duration: float = 0.0
    last_compression_time: Optional[float] = None

    @property
    def success_rate(self) -> float:
        total = self.success_count + self.failure_count
        return self.success_count / total if total > 0 else 0.0

    @property
    def avg_duration(self) -> float:
        return self.total_duration / self.success_count if self.success_count > 0 else 0.0


class CompressionManager:
    """压缩管理器：注册和切换压缩器，执行压缩，记录指标"""

    def __init__(self, monitor: Optional[CompressionMonitor] = None):
        self.monitor = monitor or CompressionMonitor()
        self.reducers: Dict[str, ChatReducer] = {}
        self.current_reducer: Optional[str] = None
        self.metrics: Dict[str, CompressionMetrics] = {}

    def register_reducer(self, name: str, reducer: ChatReducer) -> None:
        self.reducers[name] = reducer
        self.metrics[name] = CompressionMetrics(reducer_name=name)
        logger.info(f"注册压缩器: {name}")

    def set_reducer(self, name: str) -> None:
        if name not in self.reducers:
            available = ", ".join(self.reducers.keys())
            raise ValueError(f"压缩器 '{name}' 不存在。可用压缩器: {available}")
        self.current_reducer = name
        logger.info(f"切换到压缩器: {name}")

    def get_reducer(self, name: Optional[str] = None) -> ChatReducer:
        reducer_name = name or self.current_reducer
        if not reducer_name:
            raise ValueError("没有选择压缩器，请先调用 set_reducer()")
        if reducer_name not in self.reducers:
            raise ValueError(f"压缩器 '{reducer_name}' 不存在")
        return self.reducers[reducer_name]

    async def reduce(self, messages: Sequence[Message], name: Optional[str] = None) -> List[Message]:
        """用当前（或指定）压缩器压缩消息"""
        reducer_name = name or self.current_reducer
        reducer = self.get_reducer(reducer_name)
        original = list(messages)
        start_time = time.perf_counter()

        try:
            result = await reducer.reduce(original)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(f"压缩异常: {e}", exc_info=True)
            self._record(reducer_name, False, 0, duration)
            raise

        duration = time.perf_counter() - start_time
        self._record(reducer_name, True, len(original) - len(result), duration)
        self.monitor.log_compression_effectiveness(original, result, duration)
        return result

    def _record(self, reducer_name: str, success: bool, removed: int, duration: float) -> None:
        if reducer_name not in self.metrics:
            self.metrics[reducer_name] = CompressionMetrics(reducer_name=reducer_name)

        metric = self.metrics[reducer_name]
        if success:
            metric.success_count += 1
            metric.total_messages_removed += max(0, removed)
        else:
            metric.failure_count += 1

        metric.total_duration += duration
        metric.last_compression_time = time.time()

    def get_metrics(self, reducer_name: Optional[str] = None) -> CompressionMetrics:
        name = reducer_name or self.current_reducer
        if not name or name not in self.metrics:
            return CompressionMetrics(reducer_name=name or "unknown")
        return self.metrics[name]

    def list_reducers(self) -> List[ReducerMetadata]:
        return [reducer.get_metadata() for reducer in self.reducers.values()]

    def get_current_reducer_name(self) -> Optional[str]:
        return self.current_reducer
