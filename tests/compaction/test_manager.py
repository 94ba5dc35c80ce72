"""CompressionManager 单元测试"""

from typing import List, Sequence

import pytest

from context_compression.compaction.base import ChatReducer
from context_compression.compaction.manager import CompressionManager, CompressionMetrics
from context_compression.compaction.monitor import CompressionMonitor, CompressionReport
from context_compression.compaction.strategies.message_counting import MessageCountingReducer
from context_compression.messages import Message


class BrokenReducer(ChatReducer):
    name = "broken"

    async def reduce(self, messages: Sequence[Message]) -> List[Message]:
        raise RuntimeError("boom")


class RecordingMonitor(CompressionMonitor):
    def __init__(self):
        self.reports: List[CompressionReport] = []

    def log_compression_effectiveness(self, original, compressed, duration):
        report = super().log_compression_effectiveness(original, compressed, duration)
        self.reports.append(report)
        return report


class TestCompressionManager:
    """CompressionManager 测试"""

    @pytest.fixture
    def monitor(self):
        return RecordingMonitor()

    @pytest.fixture
    def manager(self, monitor):
        return CompressionManager(monitor)

    @pytest.fixture
    def reducer(self, config):
        return MessageCountingReducer(config)

    def test_register_reducer(self, manager, reducer):
        """测试：注册压缩器"""
        manager.register_reducer("counting", reducer)

        assert "counting" in manager.reducers
        assert "counting" in manager.metrics

    def test_set_nonexistent_reducer_raises_error(self, manager):
        """测试：设置不存在的压缩器抛出异常"""
        with pytest.raises(ValueError, match="不存在"):
            manager.set_reducer("nonexistent")

    def test_get_reducer_without_selection_raises_error(self, manager):
        """测试：未选择压缩器时获取抛出异常"""
        with pytest.raises(ValueError, match="没有选择压缩器"):
            manager.get_reducer()

    def test_get_reducer_by_name(self, manager, reducer):
        """测试：按名称获取压缩器"""
        manager.register_reducer("counting", reducer)

        assert manager.get_reducer("counting") is reducer

    @pytest.mark.asyncio
    async def test_reduce_records_metrics_and_report(self, manager, monitor, reducer, conversation):
        """测试：压缩后记录指标与效果报告"""
        manager.register_reducer("counting", reducer)
        manager.set_reducer("counting")

        result = await manager.reduce(conversation)

        metrics = manager.get_metrics()
        assert len(result) == 10
        assert metrics.success_count == 1
        assert metrics.total_messages_removed == 10
        assert metrics.last_compression_time is not None
        assert monitor.reports[0].original_count == 20
        assert monitor.reports[0].compressed_count == 10
        assert monitor.reports[0].message_ratio == 0.5

    @pytest.mark.asyncio
    async def test_reduce_failure_is_recorded_and_raised(self, manager):
        """测试：压缩异常记录为失败并继续抛出"""
        manager.register_reducer("broken", BrokenReducer())

        with pytest.raises(RuntimeError, match="boom"):
            await manager.reduce([Message.user("hi")], name="broken")

        metrics = manager.get_metrics("broken")
        assert metrics.failure_count == 1
        assert metrics.success_rate == 0.0

    def test_list_reducers(self, manager, reducer):
        """测试：列出压缩器元数据"""
        manager.register_reducer("counting", reducer)

        reducers = manager.list_reducers()

        assert len(reducers) == 1
        assert reducers[0].name == "message_counting"

    def test_get_current_reducer_name_when_none(self, manager):
        """测试：未设置压缩器时返回 None"""
        assert manager.get_current_reducer_name() is None


class TestCompressionMetrics:
    """CompressionMetrics 测试"""

    def test_success_rate_with_no_attempts(self):
        """测试：无尝试时成功率为0"""
        assert CompressionMetrics(reducer_name="test").success_rate == 0.0

    def test_success_rate_calculation(self):
        """测试：成功率计算"""
        metrics = CompressionMetrics(reducer_name="test", success_count=8, failure_count=2)

        assert metrics.success_rate == 0.8

    def test_avg_duration_calculation(self):
        """测试：平均耗时计算"""
        metrics = CompressionMetrics(reducer_name="test", success_count=4, total_duration=10.0)

        assert metrics.avg_duration == 2.5


class TestCompressionMonitor:
    """CompressionMonitor 测试"""

    def test_report_counts_non_text_blocks(self):
        """测试：工具块按固定字符数估算"""
        original = [Message.user("a" * 100), Message.tool_call("c1", "read"), Message.tool_result("c1", "x")]
        compressed = [Message.user("a" * 100)]

        report = CompressionMonitor().log_compression_effectiveness(original, compressed, 0.002)

        assert report.original_chars == 200
        assert report.compressed_chars == 100
        assert report.char_saving == pytest.approx(0.5)
        assert report.duration_ms == pytest.approx(2.0)

    def test_empty_input(self):
        """测试：空输入时比例为默认值"""
        report = CompressionMonitor().log_compression_effectiveness([], [], 0.0)

        assert report.message_ratio == 1.0
        assert report.char_saving == 0.0
