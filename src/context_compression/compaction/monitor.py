"""压缩效果监控"""

from dataclasses import dataclass
from typing import Sequence

from ..messages import Message, TextBlock
from ..utils.logger import logger

# 非文本内容块（工具调用/结果）按固定字符数估算
NON_TEXT_BLOCK_CHARS = 50


@dataclass
class CompressionReport:
    """单次压缩效果报告"""
    original_count: int
    compressed_count: int
    original_chars: int
    compressed_chars: int
    duration_ms: float

    @property
    def message_ratio(self) -> float:
        return self.compressed_count / self.original_count if self.original_count > 0 else 1.0

    @property
    def char_saving(self) -> float:
        return 1.0 - self.compressed_chars / self.original_chars if self.original_chars > 0 else 0.0


def estimate_chars(messages: Sequence[Message]) -> int:
    count = 0
    for msg in messages:
        count += len(msg.content)
        count += sum(NON_TEXT_BLOCK_CHARS for block in msg.blocks if not isinstance(block, TextBlock))
    return count


class CompressionMonitor:
    """记录压缩前后的消息数与字符估算"""

    def log_compression_effectiveness(
        self,
        original: Sequence[Message],
        compressed: Sequence[Message],
        duration: float,
    ) -> CompressionReport:
        """duration 单位为秒"""
        report = CompressionReport(
            original_count=len(original),
            compressed_count=len(compressed),
            original_chars=estimate_chars(original),
            compressed_chars=estimate_chars(compressed),
            duration_ms=duration * 1000,
        )
        logger.info(
            f"上下文压缩报告: 消息数 {report.original_count} -> {report.compressed_count} "
            f"({report.message_ratio:.1%}), 字符估算 {report.original_chars} -> {report.compressed_chars} "
            f"({report.char_saving:.1%}节省), 耗时: {report.duration_ms:.1f}ms"
        )
        return report
