"""分层压缩：中间层普通消息摘要化，工具调用消息与最近消息原样保留"""

from typing import List, Optional, Sequence

from ...config import CompressionConfig
from ...executor import CompletionExecutor
from ...messages import Message
from ...utils.logger import logger
from ..base import ChatReducer
from ..utils import generate_summary, render_transcript

MIDDLE_SUMMARY_PROMPT = "Summarize these middle conversation usage contexts concisely:"
MIDDLE_SUMMARY_PREFIX = "[Middle Summary]: "


class LayeredCompressionReducer(ChatReducer):
    """分层压缩器

    层次：系统消息 | 中间层工具调用消息 | 最近 RECENT_COUNT 条，
    中间摘要插在最后一条系统消息之后（没有系统消息时位于首位）。
    """

    name = "layered"
    description = "中间层普通消息摘要，保留工具调用消息与最近消息"

    MIN_MESSAGES = 15
    RECENT_COUNT = 5

    def __init__(self, executor: CompletionExecutor, config: Optional[CompressionConfig] = None):
        if executor is None:
            raise ValueError("未提供 executor，无法生成摘要")
        self.executor = executor
        self.config = config or CompressionConfig()

    async def reduce(self, messages: Sequence[Message]) -> List[Message]:
        messages = list(messages)
        if len(messages) <= self.MIN_MESSAGES:
            return messages

        split_at = len(messages) - self.RECENT_COUNT
        recent = messages[split_at:]
        middle = [msg for msg in messages[:split_at] if not msg.is_system]
        system_messages = [msg for msg in messages[:split_at] if msg.is_system]

        function_bearing = [msg for msg in middle if msg.is_function_related]
        plain = [msg for msg in middle if not msg.is_function_related]

        summary_message = await self._summarize(plain)

        result = system_messages + function_bearing + recent
        if summary_message is not None:
            # 摘要紧跟最后一条系统消息（可能位于最近消息中）
            system_indices = [i for i, msg in enumerate(result) if msg.is_system]
            insert_at = system_indices[-1] + 1 if system_indices else 0
            result.insert(insert_at, summary_message)

        logger.info(
            f"分层压缩: {len(messages)} -> {len(result)} 条 "
            f"(摘要 {len(plain)} 条, 保留工具消息 {len(function_bearing)} 条)"
        )
        return result

    async def _summarize(self, plain: List[Message]) -> Optional[Message]:
        if not plain:
            return None
        prompt = f"{MIDDLE_SUMMARY_PROMPT}\n{render_transcript(plain)}"
        summary = await generate_summary(self.executor, prompt, timeout=self.config.summary_timeout)
        if not summary:
            return None
        return Message.system(f"{MIDDLE_SUMMARY_PREFIX}{summary}")
