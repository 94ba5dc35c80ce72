"""摘要压缩：旧消息由模型总结为一条摘要，最近消息原样保留"""

from typing import List, Optional, Sequence

from ...config import CompressionConfig
from ...executor import CompletionExecutor
from ...messages import Message
from ...utils.logger import logger
from ..base import ChatReducer
from ..utils import generate_summary, render_transcript, split_system

SUMMARY_PREFIX = "[Conversation Summary]: "
EMPTY_SUMMARY_TEXT = "Summary generation returned empty text."


class SummarizingReducer(ChatReducer):
    """智能摘要压缩器

    结果 = 系统消息 + 摘要（系统消息）+ 最近 keep_recent 条非系统消息。
    """

    name = "summarizing"
    description = "使用模型将旧消息总结为摘要，保留最近消息"

    def __init__(self, executor: CompletionExecutor, config: Optional[CompressionConfig] = None):
        if executor is None:
            raise ValueError("未提供 executor，无法生成摘要")
        self.executor = executor
        self.config = config or CompressionConfig()

    @property
    def threshold(self) -> int:
        return self.config.message_count_threshold

    @property
    def keep_recent(self) -> int:
        return max(2, self.threshold // 3)

    async def reduce(self, messages: Sequence[Message]) -> List[Message]:
        messages = list(messages)
        if len(messages) < self.threshold:
            logger.debug(f"消息数 {len(messages)} 低于阈值 {self.threshold}，不压缩")
            return messages

        system_messages, others = split_system(messages)
        keep_recent = self.keep_recent
        if len(others) <= keep_recent:
            return messages

        to_summarize = others[:-keep_recent]
        to_keep = others[-keep_recent:]

        prompt = f"{self.config.summary_prompt_template}\n\n{render_transcript(to_summarize)}"
        summary = await generate_summary(self.executor, prompt, timeout=self.config.summary_timeout)
        if not summary:
            summary = EMPTY_SUMMARY_TEXT

        result = system_messages + [Message.system(f"{SUMMARY_PREFIX}{summary}")] + to_keep
        logger.info(f"摘要压缩: {len(messages)} -> {len(result)} 条 (摘要 {len(to_summarize)} 条)")
        return result
