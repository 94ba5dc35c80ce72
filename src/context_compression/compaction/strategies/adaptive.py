"""自适应压缩：按消息数与 token 估算选择压缩级别"""

from enum import Enum
from typing import List, Optional, Sequence

from ...config import CompressionConfig
from ...messages import Message
from ...utils.logger import logger
from ..base import ChatReducer
from ..utils import TokenEstimator, estimate_tokens


class CompressionLevel(Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


class AdaptiveCompressionReducer(ChatReducer):
    """自适应压缩器

    LIGHT 使用 light_reducer（消息计数），MEDIUM / HEAVY 使用 summary_reducer（摘要）。
    """

    name = "adaptive"
    description = "根据消息数和 token 估算自动选择压缩级别"

    def __init__(
        self,
        light_reducer: ChatReducer,
        summary_reducer: ChatReducer,
        config: Optional[CompressionConfig] = None,
        token_estimator: TokenEstimator = estimate_tokens,
    ):
        self.light_reducer = light_reducer
        self.summary_reducer = summary_reducer
        self.config = config or CompressionConfig()
        self.token_estimator = token_estimator

    def should_compress(self, count: int, tokens: int) -> bool:
        return count > self.config.message_count_threshold or tokens > self.config.context_length

    def determine_level(self, count: int, tokens: int) -> CompressionLevel:
        msg_limit = self.config.message_count_threshold
        token_limit = self.config.context_length
        if count > msg_limit * 2 or tokens > token_limit * 2:
            return CompressionLevel.HEAVY
        if count > msg_limit or tokens > token_limit:
            return CompressionLevel.MEDIUM
        return CompressionLevel.LIGHT

    async def reduce(self, messages: Sequence[Message]) -> List[Message]:
        messages = list(messages)
        count = len(messages)
        tokens = self.token_estimator(messages)

        if not self.should_compress(count, tokens):
            logger.debug(f"自适应压缩: 未触发 ({count} 条, 约 {tokens} tokens)")
            return messages

        level = self.determine_level(count, tokens)
        logger.info(f"自适应压缩: 级别 {level.value} ({count} 条, 约 {tokens} tokens)")

        if level is CompressionLevel.LIGHT:
            return await self.light_reducer.reduce(messages)
        return await self.summary_reducer.reduce(messages)
