"""消息计数压缩：保留系统消息与最近 N 条消息"""

from typing import List, Optional, Sequence

from ...config import CompressionConfig
from ...messages import Message
from ...utils.logger import logger
from ..base import ChatReducer
from ..utils import split_system


class MessageCountingReducer(ChatReducer):
    """消息计数压缩器"""

    name = "message_counting"
    description = "保留全部系统消息与最近的 N 条消息"

    def __init__(self, config: Optional[CompressionConfig] = None):
        self.config = config or CompressionConfig()

    @property
    def threshold(self) -> int:
        return self.config.message_count_threshold

    async def reduce(self, messages: Sequence[Message]) -> List[Message]:
        messages = list(messages)
        if len(messages) <= self.threshold:
            logger.debug(f"消息数 {len(messages)} 未超过阈值 {self.threshold}，不压缩")
            return messages

        system_messages, others = split_system(messages)
        slots = max(0, self.threshold - len(system_messages))
        kept = others[len(others) - slots:] if slots else []

        result = system_messages + kept
        logger.info(f"消息计数压缩: {len(messages)} -> {len(result)} 条")
        return result
