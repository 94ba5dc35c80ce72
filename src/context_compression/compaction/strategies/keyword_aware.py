"""关键词优先压缩：包含关键业务词的消息不被淘汰"""

from typing import List, Optional, Sequence, Tuple

from ...config import CompressionConfig
from ...messages import Message
from ...utils.logger import logger
from ..base import ChatReducer


class KeywordAwareReducer(ChatReducer):
    """关键词优先保护压缩器"""

    name = "keyword_aware"
    description = "保留系统消息与关键词消息，其余按最近优先填充到阈值"

    def __init__(self, config: Optional[CompressionConfig] = None):
        self.config = config or CompressionConfig()
        self._keywords = [kw.lower() for kw in self.config.critical_keywords if kw]

    def is_critical(self, message: Message) -> bool:
        """大小写不敏感的子串匹配"""
        text = message.content.lower()
        if not text:
            return False
        return any(keyword in text for keyword in self._keywords)

    async def reduce(self, messages: Sequence[Message]) -> List[Message]:
        messages = list(messages)

        system_idx, critical_idx, normal_idx = self._classify(messages)

        keep = set(system_idx) | set(critical_idx)
        space_left = self.config.message_count_threshold - len(keep)
        if space_left > 0 and normal_idx:
            keep.update(normal_idx[-space_left:])

        result = [msg for i, msg in enumerate(messages) if i in keep]
        if len(result) < len(messages):
            logger.info(
                f"关键词压缩: {len(messages)} -> {len(result)} 条 (关键消息 {len(critical_idx)} 条)"
            )
        return result

    def _classify(self, messages: List[Message]) -> Tuple[List[int], List[int], List[int]]:
        system_idx, critical_idx, normal_idx = [], [], []
        for i, msg in enumerate(messages):
            if msg.is_system:
                system_idx.append(i)
            elif self.is_critical(msg):
                critical_idx.append(i)
            else:
                normal_idx.append(i)
        return system_idx, critical_idx, normal_idx
