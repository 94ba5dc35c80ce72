"""系统消息保护：分离系统消息，仅将其余消息交给内部压缩器"""

from typing import List, Sequence

from ...messages import Message
from ..base import ChatReducer
from ..utils import split_system


class SystemMessageProtectionReducer(ChatReducer):
    """系统消息保护装饰器

    输出为全部系统消息（原相对顺序）+ 内部压缩器结果。
    原序列中穿插的系统消息会被移到最前。
    """

    name = "system_message_protection"
    description = "系统消息置前保留，其余消息交给内部压缩器"

    def __init__(self, inner: ChatReducer):
        self.inner = inner

    async def reduce(self, messages: Sequence[Message]) -> List[Message]:
        system_messages, others = split_system(messages)
        compressed = await self.inner.reduce(others)
        return system_messages + list(compressed)
