"""函数调用上下文保护：保留工具调用/结果及其前后上下文"""

from typing import List, Sequence, Set

from ...messages import Message
from ...utils.logger import logger
from ..base import ChatReducer


class FunctionCallPreservationReducer(ChatReducer):
    """函数调用保护压缩器

    只做窗口筛选，不保证窗口边界上的调用/结果配对。
    """

    name = "function_call_preservation"
    description = "保留系统消息、工具调用链及其上下文窗口和最近消息"

    CONTEXT_WINDOW = 2
    RECENT_FLOOR = 5

    def __init__(self, context_window: int = CONTEXT_WINDOW, recent_floor: int = RECENT_FLOOR):
        self.context_window = context_window
        self.recent_floor = recent_floor

    async def reduce(self, messages: Sequence[Message]) -> List[Message]:
        messages = list(messages)
        total = len(messages)
        preserved: Set[int] = set()

        for i, msg in enumerate(messages):
            if msg.is_system:
                preserved.add(i)
            if msg.is_function_related:
                lo = max(0, i - self.context_window)
                hi = min(total, i + self.context_window + 1)
                preserved.update(range(lo, hi))

        # 兜底保留最近消息
        preserved.update(range(max(0, total - self.recent_floor), total))

        result = [msg for i, msg in enumerate(messages) if i in preserved]
        if len(result) < total:
            logger.info(f"函数调用保护压缩: {total} -> {len(result)} 条")
        return result
