"""压缩工具函数"""

import asyncio
from typing import Callable, List, Optional, Sequence, Tuple

from ..executor import CompletionExecutor, ExecutorCallOptions
from ..messages import FunctionResultBlock, Message
from ..utils.logger import logger

TokenEstimator = Callable[[Sequence[Message]], int]


def estimate_tokens(messages: Sequence[Message]) -> int:
    """估算消息 token 数（文本 + 工具结果字符数 / 2）

    粗略估算，需要精确计数时注入模型对应的 tokenizer。
    """
    chars = 0
    for msg in messages:
        chars += len(msg.content)
        for block in msg.blocks:
            if isinstance(block, FunctionResultBlock):
                chars += len(block.result_text)
    return chars // 2


def split_system(messages: Sequence[Message]) -> Tuple[List[Message], List[Message]]:
    """拆分为 (系统消息, 非系统消息)，各自保持原顺序"""
    system = [msg for msg in messages if msg.is_system]
    others = [msg for msg in messages if not msg.is_system]
    return system, others


def render_transcript(messages: Sequence[Message]) -> str:
    """渲染为 "{role}: {text}" 形式的对话文本"""
    return "\n".join(f"{msg.role.value}: {msg.content}" for msg in messages)


async def generate_summary(
    executor: CompletionExecutor,
    prompt: str,
    timeout: Optional[float] = None,
    failure_prefix: str = "Summary generation failed",
) -> str:
    """调用执行器生成摘要

    执行器异常（含超时）转换为失败说明文本返回；任务取消不拦截。
    """
    options = ExecutorCallOptions(skip_compression=True)
    try:
        call = executor.execute(prompt, options)
        if timeout is not None:
            summary = await asyncio.wait_for(call, timeout)
        else:
            summary = await call
    except Exception as e:
        reason = str(e) or type(e).__name__
        logger.warning(f"摘要生成失败: {reason}")
        return f"{failure_prefix}: {reason}"
    return (summary or "").strip()
