"""测试公共夹具"""

import asyncio
from typing import List, Optional

import pytest

from context_compression.config import CompressionConfig
from context_compression.executor import ExecutorCallOptions
from context_compression.messages import Message


class FakeExecutor:
    """记录调用参数的模拟执行器"""

    def __init__(self, reply: str = "This is a test summary.", error: Optional[Exception] = None,
                 delay: float = 0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.prompts: List[str] = []
        self.options: List[ExecutorCallOptions] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def execute(self, prompt: str, options: ExecutorCallOptions) -> str:
        self.prompts.append(prompt)
        self.options.append(options)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def failing_executor():
    return FakeExecutor(error=RuntimeError("model unavailable"))


@pytest.fixture
def config():
    return CompressionConfig(
        message_count_threshold=10,
        token_count_threshold=4000,
        critical_keywords=["order"],
    )


@pytest.fixture
def conversation():
    """20 条 user / assistant 交替消息"""
    return [
        Message.user(f"user message {i}") if i % 2 == 0 else Message.assistant(f"assistant reply {i}")
        for i in range(20)
    ]


@pytest.fixture
def executor_factory():
    """按需构造模拟执行器"""
    return FakeExecutor
