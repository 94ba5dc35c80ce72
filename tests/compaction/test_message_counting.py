"""MessageCountingReducer 单元测试"""

import pytest

from context_compression.compaction.strategies.message_counting import MessageCountingReducer
from context_compression.config import CompressionConfig
from context_compression.messages import Message, Role


class TestMessageCountingReducer:
    """消息计数压缩测试"""

    @pytest.fixture
    def reducer(self, config):
        return MessageCountingReducer(config)

    @pytest.mark.asyncio
    async def test_keeps_last_messages(self, reducer, conversation):
        """测试：20 条交替消息、阈值 10 时保留最后 10 条"""
        result = await reducer.reduce(conversation)

        assert result == conversation[-10:]
        assert all(msg.role is not Role.SYSTEM for msg in result)

    @pytest.mark.asyncio
    async def test_unchanged_under_threshold(self, reducer, conversation):
        """测试：未超过阈值时原样返回"""
        messages = conversation[:10]

        result = await reducer.reduce(messages)

        assert result == messages
        assert result is not messages

    @pytest.mark.asyncio
    async def test_system_messages_first_and_counted(self, reducer, conversation):
        """测试：系统消息置前并占用名额"""
        messages = [Message.system("rules A")] + conversation[:8] + [Message.system("rules B")] + conversation[8:]

        result = await reducer.reduce(messages)

        assert result[:2] == [Message.system("rules A"), Message.system("rules B")]
        assert len(result) == 10
        assert result[2:] == conversation[-8:]

    @pytest.mark.asyncio
    async def test_more_system_messages_than_threshold(self):
        """测试：系统消息超过阈值时只保留系统消息"""
        reducer = MessageCountingReducer(CompressionConfig(message_count_threshold=2))
        messages = [Message.system(f"rule {i}") for i in range(3)] + [Message.user("hi")]

        result = await reducer.reduce(messages)

        assert result == messages[:3]

    @pytest.mark.asyncio
    async def test_does_not_mutate_input(self, reducer, conversation):
        """测试：不修改输入列表"""
        snapshot = list(conversation)

        await reducer.reduce(conversation)

        assert conversation == snapshot

    @pytest.mark.asyncio
    async def test_idempotent(self, reducer, conversation):
        """测试：重复压缩结果不变"""
        once = await reducer.reduce(conversation)
        twice = await reducer.reduce(once)

        assert once == twice
