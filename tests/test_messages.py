"""消息模型单元测试"""

import dataclasses

import pytest

from context_compression.compaction.utils import estimate_tokens, render_transcript, split_system
from context_compression.messages import FunctionCallBlock, FunctionResultBlock, Message, Role, TextBlock


class TestMessage:
    """测试 Message 数据类"""

    def test_text_is_leading_text_block(self):
        """测试：text 视为首个文本块"""
        msg = Message(Role.ASSISTANT, "calling", (FunctionCallBlock("c1", "read"),))

        assert msg.contents == (TextBlock("calling"), FunctionCallBlock("c1", "read"))
        assert msg.has_function_call
        assert not msg.has_function_result

    def test_content_joins_text_blocks(self):
        """测试：可见文本拼接 text 与文本块"""
        msg = Message(Role.USER, "first", (TextBlock("second"), FunctionResultBlock("c1", "x")))

        assert msg.content == "first\nsecond"

    def test_missing_text_is_empty(self):
        """测试：缺失文本按空串处理"""
        assert Message.tool_result("c1", None).content == ""
        assert Message(Role.USER).contents == ()

    def test_messages_are_immutable(self):
        """测试：消息不可变"""
        msg = Message.user("hi")

        with pytest.raises(dataclasses.FrozenInstanceError):
            msg.text = "changed"

    def test_with_blocks_returns_new_message(self):
        """测试：with_blocks 生成新实例"""
        msg = Message.tool_result("c1", "x")

        changed = msg.with_blocks([TextBlock("y")])

        assert changed.blocks == (TextBlock("y"),)
        assert msg.blocks == (FunctionResultBlock("c1", "x"),)

    @pytest.mark.parametrize("result, expected", [
        (None, ""),
        ("text", "text"),
        ({"status": "ok"}, '{"status": "ok"}'),
        ([1, 2], "[1, 2]"),
        (42, "42"),
    ])
    def test_result_text(self, result, expected):
        """测试：工具结果文本形式"""
        assert FunctionResultBlock("c1", result).result_text == expected


class TestHelpers:
    """工具函数测试"""

    def test_estimate_tokens_counts_text_and_results(self):
        """测试：token 估算为字符数 / 2"""
        messages = [Message.user("abcd"), Message.tool_result("c1", "123456"), Message.user(None)]

        assert estimate_tokens(messages) == 5

    def test_split_system_keeps_order(self):
        """测试：拆分系统消息并保持顺序"""
        messages = [Message.user("a"), Message.system("s1"), Message.assistant("b"), Message.system("s2")]

        system, others = split_system(messages)

        assert system == [messages[1], messages[3]]
        assert others == [messages[0], messages[2]]

    def test_render_transcript(self):
        """测试：渲染对话文本"""
        text = render_transcript([Message.user("hi"), Message.assistant("hello")])

        assert text == "user: hi\nassistant: hello"
