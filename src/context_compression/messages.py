"""聊天消息模型：角色 + 有序内容块（文本 / 工具调用 / 工具结果）"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class Role(Enum):
    """消息角色"""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class TextBlock:
    """纯文本内容块"""
    text: str


@dataclass(frozen=True)
class FunctionCallBlock:
    """工具调用内容块"""
    call_id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FunctionResultBlock:
    """工具结果内容块"""
    call_id: str
    result: Any = None

    @property
    def result_text(self) -> str:
        """工具结果的文本形式"""
        if self.result is None:
            return ""
        if isinstance(self.result, str):
            return self.result
        if isinstance(self.result, (dict, list)):
            return json.dumps(self.result, ensure_ascii=False, default=str)
        return str(self.result)


ContentBlock = Union[TextBlock, FunctionCallBlock, FunctionResultBlock]


@dataclass(frozen=True)
class Message:
    """聊天消息

    text 视为内容中的首个文本块；blocks 保存其余有序内容块。
    消息不可变，改写内容时使用 with_blocks() 生成新实例。
    """
    role: Role
    text: Optional[str] = None
    blocks: Tuple[ContentBlock, ...] = ()
    author_name: Optional[str] = None

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(Role.SYSTEM, text)

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(Role.USER, text)

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(Role.ASSISTANT, text)

    @classmethod
    def tool_call(cls, call_id: str, name: str, arguments: Optional[Dict[str, Any]] = None,
                  text: Optional[str] = None) -> "Message":
        """创建包含工具调用的助手消息"""
        return cls(Role.ASSISTANT, text, (FunctionCallBlock(call_id, name, arguments or {}),))

    @classmethod
    def tool_result(cls, call_id: str, result: Any) -> "Message":
        """创建工具结果消息"""
        return cls(Role.TOOL, None, (FunctionResultBlock(call_id, result),))

    @property
    def contents(self) -> Tuple[ContentBlock, ...]:
        """全部内容块（text 作为首个 TextBlock）"""
        if self.text:
            return (TextBlock(self.text),) + tuple(self.blocks)
        return tuple(self.blocks)

    @property
    def content(self) -> str:
        """消息可见文本：text 与文本块拼接，缺失时为空串"""
        parts = [block.text for block in self.contents if isinstance(block, TextBlock) and block.text]
        return "\n".join(parts)

    @property
    def is_system(self) -> bool:
        return self.role is Role.SYSTEM

    @property
    def has_function_call(self) -> bool:
        return any(isinstance(block, FunctionCallBlock) for block in self.blocks)

    @property
    def has_function_result(self) -> bool:
        return any(isinstance(block, FunctionResultBlock) for block in self.blocks)

    @property
    def is_function_related(self) -> bool:
        return self.has_function_call or self.has_function_result

    def with_blocks(self, blocks) -> "Message":
        """返回替换了内容块的新消息"""
        return replace(self, blocks=tuple(blocks))

