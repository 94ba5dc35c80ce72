"""对话上下文压缩核心模块"""

from .config import CompressionConfig, ExecutorConfig, ReducerType
from .executor import CompletionExecutor, ExecutorCallOptions, OpenAICompletionExecutor
from .messages import ContentBlock, FunctionCallBlock, FunctionResultBlock, Message, Role, TextBlock
from .compaction import (
    ChatReducer,
    CompressionManager,
    CompressionMonitor,
    ReducerFactory,
    estimate_tokens,
)

__version__ = "0.1.0"
__all__ = [
    "CompressionConfig",
    "ExecutorConfig",
    "ReducerType",
    "CompletionExecutor",
    "ExecutorCallOptions",
    "OpenAICompletionExecutor",
    "ContentBlock",
    "FunctionCallBlock",
    "FunctionResultBlock",
    "Message",
    "Role",
    "TextBlock",
    "ChatReducer",
    "CompressionManager",
    "CompressionMonitor",
    "ReducerFactory",
    "estimate_tokens",
]
