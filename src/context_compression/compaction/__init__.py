"""上下文压缩模块"""

from .base import ChatReducer, ReducerMetadata
from .factory import ReducerFactory
from .manager import CompressionManager, CompressionMetrics
from .monitor import CompressionMonitor, CompressionReport
from .strategies import (
    AdaptiveCompressionReducer,
    FunctionCallPreservationReducer,
    KeywordAwareReducer,
    LayeredCompressionReducer,
    MessageCountingReducer,
    SummarizingReducer,
    SystemMessageProtectionReducer,
    ThreeZoneReducer,
)
from .utils import TokenEstimator, estimate_tokens

__all__ = [
    "ChatReducer",
    "ReducerMetadata",
    "ReducerFactory",
    "CompressionManager",
    "CompressionMetrics",
    "CompressionMonitor",
    "CompressionReport",
    "AdaptiveCompressionReducer",
    "FunctionCallPreservationReducer",
    "KeywordAwareReducer",
    "LayeredCompressionReducer",
    "MessageCountingReducer",
    "SummarizingReducer",
    "SystemMessageProtectionReducer",
    "ThreeZoneReducer",
    "TokenEstimator",
    "estimate_tokens",
]
