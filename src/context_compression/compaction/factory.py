"""压缩器工厂：按类型创建压缩器实例"""

from typing import Optional, Union

from ..config import CompressionConfig, ReducerType
from ..executor import CompletionExecutor
from .base import ChatReducer
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


class ReducerFactory:
    """压缩器工厂

    需要生成摘要的类型（adaptive / summarizing / layered / three_zone）要求提供 executor。
    """

    def __init__(
        self,
        config: Optional[CompressionConfig] = None,
        executor: Optional[CompletionExecutor] = None,
        token_estimator: TokenEstimator = estimate_tokens,
    ):
        self.config = config or CompressionConfig()
        self.executor = executor
        self.token_estimator = token_estimator

    def create(self, reducer_type: Union[ReducerType, str], inner: Optional[ChatReducer] = None) -> ChatReducer:
        """创建指定类型的压缩器

        inner 仅用于 system_message_protection，缺省包装消息计数压缩器。
        """
        try:
            reducer_type = ReducerType(reducer_type)
        except ValueError:
            available = ", ".join(t.value for t in ReducerType)
            raise ValueError(f"未知的压缩器类型 '{reducer_type}'。可用类型: {available}") from None

        if reducer_type is ReducerType.MESSAGE_COUNTING:
            return MessageCountingReducer(self.config)
        if reducer_type is ReducerType.KEYWORD_AWARE:
            return KeywordAwareReducer(self.config)
        if reducer_type is ReducerType.FUNCTION_CALL_PRESERVATION:
            return FunctionCallPreservationReducer()
        if reducer_type is ReducerType.SYSTEM_MESSAGE_PROTECTION:
            return SystemMessageProtectionReducer(inner or MessageCountingReducer(self.config))
        if reducer_type is ReducerType.SUMMARIZING:
            return SummarizingReducer(self._require_executor(reducer_type), self.config)
        if reducer_type is ReducerType.LAYERED:
            return LayeredCompressionReducer(self._require_executor(reducer_type), self.config)
        if reducer_type is ReducerType.THREE_ZONE:
            return ThreeZoneReducer(self._require_executor(reducer_type), self.config, self.token_estimator)
        return AdaptiveCompressionReducer(
            light_reducer=MessageCountingReducer(self.config),
            summary_reducer=SummarizingReducer(self._require_executor(reducer_type), self.config),
            config=self.config,
            token_estimator=self.token_estimator,
        )

    def get_default(self) -> ChatReducer:
        """按配置创建默认压缩器"""
        return self.create(self.config.default_reducer)

    def _require_executor(self, reducer_type: ReducerType) -> CompletionExecutor:
        if self.executor is None:
            raise ValueError(f"压缩器 '{reducer_type.value}' 需要提供 executor")
        return self.executor
