from .adaptive import AdaptiveCompressionReducer, CompressionLevel
from .function_call import FunctionCallPreservationReducer
from .keyword_aware import KeywordAwareReducer
from .layered import LayeredCompressionReducer
from .message_counting import MessageCountingReducer
from .summarizing import SummarizingReducer
from .system_protection import SystemMessageProtectionReducer
from .three_zone import ThreeZoneReducer

__all__ = [
    "AdaptiveCompressionReducer",
    "CompressionLevel",
    "FunctionCallPreservationReducer",
    "KeywordAwareReducer",
    "LayeredCompressionReducer",
    "MessageCountingReducer",
    "SummarizingReducer",
    "SystemMessageProtectionReducer",
    "ThreeZoneReducer",
]
