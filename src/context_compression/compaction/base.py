"""压缩策略基础接口"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence

from ..messages import Message


@dataclass
class ReducerMetadata:
    """压缩器元数据"""
    name: str
    version: str
    description: str


class ChatReducer(ABC):
    """聊天记录压缩器接口

    reduce() 返回新列表，不修改输入；调用模型的策略在等待期间可被取消。
    """

    name: str = "chat_reducer"
    description: str = "聊天记录压缩器"
    version: str = "1.0.0"

    @abstractmethod
    async def reduce(self, messages: Sequence[Message]) -> List[Message]:
        pass

    def get_metadata(self) -> ReducerMetadata:
        return ReducerMetadata(name=self.name, version=self.version, description=self.description)
