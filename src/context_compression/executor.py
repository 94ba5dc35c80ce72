"""摘要生成执行器：压缩策略通过该接口调用模型"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from openai import AsyncOpenAI

from .config import ExecutorConfig
from .utils.logger import logger

SUMMARY_SYSTEM_PROMPT = "你是一个专业的对话摘要助手，擅长提取关键信息并生成简洁的摘要。"


@dataclass(frozen=True)
class ExecutorCallOptions:
    """执行器调用选项

    skip_compression: 告知执行器自身的请求管线不要再压缩上下文，避免递归压缩
    """
    skip_compression: bool = False
    system_prompt: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


@runtime_checkable
class CompletionExecutor(Protocol):
    """给定提示词返回生成文本"""

    async def execute(self, prompt: str, options: ExecutorCallOptions) -> str:
        ...


class OpenAICompletionExecutor:
    """基于 OpenAI 兼容接口的执行器"""

    def __init__(self, config: Optional[ExecutorConfig] = None, client: Optional[AsyncOpenAI] = None):
        self.config = config or ExecutorConfig()
        self.client = client or AsyncOpenAI(
            api_key=self.config.api_key,
            base_url=self.config.api_base
        )

    async def execute(self, prompt: str, options: ExecutorCallOptions) -> str:
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": options.system_prompt or SUMMARY_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

        response = await self.client.chat.completions.create(
            model=self.config.model,
            messages=messages,
            max_tokens=options.max_tokens or self.config.max_tokens,
            temperature=options.temperature if options.temperature is not None else self.config.temperature,
        )

        content = response.choices[0].message.content or ""
        usage = response.usage
        if usage is not None:
            logger.debug(f"摘要调用完成: 输入 {usage.prompt_tokens} tokens, 输出 {usage.completion_tokens} tokens")
        return content.strip()
