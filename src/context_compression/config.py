"""压缩配置管理 - 基于 pydantic-settings

配置优先级（从高到低）：
1. 代码传入参数
2. .env 文件
3. 系统环境变量
4. 默认值
"""

import json
import os
from enum import Enum
from typing import Annotated, Any, Dict, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, PydanticBaseSettingsSource, SettingsConfigDict


DEFAULT_CRITICAL_KEYWORDS = (
    "审批", "支付", "合同", "协议", "订单",
    "价格", "金额", "截止时间", "重要", "紧急",
)

DEFAULT_SUMMARY_PROMPT = "请将以下对话历史总结为简洁的摘要，保留关键信息："

DEFAULT_CONTEXT_LENGTH = 128_000


class ReducerType(str, Enum):
    """压缩器类型"""
    ADAPTIVE = "adaptive"
    MESSAGE_COUNTING = "message_counting"
    SUMMARIZING = "summarizing"
    KEYWORD_AWARE = "keyword_aware"
    LAYERED = "layered"
    SYSTEM_MESSAGE_PROTECTION = "system_message_protection"
    FUNCTION_CALL_PRESERVATION = "function_call_preservation"
    THREE_ZONE = "three_zone"


def _prefer_init_then_dotenv(
    init_settings: PydanticBaseSettingsSource,
    env_settings: PydanticBaseSettingsSource,
    dotenv_settings: PydanticBaseSettingsSource,
    file_secret_settings: PydanticBaseSettingsSource,
) -> Tuple[PydanticBaseSettingsSource, ...]:
    return init_settings, dotenv_settings, env_settings, file_secret_settings


class CompressionConfig(BaseSettings):
    """对话上下文压缩配置（进程启动时加载一次，之后只读）"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COMPRESSION_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    message_count_threshold: int = Field(default=20, ge=1, description="触发压缩的消息数量阈值")
    token_count_threshold: int = Field(default=4000, ge=0, description="触发压缩的 Token 数量阈值，0 表示使用默认上下文长度")
    critical_keywords: Annotated[Tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_CRITICAL_KEYWORDS,
        description="关键业务关键词（KeywordAware 使用）",
    )
    summary_prompt_template: str = Field(default=DEFAULT_SUMMARY_PROMPT, description="摘要生成的 Prompt 模板")
    summary_timeout: Optional[float] = Field(default=None, gt=0, description="摘要调用超时(秒)，None 表示不限")
    default_reducer: ReducerType = Field(default=ReducerType.ADAPTIVE, description="默认压缩器")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """自定义配置源优先级：代码传入 > .env文件 > 环境变量 > 默认值"""
        return _prefer_init_then_dotenv(init_settings, env_settings, dotenv_settings, file_secret_settings)

    @field_validator("critical_keywords", mode="before")
    @classmethod
    def split_keywords(cls, v: Any) -> Any:
        """支持 JSON 数组或逗号分隔的关键词字符串"""
        if isinstance(v, str):
            if v.strip().startswith("["):
                return json.loads(v)
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def context_length(self) -> int:
        """有效上下文长度：token 阈值为 0 时使用 DEFAULT_CONTEXT_LENGTH"""
        threshold = self.token_count_threshold
        return threshold if threshold > 0 else DEFAULT_CONTEXT_LENGTH

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompressionConfig":
        """从字典创建配置"""
        return cls(**data)


class ExecutorConfig(BaseSettings):
    """摘要模型调用配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COMPRESSION_LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    model: str = Field(default="qwen-plus", description="模型名称")
    api_key: Optional[str] = Field(default=None, validate_default=True, description="API密钥")
    api_base: Optional[str] = Field(default=None, description="API基础URL")
    max_tokens: int = Field(default=1024, ge=1, le=128000, description="摘要最大输出token数")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0, description="采样温度")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return _prefer_init_then_dotenv(init_settings, env_settings, dotenv_settings, file_secret_settings)

    @field_validator("api_key", mode="before")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        """加载 API Key，支持 OPENAI_API_KEY"""
        if v:
            return v
        return os.getenv("OPENAI_API_KEY")

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（隐藏敏感信息）"""
        data = self.model_dump()
        if data.get("api_key"):
            data["api_key"] = "***" + data["api_key"][-4:] if len(data["api_key"]) > 4 else "***"
        return data
