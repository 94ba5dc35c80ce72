"""三区保护压缩

三区划分:
  Zone A: 用户首条真实消息，永远保留（任务上下文不丢失）
  压缩区: 中间历史消息，用模型摘要替代
  Zone B: 最近 N 条消息，逐字保留

额外处理:
  - 预压缩: 上下文占用达 65% 时清理旧工具结果（不调用模型）
  - 边界修复: Zone B 起点不切断工具调用对
  - 孤儿修复: 组装后把配对断裂的调用/结果改写为文本
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

from ...config import DEFAULT_CONTEXT_LENGTH, CompressionConfig
from ...executor import CompletionExecutor
from ...messages import FunctionCallBlock, FunctionResultBlock, Message, Role, TextBlock
from ...utils.logger import logger
from ..base import ChatReducer
from ..utils import TokenEstimator, estimate_tokens, generate_summary

COMPRESSED_RESULT_PLACEHOLDER = "[compressed tool output]"
SUMMARY_HEADER = "[Conversation summary - compressed"

COMPRESSION_PROMPT = """You are a conversation compression expert. Compress the following {count} conversation messages into one concise summary.

Requirements:
1. Keep every key decision, code change and important finding
2. Keep all file paths, function names, class names and other identifiers
3. Keep the key outcome of each tool call (success/failure and the essential output)
4. Remove repetition and redundant content
5. Write in the language of the original conversation

Conversation:
{conversation}"""


@dataclass
class ZonePlan:
    """三区划分结果（索引基于原消息列表）"""
    zone_a_index: Optional[int]
    zone_b_start: int


class ThreeZoneReducer(ChatReducer):
    """三区保护压缩器"""

    name = "three_zone"
    description = "保留首条任务消息与最近消息，中间历史摘要化，并修复工具调用配对"

    PRE_COMPRESS_THRESHOLD = 0.65
    FULL_COMPRESS_THRESHOLD = 0.80
    DEFAULT_CONTEXT_LENGTH = DEFAULT_CONTEXT_LENGTH
    MIN_PRESERVE_COUNT = 4
    MAX_PRESERVE_COUNT = 10
    TOOL_RESULT_KEEP_RECENT = 6
    TOOL_RESULT_MAX_CHARS = 200
    BOUNDARY_MAX_ATTEMPTS = 10
    BOUNDARY_STEP = 2
    TEXT_MAX_CHARS = 800
    RESULT_MAX_CHARS = 500
    ORPHAN_RESULT_MAX_CHARS = 200

    def __init__(
        self,
        executor: CompletionExecutor,
        config: Optional[CompressionConfig] = None,
        token_estimator: TokenEstimator = estimate_tokens,
    ):
        if executor is None:
            raise ValueError("未提供 executor，无法生成摘要")
        self.executor = executor
        self.config = config or CompressionConfig()
        self.token_estimator = token_estimator

    @property
    def context_length(self) -> int:
        return self.config.context_length

    def usage_ratio(self, messages: Sequence[Message]) -> float:
        return self.token_estimator(messages) / self.context_length

    async def reduce(self, messages: Sequence[Message]) -> List[Message]:
        messages = list(messages)
        ratio = self.usage_ratio(messages)

        if ratio < self.PRE_COMPRESS_THRESHOLD:
            logger.debug(f"三区压缩: 上下文占用 {ratio:.1%}，不压缩")
            return messages

        if ratio < self.FULL_COMPRESS_THRESHOLD:
            logger.info(f"三区压缩: 上下文占用 {ratio:.1%}，执行预压缩")
            return self.pre_compress(messages)

        logger.info(f"三区压缩: 上下文占用 {ratio:.1%}，执行完整压缩")
        return await self._full_compress(messages)

    # ---- 预压缩 ----

    def pre_compress(self, messages: List[Message]) -> List[Message]:
        """清理旧消息中的大块工具结果，消息条数不变"""
        cutoff = len(messages) - self.TOOL_RESULT_KEEP_RECENT
        result = []
        replaced = 0
        for i, msg in enumerate(messages):
            if i >= cutoff or not msg.has_function_result:
                result.append(msg)
                continue

            blocks = []
            for block in msg.blocks:
                if isinstance(block, FunctionResultBlock) and len(block.result_text) > self.TOOL_RESULT_MAX_CHARS:
                    blocks.append(FunctionResultBlock(block.call_id, COMPRESSED_RESULT_PLACEHOLDER))
                    replaced += 1
                else:
                    blocks.append(block)
            result.append(msg.with_blocks(blocks) if blocks != list(msg.blocks) else msg)

        logger.info(f"预压缩完成: 替换 {replaced} 个工具结果")
        return result

    # ---- 完整压缩 ----

    def preserve_count(self, total: int) -> int:
        return min(self.MAX_PRESERVE_COUNT, max(self.MIN_PRESERVE_COUNT, total // 5))

    def plan_zones(self, messages: List[Message]) -> Optional[ZonePlan]:
        """计算 Zone A 与修复后的 Zone B 起点；消息太少时返回 None"""
        total = len(messages)
        preserve = self.preserve_count(total)
        if total <= preserve + 2:
            return None

        zone_a_index = find_original_task(messages)
        zone_a_count = 0 if zone_a_index is None else 1
        start = max(zone_a_count, total - preserve)
        start = self.find_clean_boundary(messages, start, zone_a_count)
        return ZonePlan(zone_a_index=zone_a_index, zone_b_start=start)

    def find_clean_boundary(self, messages: List[Message], start: int, min_start: int) -> int:
        """向前移动 Zone B 起点，直到区内没有引用区外调用的工具结果"""
        attempt = 0
        while attempt < self.BOUNDARY_MAX_ATTEMPTS and start > min_start:
            if not has_orphan_result(messages[start:]):
                return start
            start = max(min_start, start - self.BOUNDARY_STEP)
            attempt += 1
        return start

    async def _full_compress(self, messages: List[Message]) -> List[Message]:
        plan = self.plan_zones(messages)
        if plan is None:
            logger.debug(f"三区压缩: 消息数 {len(messages)} 过少，不压缩")
            return messages

        head = messages[:plan.zone_b_start]
        zone_a = head[plan.zone_a_index] if plan.zone_a_index is not None and plan.zone_a_index < len(head) else None
        # Zone A 之前的系统提示原样保留；旧摘要并入新摘要
        pinned_end = pinned_prefix_end(head, plan.zone_a_index)
        pinned_indices = {
            i for i, msg in enumerate(head[:pinned_end])
            if msg.is_system and not is_compression_summary(msg)
        }
        pinned = [head[i] for i in sorted(pinned_indices)]
        to_compress = [
            msg for i, msg in enumerate(head)
            if i not in pinned_indices and i != plan.zone_a_index
        ]
        if not to_compress:
            return messages

        prompt = COMPRESSION_PROMPT.format(count=len(to_compress), conversation=serialize_messages(to_compress))
        summary = await generate_summary(
            self.executor,
            prompt,
            timeout=self.config.summary_timeout,
        )
        if not summary:
            summary = "Summary generation failed: empty response"

        result: List[Message] = list(pinned)
        if zone_a is not None:
            result.append(zone_a)
        result.append(Message.system(f"{SUMMARY_HEADER} {len(to_compress)} messages]\n{summary}"))
        result.extend(messages[plan.zone_b_start:])

        result = sanitize_orphaned_tool_blocks(result)
        logger.info(
            f"三区压缩完成: {len(messages)} -> {len(result)} 条 "
            f"(压缩 {len(to_compress)} 条, Zone B 起点 {plan.zone_b_start})"
        )
        return result


def find_original_task(messages: Sequence[Message]) -> Optional[int]:
    """用户首条真实消息（含文本且不全是工具结果）的索引"""
    for i, msg in enumerate(messages):
        if msg.role is not Role.USER:
            continue
        contents = msg.contents
        if all(isinstance(block, FunctionResultBlock) for block in contents):
            continue
        if any(isinstance(block, TextBlock) for block in contents):
            return i
    return None


def is_compression_summary(msg: Message) -> bool:
    return msg.is_system and (msg.text or "").startswith(SUMMARY_HEADER)


def pinned_prefix_end(head: Sequence[Message], zone_a_index: Optional[int]) -> int:
    """可原样保留的系统消息范围终点：Zone A 之前；无 Zone A 时为开头连续的系统消息"""
    if zone_a_index is not None:
        return min(zone_a_index, len(head))
    for i, msg in enumerate(head):
        if not msg.is_system:
            return i
    return len(head)


def has_orphan_result(messages: Sequence[Message]) -> bool:
    """是否存在引用了区外调用的工具结果"""
    call_ids = {
        block.call_id
        for msg in messages
        for block in msg.blocks
        if isinstance(block, FunctionCallBlock) and block.call_id
    }
    return any(
        isinstance(block, FunctionResultBlock) and block.call_id and block.call_id not in call_ids
        for msg in messages
        for block in msg.blocks
    )


def collect_call_ids(messages: Sequence[Message]) -> Tuple[Set[str], Set[str]]:
    """返回 (调用 id 集合, 结果 id 集合)"""
    call_ids: Set[str] = set()
    result_ids: Set[str] = set()
    for msg in messages:
        for block in msg.blocks:
            if isinstance(block, FunctionCallBlock) and block.call_id:
                call_ids.add(block.call_id)
            elif isinstance(block, FunctionResultBlock) and block.call_id:
                result_ids.add(block.call_id)
    return call_ids, result_ids


def sanitize_orphaned_tool_blocks(messages: List[Message]) -> List[Message]:
    """把配对断裂的调用/结果块改写为文本块"""
    call_ids, result_ids = collect_call_ids(messages)
    orphaned_calls = call_ids - result_ids
    orphaned_results = result_ids - call_ids
    if not orphaned_calls and not orphaned_results:
        return messages

    logger.warning(f"修复孤儿工具块: 调用 {len(orphaned_calls)} 个, 结果 {len(orphaned_results)} 个")

    sanitized = []
    for msg in messages:
        blocks = []
        changed = False
        for block in msg.blocks:
            if isinstance(block, FunctionCallBlock) and block.call_id in orphaned_calls:
                blocks.append(TextBlock(f"[historical tool call: {block.name}]"))
                changed = True
            elif isinstance(block, FunctionResultBlock) and block.call_id in orphaned_results:
                blocks.append(TextBlock(f"[historical tool result: {_truncate(block.result_text, ThreeZoneReducer.ORPHAN_RESULT_MAX_CHARS)}]"))
                changed = True
            else:
                blocks.append(block)
        sanitized.append(msg.with_blocks(blocks) if changed else msg)
    return sanitized


def serialize_messages(messages: Sequence[Message]) -> str:
    """序列化为供摘要使用的可读文本"""
    lines = []
    for msg in messages:
        role = msg.role.value.upper()
        text = msg.content
        if text.strip():
            if len(text) > ThreeZoneReducer.TEXT_MAX_CHARS:
                text = f"{text[:ThreeZoneReducer.TEXT_MAX_CHARS]}\n... [truncated, {len(text)} chars total]"
            lines.append(f"[{role}]: {text}")

        for block in msg.blocks:
            if isinstance(block, FunctionCallBlock):
                lines.append(f"[{role}]: called {block.name}(...)")
            elif isinstance(block, FunctionResultBlock):
                lines.append(f"[{role}]: tool result: {_truncate(block.result_text, ThreeZoneReducer.RESULT_MAX_CHARS)}")
    return "\n".join(lines)


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text
