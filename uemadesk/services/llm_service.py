"""LLM API 调用服务

使用 OpenAI SDK 调用兼容 OpenAI API 的 LLM 服务（默认 Gemini 兼容端点）
"""
import re
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from uemadesk.utils.config import Config


# 匹配 <think>...</think> 标签（支持多行）
THINK_TAG_PATTERN = re.compile(r"<think>.*?</think>\s*", re.DOTALL)

# 匹配包裹整个响应的 Markdown 代码块
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class LLMService:
    """LLM 服务封装

    每次调用只请求一次，不重试（SDK 内置重试也关闭）。
    """

    def __init__(self, config: Config):
        """
        初始化 LLM 服务

        Args:
            config: 全局配置对象
        """
        self.config = config
        self.model = config.llm.model
        self.temperature = config.llm.temperature
        self.max_tokens = config.llm.max_tokens
        self.timeout = config.llm.timeout
        self.system_prompt = config.llm.system_prompt

        # 异步客户端（延迟初始化）
        self._async_client: Optional[AsyncOpenAI] = None

    @property
    def async_client(self) -> AsyncOpenAI:
        """获取异步客户端（延迟初始化）

        API Key 只来自配置（GEMINI_API_KEY / API_KEY），为空时直接报错，
        不让 SDK 回退到 OPENAI_API_KEY。

        Raises:
            OpenAIError: 未配置 API Key
        """
        if self._async_client is None:
            if not self.config.llm.api_key:
                raise OpenAIError("API Key 未配置 (GEMINI_API_KEY / API_KEY)")
            self._async_client = AsyncOpenAI(
                api_key=self.config.llm.api_key,
                base_url=self.config.llm.api_base,
                max_retries=0,
            )
        return self._async_client

    def _build_messages(
        self, prompt: str, system_prompt: Optional[str] = None
    ) -> List[Dict[str, str]]:
        """构建消息列表（可选系统提示 + 用户输入）"""
        messages = []
        if system_prompt is None:
            system_prompt = self.system_prompt
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    def _clean_response(self, content: Optional[str]) -> str:
        """清理 LLM 响应

        - 去除 <think>...</think> 标签（模型的思考过程）
        - 去除包裹 JSON 的 ``` 代码块
        - 去除首尾空白

        Args:
            content: 原始响应内容

        Returns:
            清理后的响应内容
        """
        if not content:
            return ""
        content = THINK_TAG_PATTERN.sub("", content).strip()
        match = CODE_FENCE_PATTERN.match(content)
        if match:
            content = match.group(1)
        return content.strip()

    async def generate_json(
        self,
        prompt: str,
        schema: Dict[str, Any],
        schema_name: str = "response",
        system_prompt: Optional[str] = None,
    ) -> str:
        """按 JSON Schema 生成结构化回复

        Args:
            prompt: 用户输入
            schema: 输出必须满足的 JSON Schema
            schema_name: schema 名称
            system_prompt: 系统提示（可选）

        Returns:
            清理后的 JSON 文本（可能为空字符串）

        Raises:
            openai.OpenAIError: 网络、认证等调用失败
        """
        response = await self.async_client.chat.completions.create(
            model=self.model,
            messages=self._build_messages(prompt, system_prompt),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": schema_name,
                    "schema": schema,
                    "strict": True,
                },
            },
        )
        if not response.choices:
            return ""
        return self._clean_response(response.choices[0].message.content)
