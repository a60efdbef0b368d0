"""llm_service 单元测试"""
import pytest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from openai import OpenAIError

from uemadesk.services.llm_service import CODE_FENCE_PATTERN, THINK_TAG_PATTERN, LLMService
from uemadesk.utils.config import Config, LLMConfig


def make_service(**llm_overrides) -> LLMService:
    llm = dict(api_key="test-key", api_base="http://test", model="test-model")
    llm.update(llm_overrides)
    return LLMService(Config(llm=LLMConfig(**llm)))


def make_response(content):
    """构造 chat.completions.create 的返回值"""
    if content is None:
        return SimpleNamespace(choices=[])
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def attach_client(service: LLMService, response) -> AsyncMock:
    create = AsyncMock(return_value=response)
    client = Mock()
    client.chat.completions.create = create
    service._async_client = client
    return create


class TestPatterns:
    """正则表达式测试"""

    def test_think_tag(self):
        """测试: 去除多行 think 标签"""
        text = "<think>\npensando...\n</think>\n{\"a\": 1}"
        assert THINK_TAG_PATTERN.sub("", text) == '{"a": 1}'

    def test_multiple_think_tags(self):
        """测试: 多个 think 标签"""
        text = "<think>1</think>A<think>2</think>B"
        assert THINK_TAG_PATTERN.sub("", text) == "AB"

    def test_code_fence(self):
        """测试: 匹配包裹整个响应的代码块"""
        match = CODE_FENCE_PATTERN.match('```json\n{"a": 1}\n```')
        assert match.group(1) == '{"a": 1}'

    def test_code_fence_inside_text(self):
        """测试: 文本中间的代码块不匹配"""
        assert CODE_FENCE_PATTERN.match('texto ```json\n{}\n```') is None


class TestCleanResponse:
    """_clean_response 测试"""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, ""),
            ("", ""),
            ('  {"a": 1}  ', '{"a": 1}'),
            ('<think>x</think>{"a": 1}', '{"a": 1}'),
            ('```json\n{"a": 1}\n```', '{"a": 1}'),
            ('```\n{"a": 1}\n```', '{"a": 1}'),
            ('<think>x</think>\n```json\n{"a": 1}\n```', '{"a": 1}'),
        ],
    )
    def test_clean(self, raw, expected):
        """测试: 清理各种形式的响应"""
        assert make_service()._clean_response(raw) == expected


class TestBuildMessages:
    """_build_messages 测试"""

    def test_without_system_prompt(self):
        """测试: 无系统提示"""
        messages = make_service()._build_messages("oi")
        assert messages == [{"role": "user", "content": "oi"}]

    def test_config_system_prompt(self):
        """测试: 使用配置中的系统提示"""
        messages = make_service(system_prompt="Seja breve")._build_messages("oi")
        assert messages[0] == {"role": "system", "content": "Seja breve"}

    def test_explicit_system_prompt_overrides(self):
        """测试: 显式系统提示覆盖配置"""
        service = make_service(system_prompt="Seja breve")
        messages = service._build_messages("oi", system_prompt="Detalhe tudo")
        assert messages[0]["content"] == "Detalhe tudo"


class TestGenerateJson:
    """generate_json 测试"""

    @pytest.mark.asyncio
    async def test_request_parameters(self):
        """测试: 请求参数包含 json_schema 约束"""
        service = make_service(temperature=0.1, max_tokens=512)
        create = attach_client(service, make_response('{"ok": true}'))
        schema = {"type": "object", "properties": {"ok": {"type": "boolean"}}}

        result = await service.generate_json("prompt", schema, schema_name="probe")

        assert result == '{"ok": true}'
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 512
        assert kwargs["response_format"] == {
            "type": "json_schema",
            "json_schema": {"name": "probe", "schema": schema, "strict": True},
        }
        assert kwargs["messages"][-1] == {"role": "user", "content": "prompt"}

    @pytest.mark.asyncio
    async def test_cleans_fenced_response(self):
        """测试: 返回前清理代码块"""
        service = make_service()
        attach_client(service, make_response('```json\n{"ok": true}\n```'))

        assert await service.generate_json("p", {}) == '{"ok": true}'

    @pytest.mark.asyncio
    async def test_no_choices(self):
        """测试: 没有候选时返回空字符串"""
        service = make_service()
        attach_client(service, make_response(None))

        assert await service.generate_json("p", {}) == ""

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        """测试: 调用失败向上抛出，由网关处理"""
        service = make_service()
        client = Mock()
        client.chat.completions.create = AsyncMock(side_effect=ConnectionError("offline"))
        service._async_client = client

        with pytest.raises(ConnectionError):
            await service.generate_json("p", {})


class TestClient:
    """客户端初始化测试"""

    def test_lazy_client(self):
        """测试: 首次访问时才创建客户端，并关闭 SDK 重试"""
        service = make_service()
        assert service._async_client is None

        client = service.async_client

        assert client is service.async_client
        assert client.max_retries == 0
        assert str(client.base_url).startswith("http://test")

    def test_missing_key_does_not_use_openai_env(self, monkeypatch):
        """测试: 未配置 Key 时不回退到 OPENAI_API_KEY，而是直接报错"""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai-secret")
        service = make_service(api_key="")

        with pytest.raises(OpenAIError):
            service.async_client
        assert service._async_client is None

    @pytest.mark.asyncio
    async def test_missing_key_fails_the_call(self, monkeypatch):
        """测试: 未配置 Key 时调用失败，由调用方兜底"""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai-secret")
        service = make_service(api_key="")

        with pytest.raises(OpenAIError):
            await service.generate_json("p", {})


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
