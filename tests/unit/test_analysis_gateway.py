"""AI 分析网关单元测试"""
import json
import pytest
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, Mock
import sys

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from uemadesk.dao import build_seed_tickets
from uemadesk.services.analysis_gateway import (
    ANALYSIS_SCHEMA,
    FALLBACK_SUMMARY,
    LLMAnalysisGateway,
    build_analysis_prompt,
    fallback_result,
    project_ticket,
)
from uemadesk.services.llm_service import LLMService
from uemadesk.utils.config import Config, LLMConfig


VALID_RESPONSE = {
    "summary": "Concentração de problemas de climatização no Prédio de História.",
    "hotspots": ["Prédio de História", "Ar-condicionado"],
    "preventiveActions": ["Limpeza trimestral dos filtros"],
    "trends": "Mais chamados de AC no período de calor intenso.",
    "specificSolutions": [
        {
            "ticketId": "abc123def",
            "ticketTitle": "Ar-condicionado pingando muito",
            "diagnostic": "Dreno obstruído",
            "stepByStep": ["Desligar o aparelho", "Desobstruir o dreno", "Testar"],
        }
    ],
}


@pytest.fixture
def tickets():
    return build_seed_tickets(datetime(2025, 3, 10, 14, 30))


def make_gateway(return_value=None, side_effect=None):
    llm_service = Mock()
    llm_service.generate_json = AsyncMock(return_value=return_value, side_effect=side_effect)
    return LLMAnalysisGateway(llm_service), llm_service


class TestPrompt:
    """提示词构建测试"""

    def test_projection_excludes_private_fields(self, tickets):
        """测试: 不发送申请人和图片"""
        projected = project_ticket(tickets[0])

        assert set(projected) == {
            "id", "title", "category", "status", "campus",
            "building", "room", "description", "createdAt",
        }
        assert projected["category"] == "Manutenção Ar-condicionado"
        assert projected["status"] == "Aberto"
        assert projected["createdAt"] == "2025-03-10T14:30:00"

    def test_prompt_contains_all_tickets(self, tickets):
        """测试: 提示词包含全部工单和说明"""
        prompt = build_analysis_prompt(tickets)

        for ticket in tickets:
            assert ticket.id in prompt
        assert "Prédio de História" in prompt  # 不转义非 ASCII
        assert "Step-by-Step" in prompt
        assert "Maranhão" in prompt
        assert "Prof. Ana Souza" not in prompt

    def test_prompt_for_empty_collection(self):
        """测试: 空集合也能构建提示词"""
        assert "[]" in build_analysis_prompt([])


class TestSchema:
    """输出 schema 测试"""

    def test_required_fields(self):
        """测试: 顶层五个字段全部必填"""
        assert set(ANALYSIS_SCHEMA["required"]) == {
            "summary", "hotspots", "preventiveActions", "trends", "specificSolutions",
        }

    def test_fallback_shape(self):
        """测试: 兜底结果的固定内容"""
        result = fallback_result()

        assert result.summary == FALLBACK_SUMMARY
        assert result.hotspots == []
        assert result.preventive_actions == ["Revisar conexão com a API Gemini."]
        assert result.specific_solutions == []
        assert result.trends == "Indisponível"

    def test_fallback_is_fresh(self):
        """测试: 每次返回新对象"""
        first = fallback_result()
        first.hotspots.append("x")
        assert fallback_result().hotspots == []


class TestLLMAnalysisGateway:
    """LLMAnalysisGateway 测试"""

    @pytest.mark.asyncio
    async def test_success(self, tickets):
        """测试: 正常返回解析为结构化结果"""
        gateway, llm_service = make_gateway(return_value=json.dumps(VALID_RESPONSE))

        outcome = await gateway.run(tickets)

        assert outcome.status == "success"
        assert outcome.cause is None
        solution = outcome.result.specific_solutions[0]
        assert solution.ticket_id == "abc123def"
        assert solution.step_by_step[1] == "Desobstruir o dreno"
        assert outcome.result.preventive_actions == ["Limpeza trimestral dos filtros"]

        args, kwargs = llm_service.generate_json.call_args
        assert args[1] is ANALYSIS_SCHEMA
        assert kwargs["schema_name"] == LLMAnalysisGateway.SCHEMA_NAME

    @pytest.mark.asyncio
    async def test_network_error_degrades(self, tickets):
        """测试: 网络错误返回兜底结果"""
        gateway, _ = make_gateway(side_effect=ConnectionError("network unreachable"))

        outcome = await gateway.run(tickets)

        assert outcome.degraded
        assert outcome.result.summary == FALLBACK_SUMMARY
        assert "ConnectionError" in outcome.cause
        assert outcome.result.hotspots == []
        assert outcome.result.specific_solutions == []

    @pytest.mark.asyncio
    async def test_missing_api_key_degrades(self, tickets, monkeypatch):
        """测试: 未配置 API Key 时返回兜底结果，不使用 OPENAI_API_KEY"""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai-secret")
        config = Config(llm=LLMConfig(api_key=""))
        gateway = LLMAnalysisGateway(LLMService(config))

        outcome = await gateway.run(tickets)

        assert outcome.degraded
        assert outcome.result == fallback_result()
        assert "OpenAIError" in outcome.cause

    @pytest.mark.asyncio
    async def test_empty_response_degrades(self, tickets):
        """测试: 空响应返回兜底结果"""
        gateway, _ = make_gateway(return_value="")

        outcome = await gateway.run(tickets)

        assert outcome.degraded
        assert "Sem resposta da IA" in outcome.cause

    @pytest.mark.asyncio
    async def test_invalid_json_degrades(self, tickets):
        """测试: 非 JSON 响应返回兜底结果"""
        gateway, _ = make_gateway(return_value="Desculpe, não consigo ajudar.")

        outcome = await gateway.run(tickets)

        assert outcome.degraded
        assert outcome.result.trends == "Indisponível"

    @pytest.mark.asyncio
    async def test_schema_violation_degrades(self, tickets):
        """测试: 缺少必填字段返回兜底结果"""
        incomplete = {k: v for k, v in VALID_RESPONSE.items() if k != "trends"}
        gateway, _ = make_gateway(return_value=json.dumps(incomplete))

        outcome = await gateway.run(tickets)

        assert outcome.degraded
        assert "esquema" in outcome.cause

    @pytest.mark.asyncio
    async def test_analyze_never_raises(self, tickets):
        """测试: analyze 在失败时返回兜底结果本身"""
        gateway, _ = make_gateway(side_effect=TimeoutError())

        result = await gateway.analyze(tickets)

        assert result == fallback_result()

    @pytest.mark.asyncio
    async def test_each_call_is_independent(self, tickets):
        """测试: 每次调用都重新请求，不缓存"""
        gateway, llm_service = make_gateway(return_value=json.dumps(VALID_RESPONSE))

        await gateway.run(tickets)
        await gateway.run(tickets[:1])

        assert llm_service.generate_json.await_count == 2
        second_prompt = llm_service.generate_json.call_args_list[1][0][0]
        assert tickets[1].id not in second_prompt


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
