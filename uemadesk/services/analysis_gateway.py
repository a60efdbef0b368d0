"""AI 分析网关

把工单快照发送给文本生成服务，解析为结构化的分析结果。
任何失败都转换为固定的兜底结果，网关本身从不向外抛异常。
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

from pydantic import ValidationError

from uemadesk.models import AIAnalysisResult, AnalysisOutcome, Ticket
from uemadesk.services.llm_service import LLMService

logger = logging.getLogger(__name__)


FALLBACK_SUMMARY = (
    "Não foi possível gerar a análise técnica no momento. Verifique sua conexão."
)


def fallback_result() -> AIAnalysisResult:
    """兜底结果（每次返回新对象）"""
    return AIAnalysisResult(
        summary=FALLBACK_SUMMARY,
        hotspots=[],
        preventive_actions=["Revisar conexão com a API Gemini."],
        specific_solutions=[],
        trends="Indisponível",
    )


# 远端输出必须满足的 JSON Schema
ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "summary": {"type": "string"},
        "hotspots": {"type": "array", "items": {"type": "string"}},
        "preventiveActions": {"type": "array", "items": {"type": "string"}},
        "trends": {"type": "string"},
        "specificSolutions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "ticketId": {"type": "string"},
                    "ticketTitle": {"type": "string"},
                    "diagnostic": {"type": "string"},
                    "stepByStep": {"type": "array", "items": {"type": "string"}},
                },
                "required": ["ticketId", "ticketTitle", "diagnostic", "stepByStep"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["summary", "hotspots", "preventiveActions", "trends", "specificSolutions"],
    "additionalProperties": False,
}


PROMPT_TEMPLATE = """Você é um Engenheiro de Manutenção Predial Sênior da UEMA.
Analise os chamados abaixo e forneça diagnósticos técnicos e soluções passo a passo.

Lista de Chamados:
{tickets_json}

Instruções Específicas:
1. Para cada chamado aberto ou em atraso, identifique a causa provável.
2. Forneça uma solução técnica "Step-by-Step" (Passo a Passo) para cada um desses chamados.
3. Identifique hotspots (locais ou tipos de problema recorrentes).
4. Sugira ações preventivas para evitar novos chamados.
5. Comente tendências sazonais no Maranhão (calor intenso, umidade).

Responda somente com JSON no formato exigido."""


def project_ticket(ticket: Ticket) -> Dict[str, str]:
    """裁剪工单字段，只保留诊断需要的信息（不含申请人和图片）"""
    return {
        "id": ticket.id,
        "title": ticket.title,
        "category": ticket.category.label,
        "status": ticket.status.label,
        "campus": ticket.campus,
        "building": ticket.building,
        "room": ticket.room,
        "description": ticket.description,
        "createdAt": ticket.created_at.isoformat(),
    }


def build_analysis_prompt(tickets: Sequence[Ticket]) -> str:
    """构建分析提示词"""
    payload = [project_ticket(t) for t in tickets]
    return PROMPT_TEMPLATE.format(
        tickets_json=json.dumps(payload, ensure_ascii=False)
    )


class AnalysisGateway(ABC):
    """分析网关接口

    run() 返回带标签的结果，调用方无需处理异常。
    """

    @abstractmethod
    async def run(self, tickets: Sequence[Ticket]) -> AnalysisOutcome:
        """执行一次分析"""
        pass

    async def analyze(self, tickets: Sequence[Ticket]) -> AIAnalysisResult:
        """执行一次分析，只返回结果本身"""
        outcome = await self.run(tickets)
        return outcome.result


class LLMAnalysisGateway(AnalysisGateway):
    """基于 LLMService 的分析网关

    单次调用，不重试、不缓存；每次重新发送完整快照。
    """

    SCHEMA_NAME = "maintenance_analysis"

    def __init__(self, llm_service: LLMService):
        """
        初始化网关

        Args:
            llm_service: LLM 服务
        """
        self.llm_service = llm_service

    async def run(self, tickets: Sequence[Ticket]) -> AnalysisOutcome:
        snapshot: List[Ticket] = list(tickets)
        try:
            text = await self.llm_service.generate_json(
                build_analysis_prompt(snapshot),
                ANALYSIS_SCHEMA,
                schema_name=self.SCHEMA_NAME,
            )
            if not text:
                raise ValueError("Sem resposta da IA")
            result = AIAnalysisResult.model_validate_json(text)
        except ValidationError as e:
            return self._degraded(f"resposta fora do esquema: {e.error_count()} erro(s)", e)
        except Exception as e:
            return self._degraded(f"{type(e).__name__}: {e}", e)

        logger.info(
            f"分析完成: {len(snapshot)} 个工单, "
            f"{len(result.specific_solutions)} 个解决方案"
        )
        return AnalysisOutcome(status="success", result=result)

    def _degraded(self, cause: str, error: Exception) -> AnalysisOutcome:
        logger.warning(f"AI 分析失败，使用兜底结果: {cause}", exc_info=error)
        return AnalysisOutcome(status="degraded", result=fallback_result(), cause=cause)
