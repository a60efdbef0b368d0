"""AI 分析结果模型

字段名与远端 LLM 的输出 schema 保持一致（camelCase 别名），
Python 侧使用 snake_case 访问。
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AISolution(BaseModel):
    """单个工单的技术解决方案"""

    model_config = ConfigDict(populate_by_name=True)

    ticket_id: str = Field(alias="ticketId")
    ticket_title: str = Field(alias="ticketTitle")
    diagnostic: str
    step_by_step: List[str] = Field(alias="stepByStep")


class AIAnalysisResult(BaseModel):
    """整体分析结果

    每次分析重新生成，不与上一次结果合并。
    """

    model_config = ConfigDict(populate_by_name=True)

    summary: str
    hotspots: List[str]
    preventive_actions: List[str] = Field(alias="preventiveActions")
    trends: str
    specific_solutions: List[AISolution] = Field(alias="specificSolutions")


class AnalysisOutcome(BaseModel):
    """分析网关的返回值（带标签）

    Attributes:
        status: success 表示远端正常返回；degraded 表示使用了兜底结果
        result: 分析结果（两种状态下都满足完整结构）
        cause: 降级原因（仅 degraded 时有值）
    """

    status: Literal["success", "degraded"]
    result: AIAnalysisResult
    cause: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.status == "degraded"
