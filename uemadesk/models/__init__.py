"""数据模型模块

组织结构：
- ticket: 工单领域模型 (Ticket, TicketDraft, 枚举)
- analysis: AI 分析结果模型
- session: 角色/视图会话状态
"""
from uemadesk.models.ticket import (
    Ticket,
    TicketDraft,
    TicketStatus,
    Priority,
    Category,
)
from uemadesk.models.analysis import (
    AISolution,
    AIAnalysisResult,
    AnalysisOutcome,
)
from uemadesk.models.session import UserRole, View, SessionState

__all__ = [
    # 工单
    "Ticket",
    "TicketDraft",
    "TicketStatus",
    "Priority",
    "Category",
    # 分析
    "AISolution",
    "AIAnalysisResult",
    "AnalysisOutcome",
    # 会话
    "UserRole",
    "View",
    "SessionState",
]
