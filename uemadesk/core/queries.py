"""查询与统计

所有函数都是纯函数，每次调用基于当前集合重新计算，不做缓存。
"""
from collections import Counter
from typing import Dict, List, Sequence, Union

from pydantic import BaseModel

from uemadesk.models import Category, Priority, Ticket, TicketStatus


# 状态过滤哨兵值：不按状态过滤
STATUS_FILTER_ALL = "all"

StatusFilter = Union[TicketStatus, str]


class Kpis(BaseModel):
    """仪表盘关键指标"""

    total: int
    open: int
    high_priority_or_above: int
    done: int


class DashboardSummary(BaseModel):
    """仪表盘数据"""

    kpis: Kpis
    by_status: Dict[TicketStatus, int]
    by_priority: Dict[Priority, int]
    by_category: Dict[Category, int]
    recent: List[Ticket]


def _matches_search(ticket: Ticket, term: str) -> bool:
    return (
        term in ticket.title.lower()
        or term in ticket.building.lower()
        or term in ticket.id.lower()
    )


def filter_tickets(
    tickets: Sequence[Ticket],
    status_filter: StatusFilter = STATUS_FILTER_ALL,
    search_term: str = "",
) -> List[Ticket]:
    """
    按状态和关键字过滤工单

    Args:
        tickets: 工单集合
        status_filter: STATUS_FILTER_ALL 或某个具体状态
        search_term: 关键字，大小写不敏感，匹配标题、楼宇或 ID（任一包含即可）

    Returns:
        过滤后的列表，保持原有顺序
    """
    if status_filter != STATUS_FILTER_ALL:
        status_filter = TicketStatus(status_filter)
    term = (search_term or "").lower()

    result = []
    for ticket in tickets:
        if status_filter != STATUS_FILTER_ALL and ticket.status != status_filter:
            continue
        if term and not _matches_search(ticket, term):
            continue
        result.append(ticket)
    return result


def aggregate_by_status(tickets: Sequence[Ticket]) -> Dict[TicketStatus, int]:
    """按状态计数（未出现的状态计为 0）"""
    counts = Counter(t.status for t in tickets)
    return {status: counts.get(status, 0) for status in TicketStatus}


def aggregate_by_priority(tickets: Sequence[Ticket]) -> Dict[Priority, int]:
    """按优先级计数（未出现的优先级计为 0）"""
    counts = Counter(t.priority for t in tickets)
    return {priority: counts.get(priority, 0) for priority in Priority}


def aggregate_by_category(tickets: Sequence[Ticket]) -> Dict[Category, int]:
    """按类别计数（只包含实际出现的类别，按首次出现顺序）"""
    counts: Dict[Category, int] = {}
    for ticket in tickets:
        counts[ticket.category] = counts.get(ticket.category, 0) + 1
    return counts


def kpis(tickets: Sequence[Ticket]) -> Kpis:
    """计算关键指标

    high_priority_or_above 只统计 HIGH 和 CRITICAL。
    """
    return Kpis(
        total=len(tickets),
        open=sum(1 for t in tickets if t.status == TicketStatus.OPEN),
        high_priority_or_above=sum(1 for t in tickets if t.is_high_priority),
        done=sum(1 for t in tickets if t.status == TicketStatus.DONE),
    )


def recent_tickets(tickets: Sequence[Ticket], limit: int = 5) -> List[Ticket]:
    """最近的工单（集合本身按新到旧排列）"""
    return list(tickets[:limit])


def dashboard_summary(tickets: Sequence[Ticket], recent_limit: int = 5) -> DashboardSummary:
    """汇总仪表盘所需的全部数据"""
    return DashboardSummary(
        kpis=kpis(tickets),
        by_status=aggregate_by_status(tickets),
        by_priority=aggregate_by_priority(tickets),
        by_category=aggregate_by_category(tickets),
        recent=recent_tickets(tickets, recent_limit),
    )
