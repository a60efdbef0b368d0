"""工单变更函数

纯函数：输入当前集合与意图，返回新集合，不修改输入。
"""
import uuid
from datetime import datetime
from typing import Callable, Container, List, Optional, Sequence, Tuple

from uemadesk.models import Ticket, TicketDraft, TicketStatus


IdFactory = Callable[[], str]


def generate_ticket_id() -> str:
    """生成 9 位短 ID"""
    return uuid.uuid4().hex[:9]


def _fresh_id(existing: Container[str], id_factory: IdFactory) -> str:
    """生成不与现有 ID 冲突的新 ID"""
    ticket_id = id_factory()
    while not ticket_id or ticket_id in existing:
        ticket_id = id_factory()
    return ticket_id


def create_ticket(
    tickets: Sequence[Ticket],
    draft: TicketDraft,
    now: datetime,
    id_factory: Optional[IdFactory] = None,
) -> Tuple[List[Ticket], Ticket]:
    """
    根据草稿创建工单并放在集合最前面

    Args:
        tickets: 当前工单集合（新的在前）
        draft: 已校验的工单草稿
        now: 创建时间
        id_factory: ID 生成函数（默认 generate_ticket_id）

    Returns:
        (新集合, 新工单)
    """
    existing_ids = {t.id for t in tickets}
    ticket = Ticket(
        id=_fresh_id(existing_ids, id_factory or generate_ticket_id),
        status=TicketStatus.OPEN,
        created_at=now,
        **draft.model_dump(),
    )
    return [ticket, *tickets], ticket


def update_status(
    tickets: Sequence[Ticket],
    ticket_id: str,
    new_status: TicketStatus,
    now: datetime,
) -> List[Ticket]:
    """
    修改工单状态

    - updated_at 总是更新为 now
    - 仅当新状态为 DONE 时设置 completed_at，其他状态保留原值
    - ID 不存在时原样返回（不报错）
    """
    updated = []
    for ticket in tickets:
        if ticket.id != ticket_id:
            updated.append(ticket)
            continue
        changes = {"status": new_status, "updated_at": now}
        if new_status == TicketStatus.DONE:
            changes["completed_at"] = now
        updated.append(ticket.model_copy(update=changes))
    return updated
