"""Ticket DAO

进程内工单存储，会话结束即丢失，不做持久化。
"""
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from uemadesk.core import mutators
from uemadesk.models import Ticket, TicketDraft, TicketStatus


Clock = Callable[[], datetime]


class TicketDAO:
    """工单数据访问对象

    独占持有工单集合（新的在前），对外只提供快照和变更入口。
    """

    def __init__(
        self,
        tickets: Optional[Iterable[Ticket]] = None,
        clock: Optional[Clock] = None,
        id_factory: Optional[mutators.IdFactory] = None,
    ):
        """
        初始化 DAO

        Args:
            tickets: 初始工单（通常为内置示例数据）
            clock: 时间函数，默认 datetime.now
            id_factory: ID 生成函数
        """
        self._tickets: List[Ticket] = list(tickets or [])
        self._clock = clock or datetime.now
        self._id_factory = id_factory

    def list_all(self) -> List[Ticket]:
        """返回当前集合的快照"""
        return list(self._tickets)

    def get(self, ticket_id: str) -> Optional[Ticket]:
        """
        按 ID 获取工单

        Returns:
            工单，不存在则返回 None
        """
        for ticket in self._tickets:
            if ticket.id == ticket_id:
                return ticket
        return None

    def create(self, draft: TicketDraft) -> Ticket:
        """创建工单（状态强制为 OPEN，放在最前）"""
        self._tickets, ticket = mutators.create_ticket(
            self._tickets, draft, self._clock(), self._id_factory
        )
        return ticket

    def update_status(self, ticket_id: str, new_status: TicketStatus) -> None:
        """修改工单状态，ID 不存在时静默忽略"""
        self._tickets = mutators.update_status(
            self._tickets, ticket_id, new_status, self._clock()
        )

    def __len__(self) -> int:
        return len(self._tickets)
