"""数据访问层

- TicketDAO: 进程内工单存储
- build_seed_tickets: 内置示例数据
"""
from uemadesk.dao.ticket_dao import TicketDAO
from uemadesk.dao.seed_data import build_seed_tickets

__all__ = [
    "TicketDAO",
    "build_seed_tickets",
]
