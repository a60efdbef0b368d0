"""内置示例工单

启动时用于初始化工单集合，时间相对于启动时刻计算。
"""
from datetime import datetime, timedelta
from typing import List, Optional

from uemadesk.core.mutators import generate_ticket_id
from uemadesk.models import Category, Priority, Ticket, TicketStatus


def build_seed_tickets(now: Optional[datetime] = None) -> List[Ticket]:
    """
    构建示例工单

    Args:
        now: 基准时间，默认当前时间

    Returns:
        5 个工单，状态依次为 OPEN, IN_PROGRESS, DONE, OPEN, DELAYED
    """
    now = now or datetime.now()
    three_days_ago = now - timedelta(days=3)
    ten_days_ago = now - timedelta(days=10)
    two_weeks_ago = now - timedelta(days=14)

    return [
        Ticket(
            id=generate_ticket_id(),
            title="Ar-condicionado pingando muito",
            description="O aparelho split da sala de aula está pingando em cima das carteiras.",
            category=Category.AC_REPAIR,
            priority=Priority.HIGH,
            status=TicketStatus.OPEN,
            campus="Campus Paulo VI",
            building="Prédio de História",
            room="Sala 102",
            requester_name="Prof. Ana Souza",
            created_at=now,
        ),
        Ticket(
            id=generate_ticket_id(),
            title="Vazamento na pia do banheiro masculino",
            description="Torneira não fecha, desperdício de água.",
            category=Category.HYDRAULIC,
            priority=Priority.MEDIUM,
            status=TicketStatus.IN_PROGRESS,
            campus="Campus Paulo VI",
            building="CCSA",
            room="Banheiro 1º Andar",
            requester_name="João Silva (Zelador)",
            created_at=three_days_ago,
            updated_at=now,
        ),
        Ticket(
            id=generate_ticket_id(),
            title="Limpeza Preventiva AC",
            description="Solicito limpeza dos filtros, cheiro de mofo.",
            category=Category.AC_CLEANING,
            priority=Priority.LOW,
            status=TicketStatus.DONE,
            campus="Campus Paulo VI",
            building="Reitoria",
            room="Gabinete",
            requester_name="Secretaria",
            created_at=two_weeks_ago,
            completed_at=ten_days_ago,
        ),
        Ticket(
            id=generate_ticket_id(),
            title="Ar-condicionado não gela",
            description="Aparelho liga mas só ventila.",
            category=Category.AC_REPAIR,
            priority=Priority.HIGH,
            status=TicketStatus.OPEN,
            campus="Campus Paulo VI",
            building="Prédio de História",
            room="Sala 104",
            requester_name="Coordenação",
            created_at=now,
        ),
        Ticket(
            id=generate_ticket_id(),
            title="Buraco no gesso do teto",
            description="Infiltração causou queda de parte do gesso.",
            category=Category.REFORM,
            priority=Priority.MEDIUM,
            status=TicketStatus.DELAYED,
            campus="Campus CCT",
            building="Bloco de Engenharia",
            room="Lab 03",
            requester_name="Prof. Carlos",
            created_at=ten_days_ago,
        ),
    ]
