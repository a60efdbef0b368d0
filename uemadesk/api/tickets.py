"""工单 API 接口"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from uemadesk.api.deps import get_controller
from uemadesk.core.controller import AppController
from uemadesk.core.exceptions import AttachmentError, ForbiddenError
from uemadesk.core.queries import STATUS_FILTER_ALL
from uemadesk.models import Ticket, TicketDraft, TicketStatus

# 创建路由
router = APIRouter()


class StatusRequest(BaseModel):
    """修改状态请求"""

    status: TicketStatus


def forbidden(e: ForbiddenError) -> HTTPException:
    """ForbiddenError -> 403"""
    return HTTPException(
        status_code=403,
        detail={"outcome": "forbidden", "operation": e.operation, "message": str(e)},
    )


@router.get("/tickets", response_model=List[Ticket])
async def list_tickets(
    status: str = STATUS_FILTER_ALL,
    q: str = "",
    controller: AppController = Depends(get_controller),
):
    """
    列出工单

    - status: all 或具体状态
    - q: 关键字（标题、楼宇或 ID）
    """
    try:
        return controller.list_tickets(status, q)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Status inválido: {status}")


@router.post("/tickets", response_model=Ticket, status_code=201)
async def create_ticket(draft: TicketDraft, controller: AppController = Depends(get_controller)):
    """
    创建工单

    状态强制为 open；创建后控制器会在短暂延迟后自动切换到 list 视图。
    """
    try:
        return controller.create_ticket(draft)
    except AttachmentError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/tickets/{ticket_id}", response_model=Ticket)
async def get_ticket(ticket_id: str, controller: AppController = Depends(get_controller)):
    """获取单个工单"""
    ticket = controller.get_ticket(ticket_id)
    if ticket is None:
        raise HTTPException(status_code=404, detail="Chamado não encontrado")
    return ticket


@router.patch("/tickets/{ticket_id}/status")
async def update_status(
    ticket_id: str,
    request: StatusRequest,
    controller: AppController = Depends(get_controller),
):
    """
    修改工单状态（仅 manager）

    ID 不存在时静默忽略，返回 ticket = null。
    """
    try:
        ticket = controller.set_status(ticket_id, request.status)
    except ForbiddenError as e:
        raise forbidden(e)
    return {"ticket": ticket}
