"""会话 API 接口

当前角色与视图的查询和切换。
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from uemadesk.api.deps import get_controller
from uemadesk.core.controller import AppController
from uemadesk.models import UserRole, View

# 创建路由
router = APIRouter()


class RoleRequest(BaseModel):
    """切换角色请求"""

    role: UserRole


class ViewRequest(BaseModel):
    """切换视图请求"""

    view: View


def _session_payload(controller: AppController) -> dict:
    return {
        "role": controller.role,
        "view": controller.current_view,
        "analysis_loading": controller.analysis_loading,
    }


@router.get("/session")
async def get_session(controller: AppController = Depends(get_controller)):
    """获取当前角色和视图"""
    return _session_payload(controller)


@router.put("/session/role")
async def set_role(request: RoleRequest, controller: AppController = Depends(get_controller)):
    """
    切换角色

    切换为 requester 时如果当前在 dashboard，会被重定向到 list。
    """
    controller.set_role(request.role)
    return _session_payload(controller)


@router.put("/session/view")
async def set_view(request: ViewRequest, controller: AppController = Depends(get_controller)):
    """切换视图"""
    controller.set_view(request.view)
    return _session_payload(controller)
