"""会话状态模型

角色与当前视图，只存在于进程内存中。
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class UserRole(str, Enum):
    """用户角色"""

    REQUESTER = "requester"
    MANAGER = "manager"

    @property
    def label(self) -> str:
        return "Gestor" if self is UserRole.MANAGER else "Solicitante"


class View(str, Enum):
    """页面视图"""

    DASHBOARD = "dashboard"
    LIST = "list"
    NEW = "new"


class SessionState(BaseModel):
    """应用会话状态

    新会话固定从 (MANAGER, DASHBOARD) 开始。

    Attributes:
        role: 当前角色
        view: 当前视图
        redirect_at: 待执行的自动跳转时间（创建工单后设置）
    """

    role: UserRole = UserRole.MANAGER
    view: View = View.DASHBOARD
    redirect_at: Optional[datetime] = None
