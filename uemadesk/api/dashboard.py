"""仪表盘 API 接口

仅 manager 可访问；requester 得到 403 和返回列表页的提示。
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from uemadesk.api.deps import get_controller
from uemadesk.core.controller import (
    RESTRICTED_ESCAPE_VIEW,
    RESTRICTED_MESSAGE,
    AppController,
)
from uemadesk.core.exceptions import AnalysisInProgressError, ForbiddenError
from uemadesk.core.queries import DashboardSummary
from uemadesk.models import AnalysisOutcome

logger = logging.getLogger(__name__)

# 创建路由
router = APIRouter()


def _restricted(e: ForbiddenError) -> HTTPException:
    """仪表盘受限占位（附带跳转到列表的出口）"""
    return HTTPException(
        status_code=403,
        detail={
            "outcome": "forbidden",
            "operation": e.operation,
            "message": RESTRICTED_MESSAGE,
            "escape_view": RESTRICTED_ESCAPE_VIEW.value,
        },
    )


@router.get("/dashboard", response_model=DashboardSummary)
async def get_dashboard(controller: AppController = Depends(get_controller)):
    """
    获取仪表盘数据

    包含 KPI、按状态/优先级/类别计数以及最近工单。
    """
    try:
        return controller.view_dashboard()
    except ForbiddenError as e:
        raise _restricted(e)


@router.post("/dashboard/analysis", response_model=AnalysisOutcome)
async def request_analysis(controller: AppController = Depends(get_controller)):
    """
    请求 AI 分析

    远端失败时返回 status = degraded 的兜底结果，而不是错误；
    已有请求在途时返回 409。
    """
    try:
        outcome = await controller.request_analysis()
    except ForbiddenError as e:
        raise _restricted(e)
    except AnalysisInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if outcome.degraded:
        logger.info(f"返回降级分析结果: {outcome.cause}")
    return outcome
