"""应用控制器

持有唯一的应用状态（工单存储、角色、视图、分析结果），
对外提供意图操作。每个操作声明允许的角色，在入口处统一校验。
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, FrozenSet, List, Optional

from uemadesk.core import queries
from uemadesk.core.exceptions import AnalysisInProgressError, ForbiddenError
from uemadesk.dao import TicketDAO
from uemadesk.models import (
    AIAnalysisResult,
    AnalysisOutcome,
    SessionState,
    Ticket,
    TicketDraft,
    TicketStatus,
    UserRole,
    View,
)
from uemadesk.services.analysis_gateway import AnalysisGateway
from uemadesk.utils.attachments import validate_image_url

logger = logging.getLogger(__name__)


ALL_ROLES: FrozenSet[UserRole] = frozenset(UserRole)
MANAGER_ONLY: FrozenSet[UserRole] = frozenset({UserRole.MANAGER})

# 操作 -> 允许的角色
OPERATION_ROLES: Dict[str, FrozenSet[UserRole]] = {
    "create_ticket": ALL_ROLES,
    "list_tickets": ALL_ROLES,
    "get_ticket": ALL_ROLES,
    "set_status": MANAGER_ONLY,
    "view_dashboard": MANAGER_ONLY,
    "request_analysis": MANAGER_ONLY,
}

# 无权访问仪表盘时展示的提示
RESTRICTED_MESSAGE = 'Acesso restrito a gestores. Por favor, use a aba "Meus Chamados".'
RESTRICTED_ESCAPE_VIEW = View.LIST


class AppController:
    """应用控制器

    单线程、单写者：所有同步操作一次执行完毕；
    唯一的异步操作是 AI 分析，同一时间只允许一个请求在途。
    """

    def __init__(
        self,
        dao: TicketDAO,
        gateway: AnalysisGateway,
        redirect_delay: float = 2.0,
        max_image_bytes: int = 5 * 1024 * 1024,
        recent_limit: int = 5,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        初始化控制器

        Args:
            dao: 工单存储
            gateway: AI 分析网关
            redirect_delay: 创建工单后跳转到列表的延迟（秒）
            max_image_bytes: 图片附件大小上限
            recent_limit: 仪表盘最近工单数量
            clock: 时间函数，默认 datetime.now
        """
        self.dao = dao
        self.gateway = gateway
        self.redirect_delay = timedelta(seconds=redirect_delay)
        self.max_image_bytes = max_image_bytes
        self.recent_limit = recent_limit
        self._clock = clock or datetime.now

        self.state = SessionState()
        self.last_analysis: Optional[AnalysisOutcome] = None
        self._analysis_in_flight = False

    # ===== 角色与视图 =====

    def _require(self, operation: str) -> None:
        """校验当前角色能否执行操作，否则抛出 ForbiddenError"""
        allowed = OPERATION_ROLES[operation]
        if self.state.role not in allowed:
            logger.info(f"拒绝操作 {operation} (role={self.state.role.value})")
            raise ForbiddenError(operation, self.state.role, sorted(allowed, key=lambda r: r.value))

    def can(self, operation: str) -> bool:
        """当前角色是否可以执行操作"""
        return self.state.role in OPERATION_ROLES[operation]

    @property
    def role(self) -> UserRole:
        return self.state.role

    @property
    def current_view(self) -> View:
        """当前视图（先应用已到期的自动跳转）"""
        self._apply_pending_redirect()
        return self.state.view

    def _apply_pending_redirect(self) -> None:
        redirect_at = self.state.redirect_at
        if redirect_at is not None and self._clock() >= redirect_at:
            self.state.view = View.LIST
            self.state.redirect_at = None

    def set_role(self, role: UserRole) -> View:
        """
        切换角色

        切换为 REQUESTER 且当前在仪表盘时，强制跳转到列表；
        切换为 MANAGER 不改变视图。

        Returns:
            切换后的视图
        """
        role = UserRole(role)
        self.state.role = role
        if role == UserRole.REQUESTER and self.current_view == View.DASHBOARD:
            self.state.view = View.LIST
        return self.current_view

    def set_view(self, view: View) -> View:
        """切换视图（手动导航会取消待执行的自动跳转）"""
        self.state.view = View(view)
        self.state.redirect_at = None
        return self.state.view

    # ===== 工单操作 =====

    def create_ticket(self, draft: TicketDraft) -> Ticket:
        """
        创建工单

        成功后在 redirect_delay 之后自动跳转到列表视图。

        Raises:
            AttachmentError: 图片附件不合法
        """
        self._require("create_ticket")
        validate_image_url(draft.image_url, self.max_image_bytes)
        ticket = self.dao.create(draft)
        self.state.redirect_at = self._clock() + self.redirect_delay
        logger.info(f"创建工单 {ticket.id}: {ticket.title}")
        return ticket

    def set_status(self, ticket_id: str, new_status: TicketStatus) -> Optional[Ticket]:
        """
        修改工单状态（仅 MANAGER）

        Returns:
            修改后的工单；ID 不存在时返回 None（静默忽略）
        """
        self._require("set_status")
        new_status = TicketStatus(new_status)
        self.dao.update_status(ticket_id, new_status)
        ticket = self.dao.get(ticket_id)
        if ticket is None:
            logger.debug(f"修改状态时未找到工单 {ticket_id}，忽略")
        else:
            logger.info(f"工单 {ticket_id} 状态 -> {new_status.value}")
        return ticket

    def list_tickets(
        self,
        status_filter: queries.StatusFilter = queries.STATUS_FILTER_ALL,
        search_term: str = "",
    ) -> List[Ticket]:
        """按状态和关键字列出工单"""
        self._require("list_tickets")
        return queries.filter_tickets(self.dao.list_all(), status_filter, search_term)

    def get_ticket(self, ticket_id: str) -> Optional[Ticket]:
        self._require("get_ticket")
        return self.dao.get(ticket_id)

    def view_dashboard(self) -> queries.DashboardSummary:
        """仪表盘数据（仅 MANAGER）"""
        self._require("view_dashboard")
        return queries.dashboard_summary(self.dao.list_all(), self.recent_limit)

    # ===== AI 分析 =====

    @property
    def analysis_loading(self) -> bool:
        """是否有分析请求在途"""
        return self._analysis_in_flight

    async def request_analysis(self) -> AnalysisOutcome:
        """
        请求一次 AI 分析（仅 MANAGER）

        在途期间再次调用会被拒绝。结果只读展示，不回写存储。

        Raises:
            ForbiddenError: 非 MANAGER
            AnalysisInProgressError: 已有请求在途
        """
        self._require("request_analysis")
        if self._analysis_in_flight:
            raise AnalysisInProgressError()

        self._analysis_in_flight = True
        try:
            outcome = await self.gateway.run(self.dao.list_all())
        finally:
            self._analysis_in_flight = False

        self.last_analysis = outcome
        return outcome

    async def analyze(self) -> AIAnalysisResult:
        """请求分析，只返回结果本身"""
        outcome = await self.request_analysis()
        return outcome.result


def create_controller(config=None) -> AppController:
    """
    按配置创建控制器（示例数据 + LLM 分析网关）

    Args:
        config: 全局配置，默认调用 load_config()
    """
    from uemadesk.dao import build_seed_tickets
    from uemadesk.services.analysis_gateway import LLMAnalysisGateway
    from uemadesk.services.llm_service import LLMService
    from uemadesk.utils.config import load_config

    if config is None:
        config = load_config()

    return AppController(
        dao=TicketDAO(build_seed_tickets()),
        gateway=LLMAnalysisGateway(LLMService(config)),
        redirect_delay=config.app.redirect_delay_seconds,
        max_image_bytes=config.app.max_image_bytes,
        recent_limit=config.app.recent_limit,
    )
