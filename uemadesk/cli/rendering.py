"""共享渲染逻辑

CLI 与一次性分析命令共用的渲染逻辑。
所有方法返回 Rich 可渲染对象，由调用方决定如何输出。
"""
from typing import Dict, List

from rich.box import SIMPLE
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from uemadesk.core.queries import DashboardSummary
from uemadesk.models import (
    AnalysisOutcome,
    Priority,
    Ticket,
    TicketStatus,
    UserRole,
    View,
)


STATUS_STYLES = {
    TicketStatus.OPEN: "bold red",
    TicketStatus.IN_PROGRESS: "bold yellow",
    TicketStatus.DONE: "bold green",
    TicketStatus.DELAYED: "bold bright_black",
}

PRIORITY_STYLES = {
    Priority.LOW: "green",
    Priority.MEDIUM: "yellow",
    Priority.HIGH: "red",
    Priority.CRITICAL: "bold red",
}

BAR_COLORS = ["blue", "green", "yellow", "red", "magenta"]

VIEW_TITLES = {
    View.DASHBOARD: "Painel de Gestão",
    View.LIST: "Meus Chamados",
    View.NEW: "Novo Chamado",
}


class TicketRenderer:
    """工单视图渲染器"""

    LOGO = """
██╗   ██╗███████╗███╗   ███╗ █████╗ ██████╗ ███████╗███████╗██╗  ██╗
██║   ██║██╔════╝████╗ ████║██╔══██╗██╔══██╗██╔════╝██╔════╝██║ ██╔╝
██║   ██║█████╗  ██╔████╔██║███████║██║  ██║█████╗  ███████╗█████╔╝
██║   ██║██╔══╝  ██║╚██╔╝██║██╔══██║██║  ██║██╔══╝  ╚════██║██╔═██╗
╚██████╔╝███████╗██║ ╚═╝ ██║██║  ██║██████╔╝███████╗███████║██║  ██╗
 ╚═════╝ ╚══════╝╚═╝     ╚═╝╚═╝  ╚═╝╚═════╝ ╚══════╝╚══════╝╚═╝  ╚═╝
"""

    BAR_WIDTH = 30

    def __init__(self, console: Console = None):
        """初始化渲染器

        Args:
            console: Rich Console 实例
        """
        self.console = console or Console()

    def get_logo(self) -> str:
        return self.LOGO.strip()

    # ===== 顶部状态 =====

    def render_header(self, role: UserRole, view: View) -> Text:
        """渲染当前角色和视图"""
        text = Text()
        text.append("Perfil ", style="dim")
        text.append(role.label, style="bold cyan")
        text.append("  │  ", style="dim")
        text.append(VIEW_TITLES[view], style="bold")
        return text

    # ===== 仪表盘 =====

    def render_dashboard(self, summary: DashboardSummary, loading: bool = False) -> Group:
        """渲染仪表盘：KPI、类别柱状图、状态分布、最近工单"""
        parts = [self._render_kpis(summary), Text("")]
        parts.append(Text("Chamados por Categoria", style="bold"))
        parts.append(self._render_bars(
            {c.short_label: n for c, n in summary.by_category.items()}
        ))
        parts.append(Text(""))
        parts.append(Text("Distribuição por Status", style="bold"))
        parts.append(self._render_status_breakdown(summary.by_status))
        parts.append(Text(""))
        parts.append(Text("Chamados Recentes", style="bold"))
        parts.append(self._render_recent_table(summary.recent))
        if loading:
            parts.append(Text("Analisando dados com IA...", style="dim italic"))
        return Group(*parts)

    def _render_kpis(self, summary: DashboardSummary) -> Text:
        kpis = summary.kpis
        text = Text()
        text.append("Total ", style="dim")
        text.append(str(kpis.total), style="bold")
        text.append("  │  ", style="dim")
        text.append("Abertos ", style="dim")
        text.append(str(kpis.open), style="bold red")
        text.append("  │  ", style="dim")
        text.append("Alta/Crítica ", style="dim")
        text.append(str(kpis.high_priority_or_above), style="bold yellow")
        text.append("  │  ", style="dim")
        text.append("Concluídos ", style="dim")
        text.append(str(kpis.done), style="bold green")
        return text

    def _render_bars(self, counts: Dict[str, int]) -> Group:
        """横向柱状图"""
        if not counts:
            return Group(Text("Sem dados", style="dim"))
        peak = max(counts.values()) or 1
        label_width = max(len(label) for label in counts)
        lines = []
        for i, (label, value) in enumerate(counts.items()):
            filled = max(1, round(self.BAR_WIDTH * value / peak)) if value else 0
            line = Text()
            line.append(label.ljust(label_width) + " ", style="dim")
            line.append("█" * filled, style=BAR_COLORS[i % len(BAR_COLORS)])
            line.append(f" {value}", style="bold")
            lines.append(line)
        return Group(*lines)

    def _render_status_breakdown(self, by_status: Dict[TicketStatus, int]) -> Text:
        text = Text()
        for i, (status, count) in enumerate(by_status.items()):
            if i:
                text.append("  │  ", style="dim")
            text.append(f"{status.label} ", style="dim")
            text.append(str(count), style=STATUS_STYLES[status])
        return text

    def _render_recent_table(self, tickets: List[Ticket]) -> Table:
        table = Table(box=SIMPLE, show_edge=False, pad_edge=False)
        table.add_column("ID", style="dim")
        table.add_column("Título")
        table.add_column("Local")
        table.add_column("Status")
        table.add_column("Prioridade")
        for t in tickets:
            table.add_row(
                t.id,
                t.title,
                t.building,
                Text(t.status.label, style=STATUS_STYLES[t.status]),
                Text(t.priority.label, style=PRIORITY_STYLES[t.priority]),
            )
        return table

    def render_restricted(self, message: str) -> Panel:
        """无权访问仪表盘时的占位提示"""
        body = Text()
        body.append(message + "\n\n")
        body.append("Digite ", style="dim")
        body.append("/list", style="bold blue underline")
        body.append(" para ir para meus chamados.", style="dim")
        return Panel(body, title="Acesso restrito", border_style="yellow")

    # ===== 工单列表 =====

    def render_ticket_list(
        self,
        tickets: List[Ticket],
        role: UserRole,
        status_filter: str = "all",
        search_term: str = "",
    ) -> Group:
        """渲染工单列表

        MANAGER 会看到每个工单可执行的操作提示。
        """
        header = Text()
        header.append("Filtro ", style="dim")
        header.append(
            "Todos os Status" if status_filter == "all" else TicketStatus(status_filter).label,
            style="bold",
        )
        if search_term:
            header.append("  │  ", style="dim")
            header.append("Busca ", style="dim")
            header.append(search_term, style="bold")

        if not tickets:
            return Group(header, Text(""), Text(
                "Nenhum chamado encontrado com os critérios atuais.", style="dim"
            ))

        parts = [header, Text("")]
        for ticket in tickets:
            parts.append(self.render_ticket(ticket, show_actions=role == UserRole.MANAGER))
        return Group(*parts)

    def render_ticket(self, ticket: Ticket, show_actions: bool = False) -> Panel:
        """渲染单个工单卡片"""
        body = Text()
        body.append(f"{ticket.category.label}", style="dim")
        body.append("  ")
        body.append(ticket.status.label, style=STATUS_STYLES[ticket.status])
        body.append("  ")
        body.append(f"▲ {ticket.priority.label}", style=PRIORITY_STYLES[ticket.priority])
        body.append("\n\n")
        body.append(ticket.description + "\n\n")
        body.append("📍 " + ticket.location + "\n", style="dim")
        body.append("📅 " + ticket.created_at.strftime("%d/%m/%Y") + "\n", style="dim")
        body.append("👤 " + ticket.requester_name, style="dim")
        if ticket.image_url:
            body.append("\n🖼  imagem anexada", style="dim")

        actions = self._ticket_actions(ticket) if show_actions else []
        if actions:
            body.append("\n\n")
            body.append("  ".join(actions), style="bold blue")

        return Panel(
            body,
            title=f"[bold]{ticket.title}[/bold]",
            subtitle=f"#{ticket.id}",
            border_style=STATUS_STYLES[ticket.status].replace("bold ", ""),
        )

    def _ticket_actions(self, ticket: Ticket) -> List[str]:
        """界面提供的状态操作：未处理可开始，未完成可完成"""
        actions = []
        if ticket.status not in (TicketStatus.IN_PROGRESS, TicketStatus.DONE):
            actions.append(f"/start {ticket.id}")
        if ticket.status != TicketStatus.DONE:
            actions.append(f"/done {ticket.id}")
        return actions

    # ===== 新建工单 =====

    def render_choices(self, title: str, labels: List[str]) -> Group:
        """渲染编号选项"""
        parts = [Text(title, style="bold")]
        for i, label in enumerate(labels, 1):
            line = Text()
            line.append(f"  {i}. ", style="dim")
            line.append(label)
            parts.append(line)
        return Group(*parts)

    def render_created(self, ticket: Ticket, redirect_delay: float) -> Panel:
        body = Text()
        body.append("Chamado registrado com sucesso!\n", style="bold green")
        body.append(f"Protocolo: #{ticket.id}\n")
        body.append(
            f"Você será levado à lista de chamados em {redirect_delay:g}s.",
            style="dim",
        )
        return Panel(body, border_style="green")

    # ===== AI 分析 =====

    def render_analysis(self, outcome: AnalysisOutcome) -> Group:
        """渲染 AI 分析结果"""
        result = outcome.result
        parts = []

        summary_style = "yellow" if outcome.degraded else "default"
        parts.append(Panel(
            Text(result.summary, style=summary_style),
            title="Resumo Técnico (IA)",
            border_style="magenta",
        ))

        parts.append(self._render_bullets("Pontos Críticos (Hotspots)", result.hotspots))
        parts.append(self._render_bullets("Ações Preventivas", result.preventive_actions))

        trends = Text()
        trends.append("Tendências: ", style="bold")
        trends.append(result.trends)
        parts.append(trends)

        for solution in result.specific_solutions:
            body = Text()
            body.append("Diagnóstico: ", style="bold")
            body.append(solution.diagnostic + "\n")
            for i, step in enumerate(solution.step_by_step, 1):
                body.append(f"\n  {i}. ", style="dim")
                body.append(step)
            parts.append(Panel(
                body,
                title=f"{solution.ticket_title} (#{solution.ticket_id})",
                border_style="blue",
            ))

        return Group(*parts)

    def _render_bullets(self, title: str, items: List[str]) -> Group:
        parts = [Text(title, style="bold")]
        if not items:
            parts.append(Text("  —", style="dim"))
        for item in items:
            parts.append(Text(f"  • {item}"))
        parts.append(Text(""))
        return Group(*parts)

    # ===== 帮助 =====

    def render_help(self) -> Panel:
        """渲染帮助信息"""
        rows = [
            ("/dashboard", "Painel de gestão (somente gestor)"),
            ("/list", "Lista de chamados"),
            ("/new", "Abrir novo chamado"),
            ("/role manager|requester", "Trocar perfil"),
            ("/filter <status>|all", "Filtrar por status"),
            ("/search [termo]", "Buscar por título, prédio ou ID"),
            ("/start <id>", "Iniciar atendimento (gestor)"),
            ("/done <id>", "Concluir chamado (gestor)"),
            ("/status <id> <status>", "Definir status (gestor)"),
            ("/analyze", "Gerar análise com IA (gestor)"),
            ("/help", "Mostrar esta ajuda"),
            ("/exit", "Sair"),
        ]
        table = Table(box=SIMPLE, show_header=False, pad_edge=False)
        table.add_column(style="bold blue")
        table.add_column()
        for command, description in rows:
            table.add_row(command, description)

        statuses = ", ".join(s.value for s in TicketStatus)
        footer = Text(f"Status: {statuses}", style="dim")
        return Panel(Group(table, footer), title="Comandos", border_style="blue")
