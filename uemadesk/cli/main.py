"""CLI 主程序

使用 Rich 库渲染工单视图，通过斜杠命令驱动控制器。

运行方式：
    python -m uemadesk cli
"""
import asyncio
from typing import Callable, Optional, Tuple

from pydantic import ValidationError
from rich.console import Console
from rich.padding import Padding
from rich.text import Text

from uemadesk.cli.rendering import TicketRenderer
from uemadesk.core.controller import (
    RESTRICTED_ESCAPE_VIEW,
    RESTRICTED_MESSAGE,
    AppController,
    create_controller,
)
from uemadesk.core.exceptions import (
    AnalysisInProgressError,
    AttachmentError,
    ForbiddenError,
)
from uemadesk.core.queries import STATUS_FILTER_ALL
from uemadesk.models import (
    Category,
    Priority,
    TicketDraft,
    TicketStatus,
    UserRole,
    View,
)
from uemadesk.utils.attachments import encode_image_file
from uemadesk.utils.config import Config, load_config


class TicketCLI:
    """工单交互式 CLI"""

    def __init__(
        self,
        config: Optional[Config] = None,
        controller: Optional[AppController] = None,
        console: Optional[Console] = None,
    ):
        """初始化基础组件"""
        self.console = console or Console()
        self.config = config or load_config()
        self.controller = controller or create_controller(self.config)
        self.renderer = TicketRenderer(self.console)

        # 列表视图的过滤条件
        self.status_filter: str = STATUS_FILTER_ALL
        self.search_term: str = ""

    def _print_indented(self, content, num_spaces: int = 2) -> None:
        """打印带缩进的 Rich 对象"""
        self.console.print(Padding(content, (0, 0, 0, num_spaces)))

    def _get_prompt(self) -> str:
        color = "blue" if self.controller.role == UserRole.MANAGER else "green"
        return f"[bold {color}]> [/bold {color}]"

    def run(self):
        """运行 CLI 主循环"""
        self.console.print()
        self.console.print(Text(self.renderer.get_logo(), style="bold blue"))
        self.console.print(Text("Sistema de Chamados de Manutenção - UEMA", style="bold blue"))
        self.console.print(Text("Comandos: /dashboard /list /new /role /analyze /help /exit", style="dim"))
        self.console.print()
        self.render_current_view()

        try:
            while True:
                try:
                    user_input = self.console.input(self._get_prompt()).strip()
                except EOFError:
                    self.console.print(Text("\nAté logo!\n", style="blue"))
                    break

                if not user_input:
                    self.render_current_view()
                    continue

                if self.handle_command(user_input):
                    break

        except KeyboardInterrupt:
            self.console.print(Text("\nAté logo!\n", style="blue"))

    # ===== 视图 =====

    def render_current_view(self) -> None:
        """渲染当前视图"""
        view = self.controller.current_view
        self.console.print(self.renderer.render_header(self.controller.role, view))
        self.console.print()

        if view == View.DASHBOARD:
            try:
                summary = self.controller.view_dashboard()
            except ForbiddenError:
                self._print_indented(self.renderer.render_restricted(RESTRICTED_MESSAGE))
                return
            self._print_indented(self.renderer.render_dashboard(
                summary, loading=self.controller.analysis_loading
            ))
            if self.controller.last_analysis is not None:
                self.console.print()
                self._print_indented(self.renderer.render_analysis(self.controller.last_analysis))
        elif view == View.LIST:
            tickets = self.controller.list_tickets(self.status_filter, self.search_term)
            self._print_indented(self.renderer.render_ticket_list(
                tickets, self.controller.role, self.status_filter, self.search_term
            ))
        else:
            self._print_indented(Text("Digite /new para preencher o formulário.", style="dim"))

    # ===== 命令 =====

    def handle_command(self, user_input: str) -> bool:
        """处理命令，返回 True 表示退出"""
        if not user_input.startswith("/"):
            self.console.print(Text("Comando desconhecido. Digite /help.", style="red"))
            return False

        command, _, arg = user_input.partition(" ")
        command = command.lower()
        arg = arg.strip()

        try:
            return self._dispatch(command, arg)
        except ForbiddenError:
            self.console.print(Text("Ação permitida somente para gestores.", style="red"))
        except (ValueError, AttachmentError) as e:
            self.console.print(Text(f"Erro: {e}", style="red"))
        return False

    def _dispatch(self, command: str, arg: str) -> bool:
        if command == "/exit":
            self.console.print(Text("Até logo!", style="blue"))
            return True

        if command == "/help":
            self.console.print(self.renderer.render_help())
        elif command == "/dashboard":
            self.controller.set_view(View.DASHBOARD)
            self.render_current_view()
        elif command == "/list":
            self.controller.set_view(RESTRICTED_ESCAPE_VIEW)
            self.render_current_view()
        elif command == "/new":
            self.controller.set_view(View.NEW)
            self._fill_ticket_form()
        elif command == "/role":
            self.controller.set_role(UserRole(arg.lower()))
            self.render_current_view()
        elif command == "/filter":
            self.status_filter = STATUS_FILTER_ALL if arg in ("", STATUS_FILTER_ALL) else TicketStatus(arg).value
            self.controller.set_view(View.LIST)
            self.render_current_view()
        elif command == "/search":
            self.search_term = arg
            self.controller.set_view(View.LIST)
            self.render_current_view()
        elif command == "/start":
            self._set_status(arg, TicketStatus.IN_PROGRESS)
        elif command == "/done":
            self._set_status(arg, TicketStatus.DONE)
        elif command == "/status":
            ticket_id, _, status = arg.partition(" ")
            self._set_status(ticket_id, TicketStatus(status.strip()))
        elif command == "/analyze":
            self._run_analysis()
        else:
            text = Text()
            text.append(f"Comando desconhecido: {command}", style="red")
            text.append(", digite /help para ver os comandos")
            self.console.print(text)
        return False

    def _set_status(self, ticket_id: str, status: TicketStatus) -> None:
        ticket = self.controller.set_status(ticket_id, status)
        if ticket is None:
            self.console.print(Text(f"Chamado #{ticket_id} não encontrado.", style="yellow"))
            return
        self.console.print(Text(f"#{ticket.id} → {ticket.status.label}", style="green"))

    def _run_analysis(self) -> None:
        self._print_indented(Text("Analisando dados com IA...", style="dim"))
        try:
            outcome = asyncio.run(self.controller.request_analysis())
        except AnalysisInProgressError as e:
            self.console.print(Text(str(e), style="yellow"))
            return
        self.console.print()
        self._print_indented(self.renderer.render_analysis(outcome))

    # ===== 表单 =====

    def _ask(self, label: str, required: bool = True) -> str:
        """读取一个字段，必填字段为空时重复提示"""
        while True:
            value = self.console.input(f"[bold]{label}[/bold]: ").strip()
            if value or not required:
                return value
            self.console.print(Text("Campo obrigatório.", style="red"))

    def _choose(self, title: str, options: list, label: Callable) -> Tuple[int, object]:
        """编号选择，直接回车选择第一个"""
        self.console.print(self.renderer.render_choices(title, [label(o) for o in options]))
        while True:
            raw = self.console.input("[bold]Opção[/bold] [dim](1)[/dim]: ").strip() or "1"
            if raw.isdigit() and 1 <= int(raw) <= len(options):
                index = int(raw) - 1
                return index, options[index]
            self.console.print(Text("Opção inválida.", style="red"))

    def _fill_ticket_form(self) -> None:
        """填写并提交工单表单"""
        self.console.print(Text("Novo Chamado", style="bold"))
        title = self._ask("Título do problema")
        _, category = self._choose("Categoria", list(Category), lambda c: c.label)
        _, campus = self._choose("Campus", self.config.app.campuses, str)
        building = self._ask("Prédio")
        room = self._ask("Sala")
        description = self._ask("Descrição detalhada")
        _, priority = self._choose("Prioridade", list(Priority), lambda p: p.label)
        requester_name = self._ask("Seu nome")
        image_path = self._ask("Foto do problema (caminho, opcional)", required=False)

        try:
            image_url = (
                encode_image_file(image_path, self.config.app.max_image_bytes)
                if image_path else None
            )
            draft = TicketDraft(
                title=title,
                category=category,
                priority=priority,
                campus=campus,
                building=building,
                room=room,
                description=description,
                requester_name=requester_name,
                image_url=image_url,
            )
        except (ValidationError, AttachmentError) as e:
            self.console.print(Text(f"Chamado não enviado: {e}", style="red"))
            return

        ticket = self.controller.create_ticket(draft)
        self.console.print()
        self._print_indented(self.renderer.render_created(
            ticket, self.config.app.redirect_delay_seconds
        ))
