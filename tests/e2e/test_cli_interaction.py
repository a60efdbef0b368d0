"""CLI 端到端测试

模拟用户输入，驱动 CLI 完成典型操作流程
"""
import io
import sys
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.console import Console

# 添加项目根目录到 Python 路径
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from uemadesk.cli.main import TicketCLI
from uemadesk.core.controller import AppController
from uemadesk.dao import TicketDAO, build_seed_tickets
from uemadesk.models import AnalysisOutcome, TicketStatus, UserRole, View
from uemadesk.services.analysis_gateway import AnalysisGateway, fallback_result
from uemadesk.utils.config import Config


class OfflineGateway(AnalysisGateway):
    """模拟远端不可用"""

    async def run(self, tickets):
        return AnalysisOutcome(status="degraded", result=fallback_result(), cause="offline")


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 3, 10, 14, 30)

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cli(clock):
    controller = AppController(
        TicketDAO(build_seed_tickets(clock.now), clock=clock),
        OfflineGateway(),
        clock=clock,
    )
    console = Console(file=io.StringIO(), width=120, color_system=None)
    return TicketCLI(config=Config(), controller=controller, console=console)


def run_inputs(cli: TicketCLI, inputs) -> str:
    """依次输入命令并返回全部输出"""
    with patch.object(cli.console, "input", side_effect=list(inputs)):
        cli.run()
    return cli.console.file.getvalue()


def test_cli_help_command(cli):
    """测试 /help 命令"""
    output = run_inputs(cli, ["/help", "/exit"])

    assert "Sistema de Chamados de Manutenção" in output
    assert "/status" in output
    assert "Até logo!" in output


def test_cli_starts_on_dashboard(cli):
    """测试启动时显示仪表盘"""
    output = run_inputs(cli, ["/exit"])

    assert "Painel de Gestão" in output
    assert "Total 5" in output


def test_cli_eof_exits(cli):
    """测试输入结束时退出"""
    with patch.object(cli.console, "input", side_effect=EOFError):
        cli.run()
    assert "Até logo!" in cli.console.file.getvalue()


def test_cli_requester_restrictions(cli):
    """测试 requester 无法访问仪表盘和修改状态"""
    target = cli.controller.list_tickets()[0]
    output = run_inputs(cli, [
        "/role requester",
        "/dashboard",
        f"/done {target.id}",
        "/exit",
    ])

    assert "Acesso restrito a gestores" in output
    assert "Ação permitida somente para gestores." in output
    assert cli.controller.get_ticket(target.id).status == TicketStatus.OPEN


def test_cli_manager_updates_status(cli):
    """测试 manager 通过命令修改状态"""
    target = cli.controller.list_tickets()[0]
    output = run_inputs(cli, [
        f"/start {target.id}",
        f"/status {target.id} delayed",
        "/status missing done",
        "/exit",
    ])

    assert "Em Atendimento" in output
    assert "Chamado #missing não encontrado." in output
    assert cli.controller.get_ticket(target.id).status == TicketStatus.DELAYED


def test_cli_filter_and_search(cli):
    """测试过滤和搜索"""
    output = run_inputs(cli, ["/filter done", "/search reitoria", "/filter xyz", "/exit"])

    assert cli.controller.current_view == View.LIST
    assert "Limpeza Preventiva AC" in output
    assert "Erro:" in output
    assert cli.status_filter == "done"
    assert cli.search_term == "reitoria"


def test_cli_create_ticket(cli, clock):
    """测试填写表单创建工单，延迟后跳转到列表"""
    output = run_inputs(cli, [
        "/new",
        "Porta emperrada",   # 标题
        "6",                 # 类别: Outros
        "",                  # 园区: 默认第一个
        "Reitoria",          # 楼宇
        "",                  # 房间为空，重复提示
        "Recepção",          # 房间
        "A porta principal não fecha.",
        "9",                 # 无效选项
        "2",                 # 优先级: Média
        "Recepcionista",
        "",                  # 不上传图片
        "/exit",
    ])

    assert "Chamado registrado com sucesso!" in output
    assert "Campo obrigatório." in output
    assert "Opção inválida." in output

    ticket = cli.controller.list_tickets()[0]
    assert ticket.title == "Porta emperrada"
    assert ticket.campus == "Campus Paulo VI"
    assert ticket.status == TicketStatus.OPEN
    assert cli.controller.current_view == View.NEW

    clock.now += timedelta(seconds=2)
    assert cli.controller.current_view == View.LIST


def test_cli_analysis_fallback(cli):
    """测试远端不可用时显示兜底分析"""
    output = run_inputs(cli, ["/analyze", "/exit"])

    assert "Não foi possível gerar a análise técnica" in output
    assert cli.controller.last_analysis.degraded


def test_cli_unknown_commands(cli):
    """测试未知输入"""
    output = run_inputs(cli, ["olá", "/foo", "/role admin", "/exit"])

    assert "Comando desconhecido. Digite /help." in output
    assert "Comando desconhecido: /foo" in output
    assert cli.controller.role == UserRole.MANAGER


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
