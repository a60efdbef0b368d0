"""uemadesk 命令行入口

使用方式：
    python -m uemadesk cli        # 启动交互式 CLI
    python -m uemadesk api        # 启动 FastAPI 服务
    python -m uemadesk analyze    # 对示例工单执行一次 AI 分析
"""
import sys

import click


def _load_config_or_exit(config_path):
    """加载配置，显式指定的文件不存在时终止启动"""
    from uemadesk.utils.config import load_config

    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)


@click.group()
def main():
    """UEMA 设施维修工单系统"""
    pass


@main.command("cli")
@click.option(
    "--config",
    default=None,
    help="配置文件路径（默认: config.yaml）",
)
def interactive_cli(config: str):
    """启动交互式命令行（推荐）"""
    from uemadesk.cli.main import TicketCLI

    TicketCLI(config=_load_config_or_exit(config)).run()


@main.command("api")
@click.option(
    "--host",
    default=None,
    help="服务监听地址（默认取配置 web.host）",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="服务监听端口（默认取配置 web.port）",
)
@click.option(
    "--config",
    default=None,
    help="配置文件路径（默认: config.yaml）",
)
def serve(host: str, port: int, config: str):
    """启动 FastAPI 服务"""
    import os
    import uvicorn

    app_config = _load_config_or_exit(config)
    if config:
        # API 进程内的控制器通过 load_config() 读取同一文件
        os.environ["CONFIG_PATH"] = config
    host = host or app_config.web.host
    port = port or app_config.web.port

    from uemadesk.api.main import app

    click.echo(f"正在启动服务: http://{host}:{port}")
    click.echo(f"API 文档: http://{host}:{port}/docs")
    uvicorn.run(app, host=host, port=port)


@main.command("analyze")
@click.option(
    "--config",
    default=None,
    help="配置文件路径（默认: config.yaml）",
)
def analyze(config: str):
    """对内置示例工单执行一次 AI 分析并输出结果"""
    import asyncio

    from rich.console import Console

    from uemadesk.cli.rendering import TicketRenderer
    from uemadesk.core.controller import create_controller

    controller = create_controller(_load_config_or_exit(config))
    console = Console()
    console.print("[dim]Analisando dados com IA...[/dim]")
    outcome = asyncio.run(controller.request_analysis())
    console.print(TicketRenderer(console).render_analysis(outcome))
    if outcome.degraded:
        click.echo(f"\n[WARN] 分析降级: {outcome.cause}", err=True)


if __name__ == "__main__":
    main()
