"""API 共享依赖

进程内唯一的控制器实例（与单页应用的会话语义一致），延迟创建。
"""
from typing import Optional

from uemadesk.core.controller import AppController, create_controller

_controller: Optional[AppController] = None


def get_controller() -> AppController:
    """获取控制器单例"""
    global _controller
    if _controller is None:
        _controller = create_controller()
    return _controller


def reset_controller() -> None:
    """丢弃当前控制器（下次访问重新加载示例数据）"""
    global _controller
    _controller = None
