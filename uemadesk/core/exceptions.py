"""异常定义

- UemadeskError: 所有业务异常的基类
- ForbiddenError: 当前角色无权执行该操作
- AnalysisInProgressError: 已有分析请求在执行中
- AttachmentError: 图片附件不合法（类型或大小）
"""
from typing import Iterable


class UemadeskError(Exception):
    """业务异常基类"""

    pass


class ForbiddenError(UemadeskError):
    """角色无权执行操作

    Attributes:
        operation: 被拒绝的操作名
        role: 发起操作的角色
        allowed: 允许执行该操作的角色
    """

    def __init__(self, operation: str, role, allowed: Iterable = ()):
        self.operation = operation
        self.role = role
        self.allowed = tuple(allowed)
        allowed_text = ", ".join(r.value for r in self.allowed) or "-"
        super().__init__(
            f"forbidden: '{operation}' não permitido para o perfil "
            f"'{role.value}' (permitido: {allowed_text})"
        )


class AnalysisInProgressError(UemadeskError):
    """分析请求正在进行中，拒绝并发请求"""

    def __init__(self, message: str = "Já existe uma análise em andamento."):
        super().__init__(message)


class AttachmentError(UemadeskError):
    """图片附件错误"""

    pass
