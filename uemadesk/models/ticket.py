"""工单数据模型

定义工单本身、工单草稿以及状态/优先级/类别枚举。
枚举值使用小写代码（用于 API/CLI），label 为界面展示的葡萄牙语文本。
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TicketStatus(str, Enum):
    """工单状态"""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    DELAYED = "delayed"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


class Priority(str, Enum):
    """优先级（有序：LOW < MEDIUM < HIGH < CRITICAL）"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def label(self) -> str:
        return _PRIORITY_LABELS[self]

    @property
    def rank(self) -> int:
        """排序权重，数值越大越紧急"""
        return _PRIORITY_ORDER.index(self)

    def at_least(self, other: "Priority") -> bool:
        return self.rank >= other.rank


class Category(str, Enum):
    """服务类别"""

    AC_REPAIR = "ac_repair"
    AC_CLEANING = "ac_cleaning"
    HYDRAULIC = "hydraulic"
    REFORM = "reform"
    ELECTRICAL = "electrical"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]

    @property
    def short_label(self) -> str:
        """图表用短标签（去掉重复前缀）"""
        return self.label.replace("Manutenção ", "").replace("Limpeza ", "")


_STATUS_LABELS = {
    TicketStatus.OPEN: "Aberto",
    TicketStatus.IN_PROGRESS: "Em Atendimento",
    TicketStatus.DONE: "Concluído",
    TicketStatus.DELAYED: "Atrasado",
}

_PRIORITY_ORDER = [Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.CRITICAL]

_PRIORITY_LABELS = {
    Priority.LOW: "Baixa",
    Priority.MEDIUM: "Média",
    Priority.HIGH: "Alta",
    Priority.CRITICAL: "Crítica",
}

_CATEGORY_LABELS = {
    Category.AC_REPAIR: "Manutenção Ar-condicionado",
    Category.AC_CLEANING: "Limpeza Ar-condicionado",
    Category.HYDRAULIC: "Hidráulica/Banheiros",
    Category.REFORM: "Reforma Civil",
    Category.ELECTRICAL: "Elétrica",
    Category.OTHER: "Outros",
}


class TicketDraft(BaseModel):
    """工单草稿（表单提交内容）

    所有文本字段必填且不能为空白，校验在输入层完成。
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    category: Category
    priority: Priority
    campus: str = Field(min_length=1)
    building: str = Field(min_length=1)
    room: str = Field(min_length=1)
    description: str = Field(min_length=1)
    requester_name: str = Field(min_length=1)
    image_url: Optional[str] = None


class Ticket(BaseModel):
    """工单

    Attributes:
        id: 工单 ID（会话内唯一）
        created_at: 创建时间，创建后不可变
        updated_at: 最近一次状态变更时间
        completed_at: 变更为 DONE 的时间，之后不会被清除
        image_url: 图片 URI 或内联 Base64 data URI
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    title: str
    description: str
    category: Category
    priority: Priority
    status: TicketStatus
    campus: str
    building: str
    room: str
    requester_name: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    image_url: Optional[str] = None

    @property
    def location(self) -> str:
        """展示用位置：园区 - 楼宇, 房间"""
        return f"{self.campus} - {self.building}, {self.room}"

    @property
    def is_high_priority(self) -> bool:
        return self.priority.at_least(Priority.HIGH)
