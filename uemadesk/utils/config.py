"""配置加载模块"""
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field


# Gemini 的 OpenAI 兼容端点
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-2.5-flash"

# 依次读取的 API Key 环境变量
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


def api_key_from_env() -> str:
    """从环境变量读取 API Key，未设置时返回空字符串

    缺少 Key 不阻止启动，调用时失败并由分析网关兜底。
    """
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return ""


class LLMConfig(BaseModel):
    """LLM 配置"""
    api_base: str = DEFAULT_API_BASE
    api_key: str = Field(default_factory=api_key_from_env)
    model: str = DEFAULT_MODEL
    temperature: float = 0.2
    max_tokens: int = 8192
    timeout: float = 60.0  # 秒
    system_prompt: str = ""


class WebConfig(BaseModel):
    """Web 服务配置"""
    host: str = "127.0.0.1"
    port: int = 8000


class AppConfig(BaseModel):
    """应用行为配置"""
    # 创建工单后跳转到列表前的等待时间
    redirect_delay_seconds: float = 2.0
    # 图片附件大小上限
    max_image_bytes: int = 5 * 1024 * 1024
    # 仪表盘最近工单数量
    recent_limit: int = 5
    campuses: List[str] = [
        "Campus Paulo VI",
        "Campus CCT",
        "Campus CCSA",
        "Campus Centro Histórico",
    ]


class Config(BaseModel):
    """全局配置"""
    llm: LLMConfig = Field(default_factory=LLMConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    app: AppConfig = Field(default_factory=AppConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """
    加载配置文件

    Args:
        config_path: 配置文件路径，默认按以下顺序查找：
                     1. 环境变量 CONFIG_PATH
                     2. 项目根目录的 config.yaml
                     显式指定（参数或环境变量）的文件不存在时报错；
                     默认位置不存在时使用内置默认值。

    Returns:
        Config: 配置对象
    """
    explicit = True
    if config_path is None:
        # 优先从环境变量读取
        config_path = os.environ.get("CONFIG_PATH")

    if config_path is None:
        # 默认使用项目根目录的 config.yaml
        explicit = False
        project_root = Path(__file__).parent.parent.parent
        config_path = project_root / "config.yaml"

    config_path = Path(config_path)

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(
                f"配置文件不存在: {config_path}\n"
                f"请复制 config.yaml.example 并修改为 config.yaml"
            )
        return Config()

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    config = Config(**config_dict)
    # 配置文件未填写 Key 时回退到环境变量
    if not config.llm.api_key:
        config.llm.api_key = api_key_from_env()
    return config
