"""图片附件处理

用户选择的图片转换为内联 Base64 data URI，直接保存在工单上。
"""
import base64
import mimetypes
import re
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

from uemadesk.core.exceptions import AttachmentError


DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)

# 允许原样保存的外部图片地址协议
ALLOWED_URL_SCHEMES = ("http", "https")


def encode_image_bytes(data: bytes, mime_type: str, max_bytes: int) -> str:
    """
    将图片字节编码为 data URI

    Args:
        data: 图片内容
        mime_type: MIME 类型，必须为 image/*
        max_bytes: 大小上限

    Returns:
        data URI 字符串

    Raises:
        AttachmentError: 类型不是图片或超过大小上限
    """
    if not mime_type or not mime_type.startswith("image/"):
        raise AttachmentError(f"Tipo de arquivo não suportado: {mime_type or 'desconhecido'}")
    if len(data) > max_bytes:
        raise AttachmentError(
            f"Imagem muito grande: {len(data)} bytes (limite {max_bytes} bytes)"
        )
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def encode_image_file(path: Union[str, Path], max_bytes: int) -> str:
    """读取图片文件并编码为 data URI"""
    path = Path(path)
    if not path.is_file():
        raise AttachmentError(f"Arquivo não encontrado: {path}")
    mime_type, _ = mimetypes.guess_type(path.name)
    if path.stat().st_size > max_bytes:
        raise AttachmentError(
            f"Imagem muito grande: {path.stat().st_size} bytes (limite {max_bytes} bytes)"
        )
    return encode_image_bytes(path.read_bytes(), mime_type, max_bytes)


def validate_image_url(image_url: Optional[str], max_bytes: int) -> Optional[str]:
    """
    校验工单上的图片引用

    只接受 http(s) 地址和 data URI；data URI 需为 image/* 且解码后不超过上限。

    Raises:
        AttachmentError: 其他协议、格式错误或不合法的内联图片
    """
    if not image_url:
        return None
    match = DATA_URI_PATTERN.match(image_url)
    if match is None:
        if image_url.startswith("data:"):
            raise AttachmentError("data URI inválida")
        parsed = urlparse(image_url)
        if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES or not parsed.netloc:
            raise AttachmentError(f"Endereço de imagem não suportado: {image_url[:40]}")
        return image_url

    mime_type = match.group("mime")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except ValueError as e:
        raise AttachmentError(f"Conteúdo Base64 inválido: {e}") from e
    encode_image_bytes(data, mime_type, max_bytes)
    return image_url
