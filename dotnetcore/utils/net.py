"""网络工具: 依赖下载地址校验"""

from __future__ import annotations

from urllib.parse import urlparse

from dotnetcore.core.exceptions import InstallationError

# file:// 用于离线（cached）buildpack 随包携带的依赖
_ALLOWED_SCHEMES = frozenset(("http", "https", "file"))


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https/file

    Raises:
        InstallationError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise InstallationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https/file: {url}"
        )
