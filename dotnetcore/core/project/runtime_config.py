"""runtimeconfig.json / deps.json 解析

runtimeconfig 文档结构:
    {
      "runtimeOptions": {
        "framework": {"name": "Microsoft.NETCore.App", "version": "3.1.0"},
        "applyPatches": true
      }
    }

applyPatches 缺省视为 true（与 dotnet host 默认的补丁前滚行为一致）。
解析失败对需要它的解析路径是致命的，统一抛 RuntimeConfigError。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dotnetcore.core.exceptions import RuntimeConfigError
from dotnetcore.core.models import ASPNETCORE_FRAMEWORKS, RuntimeConfig

logger = logging.getLogger(__name__)


def _load_json(path: Path) -> dict[str, Any]:
    try:
        # utf-8-sig: Windows 上发布的文件常带 BOM
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except FileNotFoundError as e:
        raise RuntimeConfigError(f"文件不存在: {path}") from e
    except (OSError, ValueError) as e:
        raise RuntimeConfigError(f"JSON 解析失败: {path}: {e}") from e
    if not isinstance(data, dict):
        raise RuntimeConfigError(f"JSON 顶层不是对象: {path}")
    return data


def parse_runtime_config(path: Path) -> RuntimeConfig:
    """解析 runtimeconfig 文档为 RuntimeConfig"""
    data = _load_json(path)
    options = data.get("runtimeOptions")
    if not isinstance(options, dict):
        raise RuntimeConfigError(f"缺少 runtimeOptions: {path}")
    framework = options.get("framework")
    if not isinstance(framework, dict):
        raise RuntimeConfigError(f"缺少 runtimeOptions.framework: {path}")

    name = framework.get("name")
    version = framework.get("version")
    if not isinstance(name, str) or not isinstance(version, str):
        raise RuntimeConfigError(f"framework.name / framework.version 无效: {path}")

    apply_patches = options.get("applyPatches", True)
    if not isinstance(apply_patches, bool):
        raise RuntimeConfigError(f"runtimeOptions.applyPatches 不是布尔值: {path}")

    cfg = RuntimeConfig(
        framework_name=name,
        framework_version=version,
        apply_patches=apply_patches,
    )
    logger.debug("runtimeconfig %s: %s", path.name, cfg)
    return cfg


def aspnetcore_version_from_deps(path: Path) -> str:
    """从 deps.json 的 libraries 段读取 web 框架锁定版本

    libraries 的键形如 "Microsoft.AspNetCore.App/2.1.1"。
    """
    data = _load_json(path)
    libraries = data.get("libraries") or {}
    if not isinstance(libraries, dict):
        raise RuntimeConfigError(f"deps.json libraries 段无效: {path}")
    for key in libraries:
        name, _, version = key.partition("/")
        if name in ASPNETCORE_FRAMEWORKS and version:
            return version
    raise RuntimeConfigError(f"deps.json 中未找到 Microsoft.AspNetCore 版本: {path}")
