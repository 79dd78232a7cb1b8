"""部署类型判定

判定依据:
  - 构建目录根下存在 *.runtimeconfig.json → 已发布产物 → FDD
  - 否则存在 *.csproj / *.fsproj / *.vbproj → 源码 → SOURCE
  - 两者皆无 → ClassificationError

无副作用，只读文件系统。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotnetcore.core.exceptions import ClassificationError
from dotnetcore.core.models import DeploymentType

logger = logging.getLogger(__name__)

PROJ_SUFFIXES = (".csproj", ".fsproj", ".vbproj")
RUNTIME_CONFIG_SUFFIX = ".runtimeconfig.json"

# 查找项目文件时跳过的目录
_SKIP_DIRS = {"node_modules", ".cloudfoundry"}


def find_runtime_config(build_dir: Path) -> Path | None:
    """构建目录根下唯一的 *.runtimeconfig.json，不存在返回 None"""
    found = sorted(build_dir.glob(f"*{RUNTIME_CONFIG_SUFFIX}"))
    if len(found) > 1:
        names = ", ".join(p.name for p in found)
        raise ClassificationError(f"存在多个 runtimeconfig 文件: {names}")
    return found[0] if found else None


def find_proj_files(build_dir: Path) -> list[Path]:
    """递归查找项目文件，结果按路径排序"""
    results: list[Path] = []
    for root, dirs, files in os.walk(build_dir):
        dirs[:] = [d for d in dirs if d not in _SKIP_DIRS]
        for name in files:
            if name.endswith(PROJ_SUFFIXES):
                results.append(Path(root) / name)
    return sorted(results)


def classify(build_dir: Path) -> DeploymentType:
    """判定部署类型"""
    if find_runtime_config(build_dir) is not None:
        logger.debug("检测到 runtimeconfig，部署类型: FDD")
        return DeploymentType.FDD
    if find_proj_files(build_dir):
        logger.debug("检测到项目文件，部署类型: SOURCE")
        return DeploymentType.SOURCE
    raise ClassificationError(
        f"无法识别的项目结构: {build_dir} 下既没有 *{RUNTIME_CONFIG_SUFFIX}，"
        f"也没有 {' / '.join('*' + s for s in PROJ_SUFFIXES)} 项目文件"
    )
