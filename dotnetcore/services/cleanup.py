"""暂存目录清理

删除发布后不再需要的目录（NuGet 缓存、npm 缓存等），
并移除 bin/ lib/ 下指向已删除目录的符号链接。

候选目录:
  - 固定: nuget .nuget .local .cache .config .npm
  - 启动命令不是 .dll 时（自包含可执行文件）追加 dotnet-sdk
  - 未开启 INSTALL_NODE 时追加 node

不存在的候选目录直接跳过，因此重复清理是空操作。
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

BASE_DIRS = ("nuget", ".nuget", ".local", ".cache", ".config", ".npm")
LINK_DIRS = ("bin", "lib")


def dirs_to_remove(start_command: str, install_node: bool) -> list[str]:
    """计算本次要删除的候选目录"""
    dirs = list(BASE_DIRS)
    if not start_command.endswith(".dll"):
        dirs.append("dotnet-sdk")
    if not install_node:
        dirs.append("node")
    return dirs


class StagingCleaner:
    """清理 DEP_DIR 中的候选目录"""

    def __init__(self, dep_dir: str | Path) -> None:
        self.dep_dir = Path(dep_dir)

    def clean(self, candidates: list[str]) -> list[str]:
        """删除存在的候选目录，返回实际删除的目录名"""
        removed: list[str] = []
        for name in candidates:
            path = self.dep_dir / name
            if not os.path.lexists(path):
                continue
            logger.info("删除 %s", name)
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
            self.remove_symlinks_to(path)
            removed.append(name)
        return removed

    def remove_symlinks_to(self, target_dir: Path) -> int:
        """移除 bin/ lib/ 下指向 target_dir 本身或其内部路径的符号链接"""
        prefix = str(target_dir)
        count = 0
        for name in LINK_DIRS:
            link_dir = self.dep_dir / name
            if not link_dir.is_dir():
                continue
            for entry in link_dir.iterdir():
                if not entry.is_symlink():
                    continue
                link = os.readlink(entry)
                if link == prefix or link.startswith(prefix + os.sep):
                    entry.unlink()
                    count += 1
        if count:
            logger.debug("已移除 %d 个指向 %s 的符号链接", count, prefix)
        return count
