"""buildpack 暂存目录

finalize 的命令行参数为 BUILD_DIR CACHE_DIR DEPS_DIR DEPS_IDX，
本 buildpack 的依赖目录为 DEPS_DIR/DEPS_IDX。
"""

from __future__ import annotations

import logging
from pathlib import Path

from dotnetcore.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)


class Stager:
    """暂存目录布局"""

    def __init__(
        self,
        build_dir: str | Path,
        cache_dir: str | Path,
        deps_dir: str | Path,
        deps_idx: str,
    ) -> None:
        self._build_dir = Path(build_dir)
        self._cache_dir = Path(cache_dir)
        self._deps_dir = Path(deps_dir)
        self._deps_idx = deps_idx

    @property
    def build_dir(self) -> Path:
        return self._build_dir

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @property
    def deps_idx(self) -> str:
        return self._deps_idx

    @property
    def dep_dir(self) -> Path:
        return self._deps_dir / self._deps_idx

    def write_profile_d(self, name: str, contents: str) -> Path:
        """写入 DEP_DIR/profile.d/<name>，应用启动前由平台 source"""
        path = self.dep_dir / "profile.d" / name
        atomic_write(path, contents)
        logger.debug("profile.d 已写入: %s", path)
        return path
