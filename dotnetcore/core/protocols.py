"""领域协议定义

集中定义版本解析引擎与外部协作者之间的接口契约（Protocol）。
解析引擎只依赖这些抽象，具体实现（文件系统、下载、子进程）可在测试中替换。
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from dotnetcore.core.models import DependencySpec, DeploymentType, RuntimeConfig


# =========================================================================
# 项目访问协议
# =========================================================================

class ProjectAccessor(Protocol):
    """项目访问者协议

    负责部署类型判定、项目文件定位、版本提取和版本匹配。
    """

    def deployment_type(self) -> DeploymentType:
        """判定部署类型（FDD / SOURCE）"""
        ...

    def main_path(self) -> Path:
        """主项目文件路径"""
        ...

    def proj_file_paths(self) -> list[Path]:
        """构建目录下全部项目文件"""
        ...

    def is_published(self) -> bool:
        """构建目录是否已是发布产物"""
        ...

    def runtime_config_file(self) -> Path | None:
        """应用自身的 *.runtimeconfig.json"""
        ...

    def parse_runtime_config(self, path: Path) -> RuntimeConfig:
        """解析 runtimeconfig 文档"""
        ...

    def framework_runtime_config_file(self, framework: str, version: str) -> Path:
        """已安装共享框架自带的 runtimeconfig 路径"""
        ...

    def version_from_proj_file(
        self, path: Path, pattern: str, dependency_name: str,
    ) -> str:
        """从项目文件文本中按正则提取版本"""
        ...

    def find_matching_version(
        self, dependency_name: str, requested_version: str, apply_patches: bool,
    ) -> str:
        """在已安装版本和目录清单中按补丁策略匹配最佳版本"""
        ...

    def aspnetcore_version_from_deps_json(self) -> str:
        """从 *.deps.json 读取恢复时已锁定的 web 框架版本"""
        ...

    def start_command(self) -> str:
        """应用启动命令"""
        ...


# =========================================================================
# 安装协议
# =========================================================================

class Installer(Protocol):
    """依赖安装器协议: 拉取并解压指定版本到目标目录"""

    def install_dependency(self, spec: DependencySpec, target_dir: str) -> None:
        """安装依赖，失败抛 InstallationError"""
        ...


# =========================================================================
# 暂存目录协议
# =========================================================================

class Stager(Protocol):
    """buildpack 暂存目录协议"""

    @property
    def build_dir(self) -> Path:
        ...

    @property
    def dep_dir(self) -> Path:
        ...

    @property
    def deps_idx(self) -> str:
        ...

    def write_profile_d(self, name: str, contents: str) -> Path:
        """写入 profile.d 启动脚本"""
        ...
