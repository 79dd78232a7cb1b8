"""核心数据模型

框架版本解析引擎的数据类集中定义。
所有模型都是单次 finalize 运行内的临时对象，不跨构建持久化。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# =========================================================================
# 依赖名 / 框架名常量
# =========================================================================

RUNTIME_DEP = "dotnet-runtime"
ASPNETCORE_DEP = "dotnet-aspnetcore"

NETCORE_APP = "Microsoft.NETCore.App"
ASPNETCORE_APP = "Microsoft.AspNetCore.App"
ASPNETCORE_ALL = "Microsoft.AspNetCore.All"

ASPNETCORE_FRAMEWORKS = (ASPNETCORE_ALL, ASPNETCORE_APP)

# 依赖名 -> SDK shared/ 下的安装目录名
SHARED_FRAMEWORK_DIRS: dict[str, str] = {
    RUNTIME_DEP: NETCORE_APP,
    ASPNETCORE_DEP: ASPNETCORE_APP,
}


class DeploymentType(str, Enum):
    """部署类型，每次 finalize 只判定一次"""
    FDD = "FDD"          # framework-dependent: 已发布，依赖共享运行时
    SOURCE = "SOURCE"    # 从源码构建


@dataclass(frozen=True)
class RuntimeConfig:
    """*.runtimeconfig.json 中与框架解析相关的字段"""

    framework_name: str
    framework_version: str
    apply_patches: bool = True


@dataclass(frozen=True)
class DependencySpec:
    """可安装依赖 (name, version)，解析的最终产物"""

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class VersionPattern:
    """具名版本提取规则，dependency_name 仅用于错误归因"""

    pattern: str
    dependency_name: str


@dataclass(frozen=True)
class FrameworkVersions:
    """一次解析得出的 web 框架版本 + 运行时版本（总是成对出现）"""

    aspnetcore_version: str
    runtime_version: str

    def specs(self) -> list[DependencySpec]:
        """按安装顺序返回依赖: web 框架在前，运行时在后"""
        return [
            DependencySpec(ASPNETCORE_DEP, self.aspnetcore_version),
            DependencySpec(RUNTIME_DEP, self.runtime_version),
        ]
