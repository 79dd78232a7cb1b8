"""框架版本解析引擎

根据部署类型决定需要安装的 web 框架 (dotnet-aspnetcore) 与运行时 (dotnet-runtime) 版本。

FDD 路径（两个分支结构互逆，因为两个共享框架相互依赖，应用只显式声明其中一个）:
  - 声明 Microsoft.AspNetCore.All / App:
      1. 按补丁策略匹配 web 框架版本
      2. 读取该 web 框架自带的 runtimeconfig（其中嵌套声明了基础运行时版本）
      3. 按同一补丁策略匹配运行时版本
  - 声明 Microsoft.NETCore.App:
      1. 按补丁策略匹配运行时版本
      2. web 框架版本从 deps.json 原样读取（恢复时已锁定，不做模糊匹配）
  - 其他框架名 → UnsupportedFrameworkError

SOURCE 路径: 直接用两个正则从主项目文件中提取，不查询目录清单。

applyPatches 只从应用自身的 runtimeconfig 读取一次，原样传给每一次匹配调用。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from dotnetcore.core.exceptions import ClassificationError, UnsupportedFrameworkError
from dotnetcore.core.models import (
    ASPNETCORE_APP,
    ASPNETCORE_DEP,
    ASPNETCORE_FRAMEWORKS,
    NETCORE_APP,
    RUNTIME_DEP,
    DependencySpec,
    DeploymentType,
    FrameworkVersions,
    RuntimeConfig,
)
from dotnetcore.core.project.extractor import (
    ASPNETCORE_VERSION_PATTERN,
    RUNTIME_VERSION_PATTERN,
)

if TYPE_CHECKING:
    from dotnetcore.core.protocols import Installer, ProjectAccessor

logger = logging.getLogger(__name__)


class FrameworkResolver:
    """框架版本解析器

    installer 可选: 提供时，若已匹配的 web 框架尚未安装到 SDK 目录，
    会先安装它再读取其 runtimeconfig（本地优先，远程回退）。
    """

    def __init__(
        self,
        project: ProjectAccessor,
        installer: Installer | None = None,
        sdk_dir: str = "",
    ) -> None:
        self.project = project
        self.installer = installer
        self.sdk_dir = sdk_dir

    def resolve(self, deployment_type: DeploymentType) -> FrameworkVersions:
        """按部署类型分派"""
        if deployment_type == DeploymentType.FDD:
            return self.resolve_app()
        if deployment_type == DeploymentType.SOURCE:
            return self.resolve_source()
        raise ClassificationError(f"未知部署类型: {deployment_type}")

    # ---- FDD ----

    def resolve_app(self) -> FrameworkVersions:
        """读取应用自身的 runtimeconfig 并解析"""
        path = self.project.runtime_config_file()
        if path is None:
            raise ClassificationError("FDD 应用缺少 *.runtimeconfig.json")
        return self.resolve_fdd(self.project.parse_runtime_config(path))

    def resolve_fdd(self, app_config: RuntimeConfig) -> FrameworkVersions:
        name = app_config.framework_name
        apply_patches = app_config.apply_patches

        if name in ASPNETCORE_FRAMEWORKS:
            aspnetcore_version = self.project.find_matching_version(
                ASPNETCORE_DEP, app_config.framework_version, apply_patches,
            )
            nested = self._aspnetcore_runtime_config(aspnetcore_version)
            runtime_version = self.project.find_matching_version(
                RUNTIME_DEP, nested.framework_version, apply_patches,
            )
        elif name == NETCORE_APP:
            runtime_version = self.project.find_matching_version(
                RUNTIME_DEP, app_config.framework_version, apply_patches,
            )
            aspnetcore_version = self.project.aspnetcore_version_from_deps_json()
        else:
            raise UnsupportedFrameworkError(name)

        versions = FrameworkVersions(aspnetcore_version, runtime_version)
        logger.info(
            "FDD 解析完成 (%s %s, applyPatches=%s): aspnetcore=%s runtime=%s",
            name, app_config.framework_version, apply_patches,
            versions.aspnetcore_version, versions.runtime_version,
        )
        return versions

    def _aspnetcore_runtime_config(self, aspnetcore_version: str) -> RuntimeConfig:
        """已匹配 web 框架自带的 runtimeconfig"""
        path = self.project.framework_runtime_config_file(
            ASPNETCORE_APP, aspnetcore_version,
        )
        if not path.is_file() and self.installer is not None:
            logger.info("web 框架 %s 尚未安装，先行安装以读取其 runtimeconfig", aspnetcore_version)
            self.installer.install_dependency(
                DependencySpec(ASPNETCORE_DEP, aspnetcore_version), self.sdk_dir,
            )
        return self.project.parse_runtime_config(path)

    # ---- SOURCE ----

    def resolve_source(self) -> FrameworkVersions:
        main = self.project.main_path()
        runtime_version = self.project.version_from_proj_file(
            main, RUNTIME_VERSION_PATTERN.pattern,
            RUNTIME_VERSION_PATTERN.dependency_name,
        )
        aspnetcore_version = self.project.version_from_proj_file(
            main, ASPNETCORE_VERSION_PATTERN.pattern,
            ASPNETCORE_VERSION_PATTERN.dependency_name,
        )
        versions = FrameworkVersions(aspnetcore_version, runtime_version)
        logger.info(
            "SOURCE 解析完成 (%s): aspnetcore=%s runtime=%s",
            main.name, versions.aspnetcore_version, versions.runtime_version,
        )
        return versions
