"""finalize 阶段编排

严格串行的流水线，任何一步失败立即中止（不重试、不回滚、不写 release 文件）:

1. dotnet_restore       - 还原依赖（已发布应用跳过）
2. install_frameworks   - 判定部署类型 → 解析版本 → 安装 web 框架和运行时
3. dotnet_publish       - 发布应用（已发布应用跳过）
4. clean_staging_area   - 清理暂存目录
5. write_profile_d      - 写入启动环境脚本
6. release              - 生成并写入启动命令 YAML

安装顺序固定: web 框架在前，运行时在后。
"""

from __future__ import annotations

import logging
import os
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from dotnetcore.core.config import Config, get_config
from dotnetcore.core.exceptions import ClassificationError, ConfigError, FinalizeError
from dotnetcore.core.manifest import Manifest
from dotnetcore.core.models import FrameworkVersions
from dotnetcore.core.project import Project
from dotnetcore.core.project.accessor import PUBLISH_DIR_NAME, SDK_DIR_NAME
from dotnetcore.services.cleanup import StagingCleaner, dirs_to_remove
from dotnetcore.services.installer import DependencyInstaller
from dotnetcore.services.resolver import FrameworkResolver
from dotnetcore.services.stager import Stager as DirStager
from dotnetcore.utils.shell import CommandExecutor, LocalExecutor, run_cmd
from dotnetcore.utils.yaml_io import save_yaml

if TYPE_CHECKING:
    from dotnetcore.core.protocols import Installer, ProjectAccessor, Stager

logger = logging.getLogger(__name__)

# 运行栈 -> dotnet publish 的 runtime identifier（仅 SDK 2.x 需要）
CF_STACK_TO_OS: dict[str, str] = {
    "cflinuxfs2": "ubuntu.14.04-x64",
    "cflinuxfs3": "ubuntu.18.04-x64",
    "cflinuxfs3m": "ubuntu.18.04-x64",
}

RELEASE_FILE = Path("tmp") / "dotnet-core-buildpack-release-step.yml"
PROFILE_D_SCRIPT = "startup.sh"
PROFILE_D_CONTENTS = "export ASPNETCORE_URLS=http://0.0.0.0:${PORT}\n"


class Finalizer:
    """finalize 阶段编排器"""

    def __init__(
        self,
        stager: Stager,
        project: ProjectAccessor,
        installer: Installer,
        *,
        executor: CommandExecutor | None = None,
        config: Config | None = None,
        manifest: Manifest | None = None,
    ) -> None:
        self.stager = stager
        self.project = project
        self.installer = installer
        self.executor = executor or LocalExecutor()
        self.config = config or get_config()
        self.manifest = manifest or Manifest()
        self.resolver = FrameworkResolver(
            project, installer=installer, sdk_dir=str(self.sdk_dir),
        )

    @property
    def sdk_dir(self) -> Path:
        return self.stager.dep_dir / SDK_DIR_NAME

    # ---- 流水线 ----

    def run(self) -> Path:
        """执行完整 finalize 流程，返回 release YAML 路径"""
        logger.info("[Step] Finalizing Dotnet Core")
        self._step("dotnet restore", self.dotnet_restore)
        self._step("安装框架", self.install_frameworks)
        self._step("dotnet publish", self.dotnet_publish)
        self._step("清理暂存目录", self.clean_staging_area)
        self._step("写入 profile.d", self.write_profile_d)
        data = self._step("生成 release YAML", self.generate_release_yaml)
        release_path = self.stager.build_dir / RELEASE_FILE
        save_yaml(release_path, data)
        logger.info("release 已写入: %s", release_path)
        return release_path

    @staticmethod
    def _step(label: str, func: Callable[[], Any]) -> Any:
        try:
            return func()
        except (FinalizeError, OSError) as e:
            logger.error("%s失败: %s", label, e)
            raise

    # ---- 框架安装 ----

    def resolve_frameworks(self) -> FrameworkVersions:
        """判定部署类型并解析需要安装的两个框架版本"""
        return self.resolver.resolve(self.project.deployment_type())

    def install_frameworks(self) -> FrameworkVersions:
        versions = self.resolve_frameworks()
        for spec in versions.specs():
            self.installer.install_dependency(spec, str(self.sdk_dir))
        return versions

    # ---- dotnet 命令 ----

    def shell_environment(self) -> dict[str, str]:
        return {
            **os.environ,
            "DOTNET_SKIP_FIRST_TIME_EXPERIENCE": "true",
            "DefaultItemExcludes": ".cloudfoundry/**/*.*",
            "HOME": str(self.stager.dep_dir),
        }

    def dotnet_restore(self) -> None:
        if self.project.is_published():
            return
        logger.info("[Step] Restore dotnet dependencies")
        env = self.shell_environment()
        for path in self.project.proj_file_paths():
            run_cmd(
                ["dotnet", "restore", str(path)],
                cwd=str(self.stager.build_dir), env=env,
                label="dotnet restore", executor=self.executor,
            )

    def dotnet_publish(self) -> None:
        if self.project.is_published():
            return
        logger.info("[Step] Publish dotnet")

        main_project = self.project.main_path()
        env = self.shell_environment()
        node_bin = main_project.parent / "node_modules" / ".bin"
        env["PATH"] = f"{node_bin}:{os.environ.get('PATH', '')}"

        publish_path = self.stager.dep_dir / PUBLISH_DIR_NAME
        publish_path.mkdir(parents=True, exist_ok=True)

        args = [
            "dotnet", "publish", str(main_project),
            "-o", str(publish_path),
            "-c", self.publish_configuration(),
        ]
        if self.sdk_version().startswith("2."):
            args += ["-r", self.runtime_identifier()]

        run_cmd(
            args, cwd=str(self.stager.build_dir), env=env,
            label="dotnet publish", executor=self.executor,
        )

    def publish_configuration(self) -> str:
        return "Release" if self.config.publish_release_config else "Debug"

    def sdk_version(self) -> str:
        return (
            self.config.dotnet_sdk_version
            or self.manifest.default_version("dotnet-sdk")
        )

    def runtime_identifier(self) -> str:
        rid = CF_STACK_TO_OS.get(self.config.cf_stack)
        if rid is None:
            raise ConfigError(
                f"SDK 2.x 发布需要 runtime identifier，不支持的运行栈: '{self.config.cf_stack}'"
            )
        return rid

    # ---- 清理 / 启动 ----

    def clean_staging_area(self) -> list[str]:
        logger.info("[Step] Cleaning staging area")
        candidates = dirs_to_remove(
            self.project.start_command(), self.config.install_node,
        )
        return StagingCleaner(self.stager.dep_dir).clean(candidates)

    def write_profile_d(self) -> Path:
        return self.stager.write_profile_d(PROFILE_D_SCRIPT, PROFILE_D_CONTENTS)

    def generate_release_yaml(self) -> dict[str, dict[str, str]]:
        start_cmd = self.project.start_command()
        if not start_cmd:
            raise ClassificationError("找不到可启动的应用产物（可执行文件或 .dll）")
        directory = posixpath.dirname(start_cmd)
        cmd = "./" + posixpath.basename(start_cmd)
        if cmd.endswith(".dll"):
            cmd = "dotnet " + cmd
        return {
            "default_process_types": {
                "web": f"cd {directory} && {cmd} --server.urls http://0.0.0.0:${{PORT}}",
            },
        }


def build_finalizer(
    build_dir: str,
    cache_dir: str,
    deps_dir: str,
    deps_idx: str,
    *,
    config: Config | None = None,
    executor: CommandExecutor | None = None,
) -> Finalizer:
    """按默认实现装配 Finalizer（文件系统项目访问 + 清单安装器 + 本地执行器）"""
    cfg = config or get_config()
    stager = DirStager(build_dir, cache_dir, deps_dir, deps_idx)
    manifest = Manifest.load(cfg.manifest, stack=cfg.cf_stack)
    project = Project(stager.build_dir, stager.dep_dir, deps_idx, manifest)
    installer = DependencyInstaller(manifest, stager.cache_dir / "dependencies")
    return Finalizer(
        stager, project, installer,
        executor=executor, config=cfg, manifest=manifest,
    )
