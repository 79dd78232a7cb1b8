"""项目访问者: ProjectAccessor 协议的文件系统实现

职责:
- 部署类型判定（每个实例只判定一次）
- 项目文件 / runtimeconfig / deps.json 定位
- 从项目文件提取版本、在已安装版本 + 目录清单中匹配版本
- 计算启动命令
"""

from __future__ import annotations

import configparser
import logging
import re
from pathlib import Path

from dotnetcore.core.exceptions import ClassificationError, RuntimeConfigError
from dotnetcore.core.manifest import Manifest
from dotnetcore.core.models import SHARED_FRAMEWORK_DIRS, DeploymentType, RuntimeConfig
from dotnetcore.core.project import classifier, runtime_config
from dotnetcore.core.project.extractor import extract_version
from dotnetcore.core.project.versions import find_matching_version

logger = logging.getLogger(__name__)

SDK_DIR_NAME = "dotnet-sdk"
PUBLISH_DIR_NAME = "dotnet_publish"

_ASSEMBLY_NAME_RE = r"<AssemblyName>\s*(.+?)\s*</AssemblyName>"


class Project:
    """构建目录中的 .NET Core 应用"""

    def __init__(
        self,
        build_dir: str | Path,
        dep_dir: str | Path,
        deps_idx: str = "0",
        manifest: Manifest | None = None,
    ) -> None:
        self.build_dir = Path(build_dir)
        self.dep_dir = Path(dep_dir)
        self.deps_idx = deps_idx
        self.manifest = manifest or Manifest()
        self._deployment_type: DeploymentType | None = None

    @property
    def sdk_dir(self) -> Path:
        return self.dep_dir / SDK_DIR_NAME

    # ---- 部署类型 / 文件定位 ----

    def deployment_type(self) -> DeploymentType:
        if self._deployment_type is None:
            self._deployment_type = classifier.classify(self.build_dir)
            logger.info("部署类型: %s", self._deployment_type.value)
        return self._deployment_type

    def proj_file_paths(self) -> list[Path]:
        return classifier.find_proj_files(self.build_dir)

    def runtime_config_file(self) -> Path | None:
        return classifier.find_runtime_config(self.build_dir)

    def is_published(self) -> bool:
        return self.runtime_config_file() is not None

    def main_path(self) -> Path:
        """主项目文件: .deployment 中的 project 设置优先，其次唯一的项目文件"""
        configured = self._deployment_project()
        if configured is not None:
            return configured

        paths = self.proj_file_paths()
        if not paths:
            raise ClassificationError(f"{self.build_dir} 下没有项目文件")
        if len(paths) > 1:
            rel = ", ".join(str(p.relative_to(self.build_dir)) for p in paths)
            raise ClassificationError(
                f"存在多个项目文件 ({rel})，请在 .deployment 的 [config] 段中用 project 指定主项目"
            )
        return paths[0]

    def _deployment_project(self) -> Path | None:
        deployment = self.build_dir / ".deployment"
        if not deployment.is_file():
            return None
        parser = configparser.ConfigParser()
        try:
            parser.read(deployment, encoding="utf-8")
        except configparser.Error as e:
            raise ClassificationError(f".deployment 解析失败: {e}") from e
        project = parser.get("config", "project", fallback="").strip()
        if not project:
            return None
        path = self.build_dir / project
        if not path.is_file():
            raise ClassificationError(f".deployment 指定的项目文件不存在: {project}")
        return path

    # ---- runtimeconfig ----

    def parse_runtime_config(self, path: Path) -> RuntimeConfig:
        return runtime_config.parse_runtime_config(path)

    def framework_runtime_config_file(self, framework: str, version: str) -> Path:
        return (
            self.sdk_dir / "shared" / framework / version
            / f"{framework}.runtimeconfig.json"
        )

    def aspnetcore_version_from_deps_json(self) -> str:
        return runtime_config.aspnetcore_version_from_deps(self._deps_json_file())

    def _deps_json_file(self) -> Path:
        rc = self.runtime_config_file()
        if rc is not None:
            candidate = rc.with_name(
                rc.name.removesuffix(classifier.RUNTIME_CONFIG_SUFFIX) + ".deps.json"
            )
            if candidate.is_file():
                return candidate
        found = sorted(self.build_dir.glob("*.deps.json"))
        if len(found) != 1:
            raise RuntimeConfigError(
                f"无法确定 deps.json: {self.build_dir} 下找到 {len(found)} 个"
            )
        return found[0]

    # ---- 版本 ----

    def version_from_proj_file(
        self, path: Path, pattern: str, dependency_name: str,
    ) -> str:
        text = path.read_text(encoding="utf-8-sig")
        return extract_version(text, pattern, dependency_name)

    def installed_versions(self, dependency_name: str) -> list[str]:
        """SDK shared/ 目录下已安装的框架版本"""
        framework = SHARED_FRAMEWORK_DIRS.get(dependency_name)
        if framework is None:
            return []
        base = self.sdk_dir / "shared" / framework
        if not base.is_dir():
            return []
        return sorted(
            d.name for d in base.iterdir()
            if d.is_dir() and not d.name.startswith(".")
        )

    def find_matching_version(
        self, dependency_name: str, requested_version: str, apply_patches: bool,
    ) -> str:
        candidates = (
            self.manifest.all_versions(dependency_name)
            + self.installed_versions(dependency_name)
        )
        return find_matching_version(
            dependency_name, requested_version, apply_patches, candidates,
        )

    # ---- 启动命令 ----

    def start_command(self) -> str:
        """应用启动命令，找不到可执行产物时返回空串"""
        rc = self.runtime_config_file()
        if rc is not None:
            assembly = rc.name.removesuffix(classifier.RUNTIME_CONFIG_SUFFIX)
            return self._published_start_command(
                self.build_dir, "${HOME}", assembly,
            )
        main = self.main_path()
        return self._published_start_command(
            self.dep_dir / PUBLISH_DIR_NAME,
            f"${{DEPS_DIR}}/{self.deps_idx}/{PUBLISH_DIR_NAME}",
            self.assembly_name(main),
        )

    def assembly_name(self, proj_file: Path) -> str:
        """<AssemblyName> 优先，否则取项目文件名"""
        text = proj_file.read_text(encoding="utf-8-sig")
        m = re.search(_ASSEMBLY_NAME_RE, text)
        if m:
            return m.group(1)
        return proj_file.stem

    @staticmethod
    def _published_start_command(
        published_dir: Path, runtime_dir: str, assembly: str,
    ) -> str:
        if (published_dir / assembly).is_file():
            return f"{runtime_dir}/{assembly}"
        if (published_dir / f"{assembly}.dll").is_file():
            return f"{runtime_dir}/{assembly}.dll"
        return ""
