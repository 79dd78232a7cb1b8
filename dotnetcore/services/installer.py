"""依赖安装器: Installer 协议的默认实现

职责:
- 在目录清单中查找 (name, version) 条目
- 下载到缓存目录（缓存命中直接复用）
- sha256 校验
- 解压 .tar.gz / .tgz / .zip 到目标目录

同一次运行内重复安装同一 (name, version, target) 是空操作。
所有失败统一抛 InstallationError，不重试。
"""

from __future__ import annotations

import hashlib
import logging
import shutil
import tarfile
import urllib.error
import urllib.request
import zipfile
from pathlib import Path

from dotnetcore.core.exceptions import InstallationError
from dotnetcore.core.manifest import Manifest, ManifestEntry
from dotnetcore.core.models import SHARED_FRAMEWORK_DIRS, DependencySpec
from dotnetcore.utils.net import validate_url_scheme

logger = logging.getLogger(__name__)


class DependencyInstaller:
    """按目录清单安装依赖"""

    def __init__(self, manifest: Manifest, cache_dir: str | Path) -> None:
        self.manifest = manifest
        self.cache_dir = Path(cache_dir)
        self._installed: set[tuple[str, str, str]] = set()

    def install_dependency(self, spec: DependencySpec, target_dir: str) -> None:
        key = (spec.name, spec.version, str(Path(target_dir)))
        if key in self._installed:
            logger.info("已安装，跳过: %s -> %s", spec, target_dir)
            return

        if self._already_present(spec, Path(target_dir)):
            logger.info("目标目录中已存在，跳过下载: %s -> %s", spec, target_dir)
            self._installed.add(key)
            return

        entry = self.manifest.find(spec.name, spec.version)
        if entry is None:
            available = self.manifest.all_versions(spec.name)
            raise InstallationError(
                f"目录清单中没有 {spec}"
                f"{f' (stack={self.manifest.stack})' if self.manifest.stack else ''}，"
                f"可用版本: {available}"
            )

        logger.info("安装 %s -> %s", spec, target_dir)
        archive = self._download(entry)
        if entry.sha256:
            self._verify_checksum(archive, entry.sha256)
        self._extract(archive, Path(target_dir))
        self._installed.add(key)
        logger.info("安装完成: %s", spec)

    @staticmethod
    def _already_present(spec: DependencySpec, target: Path) -> bool:
        """共享框架版本目录已存在（平台预装或先前阶段安装）"""
        framework = SHARED_FRAMEWORK_DIRS.get(spec.name)
        if framework is None:
            return False
        return (target / "shared" / framework / spec.version).is_dir()

    def _download(self, entry: ManifestEntry) -> Path:
        if not entry.uri:
            raise InstallationError(f"依赖 {entry.name}@{entry.version} 未定义 uri")
        filename = entry.uri.rstrip("/").split("/")[-1]
        if not filename:
            raise InstallationError(f"无法从 URI 解析文件名: {entry.uri}")

        dest = self.cache_dir / entry.name / entry.version / filename
        if dest.exists():
            logger.info("  缓存命中: %s", dest)
            return dest

        validate_url_scheme(entry.uri, context=f"{entry.name}@{entry.version}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        logger.info("  下载: %s", entry.uri)
        try:
            urllib.request.urlretrieve(entry.uri, str(dest))  # nosec B310
        except (urllib.error.URLError, OSError) as e:
            dest.unlink(missing_ok=True)
            raise InstallationError(f"下载失败: {entry.uri} - {e}") from e
        return dest

    @staticmethod
    def _verify_checksum(path: Path, expected: str) -> None:
        sha256 = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                sha256.update(chunk)
        actual = sha256.hexdigest()
        if actual != expected.lower():
            path.unlink(missing_ok=True)
            raise InstallationError(
                f"校验和不匹配 {path.name}: 期望 {expected}, 实际 {actual}",
            )
        logger.debug("  校验和通过: %s", path.name)

    @staticmethod
    def _extract(archive: Path, target: Path) -> None:
        target.mkdir(parents=True, exist_ok=True)
        name = archive.name
        try:
            if name.endswith((".tar.gz", ".tgz", ".tar.xz", ".tar")):
                with tarfile.open(archive) as tar:
                    if hasattr(tarfile, "data_filter"):
                        tar.extractall(target, filter="data")
                    else:
                        _check_members(tar, target)
                        tar.extractall(target)  # nosec B202
            elif name.endswith(".zip"):
                with zipfile.ZipFile(archive) as zf:
                    zf.extractall(target)
            else:
                shutil.copy2(archive, target / name)
        except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
            raise InstallationError(f"解压失败: {archive} - {e}") from e


def _check_members(tar: tarfile.TarFile, target: Path) -> None:
    """拒绝解压到目标目录之外的成员（无 extraction filter 的解释器）"""
    root = target.resolve()
    for member in tar.getmembers():
        dest = (root / member.name).resolve()
        if dest != root and root not in dest.parents:
            raise InstallationError(f"压缩包成员越出目标目录: {member.name}")
        if member.issym() or member.islnk():
            base = dest.parent if member.issym() else root
            link = (base / member.linkname).resolve()
            if link != root and root not in link.parents:
                raise InstallationError(f"压缩包链接越出目标目录: {member.name}")
