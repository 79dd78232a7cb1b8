"""依赖安装器测试: 使用 file:// 本地制品，无需网络"""

from __future__ import annotations

import hashlib
import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from dotnetcore.core.exceptions import InstallationError
from dotnetcore.core.manifest import Manifest, ManifestEntry
from dotnetcore.core.models import DependencySpec
from dotnetcore.services.installer import DependencyInstaller


def _make_tarball(path: Path, files: dict[str, str]) -> Path:
    with tarfile.open(path, "w:gz") as tar:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path


def _sha256(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


@pytest.fixture()
def runtime_tarball(tmp_path: Path) -> Path:
    artifacts = tmp_path / "artifacts"
    artifacts.mkdir()
    return _make_tarball(artifacts / "dotnet-runtime.3.1.5.tar.gz", {
        "shared/Microsoft.NETCore.App/3.1.5/Microsoft.NETCore.App.deps.json": "{}",
        "dotnet": "#!/bin/sh\n",
    })


class TestInstallDependency:
    def test_download_verify_extract(self, tmp_path: Path, runtime_tarball: Path) -> None:
        manifest = Manifest([ManifestEntry(
            "dotnet-runtime", "3.1.5",
            uri=runtime_tarball.as_uri(), sha256=_sha256(runtime_tarball),
        )])
        target = tmp_path / "deps" / "0" / "dotnet-sdk"
        installer = DependencyInstaller(manifest, tmp_path / "cache")

        installer.install_dependency(DependencySpec("dotnet-runtime", "3.1.5"), str(target))

        assert (target / "dotnet").read_text() == "#!/bin/sh\n"
        assert (target / "shared" / "Microsoft.NETCore.App" / "3.1.5").is_dir()
        assert (tmp_path / "cache" / "dotnet-runtime" / "3.1.5" / runtime_tarball.name).exists()

    def test_repeat_is_noop(self, tmp_path: Path, runtime_tarball: Path) -> None:
        manifest = Manifest([ManifestEntry("dotnet-runtime", "3.1.5", uri=runtime_tarball.as_uri())])
        target = tmp_path / "sdk"
        installer = DependencyInstaller(manifest, tmp_path / "cache")
        spec = DependencySpec("dotnet-runtime", "3.1.5")
        installer.install_dependency(spec, str(target))
        (target / "dotnet").unlink()
        installer.install_dependency(spec, str(target))
        assert not (target / "dotnet").exists()

    def test_cache_hit_skips_download(self, tmp_path: Path, runtime_tarball: Path) -> None:
        cache = tmp_path / "cache"
        cached = cache / "dotnet-runtime" / "3.1.5" / runtime_tarball.name
        cached.parent.mkdir(parents=True)
        cached.write_bytes(runtime_tarball.read_bytes())
        manifest = Manifest([ManifestEntry(
            "dotnet-runtime", "3.1.5",
            uri="https://unreachable.invalid/" + runtime_tarball.name,
        )])
        DependencyInstaller(manifest, cache).install_dependency(
            DependencySpec("dotnet-runtime", "3.1.5"), str(tmp_path / "sdk"),
        )
        assert (tmp_path / "sdk" / "dotnet").exists()

    def test_zip_archive(self, tmp_path: Path) -> None:
        archive = tmp_path / "aspnetcore.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("shared/Microsoft.AspNetCore.App/2.1.1/x.json", "{}")
        manifest = Manifest([ManifestEntry("dotnet-aspnetcore", "2.1.1", uri=archive.as_uri())])
        DependencyInstaller(manifest, tmp_path / "cache").install_dependency(
            DependencySpec("dotnet-aspnetcore", "2.1.1"), str(tmp_path / "sdk"),
        )
        assert (tmp_path / "sdk" / "shared" / "Microsoft.AspNetCore.App" / "2.1.1" / "x.json").exists()


class TestInstallFailures:
    def test_not_in_catalog(self, tmp_path: Path) -> None:
        manifest = Manifest([ManifestEntry("dotnet-runtime", "3.1.0")])
        with pytest.raises(InstallationError, match=r"dotnet-runtime@3.1.5.*3\.1\.0"):
            DependencyInstaller(manifest, tmp_path).install_dependency(
                DependencySpec("dotnet-runtime", "3.1.5"), str(tmp_path / "sdk"),
            )

    def test_checksum_mismatch(self, tmp_path: Path, runtime_tarball: Path) -> None:
        manifest = Manifest([ManifestEntry(
            "dotnet-runtime", "3.1.5", uri=runtime_tarball.as_uri(), sha256="0" * 64,
        )])
        cache = tmp_path / "cache"
        with pytest.raises(InstallationError, match="校验和不匹配"):
            DependencyInstaller(manifest, cache).install_dependency(
                DependencySpec("dotnet-runtime", "3.1.5"), str(tmp_path / "sdk"),
            )
        # 校验失败的缓存文件被删除，下次重新下载
        assert not (cache / "dotnet-runtime" / "3.1.5" / runtime_tarball.name).exists()

    def test_missing_uri(self, tmp_path: Path) -> None:
        manifest = Manifest([ManifestEntry("dotnet-runtime", "3.1.5")])
        with pytest.raises(InstallationError, match="未定义 uri"):
            DependencyInstaller(manifest, tmp_path).install_dependency(
                DependencySpec("dotnet-runtime", "3.1.5"), str(tmp_path / "sdk"),
            )

    def test_download_failure(self, tmp_path: Path) -> None:
        missing = tmp_path / "nope.tar.gz"
        manifest = Manifest([ManifestEntry("dotnet-runtime", "3.1.5", uri=missing.as_uri())])
        with pytest.raises(InstallationError, match="下载失败"):
            DependencyInstaller(manifest, tmp_path / "cache").install_dependency(
                DependencySpec("dotnet-runtime", "3.1.5"), str(tmp_path / "sdk"),
            )

    def test_corrupt_archive(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.tar.gz"
        bad.write_bytes(b"not a tarball")
        manifest = Manifest([ManifestEntry("dotnet-runtime", "3.1.5", uri=bad.as_uri())])
        with pytest.raises(InstallationError, match="解压失败"):
            DependencyInstaller(manifest, tmp_path / "cache").install_dependency(
                DependencySpec("dotnet-runtime", "3.1.5"), str(tmp_path / "sdk"),
            )

    def test_escaping_member_rejected(self, tmp_path: Path) -> None:
        artifacts = tmp_path / "artifacts"
        artifacts.mkdir()
        evil = _make_tarball(artifacts / "evil.tar.gz", {"../outside.txt": "x"})
        manifest = Manifest([ManifestEntry("dotnet-runtime", "3.1.5", uri=evil.as_uri())])
        with pytest.raises(InstallationError, match="解压失败|越出目标目录"):
            DependencyInstaller(manifest, tmp_path / "cache").install_dependency(
                DependencySpec("dotnet-runtime", "3.1.5"), str(tmp_path / "sdk"),
            )
        assert not (tmp_path / "outside.txt").exists()


class TestAlreadyPresent:
    def test_installed_shared_framework_skips_catalog(self, tmp_path: Path) -> None:
        """目录清单中没有、但 SDK shared/ 下已存在的版本直接视为已安装"""
        target = tmp_path / "sdk"
        (target / "shared" / "Microsoft.NETCore.App" / "3.1.7").mkdir(parents=True)
        manifest = Manifest([ManifestEntry("dotnet-runtime", "3.1.5")])
        installer = DependencyInstaller(manifest, tmp_path / "cache")

        installer.install_dependency(DependencySpec("dotnet-runtime", "3.1.7"), str(target))

        assert not (tmp_path / "cache").exists()

    def test_other_dependency_still_needs_catalog(self, tmp_path: Path) -> None:
        target = tmp_path / "sdk"
        (target / "shared" / "Microsoft.NETCore.App" / "3.1.7").mkdir(parents=True)
        with pytest.raises(InstallationError, match="dotnet-aspnetcore@3.1.7"):
            DependencyInstaller(Manifest(), tmp_path / "cache").install_dependency(
                DependencySpec("dotnet-aspnetcore", "3.1.7"), str(target),
            )
