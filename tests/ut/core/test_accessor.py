"""Project 项目访问者测试"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dotnetcore.core.exceptions import (
    ClassificationError,
    RuntimeConfigError,
    VersionResolutionError,
)
from dotnetcore.core.manifest import Manifest, ManifestEntry
from dotnetcore.core.models import DeploymentType
from dotnetcore.core.project import Project


def _runtime_config(path: Path, name: str = "Microsoft.NETCore.App", version: str = "3.1.0") -> Path:
    path.write_text(json.dumps({
        "runtimeOptions": {"framework": {"name": name, "version": version}},
    }))
    return path


@pytest.fixture()
def dirs(tmp_path: Path) -> tuple[Path, Path]:
    build = tmp_path / "build"
    dep = tmp_path / "deps" / "0"
    build.mkdir()
    dep.mkdir(parents=True)
    return build, dep


class TestDeploymentType:
    def test_computed_once(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        (build / "app.csproj").write_text("<Project />")
        project = Project(build, dep)
        assert project.deployment_type() == DeploymentType.SOURCE
        # 中途出现 runtimeconfig 也不会重新判定
        _runtime_config(build / "app.runtimeconfig.json")
        assert project.deployment_type() == DeploymentType.SOURCE

    def test_is_published(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        project = Project(build, dep)
        assert project.is_published() is False
        _runtime_config(build / "app.runtimeconfig.json")
        assert project.is_published() is True


class TestMainPath:
    def test_single_project(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        (build / "src").mkdir()
        (build / "src" / "app.csproj").write_text("")
        assert Project(build, dep).main_path() == build / "src" / "app.csproj"

    def test_multiple_without_deployment_raises(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        (build / "a.csproj").write_text("")
        (build / "b.csproj").write_text("")
        with pytest.raises(ClassificationError, match=".deployment"):
            Project(build, dep).main_path()

    def test_deployment_file_selects(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        (build / "web").mkdir()
        (build / "lib").mkdir()
        (build / "web" / "web.csproj").write_text("")
        (build / "lib" / "lib.csproj").write_text("")
        (build / ".deployment").write_text("[config]\nproject = web/web.csproj\n")
        assert Project(build, dep).main_path() == build / "web" / "web.csproj"

    def test_deployment_file_missing_target(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        (build / ".deployment").write_text("[config]\nproject = nope.csproj\n")
        with pytest.raises(ClassificationError, match="不存在"):
            Project(build, dep).main_path()

    def test_no_projects(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        with pytest.raises(ClassificationError, match="没有项目文件"):
            Project(build, dep).main_path()


class TestVersions:
    def test_candidates_include_installed_and_catalog(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        (dep / "dotnet-sdk" / "shared" / "Microsoft.NETCore.App" / "3.1.7").mkdir(parents=True)
        manifest = Manifest([ManifestEntry("dotnet-runtime", "3.1.5")])
        project = Project(build, dep, manifest=manifest)
        assert project.installed_versions("dotnet-runtime") == ["3.1.7"]
        assert project.find_matching_version("dotnet-runtime", "3.1.0", True) == "3.1.7"

    def test_catalog_only(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        manifest = Manifest([
            ManifestEntry("dotnet-runtime", "3.1.0"),
            ManifestEntry("dotnet-runtime", "3.1.5"),
        ])
        project = Project(build, dep, manifest=manifest)
        assert project.find_matching_version("dotnet-runtime", "3.1.0", True) == "3.1.5"
        assert project.find_matching_version("dotnet-runtime", "3.1.0", False) == "3.1.0"

    def test_no_match(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        with pytest.raises(VersionResolutionError):
            Project(build, dep).find_matching_version("dotnet-aspnetcore", "2.1.0", True)

    def test_version_from_proj_file(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        proj = build / "app.csproj"
        proj.write_text("<RuntimeFrameworkVersion>2.1.5</RuntimeFrameworkVersion>")
        got = Project(build, dep).version_from_proj_file(
            proj, r"<RuntimeFrameworkVersion>(.+?)</RuntimeFrameworkVersion>", "dotnet-runtime",
        )
        assert got == "2.1.5"

    def test_framework_runtime_config_file(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        path = Project(build, dep).framework_runtime_config_file("Microsoft.AspNetCore.App", "2.1.1")
        assert path == (
            dep / "dotnet-sdk" / "shared" / "Microsoft.AspNetCore.App" / "2.1.1"
            / "Microsoft.AspNetCore.App.runtimeconfig.json"
        )


class TestDepsJson:
    def test_matching_deps_json(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        _runtime_config(build / "app.runtimeconfig.json")
        (build / "app.deps.json").write_text(json.dumps({
            "libraries": {"Microsoft.AspNetCore.App/2.1.1": {}},
        }))
        (build / "other.deps.json").write_text("{}")
        assert Project(build, dep).aspnetcore_version_from_deps_json() == "2.1.1"

    def test_missing_deps_json(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        _runtime_config(build / "app.runtimeconfig.json")
        with pytest.raises(RuntimeConfigError, match="deps.json"):
            Project(build, dep).aspnetcore_version_from_deps_json()


class TestStartCommand:
    def test_published_executable(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        _runtime_config(build / "app.runtimeconfig.json")
        (build / "app").write_text("")
        (build / "app.dll").write_text("")
        assert Project(build, dep).start_command() == "${HOME}/app"

    def test_published_dll(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        _runtime_config(build / "app.runtimeconfig.json")
        (build / "app.dll").write_text("")
        assert Project(build, dep).start_command() == "${HOME}/app.dll"

    def test_source_uses_publish_dir_and_assembly_name(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        (build / "app.csproj").write_text(
            "<Project><PropertyGroup><AssemblyName>web</AssemblyName></PropertyGroup></Project>"
        )
        (dep / "dotnet_publish").mkdir()
        (dep / "dotnet_publish" / "web.dll").write_text("")
        assert Project(build, dep, "3").start_command() == "${DEPS_DIR}/3/dotnet_publish/web.dll"

    def test_source_falls_back_to_file_stem(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        (build / "app.csproj").write_text("<Project />")
        (dep / "dotnet_publish").mkdir()
        (dep / "dotnet_publish" / "app").write_text("")
        assert Project(build, dep).start_command() == "${DEPS_DIR}/0/dotnet_publish/app"

    def test_nothing_to_start(self, dirs: tuple[Path, Path]) -> None:
        build, dep = dirs
        _runtime_config(build / "app.runtimeconfig.json")
        assert Project(build, dep).start_command() == ""
