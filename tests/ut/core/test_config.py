"""集中配置测试"""

from __future__ import annotations

from pathlib import Path

import pytest

import dotnetcore.core.config as cfgmod
from dotnetcore.core.config import Config
from dotnetcore.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _reset_config():
    cfgmod.set_config(None)
    yield
    cfgmod.set_config(None)


class TestConfig:
    def test_defaults(self) -> None:
        cfg = Config()
        assert cfg.manifest == "manifest.yml"
        assert cfg.install_node is False
        assert cfg.publish_release_config is False

    def test_from_env(self) -> None:
        cfg = Config.from_env({
            "CF_STACK": "cflinuxfs3",
            "INSTALL_NODE": "true",
            "PUBLISH_RELEASE_CONFIG": "false",
            "DOTNET_SDK_VERSION": "2.2.402",
            "BP_MANIFEST": "/bp/manifest.yml",
        })
        assert cfg.cf_stack == "cflinuxfs3"
        assert cfg.install_node is True
        assert cfg.publish_release_config is False
        assert cfg.dotnet_sdk_version == "2.2.402"
        assert cfg.manifest == "/bp/manifest.yml"

    def test_only_literal_true_enables(self) -> None:
        assert Config.from_env({"INSTALL_NODE": "1"}).install_node is False
        assert Config.from_env({"INSTALL_NODE": "TRUE"}).install_node is True

    def test_from_file_with_extra(self, tmp_path: Path) -> None:
        p = tmp_path / "finalize.yml"
        p.write_text("cf_stack: cflinuxfs3\ninstall_node: 'true'\nfoo: bar\n")
        cfg = Config.from_file(str(p))
        assert cfg.cf_stack == "cflinuxfs3"
        assert cfg.install_node is True
        assert cfg.extra == {"foo": "bar"}

    def test_missing_file_defaults(self, tmp_path: Path) -> None:
        assert Config.from_file(str(tmp_path / "nope.yml")) == Config()

    def test_invalid_yaml_raises_config_error(self, tmp_path: Path) -> None:
        p = tmp_path / "finalize.yml"
        p.write_text("cf_stack: [unclosed\n")
        with pytest.raises(ConfigError, match="配置文件读取失败"):
            Config.from_file(str(p))

    def test_init_config_applies_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        p = tmp_path / "finalize.yml"
        p.write_text("cf_stack: cflinuxfs2\n")
        monkeypatch.setenv("CF_STACK", "cflinuxfs3")
        cfg = cfgmod.init_config(str(p))
        assert cfg.cf_stack == "cflinuxfs3"
        assert cfgmod.get_config() is cfg
