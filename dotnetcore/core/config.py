"""集中配置管理

buildpack 的行为开关散落在环境变量中（CF_STACK / INSTALL_NODE / ...），
这里统一收口为 Config 数据类。支持从 YAML 文件加载 + 环境变量覆盖。
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field

import yaml

from dotnetcore.core.exceptions import ConfigError
from dotnetcore.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

# 环境变量 -> 配置字段
_ENV_FIELDS: dict[str, str] = {
    "CF_STACK": "cf_stack",
    "INSTALL_NODE": "install_node",
    "PUBLISH_RELEASE_CONFIG": "publish_release_config",
    "DOTNET_SDK_VERSION": "dotnet_sdk_version",
    "BP_MANIFEST": "manifest",
}

_BOOL_FIELDS = {"install_node", "publish_release_config"}


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


@dataclass
class Config:
    """finalize 全局配置"""

    # 目录清单 (buildpack manifest.yml)
    manifest: str = "manifest.yml"

    # 运行栈，决定 SDK 2.x 发布时的 runtime identifier
    cf_stack: str = ""

    # supply 阶段安装的 SDK 版本
    dotnet_sdk_version: str = ""

    # 保留 node 目录（默认清理）
    install_node: bool = False

    # dotnet publish 使用 Release 配置（默认 Debug）
    publish_release_config: bool = False

    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = "config/finalize.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"配置文件读取失败: {path}: {e}") from e
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        for k in _BOOL_FIELDS & matched.keys():
            matched[k] = _as_bool(matched[k])
        cfg = cls(**matched)
        cfg.extra = {k: v for k, v in data.items() if k not in known}
        return cfg

    def with_env(self, environ: dict[str, str] | None = None) -> Config:
        """用环境变量覆盖配置项（未设置的变量不覆盖）"""
        env = os.environ if environ is None else environ
        for var, name in _ENV_FIELDS.items():
            if var not in env:
                continue
            value: object = env[var]
            if name in _BOOL_FIELDS:
                value = _as_bool(value)
            setattr(self, name, value)
        return self

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Config:
        return cls().with_env(environ)

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则读取环境变量）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config.from_env()
    return _current


def init_config(path: str = "") -> Config:
    """从文件 + 环境变量初始化全局配置"""
    global _current  # noqa: PLW0603
    cfg = Config.from_file(path) if path else Config()
    _current = cfg.with_env()
    logger.info("配置已加载: %s", path or "<环境变量>")
    return _current


def set_config(cfg: Config | None) -> None:
    """替换全局配置（测试用，传 None 复位）"""
    global _current  # noqa: PLW0603
    _current = cfg
