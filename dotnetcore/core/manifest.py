"""buildpack 依赖目录清单

职责:
- 从 manifest.yml 加载 dependencies / default_versions 两个配置段
- 按运行栈过滤可用条目
- 提供版本列表和 (name, version) 精确查找

清单格式:
    dependencies:
      - name: dotnet-runtime
        version: 3.1.5
        uri: https://buildpacks.example.com/dotnet-runtime.3.1.5.tar.gz
        sha256: 7f4c...
        cf_stacks: [cflinuxfs3]
    default_versions:
      - name: dotnet-sdk
        version: 3.1.x
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from dotnetcore.core.exceptions import ConfigError
from dotnetcore.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class ManifestEntry:
    """目录清单中的单个依赖条目"""

    name: str
    version: str
    uri: str = ""
    sha256: str = ""
    cf_stacks: list[str] = field(default_factory=list)

    def supports(self, stack: str) -> bool:
        """条目是否适用于指定运行栈（未声明栈或未指定栈视为通用）"""
        return not stack or not self.cf_stacks or stack in self.cf_stacks


class Manifest:
    """依赖目录清单: 只读，加载后不再变化"""

    def __init__(
        self,
        entries: list[ManifestEntry] | None = None,
        defaults: dict[str, str] | None = None,
        stack: str = "",
    ) -> None:
        self.stack = stack
        self.entries = [e for e in (entries or []) if e.supports(stack)]
        self.defaults = defaults or {}

    @classmethod
    def load(cls, path: str | Path, stack: str = "") -> Manifest:
        """从清单文件加载；文件不存在时返回空清单"""
        p = Path(path)
        if not p.exists():
            logger.warning("清单文件不存在: %s", p)
            return cls(stack=stack)
        try:
            data = load_yaml(p)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"清单文件解析失败: {p}: {e}") from e

        entries: list[ManifestEntry] = []
        for info in data.get("dependencies") or []:
            if not isinstance(info, dict) or not info.get("name"):
                continue
            entries.append(ManifestEntry(
                name=str(info["name"]),
                version=str(info.get("version", "")),
                uri=info.get("uri", ""),
                sha256=info.get("sha256", ""),
                cf_stacks=list(info.get("cf_stacks") or []),
            ))

        defaults = {
            str(d["name"]): str(d.get("version", ""))
            for d in data.get("default_versions") or []
            if isinstance(d, dict) and d.get("name")
        }
        manifest = cls(entries, defaults, stack=stack)
        logger.info("已加载 %d 个依赖条目: %s", len(manifest.entries), p)
        return manifest

    def all_versions(self, name: str) -> list[str]:
        """列出某个依赖在清单中的全部版本"""
        return [e.version for e in self.entries if e.name == name]

    def find(self, name: str, version: str) -> ManifestEntry | None:
        """精确查找 (name, version) 条目"""
        for e in self.entries:
            if e.name == name and e.version == version:
                return e
        return None

    def default_version(self, name: str) -> str:
        """default_versions 段中声明的默认版本，未声明返回空串"""
        return self.defaults.get(name, "")
