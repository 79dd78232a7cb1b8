"""项目访问模块

拆分说明:
- extractor.py: 正则版本提取
- classifier.py: 部署类型判定 + 文件定位
- runtime_config.py: runtimeconfig / deps.json 解析
- versions.py: 补丁策略下的版本匹配
- accessor.py: Project，组合以上能力
"""

from dotnetcore.core.project.accessor import Project
from dotnetcore.core.project.classifier import classify
from dotnetcore.core.project.extractor import extract_version
from dotnetcore.core.project.runtime_config import parse_runtime_config
from dotnetcore.core.project.versions import find_matching_version

__all__ = [
    "Project",
    "classify",
    "extract_version",
    "parse_runtime_config",
    "find_matching_version",
]
