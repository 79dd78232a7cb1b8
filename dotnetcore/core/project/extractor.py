"""版本提取器: 按具名正则从项目文件文本中提取版本号"""

from __future__ import annotations

import re

from dotnetcore.core.exceptions import PatternNotMatchedError
from dotnetcore.core.models import ASPNETCORE_DEP, RUNTIME_DEP, VersionPattern

RUNTIME_VERSION_PATTERN = VersionPattern(
    pattern=r"<RuntimeFrameworkVersion>\s*(.+?)\s*</RuntimeFrameworkVersion>",
    dependency_name=RUNTIME_DEP,
)

ASPNETCORE_VERSION_PATTERN = VersionPattern(
    pattern=r'"Microsoft\.AspNetCore\.(?:All|App)"\s+Version="(.+?)"',
    dependency_name=ASPNETCORE_DEP,
)


def extract_version(text: str, pattern: str, dependency_name: str) -> str:
    """返回第一个匹配的第一个捕获组

    多行文本中以首个匹配为准；未匹配时抛 PatternNotMatchedError，
    异常中带上依赖名，便于定位是哪个版本无法确定。
    """
    m = re.search(pattern, text, re.MULTILINE)
    version = (m.group(1) or "").strip() if m else ""
    if not version:
        raise PatternNotMatchedError(dependency_name)
    return version
