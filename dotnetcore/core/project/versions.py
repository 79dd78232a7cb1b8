"""补丁策略下的版本匹配

规则:
  - apply_patches=True:  在 major.minor 相同的候选中取最高版本，补丁号 ≥ 请求值
  - apply_patches=False: 请求版本必须原样出现在候选中
  - 无满足条件的候选 → VersionResolutionError

请求为正式版时不会匹配到预发布版本。无法解析的候选版本不参与模糊匹配。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from packaging.version import InvalidVersion, Version

from dotnetcore.core.exceptions import VersionResolutionError

logger = logging.getLogger(__name__)


def _parse(version: str) -> Version | None:
    try:
        return Version(version)
    except InvalidVersion:
        return None


def _family(v: Version) -> tuple[int, int]:
    release = v.release + (0, 0)
    return release[0], release[1]


def find_matching_version(
    dependency_name: str,
    requested: str,
    apply_patches: bool,
    candidates: Iterable[str],
) -> str:
    """返回满足补丁策略的最佳版本"""
    pool = sorted(set(candidates))
    if not apply_patches:
        if requested in pool:
            return requested
        raise VersionResolutionError(
            dependency_name, requested,
            f"找不到精确版本 {dependency_name}@{requested} (applyPatches=false)，"
            f"可用: {pool}",
        )

    want = _parse(requested)
    if want is None:
        if requested in pool:
            return requested
        raise VersionResolutionError(
            dependency_name, requested,
            f"无法解析请求版本 {dependency_name}@{requested}，可用: {pool}",
        )

    matches: list[tuple[Version, str]] = []
    for raw in pool:
        v = _parse(raw)
        if v is None or _family(v) != _family(want) or v < want:
            continue
        if v.is_prerelease and not want.is_prerelease:
            continue
        matches.append((v, raw))

    if not matches:
        raise VersionResolutionError(
            dependency_name, requested,
            f"找不到 {dependency_name} 在 {_family(want)[0]}.{_family(want)[1]}.x "
            f"上不低于 {requested} 的版本，可用: {pool}",
        )
    best = max(matches)[1]
    if best != requested:
        logger.info("补丁前滚: %s %s -> %s", dependency_name, requested, best)
    return best
