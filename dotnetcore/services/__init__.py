"""finalize 服务模块

- resolver.py: 框架版本解析引擎
- installer.py: 依赖安装
- cleanup.py: 暂存目录清理
- stager.py: 暂存目录布局
- finalizer.py: 流水线编排
"""

from dotnetcore.services.cleanup import StagingCleaner
from dotnetcore.services.finalizer import Finalizer, build_finalizer
from dotnetcore.services.installer import DependencyInstaller
from dotnetcore.services.resolver import FrameworkResolver
from dotnetcore.services.stager import Stager

__all__ = [
    "DependencyInstaller",
    "Finalizer",
    "FrameworkResolver",
    "Stager",
    "StagingCleaner",
    "build_finalizer",
]
