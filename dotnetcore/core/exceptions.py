"""统一异常体系

finalize 阶段的所有业务异常继承 FinalizeError。
任何异常都会立即上抛并中止整个 finalize 阶段：不重试，不降级为告警。
CLI 层据此输出友好提示并以非零状态退出。
"""

from __future__ import annotations


class FinalizeError(Exception):
    """finalize 基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(FinalizeError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ClassificationError(FinalizeError):
    """项目结构无法识别为 FDD 或 SOURCE"""

    code = "CLASSIFICATION_ERROR"


class PatternNotMatchedError(FinalizeError):
    """无法从项目文件中提取出依赖版本"""

    code = "PATTERN_NOT_MATCHED"

    def __init__(self, dependency: str, message: str = "") -> None:
        super().__init__(message or f"无法确定 {dependency} 的版本: 项目文件中未匹配到版本声明")
        self.dependency = dependency


class UnsupportedFrameworkError(FinalizeError):
    """runtimeconfig 中声明的框架不在支持范围内"""

    code = "UNSUPPORTED_FRAMEWORK"

    def __init__(self, name: str) -> None:
        super().__init__(f"应用 runtimeconfig 中声明了不支持的框架: '{name}'")
        self.name = name


class VersionResolutionError(FinalizeError):
    """已安装版本和目录清单中都没有满足要求的版本"""

    code = "VERSION_RESOLUTION_ERROR"

    def __init__(self, dependency: str, version: str, message: str = "") -> None:
        super().__init__(message or f"找不到满足要求的版本: {dependency}@{version}")
        self.dependency = dependency
        self.version = version


class RuntimeConfigError(FinalizeError):
    """runtimeconfig.json / deps.json 缺失或解析失败"""

    code = "RUNTIME_CONFIG_ERROR"


class InstallationError(FinalizeError):
    """依赖下载、校验或解压失败"""

    code = "INSTALLATION_ERROR"


class ExecutionError(FinalizeError):
    """外部命令执行失败"""

    code = "EXECUTION_ERROR"
