"""finalize 日志配置

提供统一的日志配置，支持普通文本和结构化 JSON 两种输出格式，
以及 buildpack 风格的缩进输出（外部命令输出统一缩进 7 个空格）。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

# buildpack 输出约定: 子进程输出与步骤标题对齐
INDENT = " " * 7


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器，便于平台日志采集

    输出格式:
        {
            "timestamp": "2024-01-01T12:00:00+00:00",
            "level": "INFO",
            "logger": "module.name",
            "message": "log message",
            "module": "filename",
            "function": "func_name",
            "line": 42,
            "exception": "traceback..." (仅在有异常时)
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        json_output: 为 True 时使用 JSON 格式，否则使用人类可读格式

    说明:
        - 输出到 stderr，stdout 留给 CLI 的结果输出
        - 自动清理已有 handlers，避免重复输出
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        fmt = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"
        handler.setFormatter(logging.Formatter(fmt))

    root.addHandler(handler)


def reset_logging() -> None:
    """清理根日志器的全部 handlers，恢复到未配置状态"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


def indent(text: str, prefix: str = INDENT) -> str:
    """为多行文本的每个非空行加统一缩进"""
    return "\n".join(
        f"{prefix}{line}" if line.strip() else line
        for line in text.splitlines()
    )


def log_output(logger: logging.Logger, text: str, level: int = logging.INFO) -> None:
    """按缩进格式逐行记录外部命令输出"""
    if not text or not text.strip():
        return
    logger.log(level, "\n%s", indent(text.rstrip("\n")))
