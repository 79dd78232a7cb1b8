"""dotnetcore-finalize 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os

import click

from dotnetcore import __version__
from dotnetcore.utils.logger import setup_logging


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """dotnetcore-finalize - .NET Core buildpack finalize 阶段"""
    setup_logging(
        level=os.getenv("DOTNET_FINALIZE_LOG_LEVEL", "INFO"),
        json_output=os.getenv("DOTNET_FINALIZE_LOG_JSON", "") == "1",
    )


# 注册各领域子命令
from dotnetcore.cli.cmd_finalize import register_commands as _reg_finalize  # noqa: E402
from dotnetcore.cli.cmd_project import register_commands as _reg_project  # noqa: E402

_reg_finalize(main)
_reg_project(main)
