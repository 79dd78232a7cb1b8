"""finalize 命令: buildpack 的 bin/finalize 入口"""

import click

from dotnetcore.core.config import init_config
from dotnetcore.core.exceptions import FinalizeError
from dotnetcore.services.finalizer import build_finalizer


def register_commands(main: click.Group) -> None:
    """注册 finalize 命令"""
    main.add_command(finalize)


@click.command()
@click.argument("build_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("cache_dir", type=click.Path(file_okay=False))
@click.argument("deps_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("deps_idx")
@click.option("--config", "-c", "config_path", default="", help="配置文件路径（YAML）")
def finalize(
    build_dir: str, cache_dir: str, deps_dir: str, deps_idx: str, config_path: str,
) -> None:
    """安装框架、发布应用、清理暂存目录并生成启动命令"""
    try:
        cfg = init_config(config_path)
        release = build_finalizer(
            build_dir, cache_dir, deps_dir, deps_idx, config=cfg,
        ).run()
    except (FinalizeError, OSError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"release: {release}")
