"""项目查询命令: 只读诊断，不安装、不发布"""

import click

from dotnetcore.core.config import init_config
from dotnetcore.core.exceptions import FinalizeError
from dotnetcore.services.finalizer import Finalizer, build_finalizer
from dotnetcore.services.resolver import FrameworkResolver


def register_commands(main: click.Group) -> None:
    """注册项目查询命令"""
    main.add_command(resolve)
    main.add_command(start_command)


def _finalizer(build_dir: str, deps_dir: str, deps_idx: str, config_path: str) -> Finalizer:
    cfg = init_config(config_path)
    # 只读命令不下载依赖，缓存目录无关紧要
    return build_finalizer(build_dir, deps_dir, deps_dir, deps_idx, config=cfg)


@click.command()
@click.argument("build_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("deps_dir", type=click.Path(file_okay=False))
@click.argument("deps_idx")
@click.option("--config", "-c", "config_path", default="", help="配置文件路径（YAML）")
def resolve(build_dir: str, deps_dir: str, deps_idx: str, config_path: str) -> None:
    """输出部署类型和解析出的框架版本"""
    try:
        f = _finalizer(build_dir, deps_dir, deps_idx, config_path)
        deployment_type = f.project.deployment_type()
        versions = FrameworkResolver(f.project).resolve(deployment_type)
    except (FinalizeError, OSError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"deployment_type: {deployment_type.value}")
    for spec in versions.specs():
        click.echo(f"{spec.name}: {spec.version}")


@click.command(name="start-command")
@click.argument("build_dir", type=click.Path(exists=True, file_okay=False))
@click.argument("deps_dir", type=click.Path(file_okay=False))
@click.argument("deps_idx")
@click.option("--config", "-c", "config_path", default="", help="配置文件路径（YAML）")
def start_command(build_dir: str, deps_dir: str, deps_idx: str, config_path: str) -> None:
    """输出 release YAML 中的 web 启动命令"""
    try:
        release = _finalizer(
            build_dir, deps_dir, deps_idx, config_path,
        ).generate_release_yaml()
    except (FinalizeError, OSError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(release["default_process_types"]["web"])
