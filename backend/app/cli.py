"""
Popsite Monitor 命令行入口模块。

提供 CLI 命令：run（前台运行 HTTP 服务）、check（验证并打印配置）、
query（单次查询某个 popsite 的健康标记）。
"""
import asyncio
import json
import logging
import sys

import click
from pydantic import ValidationError as SettingsError

from app import __version__
from app.core.config import Settings
from app.core.exceptions import BusinessError


def _load_settings(ctx: click.Context, **overrides) -> Settings:
    """按 --env-file 加载配置，失败时打印错误并退出。"""
    env_file = ctx.obj["env_file"]
    try:
        return Settings(_env_file=env_file, **overrides) if env_file else Settings(**overrides)
    except SettingsError as e:
        click.echo(f"Error: invalid configuration\n{e}", err=True)
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option("--env-file", "-e", default=None, type=click.Path(dir_okay=False), help="Env file path")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, env_file, verbose):
    """Popsite Monitor - Prometheus HTTP 探测代理。"""
    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file
    ctx.obj["verbose"] = verbose

    # 未指定子命令时，显示基本信息
    if ctx.invoked_subcommand is None:
        click.echo(f"Popsite Monitor v{__version__}")
        click.echo("Use --help for available commands")


def _setup_logging(ctx: click.Context, settings: Settings) -> None:
    level = logging.DEBUG if ctx.obj["verbose"] else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@cli.command()
@click.option("--host", default=None, help="Bind host (overrides HOST)")
@click.option("--port", default=None, type=int, help="Bind port (overrides PORT)")
@click.pass_context
def run(ctx, host, port):
    """以前台模式运行 HTTP 服务。"""
    overrides = {k: v for k, v in {"host": host, "port": port}.items() if v is not None}
    settings = _load_settings(ctx, **overrides)
    _setup_logging(ctx, settings)
    logger = logging.getLogger("popsite-monitor")

    import uvicorn
    from app.main import create_app

    logger.info(f"Starting Popsite Monitor v{__version__}")
    logger.info(f"Prometheus: {settings.prometheus_url}")
    logger.info(f"Metric: {settings.promql}, step {settings.query_step}")
    logger.info(f"Server is running on {settings.host}:{settings.port}")

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


@cli.command()
@click.pass_context
def check(ctx):
    """验证配置并打印生效值（密码脱敏）。"""
    settings = _load_settings(ctx)
    for key, value in settings.masked().items():
        click.echo(f"{key}: {value}")
    click.echo("Config OK")


@cli.command()
@click.argument("popsite")
@click.option("--date", "date_", default=None, help="Window start date YYYY-MM-DD")
@click.option("--time", "time_", default=None, help="Window start time HH:mm")
@click.pass_context
def query(ctx, popsite, date_, time_):
    """单次查询 POPSITE 的健康标记并输出 JSON。"""
    settings = _load_settings(ctx)
    _setup_logging(ctx, settings)

    from app.routers.http_monitoring import collect_health_flags
    from app.services.prometheus import PrometheusClient

    client = PrometheusClient(settings)
    try:
        flags = asyncio.run(collect_health_flags(client, popsite, date_, time_))
    except BusinessError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    click.echo(json.dumps(flags))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
