import logging
import platform
import typing

import click

import filedownload
from filedownload.config import LOG_LEVELS, LOGGING_CONFIG, Config
from filedownload.download import DEFAULT_CHUNK_SIZE
from filedownload.server import Server
from filedownload.sinks import DEFAULT_BUFFER_SIZE

LEVEL_CHOICES = click.Choice(list(LOG_LEVELS.keys()))

logger = logging.getLogger("filedownload.error")


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(
        "Running filedownload %s with %s %s on %s"
        % (
            filedownload.__version__,
            platform.python_implementation(),
            platform.python_version(),
            platform.system(),
        )
    )
    ctx.exit()


@click.command(context_settings={"auto_envvar_prefix": "FILEDOWNLOAD"})
@click.argument("path")
@click.option(
    "--filename",
    type=str,
    default=None,
    help="Filename announced to the client. Defaults to the basename of PATH.",
)
@click.option(
    "--inline",
    is_flag=True,
    default=False,
    help="Omit the 'attachment' disposition so browsers may display the file.",
)
@click.option(
    "--host",
    type=str,
    default="127.0.0.1",
    help="Bind socket to this host.",
    show_default=True,
)
@click.option(
    "--port",
    type=int,
    default=8000,
    help="Bind socket to this port.",
    show_default=True,
)
@click.option(
    "--chunk-size",
    type=int,
    default=DEFAULT_CHUNK_SIZE,
    help="Number of bytes read from the file at a time.",
    show_default=True,
)
@click.option(
    "--buffer-size",
    type=int,
    default=DEFAULT_BUFFER_SIZE,
    help="Size of the response output buffer. 0 disables buffering.",
    show_default=True,
)
@click.option(
    "--limit-max-requests",
    type=int,
    default=None,
    help="Maximum number of requests to service before terminating the process.",
)
@click.option(
    "--timeout-keep-alive",
    type=float,
    default=5,
    help="Close the connection if no request arrives within this timeout.",
    show_default=True,
)
@click.option(
    "--log-config",
    type=click.Path(exists=True),
    default=None,
    help="Logging configuration file. Supported formats: .ini, .json, .yaml.",
)
@click.option(
    "--log-level",
    type=LEVEL_CHOICES,
    default=None,
    help="Log level. [default: info]",
    show_default=True,
)
@click.option(
    "--access-log/--no-access-log",
    is_flag=True,
    default=True,
    help="Enable/Disable access log.",
)
@click.option(
    "--use-colors/--no-use-colors",
    default=None,
    help="Enable/Disable colorized logging.",
)
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Display the filedownload version and exit.",
)
def main(
    path: str,
    filename: typing.Optional[str],
    inline: bool,
    host: str,
    port: int,
    chunk_size: int,
    buffer_size: int,
    limit_max_requests: typing.Optional[int],
    timeout_keep_alive: float,
    log_config: typing.Optional[str],
    log_level: typing.Optional[str],
    access_log: bool,
    use_colors: typing.Optional[bool],
) -> None:
    kwargs = {
        "filename": filename,
        "force_download": not inline,
        "host": host,
        "port": port,
        "chunk_size": chunk_size,
        "buffer_size": buffer_size,
        "limit_max_requests": limit_max_requests,
        "timeout_keep_alive": timeout_keep_alive,
        "log_config": LOGGING_CONFIG if log_config is None else log_config,
        "log_level": log_level,
        "access_log": access_log,
        "use_colors": use_colors,
    }
    run(path, **kwargs)


def run(path: str, **kwargs: typing.Any) -> None:
    config = Config(path, **kwargs)
    server = Server(config=config)
    server.run()


if __name__ == "__main__":
    main()
