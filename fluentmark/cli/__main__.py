from __future__ import annotations

import importlib
import sys
import threading
import traceback
import types
import typing as t
from pathlib import Path

import pydantic as p

import fluentmark
import fluentmark.lib.cli as click
from fluentmark.core import FluentmarkContainer
from fluentmark.evaluation.errors import EvaluationError
from fluentmark.model import DeploymentEnvironment

CONFIG_ROOT = Path(fluentmark.__file__).resolve().parents[1] / "config"

# subcommand name -> module defining a click command of the same name
COMMANDS = {
    "evaluate": "fluentmark.cli.evaluate",
    "schema": "fluentmark.cli.schema",
}

# command modules imported so far; wired into the container at boot
_loaded: list[types.ModuleType] = []
_booted = False


class LazyCommandGroup(click.Group):
    """Imports a subcommand's module only when that subcommand is asked for."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(COMMANDS)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name not in COMMANDS:
            return None
        module = importlib.import_module(COMMANDS[cmd_name])
        _loaded.append(module)
        return getattr(module, cmd_name)


@click.group(cls=LazyCommandGroup)
@click.option("-E", "--env", default=DeploymentEnvironment.Local, type=click.EnumType(DeploymentEnvironment))
@click.option("-c", "--config-root", default=CONFIG_ROOT, type=click.URIParamType(dir_ok=True))
@click.option(
    "-o",
    "--override",
    multiple=True,
    help="override a configuration value by its dotted path, e.g. -o evaluation.max_workers=4",
)
@click.option("-D", "--debug", is_flag=True, default=False, help="Print tracebacks for errors")
@click.pass_context
def main(
    ctx: click.Context,
    env: DeploymentEnvironment,
    config_root: p.FileUrl,
    override: tuple[str, ...],
    debug: bool,
):
    """Rule-based evaluation of language-learning submissions."""
    global _booted
    ct = ctx.ensure_object(FluentmarkContainer)
    FluentmarkContainer.boot(
        ct,
        debug=debug,
        env=env,
        config_root=config_root,
        override=override,
        wiring=tuple(_loaded),
    )
    _booted = True


def report(ex: Exception, container: FluentmarkContainer, argv: t.Sequence[str]) -> int:
    """Print ``ex`` for the user and choose the exit status."""
    click.echo(click.style("ERROR ", fg="red") + str(ex), file=sys.stderr)
    if isinstance(ex, EvaluationError):
        click.echo(ex.user_message, file=sys.stderr)

    # before boot the container cannot tell us whether -D was given
    if container.debug() if _booted else "-D" in argv or "--debug" in argv:
        traceback.print_exc()
    return 1


def execute_command(*argv: str) -> t.NoReturn:
    threading.current_thread().name = "fluentmark-0"
    args = list(argv or sys.argv)
    prog = Path(args[0]).name
    container = FluentmarkContainer()

    status = 0
    try:
        with main.make_context(prog, args=args[1:], obj=container) as ctx:
            status = t.cast(int | None, main.invoke(ctx)) or 0
    except click.exceptions.Exit as e:
        status = e.exit_code
    except (EOFError, KeyboardInterrupt, click.Abort):
        click.echo("Aborted!", file=sys.stderr)
        status = 1
    except click.ClickException as e:
        e.show()
        status = e.exit_code
    except Exception as e:
        status = report(e, container, args[1:])
    finally:
        container.shutdown_resources()
    sys.exit(status)


def entrypoint() -> None:
    execute_command(*sys.argv)


if __name__ == "__main__":
    entrypoint()
