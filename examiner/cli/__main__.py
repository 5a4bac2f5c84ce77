from __future__ import annotations

import importlib
import sys
import threading
import types
import typing as t
from pathlib import Path

import pydantic as p

import examiner
import examiner.lib.cli as click
from examiner.core import di, ExaminerContainer
from examiner.model import DeploymentEnvironment

Commands: t.Final = ("bank", "export", "schema", "web")
ProjectRoot = Path(examiner.__file__).resolve().parents[1]


class CommandLoader(click.Group):
    """Subcommands live in examiner.cli.<name> and are imported on first use

    Each loaded module is wired into the container when `main` boots it.
    """

    loaded: list[types.ModuleType] = []
    booted: bool = False

    def list_commands(self, ctx: click.Context) -> list[str]:
        return list(Commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name not in Commands:
            return None
        mod = importlib.import_module(f"examiner.cli.{cmd_name}")
        CommandLoader.loaded.append(mod)
        return getattr(mod, cmd_name)


@click.group(cls=CommandLoader)
@click.option("-E", "--env", default=DeploymentEnvironment.Local, type=click.EnumType(DeploymentEnvironment))
@click.option("-c", "--config-root", default=ProjectRoot / "config", type=click.URIParamType(dir_ok=True))
@click.option("-s", "--secrets-path", default=None, type=click.URIParamType(dir_ok=True))
@click.option(
    "-o",
    "--override",
    multiple=True,
    help="dotted configuration key and YAML value, e.g. -o exam.max_followups=2",
)
@click.option("-D", "--debug", is_flag=True, default=False, help="drop into pdb on an unhandled error")
@click.pass_obj
@di.inject
def main(
    ct: ExaminerContainer,
    env: DeploymentEnvironment,
    config_root: p.FileUrl,
    secrets_path: p.AnyUrl | None,
    override: tuple[str, ...],
    debug: bool,
):
    ExaminerContainer.boot(
        ct,
        debug=debug,
        env=env,
        config_root=config_root,
        secrets_path=secrets_path,
        override=override,
        wiring=tuple(CommandLoader.loaded),
    )
    CommandLoader.booted = True


def execute_command(*argv: str) -> None:
    threading.current_thread().name = "examiner-0"
    prog, *args = list(argv or sys.argv)
    container = ExaminerContainer()

    try:
        with main.make_context(Path(prog).name, args=args) as ctx:
            ctx.obj = container
            sys.exit(t.cast(int, main.invoke(ctx)))
    except (EOFError, KeyboardInterrupt, click.Abort):
        click.echo("Aborted!", file=sys.stderr)
        sys.exit(1)
    except click.exceptions.Exit as e:
        sys.exit(e.exit_code)
    except Exception as e:
        click.echo(click.style("ERROR ", fg="red") + str(e), file=sys.stderr)

        # -D may not have been parsed yet if the failure came before boot
        if container.debug() or (not CommandLoader.booted and "-D" in args):
            import pdb
            import traceback

            traceback.print_exc()
            pdb.post_mortem()
        sys.exit(e.exit_code if isinstance(e, click.ClickException) else -1)
    finally:
        container.shutdown_resources()


if __name__ == "__main__":
    execute_command(*sys.argv)
