from __future__ import annotations

import importlib
import os
import pkgutil
import time
from pathlib import Path
from typing import Dict, List, Optional

import typer
import yaml

from .core import Dispatcher, TaskContext, TaskDefinitionError, TaskSpec, UnknownTask, format_elapsed
from .logging import get_logger, log_to_file
from .tools import COMMAND_NOT_FOUND, ToolFailure
from .utils import load_config


TASKS_PACKAGE = "src.tasks"

app = typer.Typer(add_completion=False, help="Task runner for building and publishing this package")
log = get_logger("dispatcher.cli")


def discover_tasks(package: str = TASKS_PACKAGE) -> Dict[str, TaskSpec]:
    """Import all modules in the tasks package and collect decorated functions."""
    specs: Dict[str, TaskSpec] = {}
    try:
        pkg = importlib.import_module(package)
    except ModuleNotFoundError:
        log.warning("No tasks package found: %s", package)
        return specs
    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{package}."):
        try:
            mod = importlib.import_module(m.name)
        except Exception as e:  # noqa: BLE001
            log.warning("Failed to import %s: %s", m.name, e)
            continue
        for attr_name in dir(mod):
            obj = getattr(mod, attr_name)
            spec = getattr(obj, "_task_spec", None)
            if not isinstance(spec, TaskSpec):
                continue
            other = specs.get(spec.name)
            if other is not None and other.fn is not spec.fn:
                raise TaskDefinitionError(f"Duplicate task name: {spec.name}")
            specs[spec.name] = spec
    return specs


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        # Everything after the task name belongs to the task
        "allow_interspersed_args": False,
    },
)
def run(
    name: Optional[str] = typer.Argument(None, help="Task to run (default: help)"),
    args: Optional[List[str]] = typer.Argument(None, help="Arguments passed to the task"),
    root: Path = typer.Option(Path("."), help="Project root the tasks operate on"),
    config: Optional[str] = typer.Option(None, help="Path to YAML task settings"),
    log_file: Optional[Path] = typer.Option(None, help="Also write logs to this file"),
):
    """Run a task by name, or list the tasks when no name is given."""
    if log_file:
        log_to_file(log_file)

    task_name = name or "help"
    code = 0
    start = time.perf_counter()
    try:
        project_root = root.resolve()
        dispatcher = Dispatcher(discover_tasks(), name="pubtask")
        ctx = TaskContext(
            root=project_root,
            config=load_config(config, root=project_root),
            env=dict(os.environ),
            args=list(args or []),
        )
        dispatcher.run(task_name, ctx)
    except UnknownTask as e:
        typer.echo(str(e), err=True)
        code = COMMAND_NOT_FOUND
    except ToolFailure as e:
        typer.echo(str(e), err=True)
        code = e.exit_code
    except (TaskDefinitionError, ValueError, OSError, yaml.YAMLError) as e:
        typer.echo(f"Error: {e}", err=True)
        code = 1
    except KeyboardInterrupt:
        typer.echo("\nInterrupted by user", err=True)
        code = 130
    finally:
        typer.echo(f"Task completed in {format_elapsed(time.perf_counter() - start)}", err=True)

    if code:
        raise typer.Exit(code=code)


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
