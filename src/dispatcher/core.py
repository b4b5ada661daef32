from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import typer

from .logging import get_logger
from .tools import run_tool


TaskFn = Callable[["TaskContext"], None]


class UnknownTask(KeyError):
    """No task is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown command: {self.name}"


class TaskDefinitionError(ValueError):
    """Tasks are wired up wrongly (duplicate name, cycle, missing prerequisite)."""


@dataclass
class TaskSpec:
    name: str
    fn: Optional[TaskFn] = None
    needs: List[str] = field(default_factory=list)
    help: str = ""


def task(name: str, needs: Sequence[str] | None = None, help: str | None = None):
    """Decorator to declare a task on a function.

    The wrapped function receives a single `TaskContext`. Tasks listed in
    `needs` run first, in order; a function whose body is only a docstring is
    therefore a pure composite of its prerequisites.
    """

    def deco(fn: TaskFn):
        doc = (fn.__doc__ or "").strip().splitlines()
        spec = TaskSpec(
            name=name,
            fn=fn,
            needs=list(needs or []),
            help=help if help is not None else (doc[0] if doc else ""),
        )
        setattr(fn, "_task_spec", spec)
        return fn

    return deco


@dataclass
class TaskContext:
    """Everything a task body may touch: project root, settings and the
    environment handed to delegated tools."""

    root: Path
    config: dict = field(default_factory=dict)
    env: Dict[str, str] = field(default_factory=lambda: dict(os.environ))
    args: List[str] = field(default_factory=list)
    task: str = ""

    def path(self, *parts: str) -> Path:
        return self.root.joinpath(*parts)

    def run(self, *argv: str, extra_env: Mapping[str, str] | None = None) -> None:
        env = self.env
        if extra_env:
            env = {**env, **extra_env}
        run_tool(self.task, argv, cwd=self.root, env=env)


def topo_sort(nodes: Iterable[str], edges: Iterable[tuple[str, str]]) -> list[str]:
    nodes = list(nodes)
    incoming = {n: set() for n in nodes}
    outgoing = {n: set() for n in nodes}
    for u, v in edges:
        if u not in incoming:
            raise TaskDefinitionError(f"Task '{v}' needs missing task '{u}'")
        outgoing[u].add(v)
        incoming[v].add(u)
    ordered: list[str] = []
    roots = [n for n in nodes if not incoming[n]]
    while roots:
        n = roots.pop()
        ordered.append(n)
        for m in list(outgoing[n]):
            incoming[m].discard(n)
            outgoing[n].discard(m)
            if not incoming[m]:
                roots.append(m)
    stuck = sorted(n for n in nodes if incoming[n])
    if stuck:
        raise TaskDefinitionError(f"Cycle detected between tasks: {', '.join(stuck)}")
    return ordered


class Dispatcher:
    def __init__(self, tasks: Mapping[str, TaskSpec], name: str = "pubtask"):
        self.name = name
        self.tasks: Dict[str, TaskSpec] = dict(tasks)
        if "help" not in self.tasks:
            self.tasks["help"] = TaskSpec(
                name="help", fn=self._print_help, help="List available tasks."
            )
        edges = [(dep, t.name) for t in self.tasks.values() for dep in t.needs]
        topo_sort(self.tasks.keys(), edges)
        self.logger = get_logger(f"dispatcher.{self.name}")

    def names(self) -> list[str]:
        return sorted(self.tasks)

    def help_text(self) -> str:
        lines = [f"{self.name} <task> <args>", "Tasks:"]
        for i, name in enumerate(self.names(), start=1):
            desc = self.tasks[name].help
            lines.append(f"{i:6d}\t{name}" + (f"  {desc}" if desc else ""))
        return "\n".join(lines)

    def _print_help(self, ctx: TaskContext) -> None:
        typer.echo(self.help_text())

    def plan(self, name: str) -> list[str]:
        """Ordered task names to run for `name`: prerequisites first, each once."""
        if name not in self.tasks:
            raise UnknownTask(name)
        ordered: list[str] = []

        def visit(n: str) -> None:
            if n in ordered:
                return
            for dep in self.tasks[n].needs:
                visit(dep)
            ordered.append(n)

        visit(name)
        return ordered

    def run(self, name: str, ctx: TaskContext) -> list[str]:
        """Run `name` and its prerequisites in order, stopping at the first failure.

        Trailing arguments in `ctx.args` reach only the task that was asked
        for; prerequisites see none. Returns the names that ran.
        """
        selected = self.plan(name)
        self.logger.info("Selected tasks: %s", " → ".join(selected))

        done: list[str] = []
        for step_name in selected:
            spec = self.tasks[step_name]
            step_logger = get_logger(f"dispatcher.{self.name}.{step_name}")
            step_ctx = replace(
                ctx,
                task=step_name,
                args=list(ctx.args) if step_name == name else [],
            )
            step_logger.debug("Run: %s", step_name)
            try:
                if spec.fn is not None:
                    spec.fn(step_ctx)
            except Exception:
                step_logger.error("Task failed: %s", step_name)
                raise
            done.append(step_name)
        return done


def format_elapsed(seconds: float) -> str:
    """Render a duration the way bash's `%3lR` time format does."""
    minutes, secs = divmod(max(seconds, 0.0), 60)
    return f"{int(minutes)}m{secs:.3f}s"
