"""Delegating tasks: install, lint, test, build and publish.

Each task is a thin call to an external tool (pip, pre-commit, pytest, build,
twine). Tool failures propagate as `ToolFailure` with the tool's exit code.
"""

from __future__ import annotations

import sys

from ..dispatcher import task
from ..dispatcher.core import TaskContext
from ..dispatcher.envfile import load_env_file
from ..dispatcher.logging import get_logger
from ..dispatcher.utils import dist_dir, env_file, install_extras, repository, tool_args


logger = get_logger("tasks.packaging")


@task(name="install")
def install(ctx: TaskContext):
    """Upgrade pip and install the project in editable mode with dev extras."""
    py = sys.executable
    extras = install_extras(ctx.config)
    target = f"{ctx.root}[{extras}]" if extras else str(ctx.root)
    ctx.run(py, "-m", "pip", "install", "--upgrade", "pip")
    ctx.run(py, "-m", "pip", "install", "--editable", target)


@task(name="lint")
def lint(ctx: TaskContext):
    """Run every pre-commit hook against all files."""
    ctx.run("pre-commit", *tool_args(ctx.config, "lint"), *ctx.args)


@task(name="test")
def test(ctx: TaskContext):
    """Run pytest with JUnit and coverage reports."""
    ctx.run(sys.executable, "-m", "pytest", *tool_args(ctx.config, "test"), *ctx.args)


@task(name="build")
def build(ctx: TaskContext):
    """Build the sdist and wheel into dist/."""
    ctx.run(sys.executable, "-m", "build", "--sdist", "--wheel", str(ctx.root))


def try_load_env_file(ctx: TaskContext) -> bool:
    """Load the secrets file into the task environment; absence is not fatal."""
    return load_env_file(ctx.path(env_file(ctx.config)), ctx.env) is not None


def _artifacts(ctx: TaskContext) -> list[str]:
    dist = ctx.path(dist_dir(ctx.config))
    found = sorted(str(p) for p in dist.glob("*") if p.is_file()) if dist.is_dir() else []
    if not found:
        # Hand twine the literal pattern so it reports the missing artifacts
        logger.warning("No artifacts in %s", dist)
        return [f"{dist_dir(ctx.config)}/*"]
    return found


def _publish(ctx: TaskContext, target: str) -> None:
    try_load_env_file(ctx)
    repo_name, token_env = repository(ctx.config, target)
    token = ctx.env.get(token_env, "")
    if not token:
        logger.warning("%s is not set; leaving TWINE_PASSWORD untouched", token_env)
    ctx.run(
        "twine",
        "upload",
        *_artifacts(ctx),
        "--repository",
        repo_name,
        "--username=__token__",
        extra_env={"TWINE_PASSWORD": token} if token else None,
    )


@task(name="publish:test")
def publish_test(ctx: TaskContext):
    """Upload dist/ to TestPyPI using TEST_PYPI_TOKEN."""
    _publish(ctx, "test")


@task(name="publish:prod")
def publish_prod(ctx: TaskContext):
    """Upload dist/ to PyPI using PROD_PYPI_TOKEN."""
    _publish(ctx, "prod")
