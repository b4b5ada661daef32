"""Composite tasks. Prerequisites run in order and the first failure stops the rest."""

from __future__ import annotations

from ..dispatcher import task


@task(name="test:build", needs=["test", "build"])
def test_build(ctx):
    """Run the tests, then build the distributions."""


@task(name="release:test", needs=["test:build", "publish:test"])
def release_test(ctx):
    """Test, build and upload to TestPyPI."""


@task(name="release:prod", needs=["test:build", "publish:prod"])
def release_prod(ctx):
    """Test, build and upload to PyPI."""
