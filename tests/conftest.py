from __future__ import annotations

import subprocess
from types import SimpleNamespace

import pytest

from src.dispatcher import Dispatcher, TaskContext
from src.dispatcher import tools
from src.dispatcher.cli import discover_tasks
from src.dispatcher.utils import load_config


class Recorder:
    """Stand-in for subprocess.run that records each delegated command."""

    def __init__(self):
        self.calls = []
        self.failures = {}
        self.missing = set()

    def fail_on(self, word: str, code: int = 1) -> None:
        self.failures[word] = code

    def __call__(self, argv, cwd=None, env=None, **kwargs):
        self.calls.append(SimpleNamespace(argv=list(argv), cwd=cwd, env=dict(env or {})))
        if argv[0] in self.missing:
            raise FileNotFoundError(argv[0])
        code = 0
        for word, rc in self.failures.items():
            if word in argv:
                code = rc
        return subprocess.CompletedProcess(argv, code)

    @property
    def argvs(self):
        return [c.argv for c in self.calls]

    def tools(self):
        """Tool name per call, using the module name for `python -m <module>`."""
        out = []
        for argv in self.argvs:
            out.append(argv[2] if len(argv) > 2 and argv[1] == "-m" else argv[0])
        return out


@pytest.fixture
def recorder(monkeypatch):
    rec = Recorder()
    monkeypatch.setattr(tools.subprocess, "run", rec)
    return rec


@pytest.fixture
def ctx(tmp_path):
    return TaskContext(
        root=tmp_path,
        config=load_config(root=tmp_path),
        env={"PATH": "/usr/bin"},
    )


@pytest.fixture
def dispatcher():
    return Dispatcher(discover_tasks())
