"""Small task dispatcher for packaging and publishing workflows.

Provides the `task` decorator, the Dispatcher that expands and runs task plans,
and a Typer CLI (`pubtask`).
"""

from .core import Dispatcher, TaskContext, TaskSpec, task  # re-export for convenience

__all__ = ["Dispatcher", "TaskContext", "TaskSpec", "task"]
