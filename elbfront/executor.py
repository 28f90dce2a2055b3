"""
Executors that either perform mutating control-plane calls or only describe them.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from .client import ElbV2Client

logger = logging.getLogger(__name__)

DoneMessage = Optional[Callable[[Any], str]]


def describe_call(method: str, params: Dict[str, Any]) -> str:
    """Render a client call the way it would be issued, e.g. for dry-run output."""
    args = ", ".join(f"{key}={value!r}" for key, value in params.items())
    return f"elb_client.{method}({args})"


class Executor(ABC):
    """Runs mutating actions against the control plane."""

    dry_run = False

    def __init__(self, client: ElbV2Client):
        self.client = client

    @abstractmethod
    def run(self, description: str, action: Callable[[], Any], done: DoneMessage = None) -> Any:
        """
        Run (or describe) one mutating action.

        Args:
            description: What the action does, as a call expression
            action: Zero-argument callable performing the action
            done: Builds the log line for a completed action from its result

        Returns:
            The action's result, or None when nothing was performed
        """

    def call(self, method: str, params: Dict[str, Any], done: DoneMessage = None) -> Any:
        """Run a single client method with keyword params."""
        return self.run(
            describe_call(method, params),
            lambda: getattr(self.client, method)(**params),
            done,
        )


class ExecutingExecutor(Executor):
    """Performs every action and logs its outcome."""

    def run(self, description, action, done=None):
        logger.debug(description)
        result = action()
        if done is not None:
            logger.info(done(result))
        return result


class DescribingExecutor(Executor):
    """Logs what would be done; never touches the control plane."""

    dry_run = True

    def run(self, description, action, done=None):
        logger.info(f"{description} (dry-run)")
        return None


def make_executor(client: ElbV2Client, dry_run: bool) -> Executor:
    if dry_run:
        return DescribingExecutor(client)
    return ExecutingExecutor(client)
