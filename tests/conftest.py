"""Pytest configuration and shared fixtures."""
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from click.testing import CliRunner

from topup.core import Category, Command, ExecutionContext, NullReporter, Outcome, RunOptions, Step
from topup.core.sudo import Sudo


class FakeEnv:
    """Environment double: binaries come from a dict, nothing touches the host."""

    def __init__(self, binaries: Optional[Dict[str, str]] = None, os_name: str = "linux",
                 home: Optional[Path] = None, is_root: bool = False, distro: str = ""):
        self.binaries = {k: Path(v) for k, v in (binaries or {}).items()}
        self.os_name = os_name
        self.home = home or Path("/nonexistent-home")
        self.is_root = is_root
        self._distro = distro

    def which(self, binary: str) -> Optional[Path]:
        return self.binaries.get(binary)

    @property
    def config_dir(self) -> Path:
        return self.home / ".config"

    def distro_id(self) -> str:
        return self._distro

    def is_distro(self, *names: str) -> bool:
        return any(name in self._distro.split() for name in names)


class FakeExecutor:
    """Records commands; outcomes are looked up by argv[0].

    A value may be an ``Outcome``, an exception instance (raised) or a
    callable taking the command.
    """

    def __init__(self, outcomes: Optional[Dict[str, object]] = None, queries: Optional[Dict[str, str]] = None):
        self.outcomes = outcomes or {}
        self.queries = queries or {}
        self.calls: List[Command] = []

    def run(self, command: Command) -> Outcome:
        self.calls.append(command)
        result = self.outcomes.get(command.argv[0], Outcome.success())
        if isinstance(result, BaseException):
            raise result
        if callable(result):
            return result(command)
        return result

    def output(self, *argv) -> str:
        return self.queries[str(argv[0])]

    @property
    def programs(self) -> List[str]:
        return [command.argv[0] for command in self.calls]


class FakeStep(Step):
    """Step that runs one command named after itself, or raises ``error``."""

    def __init__(self, name: str, category: Category = Category.SYSTEM, installed: bool = True,
                 error: Optional[BaseException] = None, sudo: bool = False):
        self.name = name
        self.category = category
        self.installed = installed
        self.error = error
        self.sudo = sudo
        self.applicable_calls = 0

    def applicable(self, ctx) -> bool:
        self.applicable_calls += 1
        return self.installed

    def commands(self, ctx) -> List[Command]:
        if self.error is not None:
            raise self.error
        return [Command.of(self.name, sudo=self.sudo)]


class ScriptedPrompt:
    """Answers prompts from a list, recording every question."""

    def __init__(self, answers=()):
        self.answers = list(answers)
        self.questions: List[str] = []

    def __call__(self, message: str, default: str = "y") -> str:
        self.questions.append(message)
        if not self.answers:
            return default
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer


class CountingElevate:
    def __init__(self, error: Optional[BaseException] = None):
        self.calls = 0
        self.error = error

    def __call__(self) -> Sudo:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return Sudo(Path("/usr/bin/sudo"), "sudo")


@pytest.fixture
def cli_runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_config(monkeypatch):
    """Create temporary config directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_dir = os.path.join(temp_dir, ".topup")
        os.makedirs(config_dir, exist_ok=True)
        monkeypatch.setenv("HOME", temp_dir)
        yield config_dir


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def fake_env() -> FakeEnv:
    return FakeEnv()


@pytest.fixture
def make_env():
    """Factory for ``FakeEnv`` instances."""
    return FakeEnv


@pytest.fixture
def make_step():
    """Factory for ``FakeStep`` instances."""
    return FakeStep


@pytest.fixture
def scripted_prompt():
    return ScriptedPrompt


@pytest.fixture
def counting_elevate():
    return CountingElevate


@pytest.fixture
def make_ctx(fake_executor, fake_env):
    """Build an ``ExecutionContext`` wired to fakes.

    Keyword arguments not consumed here become ``RunOptions`` fields.
    """
    def _make(prompt=None, executor=None, env=None, elevate=None, reporter=None, **opts):
        return ExecutionContext(
            RunOptions(**opts),
            env=env or fake_env,
            reporter=reporter or NullReporter(),
            prompt=prompt,
            elevate=elevate,
            executor=executor or fake_executor,
        )
    return _make
