"""
Shared test fixtures and configuration.

Projects are laid out under ``tmp_path`` and classified with tier
patterns rooted there:

    <tmp>/vhosts/dev1/.env                 shared family settings
    <tmp>/vhosts/dev1/example/             dev project "example"
    <tmp>/prod/acme/public_html/           prod project "acme"
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import pytest
import yaml

from siteflow.adapters.base import ExecutionContext
from siteflow.adapters.mock import MockAdapter
from siteflow.adapters.registry import AdapterRegistry
from siteflow.adapters.shell.filesystem import FilesystemAdapter
from siteflow.core.context import build_context
from siteflow.core.models.config import SiteflowConfig, TierRule
from siteflow.core.models.context import ProjectContext
from siteflow.core.services.drift import CONFIG_CLEAN_MARKER

UP_TO_DATE = "Your branch is up to date with 'origin/master'.\n\nnothing to commit, working tree clean"


def tier_patterns(base: Path) -> dict:
    root = re.escape(str(base.resolve()))
    return {
        "dev": {"path_patterns": [rf"^{root}/vhosts/(?P<family>[a-z0-9]+)/(?P<project>[a-z0-9]+)/?$"]},
        "prod": {"path_patterns": [rf"^{root}/prod/(?P<project>[a-z0-9]+)/public_html/?$"]},
    }


@pytest.fixture
def config(tmp_path: Path) -> SiteflowConfig:
    patterns = tier_patterns(tmp_path)
    return SiteflowConfig(
        dev=TierRule(**patterns["dev"]),
        prod=TierRule(**patterns["prod"]),
    )


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """siteflow.yml above the project dirs, found by upward discovery."""
    path = tmp_path / "siteflow.yml"
    path.write_text(yaml.safe_dump(tier_patterns(tmp_path)), encoding="utf-8")
    return path


@pytest.fixture
def dev_root(tmp_path: Path) -> Path:
    """A dev project straight after create-project: scaffold, no settings."""
    root = tmp_path / "vhosts" / "dev1" / "example"
    (root / "private" / "scaffold").mkdir(parents=True)
    (root / "private" / "scaffold" / "default.settings.php.append").write_text("// append\n")
    (root / "web" / "sites" / "default").mkdir(parents=True)
    (root / "web" / "sites" / "default" / "default.settings.php").write_text("<?php\n// default\n")
    (root.parent / ".env").write_text('DB_USER="dev1"\nDB_PASSWORD="s3cret"\n')
    return root


@pytest.fixture
def configured_root(dev_root: Path) -> Path:
    """A dev project after init-dev."""
    (dev_root / ".env").write_text('PROJECT_NAME="example"\nDB_NAME="dev1_example"\n')
    (dev_root / "web" / "sites" / "default" / "settings.php").write_text("<?php\n")
    return dev_root


@pytest.fixture
def installed_root(configured_root: Path) -> Path:
    """A dev project after install."""
    (configured_root / "web" / "sites" / "default" / "files").mkdir()
    return configured_root


@pytest.fixture
def prod_root(tmp_path: Path) -> Path:
    root = tmp_path / "prod" / "acme" / "public_html"
    root.mkdir(parents=True)
    (root / ".env").write_text('PROJECT_NAME="example"\nENV="prod"\n')
    return root


@pytest.fixture
def make_ctx(config: SiteflowConfig):
    """Build the ProjectContext for a directory, as the CLI would."""

    def make(root: Path, hostname: str = "dev1") -> ProjectContext:
        return build_context(config, cwd=root, hostname=hostname)

    return make


# ── Adapters ────────────────────────────────────────────────────────


def _simulate_drush(context: ExecutionContext) -> None:
    """Leave behind what a real site install would."""
    argv = context.action.params.get("argv", [])
    if "site:install" in argv:
        Path(context.project_root, "web/sites/default/files").mkdir(parents=True, exist_ok=True)


@dataclass
class Adapters:
    registry: AdapterRegistry
    shell: MockAdapter
    git: MockAdapter
    ssh: MockAdapter
    order: list[str] = field(default_factory=list)

    def clean_config(self) -> None:
        self.shell.set_output("drush config:status", CONFIG_CLEAN_MARKER)


@pytest.fixture
def adapters() -> Adapters:
    """Mocked shell/git/ssh plus the real filesystem adapter."""
    order: list[str] = []

    def record(context: ExecutionContext) -> None:
        order.append(context.action.name)

    def shell_hook(context: ExecutionContext) -> None:
        record(context)
        _simulate_drush(context)

    shell = MockAdapter("shell", on_execute=shell_hook)
    git = MockAdapter("git", default_output=UP_TO_DATE, on_execute=record)
    ssh = MockAdapter("ssh", remote=True, on_execute=record)

    registry = AdapterRegistry()
    for adapter in (shell, git, ssh, FilesystemAdapter()):
        registry.register(adapter)
    return Adapters(registry=registry, shell=shell, git=git, ssh=ssh, order=order)


# ── Operator ────────────────────────────────────────────────────────


class ScriptedOperator:
    """Answers prompts from a script and records everything it was told.

    An empty answer takes the prompt's default. Answers rejected by the
    validator are recorded in ``rejected`` and the next answer is used,
    like a re-prompt.
    """

    def __init__(self, answers: list[str] | None = None, confirmations: list[bool] | None = None):
        self.answers = list(answers or [])
        self.confirmations = list(confirmations or [])
        self.said: list[str] = []
        self.steps: list[str] = []
        self.shown: list[tuple[str, str]] = []
        self.asked: list[str] = []
        self.rejected: list[str] = []

    def say(self, message: str) -> None:
        self.said.append(message)

    def step(self, name: str) -> None:
        self.steps.append(name)

    def show(self, title: str, text: str) -> None:
        self.shown.append((title, text))

    def ask(self, question, default="", hidden=False, validate=None) -> str:
        self.asked.append(question)
        while True:
            if not self.answers:
                raise AssertionError(f"Unexpected prompt: {question}")
            value = self.answers.pop(0) or default
            if validate is None:
                return value
            try:
                return validate(value)
            except ValueError:
                self.rejected.append(value)

    def confirm(self, question, default=False) -> bool:
        self.asked.append(question)
        if not self.confirmations:
            raise AssertionError(f"Unexpected confirmation: {question}")
        return self.confirmations.pop(0)


@pytest.fixture
def operator() -> ScriptedOperator:
    return ScriptedOperator()


@pytest.fixture
def scripted():
    """The ScriptedOperator class, for tests that need answers."""
    return ScriptedOperator
