"""Shared fixtures for the scaffolding tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console
from rich.prompt import Prompt

from plugin_scaffold.core.config import ScaffoldConfig
from plugin_scaffold.commands.plugin import GeneratePluginOptions, generate_plugin


VENDURE_CONFIG = """\
import { DefaultSearchPlugin, VendureConfig } from '@vendure/core';
import path from 'path';

export const config: VendureConfig = {
    apiOptions: {
        port: 3000,
        adminApiPath: 'admin-api',
    },
    // plugins: [] is configured below
    plugins: [
        DefaultSearchPlugin.init({ bufferUpdates: false, indexStockStatus: true }),
    ],
};
"""


class ScriptedAnswers:
    """Stands in for rich's Prompt.ask, replaying a list of answers.

    An answer of None accepts the prompt's default; an exception instance
    is raised instead of answering.
    """

    def __init__(self):
        self.answers: list = []
        self.prompts: list[str] = []

    def queue(self, *answers):
        self.answers.extend(answers)

    def __call__(self, prompt="", *args, **kwargs):
        self.prompts.append(str(prompt))
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {prompt}")
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        if answer is None:
            return kwargs.get("default")
        return answer


@pytest.fixture
def answers(monkeypatch) -> ScriptedAnswers:
    """Scripted answers for every rich prompt."""
    scripted = ScriptedAnswers()
    monkeypatch.setattr(Prompt, "ask", scripted)
    return scripted


@pytest.fixture
def console() -> Console:
    """A console writing to memory."""
    return Console(file=io.StringIO(), width=1000, force_terminal=False)


@pytest.fixture
def config() -> ScaffoldConfig:
    return ScaffoldConfig()


@pytest.fixture
def vendure_project(tmp_path: Path, monkeypatch) -> Path:
    """A minimal Vendure project root, used as the working directory."""
    (tmp_path / "package.json").write_text('{"name": "shop"}', encoding="utf-8")
    src = tmp_path / "src"
    (src / "plugins").mkdir(parents=True)
    (src / "vendure-config.ts").write_text(VENDURE_CONFIG, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def reviews_plugin(vendure_project: Path, config: ScaffoldConfig):
    """A generated "reviews" plugin inside the Vendure project."""
    options = GeneratePluginOptions(
        name="reviews",
        plugin_dir=str(vendure_project / "src" / "plugins" / "reviews"),
    )
    return generate_plugin(options, config)
