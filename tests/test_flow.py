"""Tests for the interactive plugin creation flow."""

from __future__ import annotations

import pytest

from plugin_scaffold.commands.plugin import (
    CANCELLED_MESSAGE,
    COMPLETE_MESSAGE,
    create_new_plugin,
)
from plugin_scaffold.shared.prompts import PromptCancelled, ask_select, ask_text


class TestPrompts:
    """Tests for the prompt helpers."""

    def test_ask_text_revalidates(self, answers, console):
        answers.queue("Bad Name", "  good  ")
        value = ask_text("Name?", validate=lambda v: None if v == "good" else "nope", console=console)
        assert value == "good"
        assert len(answers.prompts) == 2
        assert "✗ nope" in console.file.getvalue()

    def test_ask_text_default(self, answers, console):
        answers.queue(None)
        assert ask_text("Name?", default="MyService", console=console) == "MyService"

    @pytest.mark.parametrize("interrupt", [KeyboardInterrupt(), EOFError()])
    def test_cancel(self, answers, console, interrupt):
        answers.queue(interrupt)
        with pytest.raises(PromptCancelled):
            ask_text("Name?", console=console)

    def test_ask_select(self, answers, console):
        answers.queue("2")
        assert ask_select("Pick", [("a", "First"), ("b", "Second")], console=console) == "b"
        output = console.file.getvalue()
        assert "1. First" in output
        assert "2. Second" in output


class TestCreateNewPlugin:
    """Tests for the full interactive flow."""

    def test_cancel_at_name(self, answers, console, vendure_project, config):
        config_path = vendure_project / "src" / "vendure-config.ts"
        before = config_path.read_text(encoding="utf-8")
        answers.queue(KeyboardInterrupt())

        assert create_new_plugin(console, config, vendure_project) == 0

        assert CANCELLED_MESSAGE in console.file.getvalue()
        assert list((vendure_project / "src" / "plugins").iterdir()) == []
        assert config_path.read_text(encoding="utf-8") == before

    def test_cancel_at_location(self, answers, console, vendure_project, config):
        answers.queue("reviews", EOFError())

        assert create_new_plugin(console, config, vendure_project) == 0

        assert CANCELLED_MESSAGE in console.file.getvalue()
        assert list((vendure_project / "src" / "plugins").iterdir()) == []

    def test_invalid_name_reprompts(self, answers, console, vendure_project, config):
        answers.queue("Bad Name", "reviews", None, "1")

        assert create_new_plugin(console, config, vendure_project) == 0

        assert answers.prompts.count(answers.prompts[0]) == 2
        assert "lowercase" in console.file.getvalue()

    def test_default_location_and_finish(self, answers, console, vendure_project, config):
        answers.queue("reviews", None, "1")

        assert create_new_plugin(console, config, vendure_project) == 0

        plugin_dir = vendure_project / "src" / "plugins" / "reviews"
        assert (plugin_dir / "reviews.plugin.ts").is_file()
        config_text = (vendure_project / "src" / "vendure-config.ts").read_text(encoding="utf-8")
        assert "ReviewsPlugin.init({})" in config_text
        output = console.file.getvalue()
        assert COMPLETE_MESSAGE in output
        assert "Add features to reviews?" in output

    def test_existing_directory_reprompts(self, answers, console, vendure_project, config):
        (vendure_project / "src" / "plugins" / "reviews").mkdir()
        other_dir = vendure_project / "src" / "plugins" / "product-reviews"
        answers.queue("reviews", None, str(other_dir), "1")

        assert create_new_plugin(console, config, vendure_project) == 0

        assert "already exists" in console.file.getvalue()
        assert (other_dir / "reviews.plugin.ts").is_file()
        assert list((vendure_project / "src" / "plugins" / "reviews").iterdir()) == []

    def test_cancel_inside_feature_returns_to_menu(self, answers, console, vendure_project, config):
        answers.queue("reviews", None, "2", KeyboardInterrupt(), "1")

        assert create_new_plugin(console, config, vendure_project) == 0

        output = console.file.getvalue()
        assert "Cancelled." in output
        assert COMPLETE_MESSAGE in output
        assert not (vendure_project / "src" / "plugins" / "reviews" / "entities").exists()

    def test_duplicate_entity_reprompts(self, answers, console, vendure_project, config):
        answers.queue(
            "reviews", None,
            "2", "ProductReview",
            "2", "ProductReview", "ReviewVote",
            "1",
        )

        assert create_new_plugin(console, config, vendure_project) == 0

        output = console.file.getvalue()
        assert "An entity file already exists" in output
        assert COMPLETE_MESSAGE in output
        plugin_dir = vendure_project / "src" / "plugins" / "reviews"
        assert (plugin_dir / "entities" / "review-vote.entity.ts").is_file()
        plugin_text = (plugin_dir / "reviews.plugin.ts").read_text(encoding="utf-8")
        assert "entities: [ProductReview, ReviewVote]," in plugin_text

    def test_duplicate_service_reprompts(self, answers, console, vendure_project, config):
        answers.queue("reviews", None, "3", None, "3", None, "Review", "1")

        assert create_new_plugin(console, config, vendure_project) == 0

        output = console.file.getvalue()
        assert "A service file already exists" in output
        assert COMPLETE_MESSAGE in output
        services_dir = vendure_project / "src" / "plugins" / "reviews" / "services"
        assert sorted(p.name for p in services_dir.iterdir()) == ["my-service.ts", "review-service.ts"]

    def test_cancel_at_menu_finishes(self, answers, console, vendure_project, config):
        answers.queue("reviews", None, KeyboardInterrupt())

        assert create_new_plugin(console, config, vendure_project) == 0
        assert COMPLETE_MESSAGE in console.file.getvalue()

    def test_all_features(self, answers, console, vendure_project, config):
        answers.queue(
            "reviews", None,
            "2", "ProductReview",
            "3", None,
            "4",
            "5",
            "4",
            "1",
        )

        assert create_new_plugin(console, config, vendure_project) == 0

        plugin_dir = vendure_project / "src" / "plugins" / "reviews"
        assert (plugin_dir / "entities" / "product-review.entity.ts").is_file()
        assert (plugin_dir / "services" / "my-service.ts").is_file()
        assert (plugin_dir / "ui" / "providers.ts").is_file()
        assert (vendure_project / "codegen.ts").is_file()

        plugin_text = (plugin_dir / "reviews.plugin.ts").read_text(encoding="utf-8")
        assert "entities: [ProductReview]," in plugin_text
        assert "MyService" in plugin_text
        assert plugin_text.count("static ui") == 1
        assert "already has UI extensions" in console.file.getvalue()
