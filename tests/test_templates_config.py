"""Tests for the template engine and the settings loader."""

from __future__ import annotations

import json

import pytest

from plugin_scaffold.core.config import (
    DEFAULT_CONFIG_FILE,
    ConfigError,
    ConfigManager,
    ScaffoldConfig,
    find_config_file,
    load_config,
)
from plugin_scaffold.core.templates import (
    BUNDLED_TEMPLATE_DIR,
    TemplateEngine,
    TemplateError,
    get_default_template_engine,
    get_template_engine,
)


class TestTemplateEngine:
    """Tests for TemplateEngine."""

    @pytest.fixture
    def engine(self, tmp_path) -> TemplateEngine:
        (tmp_path / "names.ts.j2").write_text(
            "{{ name | pascal_case }} {{ name | kebab_case }} {{ name | camel_case }} {{ name | constant_case }}\n",
            encoding="utf-8",
        )
        (tmp_path / "broken.ts.j2").write_text("{{ missing }}\n", encoding="utf-8")
        return TemplateEngine(tmp_path)

    def test_filters(self, engine):
        rendered = engine.render_template("names.ts.j2", {"name": "product review"})
        assert rendered == "ProductReview product-review productReview PRODUCT_REVIEW\n"

    def test_missing_template(self, engine):
        assert not engine.template_exists("nope.ts.j2")
        with pytest.raises(TemplateError, match="not found"):
            engine.render_template("nope.ts.j2", {})

    def test_undefined_variable(self, engine):
        with pytest.raises(TemplateError, match="broken.ts.j2"):
            engine.render_template("broken.ts.j2", {})

    def test_missing_directory(self, tmp_path):
        with pytest.raises(TemplateError):
            TemplateEngine(tmp_path / "nope")

    def test_template_path(self, engine, tmp_path):
        assert engine.get_template_path("names.ts.j2") == tmp_path / "names.ts"

    def test_bundled_templates(self):
        engine = get_default_template_engine()
        assert engine.template_dir == BUNDLED_TEMPLATE_DIR
        assert engine is get_template_engine()
        for name in (
            "plugin/plugin.template.ts.j2",
            "plugin/types.template.ts.j2",
            "plugin/constants.template.ts.j2",
            "entity/entity.template.ts.j2",
            "service/service.template.ts.j2",
            "ui-extensions/providers.template.ts.j2",
            "ui-extensions/ui-property.template.ts.j2",
            "codegen/codegen.template.ts.j2",
            "codegen/generates-entry.template.ts.j2",
        ):
            assert engine.template_exists(name), name

    def test_custom_template_dir(self, tmp_path):
        engine = get_template_engine(tmp_path)
        assert engine.template_dir == tmp_path
        assert engine is not get_default_template_engine()


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_defaults(self):
        config = ConfigManager().get_config()
        assert config == ScaffoldConfig()
        assert config.config_type_name == "VendureConfig"
        assert config.plugins_dir_name == "plugins"

    def test_file_and_overrides(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"compatibility": "^3.0.0", "plugins_dir_name": "ext"}), encoding="utf-8")

        config = ConfigManager().get_config({"plugins_dir_name": "mods"}, path)

        assert config.compatibility == "^3.0.0"
        assert config.plugins_dir_name == "mods"

    def test_unknown_keys_go_to_custom(self):
        config = load_config({"team": "shop", "compatibility": "^2.1.0"})
        assert config.custom == {"team": "shop"}
        assert config.compatibility == "^2.1.0"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ConfigManager().get_config(config_file=tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            ConfigManager().get_config(config_file=path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ConfigError, match="JSON object"):
            ConfigManager().get_config(config_file=path)

    def test_save_and_reload(self, tmp_path):
        manager = ConfigManager()
        config = ScaffoldConfig(compatibility="^3.0.0", custom={"team": "shop"})
        path = tmp_path / "saved.json"

        manager.save_config(config, path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["team"] == "shop"
        assert "custom" not in data
        assert manager.get_config(config_file=path) == config

    def test_validate(self, tmp_path):
        manager = ConfigManager()
        assert manager.validate_config(ScaffoldConfig()) == []

        warnings = manager.validate_config(
            ScaffoldConfig(
                config_file_name="config.js",
                codegen_file_name="codegen.yml",
                config_type_name="Not Valid",
                template_dir=str(tmp_path / "missing"),
                encoding="no-such-encoding",
            )
        )
        assert len(warnings) == 5

    def test_find_config_file(self, tmp_path):
        assert find_config_file(tmp_path) is None
        (tmp_path / DEFAULT_CONFIG_FILE).write_text("{}", encoding="utf-8")
        assert find_config_file(tmp_path) == tmp_path / DEFAULT_CONFIG_FILE
