"""Tests for configuration models."""

import json

import pytest
from pydantic import ValidationError

from dbtree.config import BINDABLE_ACTIONS, AppConfig, DrawerConfig, KeyMapping


class TestDrawerConfig:
    def test_defaults_bind_every_action(self):
        config = DrawerConfig()

        assert set(config.mappings) == set(BINDABLE_ACTIONS)
        assert config.mappings["action_1"].key == "enter"
        assert config.mappings["refresh"].mode == "n"

    def test_default_keys_are_distinct(self):
        keys = [m.key for m in DrawerConfig().mappings.values()]

        assert len(keys) == len(set(keys))

    def test_bound_mappings_drop_unknown_actions(self):
        config = DrawerConfig(mappings={"toggle": KeyMapping(key="o"), "dance": KeyMapping(key="x")})

        assert list(config.bound_mappings()) == ["toggle"]

    def test_disable_candies(self):
        assert DrawerConfig(disable_candies=True).effective_candies() == {}
        assert "table" in DrawerConfig().effective_candies()


class TestAppConfig:
    def test_missing_path_gives_defaults(self, tmp_path):
        config = AppConfig.load(tmp_path / "nope.json")

        assert config.backend_url == "http://localhost:8766"
        assert config.connections == []

    def test_no_path_gives_defaults(self):
        assert AppConfig.load(None) == AppConfig()

    def test_load_json(self, tmp_path):
        path = tmp_path / "dbtree.json"
        path.write_text(json.dumps({
            "backend_url": "http://proxy:9000",
            "drawer": {"disable_help": True, "mappings": {"refresh": {"key": "R"}}},
            "connections": [{"name": "local", "type": "postgres", "url": "postgres://localhost/db"}],
        }))

        config = AppConfig.load(path)

        assert config.backend_url == "http://proxy:9000"
        assert config.drawer.disable_help is True
        assert config.drawer.mappings == {"refresh": KeyMapping(key="R", mode="n")}
        assert config.connections[0].type == "postgres"

    def test_invalid_json_raises(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"drawer": {"disable_help": "not a bool"}}))

        with pytest.raises(ValidationError):
            AppConfig.load(path)
