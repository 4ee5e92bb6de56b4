"""Tests for reading installed state back from a target."""

import json
import logging

import pytest

from squadkit.installer import read_install_state
from squadkit.installer.state import parse_count, read_fragment_count, read_integration


def write_fragment(layout, name, payload):
    layout.fragments_dir.mkdir(parents=True, exist_ok=True)
    text = payload if isinstance(payload, str) else json.dumps(payload)
    layout.fragment_file(name).write_text(text)


def write_config(layout, payload):
    layout.pipeline_dir.mkdir(parents=True, exist_ok=True)
    layout.config_file.write_text(json.dumps(payload))


@pytest.mark.parametrize(
    "value,expected",
    [
        (1, 1),
        (4, 4),
        ("3", 3),
        (" 2 ", 2),
        (0, None),
        (-1, None),
        ("0", None),
        ("two", None),
        (True, None),
        (2.5, None),
        (None, None),
    ],
)
def test_parse_count(value, expected):
    assert parse_count(value) == expected


class TestReadInstallState:
    def test_missing_target_is_empty(self, layout, catalog):
        state = read_install_state(layout, catalog)
        assert state.agents == {}
        assert state.initialized is False
        assert state.integration.url is None

    def test_fragment_means_installed(self, layout, catalog):
        write_fragment(layout, "dev-agent-a", {"count": 2})
        write_fragment(layout, "ops-agent-x", {"count": "3"})
        state = read_install_state(layout, catalog)
        assert state.agents == {"dev-agent-a": 2, "ops-agent-x": 3}
        assert state.existing_agents == {"dev-agent-a", "ops-agent-x"}

    def test_persona_not_required(self, layout, catalog):
        write_fragment(layout, "dev-agent-b", {"count": 1})
        assert not (layout.agents_dir / "dev-agent-b.md").exists()
        assert read_install_state(layout, catalog).agents == {"dev-agent-b": 1}

    def test_missing_or_bad_count_defaults_to_one(self, layout, catalog):
        write_fragment(layout, "dev-agent-a", {"role": "x"})
        write_fragment(layout, "dev-agent-b", {"count": "lots"})
        assert read_install_state(layout, catalog).agents == {
            "dev-agent-a": 1,
            "dev-agent-b": 1,
        }

    def test_unparseable_fragment_still_installed(self, layout, catalog, caplog):
        write_fragment(layout, "dev-agent-a", "{not json")
        with caplog.at_level(logging.WARNING):
            state = read_install_state(layout, catalog)
        assert state.agents == {"dev-agent-a": 1}
        assert "unreadable" in caplog.text

    def test_core_and_unknown_fragments_ignored(self, layout, catalog, caplog):
        write_fragment(layout, "lead", {"count": 1})
        write_fragment(layout, "mystery", {"count": 1})
        with caplog.at_level(logging.WARNING):
            state = read_install_state(layout, catalog)
        assert state.agents == {}
        assert "mystery" in caplog.text
        assert "'lead'" not in caplog.text

    def test_initialized_follows_config_file(self, layout, catalog):
        write_fragment(layout, "dev-agent-a", {"count": 1})
        assert read_install_state(layout, catalog).initialized is False
        write_config(layout, {})
        assert read_install_state(layout, catalog).initialized is True


class TestReadIntegration:
    def test_placeholders_mean_unconfigured(self, layout):
        write_config(
            layout,
            {
                "fizzy": {
                    "url": "https://your-fizzy.fly.dev",
                    "accountSlug": "your-account",
                    "token": "${FIZZY_TOKEN}",
                    "sync": False,
                }
            },
        )
        integration = read_integration(layout)
        assert integration.url is None
        assert integration.account_slug is None
        assert integration.token == "${FIZZY_TOKEN}"
        assert integration.sync is False

    def test_configured_values(self, layout):
        write_config(
            layout,
            {
                "fizzy": {
                    "url": "https://fizzy.example.com",
                    "accountSlug": "acme",
                    "token": "secret",
                    "boardId": "42",
                    "sync": True,
                }
            },
        )
        integration = read_integration(layout)
        assert integration.url == "https://fizzy.example.com"
        assert integration.account_slug == "acme"
        assert integration.board_id == "42"
        assert integration.sync is True

    def test_absent_fields_are_none(self, layout):
        write_config(layout, {"fizzy": {"url": "https://fizzy.example.com"}})
        integration = read_integration(layout)
        assert integration.account_slug is None
        assert integration.board_id is None

    def test_unreadable_config(self, layout, caplog):
        layout.pipeline_dir.mkdir(parents=True)
        layout.config_file.write_text("{oops")
        with caplog.at_level(logging.WARNING):
            assert read_integration(layout).url is None
        assert "unreadable" in caplog.text


def test_read_fragment_count_missing_file(temp_dir):
    assert read_fragment_count(temp_dir / "absent.json") == 1
