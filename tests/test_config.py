"""Tests for JSON config reading and writing."""

import json

import pytest

from squadkit.config import (
    ConfigError,
    dump_json,
    load_json,
    preprocess_jsonish,
    upsert_fields,
    write_json_atomic,
)
from squadkit.errors import EXIT_CONFIG_ERROR, InstallIOError


class TestLoadJson:
    def test_plain_json(self, temp_dir):
        path = temp_dir / "c.json"
        path.write_text('{"count": 2}')
        assert load_json(path) == {"count": 2}

    def test_comments_and_trailing_commas(self):
        text = """{
            // how many instances
            "count": 3,
            "tags": ["a", "b",],
        }"""
        assert load_json(text) == {"count": 3, "tags": ["a", "b"]}

    def test_slashes_inside_strings_are_kept(self):
        data = load_json('{"url": "https://fizzy.example.com//x", "a": "b,"}')
        assert data["url"] == "https://fizzy.example.com//x"
        assert data["a"] == "b,"

    def test_escaped_quote_in_string(self):
        assert load_json(r'{"a": "say \"hi\" // not a comment"}') == {
            "a": 'say "hi" // not a comment'
        }

    def test_preprocess_keeps_positions(self):
        text = '{"a": 1, // note\n}'
        assert len(preprocess_jsonish(text)) == len(text)

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            load_json(temp_dir / "missing.json")

    def test_syntax_error_points_at_column(self):
        with pytest.raises(ConfigError) as exc_info:
            load_json('{\n  "count": 2\n  "model": "x"\n}')
        message = str(exc_info.value)
        assert "line 3" in message
        assert "^" in message

    def test_non_object_rejected(self):
        with pytest.raises(ConfigError, match="JSON object"):
            load_json("[1, 2]")

    def test_wrong_type(self):
        with pytest.raises(TypeError):
            load_json(42)

    def test_exit_code(self):
        assert ConfigError("x").exit_code == EXIT_CONFIG_ERROR


class TestWriteJsonAtomic:
    def test_writes_canonical_layout(self, temp_dir):
        path = temp_dir / "sub" / "config.json"
        write_json_atomic(path, {"b": 1, "a": "é"})
        assert path.read_text(encoding="utf-8") == dump_json({"b": 1, "a": "é"})
        assert path.read_text(encoding="utf-8").endswith("}\n")
        assert json.loads(path.read_text(encoding="utf-8")) == {"b": 1, "a": "é"}

    def test_no_temp_file_left_behind(self, temp_dir):
        path = temp_dir / "config.json"
        write_json_atomic(path, {"a": 1})
        assert [p.name for p in temp_dir.iterdir()] == ["config.json"]

    def test_io_error_is_wrapped(self, temp_dir):
        blocker = temp_dir / "file"
        blocker.write_text("")
        with pytest.raises(InstallIOError) as exc_info:
            write_json_atomic(blocker / "config.json", {"a": 1})
        assert exc_info.value.path == blocker / "config.json"


class TestUpsertFields:
    def test_preserves_unrelated_keys(self):
        data = {"fizzy": {"boardId": "42", "url": "old"}, "phases": []}
        changed = upsert_fields(data, "fizzy", {"url": "new"})
        assert changed is True
        assert data == {"fizzy": {"boardId": "42", "url": "new"}, "phases": []}

    def test_no_change_reported(self):
        data = {"fizzy": {"url": "same"}}
        assert upsert_fields(data, "fizzy", {"url": "same"}) is False

    def test_creates_missing_section(self):
        data = {"fizzy": "garbage"}
        assert upsert_fields(data, "fizzy", {"sync": True}) is True
        assert data["fizzy"] == {"sync": True}
