"""JSON config reading and writing for catalog data and installed targets.

Files under a target's ``pipeline/`` directory are meant to be edited by hand,
so reading is lenient: ``//`` line comments and trailing commas are tolerated.
Writing is strict JSON with a stable layout so that repeated installs produce
byte-identical files.
"""

import json
import logging
from pathlib import Path

from .errors import EXIT_CONFIG_ERROR, InstallIOError, SquadError

_logging = logging.getLogger(__name__)


class ConfigError(SquadError):
    """Raised when config loading or parsing fails.

    Syntax errors carry the line, column and a caret under the offending
    character.
    """

    exit_code = EXIT_CONFIG_ERROR


def _trailing_comma(text: str, start: int) -> bool:
    """Return True if only whitespace and comments separate ``start`` from ] or }."""
    j, n = start, len(text)
    while j < n:
        if text[j] in " \t\r\n":
            j += 1
        elif text.startswith("//", j):
            newline = text.find("\n", j)
            j = n if newline == -1 else newline
        else:
            return text[j] in "]}"
    return False


def preprocess_jsonish(text: str) -> str:
    """Turn JSON-ish text into strict JSON.

    Comments and trailing commas are replaced with spaces rather than removed
    so line and column numbers in later parse errors still match the source.
    """
    out = []
    i, n = 0, len(text)
    in_string = False
    while i < n:
        char = text[i]
        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 1
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
            out.append(char)
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            end = n if newline == -1 else newline
            out.append(" " * (end - i))
            i = end
            continue
        elif char == "," and _trailing_comma(text, i + 1):
            out.append(" ")
        else:
            out.append(char)
        i += 1
    return "".join(out)


def _format_syntax_error(original_text: str, error: json.JSONDecodeError) -> str:
    lines = original_text.split("\n")
    parts = [f"syntax error at line {error.lineno}, col {error.colno}: {error.msg}"]
    if 1 <= error.lineno <= len(lines):
        parts.append(lines[error.lineno - 1])
        parts.append(" " * (error.colno - 1) + "^")
    return "\n".join(parts)


def load_json(path_or_text: Path | str) -> dict:
    """Load a JSON object from a file path or raw text.

    Raises:
        ConfigError: If the file cannot be read, does not parse, or does not
            hold a JSON object.
        TypeError: If path_or_text is neither Path nor str.
    """
    if isinstance(path_or_text, Path):
        try:
            original_text = path_or_text.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {path_or_text}")
        except UnicodeDecodeError:
            raise ConfigError(f"Config file is not valid UTF-8: {path_or_text}")
        except OSError as e:
            raise ConfigError(f"Error reading config file {path_or_text}: {e}")
        source = str(path_or_text)
    elif isinstance(path_or_text, str):
        original_text = path_or_text
        source = "<text>"
    else:
        raise TypeError(
            f"path_or_text must be Path or str, got {type(path_or_text).__name__}"
        )

    try:
        result = json.loads(preprocess_jsonish(original_text))
    except json.JSONDecodeError as e:
        raise ConfigError(f"{source}: {_format_syntax_error(original_text, e)}") from e

    if not isinstance(result, dict):
        raise ConfigError(f"{source} must hold a JSON object, got {type(result).__name__}")
    return result


def dump_json(data: dict) -> str:
    """Serialize ``data`` in the canonical on-disk layout."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_json_atomic(path: Path, data: dict) -> None:
    """Write ``data`` to ``path`` via a temp file and atomic rename.

    Raises:
        InstallIOError: If the directory cannot be created or the write fails.
    """
    temp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.write_text(dump_json(data), encoding="utf-8")
        temp_path.replace(path)
    except OSError as e:
        raise InstallIOError(path, e) from e
    _logging.debug(f"Wrote {path}")


def upsert_fields(data: dict, section: str, fields: dict) -> bool:
    """Set ``fields`` inside ``data[section]`` without touching other keys.

    Returns:
        True if any value changed.
    """
    target = data.get(section)
    if not isinstance(target, dict):
        target = {}
        data[section] = target
    changed = False
    for key, value in fields.items():
        if key not in target or target[key] != value:
            target[key] = value
            changed = True
    return changed


__all__ = [
    "ConfigError",
    "preprocess_jsonish",
    "load_json",
    "dump_json",
    "write_json_atomic",
    "upsert_fields",
]
