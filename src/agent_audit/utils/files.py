from __future__ import annotations

import json
from pathlib import Path, PurePath

import yaml

from agent_audit.errors import FileReadError, ParseError

JSON_SUFFIXES = {".json"}
YAML_SUFFIXES = {".yaml", ".yml"}


def read_text(path: str | Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise FileReadError(path, f"{error.__class__.__name__}: {error}") from error


def is_json_file(path: str | PurePath) -> bool:
    return PurePath(path).suffix.lower() in JSON_SUFFIXES


def is_yaml_file(path: str | PurePath) -> bool:
    return PurePath(path).suffix.lower() in YAML_SUFFIXES


def is_structured_file(path: str | PurePath) -> bool:
    return is_json_file(path) or is_yaml_file(path)


def parse_structured(path: str | Path, content: str) -> object:
    """Parse JSON or YAML content; other file types yield ``None``."""
    if is_json_file(path):
        try:
            return json.loads(content)
        except json.JSONDecodeError as error:
            raise ParseError(path, str(error)) from error
    if is_yaml_file(path):
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as error:
            raise ParseError(path, str(error)) from error
    return None
