"""Cargo.toml dependency parser."""

from __future__ import annotations

import json
import tomllib
from typing import Any, List

from ..classifier import RUST
from ..models import DependencyKind, DependencyRecord
from .base import ManifestParseError, ManifestParser

_TABLES = (
    ("dependencies", DependencyKind.PRODUCTION),
    ("dev-dependencies", DependencyKind.DEVELOPMENT),
)


class CargoParser(ManifestParser):
    """Reads ``[dependencies]`` and ``[dev-dependencies]`` from Cargo.toml."""

    ecosystem = RUST
    manifest = "Cargo.toml"
    lockfiles = ("Cargo.lock",)

    def parse_text(self, text: str) -> List[DependencyRecord]:
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ManifestParseError(f"invalid TOML in Cargo.toml: {exc}") from exc

        records: List[DependencyRecord] = []
        for table, kind in _TABLES:
            entries = data.get(table)
            if not isinstance(entries, dict):
                continue
            for name in sorted(entries):
                spec = _crate_spec(entries[name])
                advisories = ("wildcard",) if spec == "*" else ()
                records.append(DependencyRecord(name, spec, kind, advisories))
        return records


def load_workspace_members(text: str) -> List[str]:
    """Return ``[workspace] members``, or ``[]`` when absent or unparseable."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError:
        return []
    workspace = data.get("workspace")
    if not isinstance(workspace, dict):
        return []
    members = workspace.get("members")
    if not isinstance(members, list):
        return []
    return [member for member in members if isinstance(member, str)]


def _crate_spec(value: Any) -> str:
    # Inline tables (git/path/features) are kept as an opaque string.
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        if isinstance(value.get("version"), str) and len(value) == 1:
            return value["version"]
        parts = []
        for key in sorted(value):
            item = value[key]
            if isinstance(item, str):
                parts.append(f'{key} = "{item}"')
            elif isinstance(item, (bool, list)):
                parts.append(f"{key} = {json.dumps(item)}")
            else:
                parts.append(f"{key} = {item}")
        return "{ " + ", ".join(parts) + " }"
    return str(value)
