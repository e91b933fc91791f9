"""composer.json dependency parser."""

from __future__ import annotations

import json
from typing import List

from ..classifier import PHP
from ..models import DependencyKind, DependencyRecord
from .base import ManifestParseError, ManifestParser

_SECTIONS = (
    ("require", DependencyKind.PRODUCTION),
    ("require-dev", DependencyKind.DEVELOPMENT),
)


class ComposerParser(ManifestParser):
    """Reads ``require`` and ``require-dev`` from composer.json."""

    ecosystem = PHP
    manifest = "composer.json"
    lockfiles = ("composer.lock",)

    def parse_text(self, text: str) -> List[DependencyRecord]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ManifestParseError(f"invalid JSON in composer.json: {exc}") from exc
        if not isinstance(data, dict):
            raise ManifestParseError("composer.json must contain a JSON object")

        records: List[DependencyRecord] = []
        for key, kind in _SECTIONS:
            section = data.get(key) or {}
            if not isinstance(section, dict):
                continue
            for name in sorted(section):
                records.append(DependencyRecord(name, str(section[name]), kind))
        return records
