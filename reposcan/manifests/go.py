"""go.mod dependency parser."""

from __future__ import annotations

from typing import List, Optional

from ..classifier import GO
from ..models import DependencyKind, DependencyRecord
from .base import ManifestParseError, ManifestParser

_INDIRECT_MARKER = "// indirect"


class GoModParser(ManifestParser):
    """Reads ``require`` lines and blocks; ``// indirect`` entries are tagged."""

    ecosystem = GO
    manifest = "go.mod"
    lockfiles = ("go.sum",)

    def parse_text(self, text: str) -> List[DependencyRecord]:
        records: List[DependencyRecord] = []
        in_require = False
        block_start = 0
        for number, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()
            body = line.split("//", 1)[0].strip()
            if not body:
                continue
            if in_require:
                if body == ")":
                    in_require = False
                    continue
                record = _parse_require(line)
                if record is not None:
                    records.append(record)
                continue
            if _is_require(body):
                if body[len("require") :].strip() == "(":
                    in_require = True
                    block_start = number
                    continue
                record = _parse_require(line[len("require") :])
                if record is not None:
                    records.append(record)
        if in_require:
            raise ManifestParseError(f"unterminated require block starting at line {block_start} of go.mod")
        return records


def _is_require(body: str) -> bool:
    return body == "require" or body.startswith(("require ", "require\t", "require("))


def _parse_require(line: str) -> Optional[DependencyRecord]:
    kind = DependencyKind.INDIRECT if _INDIRECT_MARKER in line else DependencyKind.PRODUCTION
    body = line.split("//", 1)[0].strip()
    parts = body.split()
    if not parts:
        return None
    version = parts[1] if len(parts) > 1 else ""
    return DependencyRecord(parts[0], version, kind)
