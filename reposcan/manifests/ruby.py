"""Gemfile dependency parser."""

from __future__ import annotations

import re
from typing import List

from ..classifier import RUBY
from ..models import DependencyKind, DependencyRecord
from .base import ManifestParser

_GEM = re.compile(r"""^gem\s+['"]([^'"]+)['"]\s*(.*)$""")
_QUOTED = re.compile(r"""['"]([^'"]+)['"]""")
_GROUP = re.compile(r"^group\s+(.+?)\s+do\b")
_BLOCK_OPENER = re.compile(r"^(source|platforms|install_if|path|git|github)\b.*\bdo\b")
_DEV_GROUPS = {"development", "test"}


class GemfileParser(ManifestParser):
    """``gem`` lines; those inside development/test groups are development."""

    ecosystem = RUBY
    manifest = "Gemfile"
    lockfiles = ("Gemfile.lock",)

    def parse_text(self, text: str) -> List[DependencyRecord]:
        records: List[DependencyRecord] = []
        # Each open block records whether it is a development group.
        blocks: List[bool] = []
        for line in text.splitlines():
            stripped = line.split("#", 1)[0].strip()
            if not stripped:
                continue
            group = _GROUP.match(stripped)
            if group:
                names = {name.strip(" :'\"") for name in group.group(1).split(",")}
                blocks.append(bool(names & _DEV_GROUPS))
                continue
            if _BLOCK_OPENER.match(stripped):
                blocks.append(False)
                continue
            if stripped == "end":
                if blocks:
                    blocks.pop()
                continue
            gem = _GEM.match(stripped)
            if not gem:
                continue
            constraints = [
                value for value in _QUOTED.findall(gem.group(2)) if value[:1] in "<>=~!0123456789"
            ]
            inline_dev = re.search(r"group:\s*\[?\s*:(development|test)", gem.group(2))
            kind = (
                DependencyKind.DEVELOPMENT
                if any(blocks) or inline_dev
                else DependencyKind.PRODUCTION
            )
            records.append(DependencyRecord(gem.group(1), ", ".join(constraints), kind))
        return records
