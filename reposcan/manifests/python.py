"""Python manifest parsers: requirements.txt, pyproject.toml and setup.py."""

from __future__ import annotations

import re
import tomllib
from typing import Any, Dict, Iterable, List

from ..classifier import PYTHON
from ..models import DependencyKind, DependencyRecord
from .base import ManifestParseError, ManifestParser, split_requirement

_INSTALL_REQUIRES = re.compile(r"install_requires\s*=\s*\[(.*?)\]", re.DOTALL)
_QUOTED = re.compile(r"""["']([^"']+)["']""")


class RequirementsParser(ManifestParser):
    """One dependency per non-comment, non-blank line of requirements.txt."""

    ecosystem = PYTHON
    manifest = "requirements.txt"

    def parse_text(self, text: str) -> List[DependencyRecord]:
        records: List[DependencyRecord] = []
        for line in text.splitlines():
            stripped = line.strip()
            # Options such as -r, -e and --index-url are not dependencies.
            if not stripped or stripped.startswith(("#", "-")):
                continue
            stripped = stripped.split(" #", 1)[0].strip()
            name, spec = split_requirement(stripped)
            if not name:
                continue
            advisories = () if "==" in stripped else ("unpinned",)
            records.append(DependencyRecord(name, spec, DependencyKind.PRODUCTION, advisories))
        return records


class PyprojectParser(ManifestParser):
    """PEP 621 and Poetry dependency tables from pyproject.toml."""

    ecosystem = PYTHON
    manifest = "pyproject.toml"
    lockfiles = ("poetry.lock", "uv.lock", "pdm.lock")

    def parse_text(self, text: str) -> List[DependencyRecord]:
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ManifestParseError(f"invalid TOML in pyproject.toml: {exc}") from exc

        records: List[DependencyRecord] = []
        project = _as_dict(data.get("project"))
        records.extend(_pep508(project.get("dependencies"), DependencyKind.PRODUCTION))
        for values in _as_dict(project.get("optional-dependencies")).values():
            records.extend(_pep508(values, DependencyKind.DEVELOPMENT))
        for values in _as_dict(data.get("dependency-groups")).values():
            records.extend(_pep508(values, DependencyKind.DEVELOPMENT))

        poetry = _as_dict(_as_dict(data.get("tool")).get("poetry"))
        records.extend(_poetry(poetry.get("dependencies"), DependencyKind.PRODUCTION))
        records.extend(_poetry(poetry.get("dev-dependencies"), DependencyKind.DEVELOPMENT))
        for group in _as_dict(poetry.get("group")).values():
            records.extend(_poetry(_as_dict(group).get("dependencies"), DependencyKind.DEVELOPMENT))
        return records


class SetupPyParser(ManifestParser):
    """Quoted requirement strings inside ``install_requires=[...]``."""

    ecosystem = PYTHON
    manifest = "setup.py"

    def parse_text(self, text: str) -> List[DependencyRecord]:
        match = _INSTALL_REQUIRES.search(text)
        if not match:
            return []
        records: List[DependencyRecord] = []
        for requirement in _QUOTED.findall(match.group(1)):
            name, spec = split_requirement(requirement)
            if name:
                records.append(DependencyRecord(name, spec, DependencyKind.PRODUCTION))
        return records


def _pep508(values: Any, kind: DependencyKind) -> Iterable[DependencyRecord]:
    if not isinstance(values, list):
        return []
    records = []
    for value in values:
        if not isinstance(value, str):
            # dependency-groups may include {include-group = "..."} tables.
            continue
        name, spec = split_requirement(value)
        if name:
            records.append(DependencyRecord(name, spec, kind))
    return records


def _poetry(values: Any, kind: DependencyKind) -> Iterable[DependencyRecord]:
    records = []
    for name, value in _as_dict(values).items():
        if name.lower() == "python":
            continue
        records.append(DependencyRecord(name, _opaque_spec(value), kind))
    return records


def _opaque_spec(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        if isinstance(value.get("version"), str):
            return value["version"]
        return ", ".join(f"{key}={value[key]}" for key in sorted(value))
    return str(value)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}
