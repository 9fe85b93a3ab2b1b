"""RPM spec parsing.

Only the parts of a spec file the planner needs are understood: the
package name (taken from the spec's location) and the names listed on
``BuildRequires:`` lines.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

from .errors import ExtractionError
from .models import SpecInfo

# Anchored and case-sensitive: commented-out or embedded occurrences of
# the keyword must not count.
BUILD_REQUIRES_RE = re.compile(r"^\s*BuildRequires:\s*")
TOKEN_SPLIT_RE = re.compile(r"[\s,]+")
PACKAGE_NAME_RE = re.compile(r"^[a-zA-Z][-._+a-zA-Z0-9]*")
VERSION_OPERATORS = frozenset({"<", "<=", "=", "==", ">=", ">"})
DEVEL_SUFFIX = "-devel"
SPECS_DIR = "SPECS"


def parse_build_deps(text: str) -> tuple[str, ...]:
    """Extract build dependency names from spec file content.

    Each ``BuildRequires:`` line is split on commas and whitespace, every
    token is reduced to its leading package-name run, and a ``-devel``
    suffix is stripped so a dependency on ``foo-devel`` counts as one on
    ``foo``. Version constraints are skipped.

    Examples:
        "BuildRequires: foo-devel, bar" → ("foo", "bar")
        "BuildRequires: gcc >= 12, make" → ("gcc", "make")
    """
    deps: dict[str, None] = {}
    for line in text.splitlines():
        match = BUILD_REQUIRES_RE.match(line)
        if not match:
            continue

        skip_next = False
        for token in TOKEN_SPLIT_RE.split(line[match.end() :]):
            if not token:
                continue
            if token in VERSION_OPERATORS:
                skip_next = True
                continue
            if skip_next:
                skip_next = False
                continue
            name = PACKAGE_NAME_RE.match(token)
            if name:
                deps[strip_devel(name.group(0))] = None
    return tuple(deps)


def strip_devel(name: str) -> str:
    """Map a ``-devel`` subpackage name to its base package."""
    if name.endswith(DEVEL_SUFFIX) and len(name) > len(DEVEL_SUFFIX):
        return name[: -len(DEVEL_SUFFIX)]
    return name


def read_build_deps(path: Path) -> tuple[str, ...]:
    """Read a spec file and extract its build dependencies.

    Raises:
        ExtractionError: If the file cannot be read.
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise ExtractionError(str(path), exc.strerror or str(exc)) from exc
    return parse_build_deps(text)


def package_name(spec_path: str) -> str:
    """Derive the package name from a spec path.

    The package is named after the directory holding the spec, skipping a
    conventional ``SPECS`` directory:

        "foo/SPECS/foo.spec" → "foo"
        "rpms/bar/bar.spec" → "bar"
    """
    parent = PurePosixPath(spec_path).parent
    if parent.name == SPECS_DIR:
        parent = parent.parent
    if not parent.name:
        # Spec at the workspace root: fall back to the file stem
        return PurePosixPath(spec_path).stem
    return parent.name


def load_spec(spec_path: str, workspace: Path) -> SpecInfo:
    """Build a SpecInfo for a spec path relative to ``workspace``."""
    return SpecInfo(
        path=spec_path,
        name=package_name(spec_path),
        build_deps=read_build_deps(workspace / spec_path),
    )
