"""Import statements: extraction, path resolution, visibility, canonical form.

Two statement forms exist::

    import * from "common.kite"
    import Config, Utils from 'lib/common.kite'

An import's path resolves relative to the importing file's directory.
Dotted package paths (``aws.network.Vpc``) map onto directories.
"""

from __future__ import annotations

import os
import re
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from kitescope.index.lexical import LexicalMap, scan
from kitescope.index.models import Import, ImportSymbol

DEFAULT_EXTENSION = ".kite"

_IMPORT_RE = re.compile(
    r"(?<![A-Za-z0-9_.$@])import\s+"
    r"(?P<symbols>\*|[A-Za-z_][A-Za-z0-9_]*(?:\s*,\s*[A-Za-z_][A-Za-z0-9_]*)*)"
    r"\s+from\s+(?P<quote>[\"'])(?P<path>[^\"'\n]+)(?P=quote)"
)
_SYMBOL_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_DOTTED_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)+$")


def extract_imports(text: str, lexmap: LexicalMap | None = None) -> list[Import]:
    """All import statements in ``text`` that sit in code, in order."""
    lexmap = lexmap or scan(text)
    imports: list[Import] = []
    for m in _IMPORT_RE.finditer(text):
        if not lexmap.is_code(m.start()):
            continue
        symbols: tuple[ImportSymbol, ...] = ()
        if m.group("symbols") != "*":
            base = m.start("symbols")
            symbols = tuple(
                ImportSymbol(s.group(), base + s.start(), base + s.end())
                for s in _SYMBOL_RE.finditer(m.group("symbols"))
            )
        imports.append(
            Import(
                path=m.group("path"),
                quote=m.group("quote"),
                symbols=symbols,
                start=m.start(),
                end=m.end(),
                start_line=text.count("\n", 0, m.start()),
                end_line=text.count("\n", 0, m.end()),
            )
        )
    return imports


def normalize_path(path: Path | str) -> Path:
    return Path(os.path.realpath(path))


def resolve_import_path(
    raw: str, current_dir: Path, extension: str = DEFAULT_EXTENSION
) -> Path:
    """Map an import path literal to the file it names.

    - ``./x`` and ``../x`` resolve against ``current_dir``
    - absolute paths are used verbatim
    - ``x.kite`` resolves against ``current_dir``
    - ``a.b.Name`` becomes ``a/b/Name.kite`` under ``current_dir``
    - anything else is taken literally under ``current_dir``
    """
    if raw.startswith(("./", "../")):
        candidate = current_dir / raw
    elif os.path.isabs(raw):
        candidate = Path(raw)
    elif raw.endswith(extension):
        candidate = current_dir / raw
    elif _DOTTED_RE.match(raw):
        candidate = current_dir.joinpath(*raw.split(".")).with_suffix(extension)
    else:
        candidate = current_dir / raw
    return normalize_path(candidate)


def imports_file(
    imp: Import, defining_file: Path, referencing_file: Path, extension: str = DEFAULT_EXTENSION
) -> bool:
    resolved = resolve_import_path(imp.path, referencing_file.parent, extension)
    return resolved == normalize_path(defining_file)


def is_symbol_imported(
    imports: Iterable[Import],
    name: str,
    defining_file: Path,
    referencing_file: Path,
    extension: str = DEFAULT_EXTENSION,
) -> bool:
    """True iff an import names ``name`` (or is a wildcard) and resolves to ``defining_file``."""
    return any(
        imp.names(name) and imports_file(imp, defining_file, referencing_file, extension)
        for imp in imports
    )


@dataclass(frozen=True, slots=True)
class ImportEntry:
    """One canonical import statement."""

    path: str
    quote: str = '"'
    symbols: tuple[str, ...] = ()

    @property
    def is_wildcard(self) -> bool:
        return not self.symbols

    def render(self) -> str:
        names = "*" if self.is_wildcard else ", ".join(self.symbols)
        return f"import {names} from {self.quote}{self.path}{self.quote}"


@dataclass
class _Group:
    path: str
    quote: str
    wildcard: bool = False
    symbols: set[str] = field(default_factory=set)


def _ci(value: str) -> tuple[str, str]:
    return value.lower(), value


def canonicalize_imports(
    imports: Iterable[Import],
    unused: Collection[str] = (),
    current_dir: Path | None = None,
    extension: str = DEFAULT_EXTENSION,
) -> list[ImportEntry]:
    """Merge, filter and sort imports.

    Imports are grouped by resolved path (by literal when ``current_dir`` is
    None); the first literal and quote style seen for a path are kept. A
    wildcard dominates its path. Symbols named in ``unused`` are dropped, and
    a named import left with no symbols disappears. Symbols and paths are
    sorted case-insensitively.
    """
    groups: dict[str, _Group] = {}
    for imp in imports:
        key = (
            str(resolve_import_path(imp.path, current_dir, extension))
            if current_dir is not None
            else imp.path
        )
        group = groups.setdefault(key, _Group(imp.path, imp.quote))
        if imp.is_wildcard:
            group.wildcard = True
        else:
            group.symbols.update(s for s in imp.symbol_names if s not in unused)

    entries: list[ImportEntry] = []
    for group in groups.values():
        if group.wildcard:
            entries.append(ImportEntry(group.path, group.quote))
        elif group.symbols:
            entries.append(
                ImportEntry(group.path, group.quote, tuple(sorted(group.symbols, key=_ci)))
            )
    entries.sort(key=lambda e: _ci(e.path))
    return entries
