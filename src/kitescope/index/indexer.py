"""Document scope indexer.

Builds a ``DocumentIndex`` from Kite source in one pass over the keyword
occurrences of the text, without a grammar-driven parse:

1. Every declaration keyword that sits in plain code at a statement start
   is matched against its form (``var``, ``input``/``output``, ``schema``,
   ``type``, ``fun``, ``component``, ``resource``, ``for``), as is every
   ``[for x in ...]`` comprehension. Each form yields scope spans and
   declarations with an ownership rule.
2. Remaining code braces become ``block`` scopes.
3. Spans are nested into a tree, then declarations are bound to their
   owning scopes.

Malformed text never raises: a form that does not match is skipped and an
unbalanced brace closes at the end of the text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from kitescope.core.logging import get_logger
from kitescope.index.imports import extract_imports
from kitescope.index.lexical import LexicalMap, is_identifier_char, scan
from kitescope.index.models import (
    BUILTIN_TYPES,
    KEYWORDS,
    Declaration,
    DeclarationKind,
    DocumentIndex,
    MemberAccess,
    PropertyKey,
    Scope,
    ScopeKind,
    TypeReference,
)

log = get_logger(__name__)

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
_TYPE = r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*(?:\[\])?"

_KEYWORD_RE = re.compile(
    r"(?<![A-Za-z0-9_.@$])(var|input|output|schema|type|fun|component|resource|for)(?![A-Za-z0-9_])"
)
_VAR_RE = re.compile(rf"var[ \t]+(?:(?P<type>{_TYPE})[ \t]+)?(?P<name>{_IDENT})\s*=(?!=)")
_IO_RE = re.compile(rf"(?:input|output)[ \t]+(?:(?P<type>{_TYPE})[ \t]+)?(?P<name>{_IDENT})")
_SCHEMA_RE = re.compile(rf"schema[ \t]+(?P<name>{_IDENT})\s*\{{")
_TYPE_ALIAS_RE = re.compile(rf"type[ \t]+(?P<name>{_IDENT})\s*=(?!=)")
_FUN_RE = re.compile(rf"fun[ \t]+(?P<name>{_IDENT})\s*\(")
_RETURN_TYPE_RE = re.compile(rf"\s*(?P<type>{_TYPE})?\s*\{{")
_COMPONENT_RE = re.compile(
    rf"component[ \t]+(?P<first>{_TYPE})(?:[ \t]+(?P<second>{_IDENT}))?\s*\{{"
)
_RESOURCE_RE = re.compile(rf"resource[ \t]+(?P<type>{_TYPE})[ \t]+(?P<name>{_IDENT})\s*\{{")
_FOR_RE = re.compile(rf"for[ \t]*\(?[ \t]*(?P<name>{_IDENT})[ \t]+in(?![A-Za-z0-9_])")
_COMPREHENSION_RE = re.compile(rf"\[\s*for[ \t]*\(?[ \t]*(?P<name>{_IDENT})[ \t]+in(?![A-Za-z0-9_])")
_PARAM_RE = re.compile(rf"(?:(?P<type>{_TYPE})\s+)?(?P<name>{_IDENT})")
_PROPERTY_RE = re.compile(
    rf"(?m)^[ \t]*(?:@{_IDENT}(?:\([^)\n]*\))?[ \t]*)*(?P<type>{_TYPE})[ \t]+(?P<name>{_IDENT})[ \t]*(?P<eq>=)?"
)
_DECORATOR_RE = re.compile(rf"@{_IDENT}")
_BLOCK_OWNER_RE = re.compile(r"(resource|component)(?![A-Za-z0-9_])")


class _Owner(Enum):
    """How a declaration finds its scope once the tree exists."""

    INNERMOST = "innermost"  # deepest scope at the binding site
    CONTAINER = "container"  # nearest component/schema body, else file
    COMPONENT_OR_FILE = "component_or_file"  # nearest component definition, else file
    EXPLICIT = "explicit"  # the scope created by the same form


@dataclass(eq=False)
class _ScopeSpec:
    kind: ScopeKind
    start: int
    end: int
    scope: Scope | None = None


@dataclass(eq=False)
class _DeclSpec:
    decl_kwargs: dict
    owner: _Owner
    anchor: int
    scope_spec: _ScopeSpec | None = None
    params: list[_DeclSpec] = field(default_factory=list)


class _Builder:
    """Collects scope and declaration specs for one text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.lexmap: LexicalMap = scan(text)
        self.scopes: list[_ScopeSpec] = []
        self.decls: list[_DeclSpec] = []
        self.type_refs: list[TypeReference] = []
        self.claimed_braces: set[int] = set()

    # -- helpers ---------------------------------------------------------

    def block_end(self, brace: int) -> int:
        """Exclusive end of the block opened at ``brace``."""
        close = self.lexmap.find_matching(brace)
        return len(self.text) if close is None else close + 1

    def at_statement_start(self, pos: int) -> bool:
        text = self.text
        i = pos - 1
        while i >= 0:
            ch = text[i]
            if ch in " \t" or self.lexmap.in_comment(i):
                i -= 1
                continue
            if ch in "\r\n{};)]":
                return True
            if is_identifier_char(ch):
                j = i
                while j > 0 and is_identifier_char(text[j - 1]):
                    j -= 1
                if j > 0 and text[j - 1] == "@":
                    i = j - 2
                    continue
            return False
        return True

    def find_block_open(self, pos: int) -> int | None:
        """First code ``{`` after ``pos`` outside nested brackets, within one statement."""
        text = self.text
        lexmap = self.lexmap
        i = pos
        n = len(text)
        while i < n:
            if not lexmap.is_code(i):
                i += 1
                continue
            ch = text[i]
            if ch == "{":
                return i
            if ch in "[(":
                close = lexmap.find_matching(i)
                if close is None:
                    return None
                i = close + 1
                continue
            if ch in ";}])":
                return None
            i += 1
        return None

    def type_ref(self, name: str | None, start: int) -> None:
        if not name:
            return
        base = name[:-2] if name.endswith("[]") else name
        if base[:1].isupper() or base in BUILTIN_TYPES or "." in base:
            self.type_refs.append(TypeReference(base, start, start + len(base)))

    def add_scope(self, kind: ScopeKind, start: int, end: int) -> _ScopeSpec:
        spec = _ScopeSpec(kind, start, end)
        self.scopes.append(spec)
        return spec

    def add_decl(
        self,
        owner: _Owner,
        anchor: int,
        scope_spec: _ScopeSpec | None = None,
        **kwargs,
    ) -> _DeclSpec:
        spec = _DeclSpec(kwargs, owner, anchor, scope_spec)
        self.decls.append(spec)
        return spec

    # -- forms -----------------------------------------------------------

    def run(self) -> None:
        text = self.text
        lexmap = self.lexmap
        for match in _KEYWORD_RE.finditer(text):
            pos = match.start()
            if not lexmap.is_code(pos) or not self.at_statement_start(pos):
                continue
            handler = getattr(self, f"_form_{match.group(1)}")
            handler(pos)
        for match in _COMPREHENSION_RE.finditer(text):
            if lexmap.is_code(match.start()):
                self._form_comprehension(match)
        brace = lexmap.find_code("{", 0)
        while brace is not None:
            if brace not in self.claimed_braces:
                self.add_scope(ScopeKind.BLOCK, brace, self.block_end(brace))
            brace = lexmap.find_code("{", brace + 1)

    def _named(self, m: re.Match[str], kind: DeclarationKind, **extra) -> dict | None:
        name = m.group("name")
        if name in KEYWORDS:
            return None
        return {
            "name": name,
            "kind": kind,
            "start": m.start("name"),
            "end": m.end("name"),
            **extra,
        }

    def _line_end(self, pos: int) -> int:
        end = self.text.find("\n", pos)
        return len(self.text) if end == -1 else end

    def _form_var(self, pos: int) -> None:
        m = _VAR_RE.match(self.text, pos)
        if not m or (kwargs := self._named(m, DeclarationKind.VARIABLE)) is None:
            return
        type_name = m.group("type")
        self.type_ref(type_name, m.start("type"))
        self.add_decl(
            _Owner.INNERMOST,
            m.start("name"),
            type_name=type_name,
            extent=(pos, self._line_end(pos)),
            value_start=self.lexmap.skip_trivia(m.end()),
            **kwargs,
        )

    def _form_io(self, pos: int, kind: DeclarationKind) -> None:
        m = _IO_RE.match(self.text, pos)
        if not m or (kwargs := self._named(m, kind)) is None:
            return
        type_name = m.group("type")
        self.type_ref(type_name, m.start("type"))
        value_start = None
        after = self.lexmap.skip_trivia(m.end())
        if self.text.startswith("=", after) and not self.text.startswith("==", after):
            value_start = self.lexmap.skip_trivia(after + 1)
        self.add_decl(
            _Owner.CONTAINER,
            m.start("name"),
            type_name=type_name,
            extent=(pos, self._line_end(pos)),
            value_start=value_start,
            **kwargs,
        )

    def _form_input(self, pos: int) -> None:
        self._form_io(pos, DeclarationKind.INPUT)

    def _form_output(self, pos: int) -> None:
        self._form_io(pos, DeclarationKind.OUTPUT)

    def _form_schema(self, pos: int) -> None:
        m = _SCHEMA_RE.match(self.text, pos)
        if not m or (kwargs := self._named(m, DeclarationKind.SCHEMA)) is None:
            return
        brace = m.end() - 1
        end = self.block_end(brace)
        self.claimed_braces.add(brace)
        scope = self.add_scope(ScopeKind.SCHEMA, brace, end)
        self.add_decl(_Owner.INNERMOST, pos, extent=(pos, end), body=(brace, end - 1), **kwargs)
        self._schema_properties(brace, end, scope)

    def _schema_properties(self, brace: int, end: int, scope: _ScopeSpec) -> None:
        text = self.text
        lexmap = self.lexmap
        # Nested braces (object defaults) are not property lines
        nested: list[tuple[int, int]] = []
        i = lexmap.find_code("{", brace + 1, end - 1)
        while i is not None:
            close = self.block_end(i)
            nested.append((i, close))
            i = lexmap.find_code("{", close, end - 1)
        for m in _PROPERTY_RE.finditer(text, brace + 1, max(brace + 1, end - 1)):
            type_start = m.start("type")
            if not lexmap.is_code(type_start) or any(s < type_start < e for s, e in nested):
                continue
            type_name = m.group("type")
            if type_name in KEYWORDS:
                continue
            self.type_ref(type_name, type_start)
            self.add_decl(
                _Owner.EXPLICIT,
                m.start("name"),
                scope,
                name=m.group("name"),
                kind=DeclarationKind.PROPERTY,
                start=m.start("name"),
                end=m.end("name"),
                type_name=type_name,
                extent=(type_start, self._line_end(type_start)),
                value_start=lexmap.skip_trivia(m.end()) if m.group("eq") else None,
            )

    def _form_type(self, pos: int) -> None:
        m = _TYPE_ALIAS_RE.match(self.text, pos)
        if not m or (kwargs := self._named(m, DeclarationKind.TYPE_ALIAS)) is None:
            return
        self.add_decl(
            _Owner.INNERMOST,
            pos,
            extent=(pos, self._line_end(pos)),
            value_start=self.lexmap.skip_trivia(m.end()),
            **kwargs,
        )

    def _form_fun(self, pos: int) -> None:
        text = self.text
        m = _FUN_RE.match(text, pos)
        if not m or (kwargs := self._named(m, DeclarationKind.FUNCTION)) is None:
            return
        paren = m.end() - 1
        close = self.lexmap.find_matching(paren)
        if close is None:
            return
        ret = _RETURN_TYPE_RE.match(text, close + 1)
        return_type = None
        body = None
        if ret:
            return_type = ret.group("type")
            self.type_ref(return_type, ret.start("type"))
            brace = ret.end() - 1
            end = self.block_end(brace)
            self.claimed_braces.add(brace)
            body = (brace, end - 1)
        else:
            end = close + 1
        scope = self.add_scope(ScopeKind.FUNCTION, paren, end)
        fun = self.add_decl(
            _Owner.INNERMOST,
            pos,
            type_name=return_type,
            return_type=return_type,
            extent=(pos, end),
            body=body,
            **kwargs,
        )
        fun.params = self._parameters(paren, close, scope)

    def _parameters(self, paren: int, close: int, scope: _ScopeSpec) -> list[_DeclSpec]:
        params: list[_DeclSpec] = []
        start = paren + 1
        for comma in self._top_level_commas(start, close) + [close]:
            piece = self.text[start:comma]
            stripped = piece.strip()
            offset = start + (len(piece) - len(piece.lstrip()))
            start = comma + 1
            m = _PARAM_RE.fullmatch(stripped)
            if not m or m.group("name") in KEYWORDS:
                continue
            type_name = m.group("type")
            if type_name:
                self.type_ref(type_name, offset + m.start("type"))
            params.append(
                self.add_decl(
                    _Owner.EXPLICIT,
                    offset + m.start("name"),
                    scope,
                    name=m.group("name"),
                    kind=DeclarationKind.PARAMETER,
                    start=offset + m.start("name"),
                    end=offset + m.end("name"),
                    type_name=type_name,
                    extent=(offset, offset + len(stripped)),
                )
            )
        return params

    def _top_level_commas(self, start: int, end: int) -> list[int]:
        commas = []
        i = start
        while i < end:
            ch = self.text[i]
            if self.lexmap.is_code(i):
                if ch in "[({":
                    close = self.lexmap.find_matching(i)
                    i = end if close is None else close + 1
                    continue
                if ch == ",":
                    commas.append(i)
            i += 1
        return commas

    def _form_component(self, pos: int) -> None:
        m = _COMPONENT_RE.match(self.text, pos)
        if not m:
            return
        brace = m.end() - 1
        end = self.block_end(brace)
        first = m.group("first")
        second = m.group("second")
        if second is None:
            if first in KEYWORDS or "." in first:
                return
            self.claimed_braces.add(brace)
            self.add_scope(ScopeKind.COMPONENT, brace, end)
            self.add_decl(
                _Owner.INNERMOST,
                pos,
                name=first,
                kind=DeclarationKind.COMPONENT_DEFINITION,
                start=m.start("first"),
                end=m.end("first"),
                extent=(pos, end),
                body=(brace, end - 1),
            )
            return
        if second in KEYWORDS:
            return
        self.type_ref(first, m.start("first"))
        self.add_decl(
            _Owner.COMPONENT_OR_FILE,
            pos,
            name=second,
            kind=DeclarationKind.COMPONENT_INSTANCE,
            start=m.start("second"),
            end=m.end("second"),
            type_name=first,
            extent=(pos, end),
            body=(brace, end - 1),
        )

    def _form_resource(self, pos: int) -> None:
        m = _RESOURCE_RE.match(self.text, pos)
        if not m or (kwargs := self._named(m, DeclarationKind.RESOURCE_INSTANCE)) is None:
            return
        brace = m.end() - 1
        end = self.block_end(brace)
        self.type_ref(m.group("type"), m.start("type"))
        self.add_decl(
            _Owner.COMPONENT_OR_FILE,
            pos,
            type_name=m.group("type"),
            extent=(pos, end),
            body=(brace, end - 1),
            **kwargs,
        )

    def _form_for(self, pos: int) -> None:
        m = _FOR_RE.match(self.text, pos)
        if not m or m.group("name") in KEYWORDS:
            return
        brace = self.find_block_open(m.end())
        if brace is None:
            return
        end = self.block_end(brace)
        self.claimed_braces.add(brace)
        scope = self.add_scope(ScopeKind.LOOP, pos, end)
        self.add_decl(
            _Owner.EXPLICIT,
            m.start("name"),
            scope,
            name=m.group("name"),
            kind=DeclarationKind.LOOP_VARIABLE,
            start=m.start("name"),
            end=m.end("name"),
            extent=(pos, end),
        )

    def _form_comprehension(self, m: re.Match[str]) -> None:
        if m.group("name") in KEYWORDS:
            return
        bracket = m.start()
        end = self._comprehension_end(bracket)
        scope = self.add_scope(ScopeKind.COMPREHENSION, bracket, end)
        self.add_decl(
            _Owner.EXPLICIT,
            m.start("name"),
            scope,
            name=m.group("name"),
            kind=DeclarationKind.COMPREHENSION_VARIABLE,
            start=m.start("name"),
            end=m.end("name"),
            extent=(bracket, end),
        )

    def _comprehension_end(self, bracket: int) -> int:
        """Bracket pair, or through the following block for the prefix form."""
        text = self.text
        close = self.lexmap.find_matching(bracket)
        if close is None:
            return len(text)
        if not self.at_statement_start(bracket):
            return close + 1
        pos = self._skip_decorators(self.lexmap.skip_trivia(close + 1))
        if pos >= len(text):
            return close + 1
        if text[pos] == "{":
            return self.block_end(pos)
        if text[pos] == "[" and _COMPREHENSION_RE.match(text, pos):
            # Stacked prefixes cover the same following declaration
            return max(close + 1, self._comprehension_end(pos))
        if _BLOCK_OWNER_RE.match(text, pos):
            brace = self.find_block_open(pos)
            if brace is not None:
                return self.block_end(brace)
        return close + 1

    def _skip_decorators(self, pos: int) -> int:
        text = self.text
        while (m := _DECORATOR_RE.match(text, pos)) is not None:
            pos = m.end()
            if text.startswith("(", pos):
                close = self.lexmap.find_matching(pos)
                if close is None:
                    return len(text)
                pos = close + 1
            pos = self.lexmap.skip_trivia(pos)
        return pos


def _build_tree(specs: list[_ScopeSpec], text_length: int) -> Scope:
    root = Scope(ScopeKind.FILE, 0, text_length + 1)
    stack: list[Scope] = [root]
    for spec in sorted(specs, key=lambda s: (s.start, -s.end)):
        while not (stack[-1].start <= spec.start < stack[-1].end):
            stack.pop()
        parent = stack[-1]
        scope = Scope(spec.kind, spec.start, min(spec.end, parent.end), parent)
        spec.scope = scope
        stack.append(scope)
    return root


def _owning_scope(index: DocumentIndex, spec: _DeclSpec) -> Scope:
    if spec.owner is _Owner.EXPLICIT and spec.scope_spec is not None:
        assert spec.scope_spec.scope is not None
        return spec.scope_spec.scope
    innermost = index.scope_at(spec.anchor)
    if spec.owner is _Owner.INNERMOST:
        return innermost
    wanted = (
        (ScopeKind.COMPONENT, ScopeKind.SCHEMA)
        if spec.owner is _Owner.CONTAINER
        else (ScopeKind.COMPONENT,)
    )
    for scope in innermost.ancestors():
        if scope.kind in wanted:
            return scope
    return index.root


def _leading_documentation(text: str, lexmap: LexicalMap, pos: int) -> str | None:
    """Comment text directly above the line holding ``pos``."""
    line_start = text.rfind("\n", 0, pos) + 1
    lines: list[str] = []
    cursor = line_start - 1
    while cursor > 0:
        prev_start = text.rfind("\n", 0, cursor) + 1
        line = text[prev_start:cursor].strip()
        if line.startswith("@"):
            cursor = prev_start - 1
            continue
        if line.startswith("//") and lexmap.in_comment(text.index("//", prev_start)):
            lines.insert(0, line[2:].strip())
            cursor = prev_start - 1
            continue
        close_at = text.rfind("*/", prev_start, cursor)
        if line.endswith("*/") and not lines and lexmap.in_comment(close_at):
            open_at = text.rfind("/*", 0, close_at)
            if open_at == -1:
                break
            body = text[open_at + 2 : close_at]
            for raw in body.splitlines():
                cleaned = raw.strip().lstrip("*").strip()
                if cleaned:
                    lines.append(cleaned)
        break
    return "\n".join(lines) if lines else None


def _classify_tokens(
    index: DocumentIndex, instance_bodies: dict[int, Declaration]
) -> tuple[set[int], list[PropertyKey], list[MemberAccess]]:
    text = index.text
    lexmap = index.lexmap
    excluded: set[int] = set()
    keys: list[PropertyKey] = []
    members: list[MemberAccess] = []

    def prev_code_char(i: int) -> tuple[str, bool]:
        """Previous significant char and whether a newline was crossed."""
        crossed = False
        i -= 1
        while i >= 0 and (text[i].isspace() or lexmap.in_comment(i)):
            crossed = crossed or text[i] == "\n"
            i -= 1
        return (text[i] if i >= 0 else "", crossed)

    for token in lexmap.identifiers():
        start, end = token.start, token.end
        before = text[start - 1] if start > 0 else ""
        if before == "@":
            excluded.add(start)
            continue
        if before == ".":
            excluded.add(start)
            obj_end = start - 1
            obj_start = obj_end
            while obj_start > 0 and is_identifier_char(text[obj_start - 1]):
                obj_start -= 1
            if obj_start < obj_end:
                members.append(
                    MemberAccess(token.name, start, end, text[obj_start:obj_end], obj_start)
                )
            continue
        after = lexmap.skip_trivia(end) if not token.interpolated else end
        nxt = text[after] if after < len(text) else ""
        prev, crossed = prev_code_char(start)
        at_entry = crossed or prev in ("{", ",", ";", "")
        if nxt == ":" and not text.startswith("::", after) and prev in ("{", ","):
            excluded.add(start)
            continue
        if nxt == "=" and not text.startswith("==", after) and at_entry:
            scope = index.scope_at(start)
            instance = instance_bodies.get(scope.start)
            if scope.kind is ScopeKind.BLOCK and instance is not None:
                excluded.add(start)
                keys.append(
                    PropertyKey(token.name, start, end, instance, lexmap.skip_trivia(after + 1))
                )
    return excluded, keys, members


def index_document(text: str) -> DocumentIndex:
    """Index ``text`` into scopes, declarations, type references and imports."""
    builder = _Builder(text)
    builder.run()
    root = _build_tree(builder.scopes, len(text))
    index = DocumentIndex(
        text=text,
        lexmap=builder.lexmap,
        root=root,
        declarations=[],
        type_references=builder.type_refs,
        imports=extract_imports(text, builder.lexmap),
        property_keys=[],
        member_accesses=[],
        excluded_starts=frozenset(),
    )

    built: dict[int, Declaration] = {}
    for spec in sorted(builder.decls, key=lambda s: s.decl_kwargs["start"]):
        scope = _owning_scope(index, spec)
        decl = Declaration(scope=scope, **spec.decl_kwargs)
        if decl.is_top_level or decl.kind is DeclarationKind.PROPERTY:
            decl.documentation = _leading_documentation(text, builder.lexmap, decl.start)
        scope.bind(decl)
        built[id(spec)] = decl
        index.declarations.append(decl)
    for spec in builder.decls:
        if spec.params:
            built[id(spec)].parameters = [built[id(p)] for p in spec.params]

    instance_bodies = {
        d.body[0]: d
        for d in index.declarations
        if d.body is not None
        and d.kind in (DeclarationKind.RESOURCE_INSTANCE, DeclarationKind.COMPONENT_INSTANCE)
    }
    excluded, keys, members = _classify_tokens(index, instance_bodies)
    index.excluded_starts = frozenset(excluded)
    index.property_keys = keys
    index.member_accesses = members
    log.debug(
        "indexer.document_indexed",
        declarations=len(index.declarations),
        scopes=sum(1 for _ in root.walk()),
        imports=len(index.imports),
    )
    return index


def empty_index(text: str) -> DocumentIndex:
    """An index with only the file scope, used when indexing fails."""
    return DocumentIndex(
        text=text,
        lexmap=scan(text),
        root=Scope(ScopeKind.FILE, 0, len(text) + 1),
        declarations=[],
        type_references=[],
        imports=[],
        property_keys=[],
        member_accesses=[],
        excluded_starts=frozenset(),
    )
