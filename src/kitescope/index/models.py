"""Index data model: scopes, declarations, references and imports.

All offsets are string indices into the indexed text. Spans are half-open
``[start, end)``. A ``DocumentIndex`` is built fresh for every text snapshot
and never mutated afterwards.
"""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from kitescope.index.lexical import LexicalMap, Token

KEYWORDS: frozenset[str] = frozenset(
    (
        "resource",
        "component",
        "schema",
        "input",
        "output",
        "if",
        "else",
        "while",
        "for",
        "in",
        "return",
        "import",
        "from",
        "fun",
        "var",
        "type",
        "init",
        "this",
        "true",
        "false",
        "null",
    )
)

BUILTIN_TYPES: frozenset[str] = frozenset(("string", "number", "boolean", "any", "object", "void"))

BUILTIN_FUNCTIONS: frozenset[str] = frozenset(
    ("println", "print", "len", "toString", "toNumber", "typeof")
)


class ScopeKind(str, Enum):
    """Lexical scope kind."""

    FILE = "file"
    FUNCTION = "function"
    LOOP = "loop"
    COMPREHENSION = "comprehension"
    SCHEMA = "schema"
    COMPONENT = "component"
    BLOCK = "block"


class DeclarationKind(str, Enum):
    """What a binding site declares."""

    VARIABLE = "variable"
    INPUT = "input"
    OUTPUT = "output"
    FUNCTION = "function"
    SCHEMA = "schema"
    COMPONENT_DEFINITION = "component-definition"
    COMPONENT_INSTANCE = "component-instance"
    RESOURCE_INSTANCE = "resource-instance"
    TYPE_ALIAS = "type-alias"
    LOOP_VARIABLE = "loop-variable"
    COMPREHENSION_VARIABLE = "comprehension-variable"
    PARAMETER = "parameter"
    PROPERTY = "property"


# Kinds another file can import when declared at file scope
EXPORTED_KINDS: frozenset[DeclarationKind] = frozenset(
    (
        DeclarationKind.SCHEMA,
        DeclarationKind.COMPONENT_DEFINITION,
        DeclarationKind.FUNCTION,
        DeclarationKind.TYPE_ALIAS,
        DeclarationKind.VARIABLE,
        DeclarationKind.RESOURCE_INSTANCE,
        DeclarationKind.COMPONENT_INSTANCE,
    )
)

# Kinds whose binding is a value that can go unused
VALUE_KINDS: frozenset[DeclarationKind] = frozenset(
    (
        DeclarationKind.VARIABLE,
        DeclarationKind.INPUT,
        DeclarationKind.OUTPUT,
        DeclarationKind.LOOP_VARIABLE,
        DeclarationKind.COMPREHENSION_VARIABLE,
        DeclarationKind.PARAMETER,
    )
)


class Scope:
    """A lexical region holding name bindings.

    Children are owned by their parent; the parent link is weak so a scope
    tree is released as soon as its ``DocumentIndex`` is.
    """

    __slots__ = ("kind", "start", "end", "_parent", "children", "bindings", "__weakref__")

    def __init__(self, kind: ScopeKind, start: int, end: int, parent: Scope | None = None):
        self.kind = kind
        self.start = start
        self.end = end
        self._parent: weakref.ref[Scope] | None = weakref.ref(parent) if parent else None
        self.children: list[Scope] = []
        self.bindings: dict[str, Declaration] = {}
        if parent is not None:
            parent.children.append(self)

    def __repr__(self) -> str:
        return f"Scope({self.kind.value}, {self.start}, {self.end})"

    @property
    def parent(self) -> Scope | None:
        return self._parent() if self._parent is not None else None

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def bind(self, declaration: Declaration) -> bool:
        """Bind a declaration; the first binding of a name wins."""
        if declaration.name in self.bindings:
            return False
        self.bindings[declaration.name] = declaration
        return True

    def ancestors(self) -> Iterator[Scope]:
        """This scope, then each enclosing scope up to the file scope."""
        scope: Scope | None = self
        while scope is not None:
            yield scope
            scope = scope.parent

    def lookup(self, name: str) -> Declaration | None:
        for scope in self.ancestors():
            if (found := scope.bindings.get(name)) is not None:
                return found
        return None

    def walk(self) -> Iterator[Scope]:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(eq=False)
class Declaration:
    """A binding site. Compared by identity."""

    name: str
    kind: DeclarationKind
    start: int
    end: int
    scope: Scope
    type_name: str | None = None
    extent: tuple[int, int] | None = None
    body: tuple[int, int] | None = None  # braces of the construct's block, inclusive
    value_start: int | None = None
    documentation: str | None = None
    return_type: str | None = None
    parameters: list[Declaration] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"Declaration({self.kind.value} {self.name!r} @{self.start})"

    @property
    def is_top_level(self) -> bool:
        return self.scope.kind == ScopeKind.FILE

    @property
    def is_exported(self) -> bool:
        return self.is_top_level and self.kind in EXPORTED_KINDS

    @property
    def span(self) -> tuple[int, int]:
        """Text over which this binding is visible."""
        return self.scope.start, self.scope.end


@dataclass(frozen=True, slots=True)
class TypeReference:
    """A type name in a declaration; not a binding."""

    name: str
    start: int
    end: int

    @property
    def builtin(self) -> bool:
        return self.name in BUILTIN_TYPES


@dataclass(frozen=True, slots=True)
class PropertyKey:
    """``name = value`` inside a resource or component instance body."""

    name: str
    start: int
    end: int
    instance: Declaration
    value_start: int


@dataclass(frozen=True, slots=True)
class MemberAccess:
    """``object.name``; ``name`` is a member, not a scope reference."""

    name: str
    start: int
    end: int
    object_name: str
    object_start: int


@dataclass(frozen=True, slots=True)
class ImportSymbol:
    name: str
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class Import:
    """One ``import ... from "path"`` statement."""

    path: str
    quote: str
    symbols: tuple[ImportSymbol, ...]
    start: int
    end: int
    start_line: int
    end_line: int

    @property
    def is_wildcard(self) -> bool:
        return not self.symbols

    @property
    def symbol_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.symbols)

    def names(self, name: str) -> bool:
        return self.is_wildcard or name in self.symbol_names


@dataclass(frozen=True, slots=True)
class Reference:
    """A name occurrence that is not its own binding site."""

    name: str
    start: int
    end: int
    declaration: Declaration | None


@dataclass(eq=False)
class DocumentIndex:
    """Scope tree, declarations and imports of one text snapshot."""

    text: str
    lexmap: LexicalMap
    root: Scope
    declarations: list[Declaration]
    type_references: list[TypeReference]
    imports: list[Import]
    property_keys: list[PropertyKey]
    member_accesses: list[MemberAccess]
    excluded_starts: frozenset[int]

    def scope_at(self, offset: int) -> Scope:
        """The most deeply nested scope containing ``offset``."""
        scope = self.root
        while True:
            for child in scope.children:
                if child.contains(offset):
                    scope = child
                    break
                if child.start > offset:
                    return scope
            else:
                return scope

    def name_tokens(self, name: str | None = None) -> Iterator[Token]:
        """Identifier tokens that can refer to a scope binding.

        Member names, property keys, object keys, decorator names and
        keywords are skipped.
        """
        for token in self.lexmap.identifiers():
            if name is not None and token.name != name:
                continue
            if token.start in self.excluded_starts or token.name in KEYWORDS:
                continue
            yield token

    def in_import(self, offset: int) -> bool:
        return any(imp.start <= offset < imp.end for imp in self.imports)

    def declaration_at(self, offset: int) -> Declaration | None:
        """The declaration whose binding-site name covers ``offset``."""
        for decl in self.declarations:
            if decl.start <= offset <= decl.end:
                return decl
        return None

    def exported(self) -> list[Declaration]:
        return [d for d in self.declarations if d.is_exported]

    def named(self, name: str) -> list[Declaration]:
        return [d for d in self.declarations if d.name == name]
