"""
Aggregator files

The query registry (src/db/db.js) and the route registry (src/routes/index.js)
are hand-maintained files that every generated model registers itself in.

Both share one shape:

    <imports>
    <other lines>
    <opening line>      const db = {            function registerRoutes(app, apiV) {
      <members>           author,                 app.use(`/api/${apiV}/authors`, authorsRoutes);
    <closing line>      };                      }
    <other lines>
    <export line>       export default db;      export default registerRoutes;

A file is parsed into an ordered list of classified lines. Patching inserts
or deletes only the lines keyed by the model; every other line keeps its
text and position. A patch that changes nothing returns the input verbatim.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

from crudgen.logging import get_logger
from crudgen.model import ModelDescriptor

logger = get_logger(__name__)

# Line kinds
IMPORT = "import"
OPENING = "opening"
MEMBER = "member"
CLOSING = "closing"
EXPORT = "export"
OTHER = "other"

IMPORT_STATEMENT_RE = re.compile(r"^\s*import\b")
# Comments and directives that must stay at the top of a file
LEADING_LINE_RE = re.compile(r"""^\s*(?://|/\*|\*|['"]use strict['"])""")

_QUOTES = "'\"`"
_PAIRS = {'(': ')', '[': ']', '{': '}'}


@dataclass
class Entry:
    """A classified line. `key` is None for lines that are kept but not understood."""

    kind: str
    line: str
    key: Optional[str] = None


def _is_blank(entry: Entry) -> bool:
    return not entry.line.strip()


def _scan_braces(line: str, depth: int, start: int = 0) -> Tuple[int, int]:
    """
    Track curly brace depth across `line`, ignoring strings and `//` comments.

    Returns:
        (depth after the line, index of the brace that brought depth to 0 or -1)
    """
    quote = None
    index = start
    while index < len(line):
        char = line[index]
        if quote:
            if char == '\\':
                index += 1
            elif char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
        elif line.startswith('//', index):
            break
        elif char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return depth, index
        index += 1
    return depth, -1


def _split_top_level(text: str, separator: str) -> Optional[List[str]]:
    """
    Split `text` on `separator` outside brackets and strings.

    Returns None when the text holds a comment; such lines are kept whole.
    """
    pieces = []
    stack = []
    quote = None
    current = ""
    index = 0
    while index < len(text):
        char = text[index]
        if quote:
            current += char
            if char == '\\' and index + 1 < len(text):
                index += 1
                current += text[index]
            elif char == quote:
                quote = None
        elif char in _QUOTES:
            quote = char
            current += char
        elif text.startswith('//', index) or text.startswith('/*', index):
            return None
        elif char in _PAIRS:
            stack.append(_PAIRS[char])
            current += char
        elif stack and char == stack[-1]:
            stack.pop()
            current += char
        elif char == separator and not stack:
            pieces.append(current)
            current = ""
        else:
            current += char
        index += 1
    pieces.append(current)
    return [piece.strip() for piece in pieces if piece.strip()]


class AggregatorFile:
    """
    Structured view of an aggregator file.

    Subclasses provide the syntax: how imports, the block opening and the
    member lines look, and how to produce them for a model.
    """

    OPENING_RE: Pattern
    OPENING_LINE: str
    CLOSING_LINE: str
    EXPORT_RE: Pattern
    EXPORT_LINE: str
    # Separates members written on one line, e.g. `{ author, book }`
    MEMBER_SEPARATOR: str

    def __init__(self):
        self.lines: List[Entry] = []
        self.newline = "\n"
        self.trailing_newline = True
        self.modified = False

    # -- syntax hooks -------------------------------------------------------

    def key_for(self, model: ModelDescriptor) -> str:
        raise NotImplementedError

    def import_line(self, model: ModelDescriptor) -> str:
        raise NotImplementedError

    def member_line(self, model: ModelDescriptor) -> str:
        raise NotImplementedError

    def match_import(self, line: str) -> Optional[str]:
        raise NotImplementedError

    def match_member(self, line: str) -> Optional[str]:
        raise NotImplementedError

    # -- parsing and rendering ----------------------------------------------

    @classmethod
    def parse(cls, text: str, **options) -> "AggregatorFile":
        """Parse file text. An empty string yields an empty document."""
        document = cls(**options)
        document._load(text)
        return document

    def _load(self, text: str):
        if "\r\n" in text:
            self.newline = "\r\n"
        self.trailing_newline = not text or text.endswith("\n")

        state = "head"
        depth = 0

        for line in text.splitlines():
            if state == "body":
                depth, end = _scan_braces(line, depth)
                if end < 0:
                    self._add_member_line(line, nested=depth > 1)
                    continue
                if line[:end].strip():
                    self._add_inline_members(line[:end])
                    self.lines.append(Entry(CLOSING, line[end:].strip()))
                else:
                    self.lines.append(Entry(CLOSING, line))
                state = "tail"
                continue

            key = self.match_import(line)
            opening = self.OPENING_RE.match(line) if state == "head" else None
            if key is not None:
                self.lines.append(Entry(IMPORT, line, key))
            elif self.EXPORT_RE.match(line):
                self.lines.append(Entry(EXPORT, line))
            elif opening:
                brace = opening.end() - 1
                depth, end = _scan_braces(line, 0, brace)
                inner = line[brace + 1:end] if end >= 0 else line[brace + 1:]

                if not inner.strip() and end < 0:
                    self.lines.append(Entry(OPENING, line))
                else:
                    # Members sharing the opening line, e.g. `const db = { author };`
                    self.lines.append(Entry(OPENING, line[:brace + 1]))
                    if inner.strip():
                        self._add_inline_members(inner, nested=depth > 1)

                if end >= 0:
                    self.lines.append(Entry(CLOSING, line[end:].strip()))
                    state = "tail"
                else:
                    state = "body"
            else:
                self.lines.append(Entry(OTHER, line))

        if state == "body":
            logger.warning(f"Unterminated block in {type(self).__name__}; closing it")
            self.lines.append(Entry(CLOSING, self.CLOSING_LINE))

    def _add_member_line(self, line: str, nested: bool = False):
        """Add a body line; balanced lines holding several members are split up."""
        if not nested:
            pieces = _split_top_level(line, self.MEMBER_SEPARATOR)
            if pieces and len(pieces) > 1:
                self._add_inline_members(line)
                return
        self.lines.append(Entry(MEMBER, line, None if nested else self.match_member(line)))

    def _add_inline_members(self, text: str, nested: bool = False):
        """Add members written next to a brace, one line each."""
        pieces = None if nested else _split_top_level(text, self.MEMBER_SEPARATOR)
        if pieces is None:
            line = "  " + text.strip()
            self.lines.append(Entry(MEMBER, line, None if nested else self.match_member(line)))
            return
        for piece in pieces:
            line = f"  {piece}{self.MEMBER_SEPARATOR}"
            self.lines.append(Entry(MEMBER, line, self.match_member(line)))

    def render(self) -> str:
        """Serialize back to text, line for line."""
        if not self.lines:
            return ""
        text = self.newline.join(entry.line for entry in self.lines)
        return text + self.newline if self.trailing_newline else text

    def _find(self, kind: str, key: Optional[str] = None) -> List[int]:
        return [
            index for index, entry in enumerate(self.lines)
            if entry.kind == kind and (key is None or entry.key == key)
        ]

    # -- editing ------------------------------------------------------------

    def _insert_section(self, index: int, entries: List[Entry]):
        """Insert `entries` as a paragraph, separated from neighbours by blank lines."""
        block = list(entries)
        if index > 0 and not _is_blank(self.lines[index - 1]):
            block.insert(0, Entry(OTHER, ""))
        if index < len(self.lines) and not _is_blank(self.lines[index]):
            block.append(Entry(OTHER, ""))
        self.lines[index:index] = block
        self.modified = True

    def _delete(self, index: int):
        """Delete one line without leaving a doubled or dangling blank line."""
        del self.lines[index]
        self.modified = True

        if index < len(self.lines) and _is_blank(self.lines[index]):
            if index == 0 or _is_blank(self.lines[index - 1]):
                del self.lines[index]
        elif index == len(self.lines) and index > 0 and _is_blank(self.lines[index - 1]):
            del self.lines[index - 1]

    def _after_leading_comments(self) -> int:
        """Index of the first line after a leading comment or directive block."""
        index = 0
        while index < len(self.lines) and self.lines[index].kind == OTHER:
            if not LEADING_LINE_RE.match(self.lines[index].line):
                break
            index += 1
        return index

    def _delete_all_but_first(self, kind: str, key: Optional[str] = None):
        for index in reversed(self._find(kind, key)[1:]):
            self._delete(index)

    # -- patch modes --------------------------------------------------------

    def ensure_present(self, model: ModelDescriptor) -> "AggregatorFile":
        """
        Make sure the model's import and member appear exactly once.

        A missing import goes before the first existing import (or below any
        leading comments); a missing member goes right after the block opening.
        Without a block, the skeleton block is created. The export line is
        present exactly once afterwards.
        """
        key = self.key_for(model)

        if not self._find(OPENING):
            exports = self._find(EXPORT)
            self._insert_section(
                exports[0] if exports else len(self.lines),
                [Entry(OPENING, self.OPENING_LINE), Entry(CLOSING, self.CLOSING_LINE)],
            )

        if not self._find(IMPORT, key):
            entry = Entry(IMPORT, self.import_line(model), key)
            imports = self._find(IMPORT) or [
                index for index, other in enumerate(self.lines)
                if other.kind == OTHER and IMPORT_STATEMENT_RE.match(other.line)
            ]
            if imports:
                self.lines.insert(imports[0], entry)
                self.modified = True
            else:
                self._insert_section(self._after_leading_comments(), [entry])

        if not self._find(MEMBER, key):
            opening = self._find(OPENING)[0]
            self.lines.insert(opening + 1, Entry(MEMBER, self.member_line(model), key))
            self.modified = True

        self._delete_all_but_first(IMPORT, key)
        self._delete_all_but_first(MEMBER, key)
        self._delete_all_but_first(EXPORT)

        if not self._find(EXPORT):
            self._insert_section(len(self.lines), [Entry(EXPORT, self.EXPORT_LINE)])
        return self

    def ensure_absent(self, model: ModelDescriptor) -> "AggregatorFile":
        """Drop every import and member keyed by the model. Nothing else changes."""
        key = self.key_for(model)
        for kind in (MEMBER, IMPORT):
            for index in reversed(self._find(kind, key)):
                self._delete(index)
        return self


class DbRegistry(AggregatorFile):
    """
    src/db/db.js - aggregates every query module into one `db` object.

        import author from './queries/author.js';

        const db = {
          author,
        };

        export default db;
    """

    IMPORT_RE = re.compile(
        r"""^\s*import\s+(\w+)\s+from\s+['"](?:\.{1,2}/)+(?:[\w.-]+/)*(\w+)\.js['"]\s*;?\s*$"""
    )
    OPENING_RE = re.compile(r"^\s*(?:export\s+)?const\s+db\s*=\s*\{")
    MEMBER_RE = re.compile(r"^\s*(\w+)\s*(?::\s*\w+\s*)?,?\s*(?://.*)?$")
    EXPORT_RE = re.compile(r"^\s*export\s+default\s+db\s*;?\s*$")

    OPENING_LINE = "const db = {"
    CLOSING_LINE = "};"
    EXPORT_LINE = "export default db;"
    MEMBER_SEPARATOR = ","

    def __init__(self, queries_path: str = "./queries"):
        super().__init__()
        self.queries_path = queries_path.rstrip('/')

    def key_for(self, model: ModelDescriptor) -> str:
        return model.name

    def import_line(self, model: ModelDescriptor) -> str:
        return f"import {model.name} from '{self.queries_path}/{model.name}.js';"

    def member_line(self, model: ModelDescriptor) -> str:
        return f"  {model.name},"

    def match_import(self, line: str) -> Optional[str]:
        match = self.IMPORT_RE.match(line)
        # Only `import x from '.../x.js'` counts as a query module import
        if match and match.group(1) == match.group(2):
            return match.group(1)
        return None

    def match_member(self, line: str) -> Optional[str]:
        match = self.MEMBER_RE.match(line)
        return match.group(1) if match else None


class RouteRegistry(AggregatorFile):
    """
    src/routes/index.js - mounts every router inside registerRoutes().

        import authorsRoutes from './authors.js';

        function registerRoutes(app, apiV) {
          app.use(`/api/${apiV}/authors`, authorsRoutes);
        }

        export default registerRoutes;
    """

    IMPORT_RE = re.compile(
        r"""^\s*import\s+(\w+)Routes\s+from\s+['"](?:\.{1,2}/)+(?:[\w.-]+/)*(\w+)\.js['"]\s*;?\s*$"""
    )
    OPENING_RE = re.compile(
        r"^\s*(?:export\s+)?function\s+registerRoutes\s*\(\s*app\s*,\s*apiV\s*\)\s*\{"
    )
    MEMBER_RE = re.compile(
        r"^\s*app\.use\(\s*`[^`]*/\$\{\s*apiV\s*\}/(\w+)`\s*,\s*(\w+)\s*\)\s*;?\s*$"
    )
    EXPORT_RE = re.compile(r"^\s*export\s+default\s+registerRoutes\s*;?\s*$")

    OPENING_LINE = "function registerRoutes(app, apiV) {"
    CLOSING_LINE = "}"
    EXPORT_LINE = "export default registerRoutes;"
    MEMBER_SEPARATOR = ";"

    def __init__(self, routes_path: str = ".", api_prefix: str = "/api"):
        super().__init__()
        self.routes_path = routes_path.rstrip('/') or "."
        self.api_prefix = "/" + api_prefix.strip('/') if api_prefix.strip('/') else ""

    def key_for(self, model: ModelDescriptor) -> str:
        return model.plural_name

    def import_line(self, model: ModelDescriptor) -> str:
        plural = model.plural_name
        return f"import {plural}Routes from '{self.routes_path}/{plural}.js';"

    def member_line(self, model: ModelDescriptor) -> str:
        plural = model.plural_name
        return f"  app.use(`{self.api_prefix}/${{apiV}}/{plural}`, {plural}Routes);"

    def match_import(self, line: str) -> Optional[str]:
        match = self.IMPORT_RE.match(line)
        if match and match.group(1) == match.group(2):
            return match.group(2)
        return None

    def match_member(self, line: str) -> Optional[str]:
        match = self.MEMBER_RE.match(line)
        if match and match.group(2) == f"{match.group(1)}Routes":
            return match.group(1)
        return None


def _patch(document: AggregatorFile, text: str, model: ModelDescriptor, present: bool) -> str:
    if present:
        document.ensure_present(model)
    else:
        document.ensure_absent(model)
    return document.render() if document.modified else text


def patch_db_registry(text: str, model: ModelDescriptor, present: bool = True,
                      queries_path: str = "./queries") -> str:
    """Apply ensure-present (create) or ensure-absent (remove) to db.js text."""
    document = DbRegistry.parse(text, queries_path=queries_path)
    return _patch(document, text, model, present)


def patch_route_registry(text: str, model: ModelDescriptor, present: bool = True,
                         routes_path: str = ".", api_prefix: str = "/api") -> str:
    """Apply ensure-present (create) or ensure-absent (remove) to routes/index.js text."""
    document = RouteRegistry.parse(text, routes_path=routes_path, api_prefix=api_prefix)
    return _patch(document, text, model, present)
