"""
Aggregator File Tests

Covers parsing, ensure-present and ensure-absent for the query registry
(db.js) and the route registry (routes/index.js).
"""

import pytest

from crudgen.aggregator import (
    DbRegistry, RouteRegistry, patch_db_registry, patch_route_registry,
)
from crudgen.model import ModelDescriptor


EMPTY_DB_WITH_AUTHOR = (
    "import author from './queries/author.js';\n"
    "\n"
    "const db = {\n"
    "  author,\n"
    "};\n"
    "\n"
    "export default db;\n"
)

EMPTY_ROUTES_WITH_AUTHOR = (
    "import authorsRoutes from './authors.js';\n"
    "\n"
    "function registerRoutes(app, apiV) {\n"
    "  app.use(`/api/${apiV}/authors`, authorsRoutes);\n"
    "}\n"
    "\n"
    "export default registerRoutes;\n"
)


def model(name):
    return ModelDescriptor.from_input(name, ["name"])


def members(document):
    return [entry for entry in document.lines if entry.kind == "member"]


def registered(document):
    """Keys of recognized members, in file order."""
    return [entry.key for entry in members(document) if entry.key is not None]


class TestDbRegistryEnsurePresent:
    """Registering query modules in db.js"""

    def test_synthesizes_skeleton_from_empty_file(self, author):
        assert patch_db_registry("", author) == EMPTY_DB_WITH_AUTHOR

    def test_idempotent(self, author):
        once = patch_db_registry("", author)
        twice = patch_db_registry(once, author)

        assert twice == once
        assert twice.count("import author from './queries/author.js';") == 1
        assert twice.count("  author,") == 1

    def test_new_model_is_prepended(self, author, book):
        text = patch_db_registry(patch_db_registry("", author), book)

        assert text == (
            "import book from './queries/book.js';\n"
            "import author from './queries/author.js';\n"
            "\n"
            "const db = {\n"
            "  book,\n"
            "  author,\n"
            "};\n"
            "\n"
            "export default db;\n"
        )

    def test_inserts_after_existing_literal_opening(self, author):
        existing = (
            "import book from './queries/book.js';\n"
            "\n"
            "const db = {\n"
            "  book,\n"
            "};\n"
        )
        text = patch_db_registry(existing, author)

        assert "const db = {\n  author,\n  book,\n};" in text
        assert text.endswith("export default db;\n")

    def test_collapses_duplicate_entries(self, author):
        existing = (
            "import author from './queries/author.js';\n"
            "import author from './queries/author.js';\n"
            "const db = {\n"
            "  author,\n"
            "  author,\n"
            "};\n"
            "export default db;\n"
        )
        text = patch_db_registry(existing, author)

        assert text == (
            "import author from './queries/author.js';\n"
            "const db = {\n"
            "  author,\n"
            "};\n"
            "export default db;\n"
        )

    def test_single_line_empty_literal(self, author):
        text = patch_db_registry("const db = {};\n\nexport default db;\n", author)

        assert text == EMPTY_DB_WITH_AUTHOR
        assert text.count("const db") == 1

    def test_preserves_unrecognized_lines(self, author):
        existing = (
            "import { query } from './pool.js';\n"
            "\n"
            "const db = {\n"
            "  ping: () => query('SELECT 1'),\n"
            "};\n"
            "\n"
            "export const ready = true;\n"
            "export default db;\n"
        )
        text = patch_db_registry(existing, author)

        assert "import { query } from './pool.js';" in text
        assert "  ping: () => query('SELECT 1')," in text
        assert "export const ready = true;" in text
        assert text.index("export const ready") < text.index("export default db;")

    def test_custom_queries_path(self, author):
        text = patch_db_registry("", author, queries_path="../queries/")

        assert "import author from '../queries/author.js';" in text


class TestDbRegistryEnsureAbsent:
    """Unregistering query modules from db.js"""

    def test_removes_import_and_member(self, author, book):
        text = patch_db_registry(patch_db_registry("", author), book)
        text = patch_db_registry(text, author, present=False)

        assert "author" not in text
        assert "import book from './queries/book.js';" in text
        assert "  book," in text
        assert "export default db;" in text

    def test_does_not_touch_similar_names(self):
        """Removing `book` must leave `bookmark` and `books` alone"""
        text = ""
        for name in ("bookmark", "books", "book"):
            text = patch_db_registry(text, model(name))

        text = patch_db_registry(text, model("book"), present=False)
        document = DbRegistry.parse(text)

        assert registered(document) == ["books", "bookmark"]
        assert "import book from" not in text

    def test_removing_last_model_keeps_skeleton(self, author):
        text = patch_db_registry(EMPTY_DB_WITH_AUTHOR, author, present=False)

        assert text == "const db = {\n};\n\nexport default db;\n"

    def test_absent_model_is_noop(self, author, book):
        assert patch_db_registry(EMPTY_DB_WITH_AUTHOR, book, present=False) == EMPTY_DB_WITH_AUTHOR

    def test_does_not_synthesize_block(self, author):
        assert patch_db_registry("", author, present=False) == ""

    def test_legacy_layout_with_block_after_imports(self, author, book):
        """Files written by older generators (block appended after a blank line)"""
        legacy = (
            "import book from './queries/book.js';\n"
            "import author from './queries/author.js';\n"
            "\n"
            "const db = {\n"
            "  book,\n"
            "  author,\n"
            "};\n"
            "\n"
            "export default db;\n"
            "\n"
            "export default db;\n"
        )
        text = patch_db_registry(legacy, author, present=False)
        assert registered(DbRegistry.parse(text)) == ["book"]

        text = patch_db_registry(text, model("post"))
        assert registered(DbRegistry.parse(text)) == ["post", "book"]
        assert text.count("export default db;") == 1
        assert text.endswith("};\n\nexport default db;\n")


class TestRouteRegistry:
    """Registering routers in routes/index.js"""

    def test_synthesizes_skeleton_from_empty_file(self, author):
        assert patch_route_registry("", author) == EMPTY_ROUTES_WITH_AUTHOR

    def test_idempotent(self, author):
        once = patch_route_registry("", author)

        assert patch_route_registry(once, author) == once

    def test_removal(self, author, book):
        text = patch_route_registry(patch_route_registry("", author), book)
        text = patch_route_registry(text, author, present=False)

        assert "authors" not in text
        assert "  app.use(`/api/${apiV}/books`, booksRoutes);" in text

    def test_removal_survives_reformatting(self, author):
        reformatted = (
            'import authorsRoutes from "./authors.js"\n'
            "\n"
            "function registerRoutes(app, apiV) {\n"
            "    app.use( `/api/${ apiV }/authors` ,authorsRoutes )\n"
            "}\n"
            "\n"
            "export default registerRoutes;\n"
        )
        text = patch_route_registry(reformatted, author, present=False)

        assert "authors" not in text

    def test_nested_braces_stay_inside_function(self, author):
        existing = (
            "function registerRoutes(app, apiV) {\n"
            "  if (process.env.DEBUG) {\n"
            "    app.use('/debug', debugRoutes);\n"
            "  }\n"
            "}\n"
            "\n"
            "export default registerRoutes;\n"
        )
        text = patch_route_registry(existing, author)

        assert text == (
            "import authorsRoutes from './authors.js';\n"
            "\n"
            "function registerRoutes(app, apiV) {\n"
            "  app.use(`/api/${apiV}/authors`, authorsRoutes);\n"
            "  if (process.env.DEBUG) {\n"
            "    app.use('/debug', debugRoutes);\n"
            "  }\n"
            "}\n"
            "\n"
            "export default registerRoutes;\n"
        )

    def test_custom_api_prefix(self, author):
        text = patch_route_registry("", author, api_prefix="/v")
        assert "app.use(`/v/${apiV}/authors`, authorsRoutes);" in text

        text = patch_route_registry("", author, api_prefix="")
        assert "app.use(`/${apiV}/authors`, authorsRoutes);" in text
        assert registered(RouteRegistry.parse(text)) == ["authors"]

    def test_mismatched_handler_is_not_a_registration(self):
        line = "  app.use(`/api/${apiV}/authors`, legacyRoutes);"
        document = RouteRegistry.parse(f"function registerRoutes(app, apiV) {{\n{line}\n}}\n")

        assert registered(document) == []
        assert members(document)[0].line == line


class TestParsing:
    """Structure detection"""

    def test_import_must_match_module_name(self):
        document = DbRegistry.parse("import author from './queries/writer.js';\n")

        assert [entry.kind for entry in document.lines] == ["other"]

    def test_unterminated_block_is_closed(self, author):
        document = DbRegistry.parse("const db = {\n  author,\n")

        assert registered(document) == ["author"]
        assert document.render() == "const db = {\n  author,\n};\n"

    @pytest.mark.parametrize("registry", [DbRegistry, RouteRegistry])
    def test_empty_document_renders_empty(self, registry):
        assert registry.parse("").render() == ""


class TestInlineMembers:
    """Members written on the same line as a brace"""

    def test_one_line_object_keeps_members(self, book):
        existing = (
            "import author from './queries/author.js';\n"
            "\n"
            "const db = { author };\n"
            "\n"
            "export default db;\n"
        )
        text = patch_db_registry(existing, book)

        assert "const db = {\n  book,\n  author,\n};" in text
        assert registered(DbRegistry.parse(text)) == ["book", "author"]
        assert text.count("import author from './queries/author.js';") == 1

    def test_one_line_function_keeps_registrations(self, book):
        existing = (
            "import authorsRoutes from './authors.js';\n"
            "\n"
            "function registerRoutes(app, apiV) { app.use(`/api/${apiV}/authors`, authorsRoutes); }\n"
            "\n"
            "export default registerRoutes;\n"
        )
        text = patch_route_registry(existing, book)

        assert registered(RouteRegistry.parse(text)) == ["books", "authors"]
        assert "  app.use(`/api/${apiV}/authors`, authorsRoutes);\n}" in text

    def test_member_on_opening_line_of_multiline_block(self, author):
        existing = (
            "const db = { author,\n"
            "  book,\n"
            "};\n"
        )
        text = patch_db_registry(existing, author, present=False)

        assert text == "const db = {\n  book,\n};\n"

    def test_member_before_closing_brace(self):
        text = patch_db_registry("const db = {\n  author,\n  book };\n", model("post"))

        assert registered(DbRegistry.parse(text)) == ["post", "author", "book"]
        assert "  book,\n};" in text

    def test_several_members_on_one_line(self, author):
        existing = "const db = {\n  author, book,\n};\n"

        text = patch_db_registry(existing, author, present=False)

        assert text == "const db = {\n  book,\n};\n"

    def test_one_line_object_untouched_when_already_registered(self, author):
        existing = "import author from './queries/author.js';\nconst db = { author };\nexport default db;\n"

        assert patch_db_registry(existing, author) == existing


class TestLayoutPreserved:
    """Lines that do not belong to the model keep their text and position"""

    COMMENTED = (
        "// @ts-check\n"
        "import author from './queries/author.js';\n"
        "import book from './queries/book.js';\n"
        "\n"
        "const db = {\n"
        "  author,\n"
        "  book,\n"
        "};\n"
        "\n"
        "export default db;\n"
    )

    def test_removing_unregistered_model_returns_input(self):
        assert patch_db_registry(self.COMMENTED, model("post"), present=False) == self.COMMENTED

    def test_no_trailing_newline_is_kept(self):
        existing = self.COMMENTED.rstrip("\n")

        assert patch_db_registry(existing, model("post"), present=False) == existing
        assert not patch_db_registry(existing, model("author"), present=False).endswith("\n")

    def test_removal_keeps_leading_comment_in_place(self, author):
        text = patch_db_registry(self.COMMENTED, author, present=False)

        assert text == (
            "// @ts-check\n"
            "import book from './queries/book.js';\n"
            "\n"
            "const db = {\n"
            "  book,\n"
            "};\n"
            "\n"
            "export default db;\n"
        )

    def test_first_import_goes_below_leading_comment(self, author):
        text = patch_db_registry("// @ts-check\n\nconst db = {\n};\n", author)

        assert text == (
            "// @ts-check\n"
            "\n"
            "import author from './queries/author.js';\n"
            "\n"
            "const db = {\n"
            "  author,\n"
            "};\n"
            "\n"
            "export default db;\n"
        )

    def test_windows_line_endings_kept(self, author):
        text = patch_db_registry("const db = {\r\n};\r\n\r\nexport default db;\r\n", author)

        assert text == (
            "import author from './queries/author.js';\r\n"
            "\r\n"
            "const db = {\r\n"
            "  author,\r\n"
            "};\r\n"
            "\r\n"
            "export default db;\r\n"
        )
