import pytest

from tsunravel.extractors.typescript.exports import parse_exports
from tsunravel.model import ExportedSymbol, ExportKind, ImportLine, SymbolTable
from tsunravel.rewriter import (
    SAFEGUARD_BEGIN,
    SAFEGUARD_END,
    build_import_body,
    rewrite_entry,
    rewrite_imports,
    routes_to_index,
)

PATH = "/p/src/app.ts"
INDEX = "/p/index.ts"


@pytest.fixture
def symbols():
    table = SymbolTable()
    for name in ("X", "Base", "T"):
        table.claim(f"/p/src/{name.lower()}.ts", ExportedSymbol(name, ExportKind.CLASS))
    return table


def _rewrite(text, symbols):
    return rewrite_imports(text, parse_exports(PATH, text), INDEX, symbols)


class TestRewriteImports:
    def test_covered_import_goes_to_index(self, symbols):
        text = "import { X } from './x';\nexport class A extends X {}\n"
        assert _rewrite(text, symbols) == (
            'import { X } from "../index";\nexport class A extends X {}\n'
        )

    def test_partial_coverage_left_alone(self, symbols):
        text = 'import {X, Y} from "./m";\nexport const z = 1;\n'
        assert _rewrite(text, symbols) == text

    def test_aliases_and_default(self, symbols):
        text = "import Base, { X as Other } from './base';\n"
        assert _rewrite(text, symbols) == 'import { Base, X as Other } from "../index";\n'

    def test_type_only_kept(self, symbols):
        text = "import type { T } from './t';\n"
        assert _rewrite(text, symbols) == 'import type { T } from "../index";\n'

    def test_external_and_namespace_untouched(self, symbols):
        text = (
            "import * as path from 'path';\n"
            "import * as xs from './x';\n"
            "import './polyfill';\n"
            "import fs = require('fs');\n"
        )
        assert _rewrite(text, symbols) == text

    def test_late_imports_hoisted(self, symbols):
        text = "// app\nconst a = 1;\nimport { X } from './x';\nrun(a, X);\n"
        assert _rewrite(text, symbols) == (
            '// app\nimport { X } from "../index";\nconst a = 1;\nrun(a, X);\n'
        )

    def test_multiline_import(self, symbols):
        text = "import {\n  X,\n  Base,\n} from './x';\nfoo();\n"
        assert _rewrite(text, symbols) == 'import { X, Base } from "../index";\nfoo();\n'

    def test_trailing_comment_kept(self, symbols):
        text = "import { X } from './x'; // the x\nfoo();\n"
        assert _rewrite(text, symbols) == 'import { X } from "../index"; // the x\nfoo();\n'

    def test_missing_newline_before_body(self, symbols):
        text = "foo();\nimport { X } from './x'"
        assert _rewrite(text, symbols) == 'import { X } from "../index";\nfoo();\n'

    def test_second_pass_is_stable(self, symbols):
        text = "import { X } from './x';\nexport class A extends X {}\n"
        once = _rewrite(text, symbols)
        assert _rewrite(once, symbols) == once


class TestHelpers:
    def test_build_import_body(self):
        line = ImportLine("./m", imported_names=["D", "a", "c"], aliases={"c": "b"})
        assert build_import_body(line) == "{ D, a, b as c }"

    def test_routes_to_index(self, symbols):
        assert routes_to_index(ImportLine("./x", imported_names=["X"]), symbols)
        assert not routes_to_index(ImportLine("./x", imported_names=["X", "Y"]), symbols)
        assert not routes_to_index(ImportLine("./side"), symbols)
        assert not routes_to_index(ImportLine("./x", namespace="ns"), symbols)
        assert routes_to_index(ImportLine("./x", imported_names=["Y"], aliases={"Y": "X"}), symbols)

    def test_default_import_must_come_from_its_owner(self, symbols):
        own = ImportLine("./base", resolved_path="/p/src/base.ts", imported_names=["Base"], has_default_import=True)
        other = ImportLine("./y", resolved_path="/p/src/y.ts", imported_names=["Base"], has_default_import=True)
        assert routes_to_index(own, symbols)
        assert not routes_to_index(other, symbols)

    def test_require_never_routed(self, symbols):
        line = ImportLine("./x", resolved_path="/p/src/x.ts", imported_names=["X"], has_default_import=True, is_require=True)
        assert not routes_to_index(line, symbols)

    def test_default_import_of_other_module_left_alone(self, symbols):
        text = "import Base from './y';\nexport const b = Base;\n"
        assert _rewrite(text, symbols) == text


class TestRewriteEntry:
    def test_adds_block_when_missing(self):
        assert rewrite_entry("main();\n", "./index") == (
            f"// {SAFEGUARD_BEGIN}\nrequire('./index');\n// {SAFEGUARD_END}\nmain();\n"
        )

    def test_replaces_region(self):
        text = f"// {SAFEGUARD_BEGIN}\nold();\nolder();\n// {SAFEGUARD_END}\nmain();\n"
        assert rewrite_entry(text, "./gen/index") == (
            f"// {SAFEGUARD_BEGIN}\nrequire('./gen/index');\n// {SAFEGUARD_END}\nmain();\n"
        )

    def test_empty_region(self):
        text = f"// {SAFEGUARD_BEGIN}\n// {SAFEGUARD_END}\n"
        assert rewrite_entry(text, "./index") == (
            f"// {SAFEGUARD_BEGIN}\nrequire('./index');\n// {SAFEGUARD_END}\n"
        )

    def test_idempotent(self):
        once = rewrite_entry("main();\n", "./index")
        assert rewrite_entry(once, "./index") == once
