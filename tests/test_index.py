import hashlib

from tsunravel.model import ExportedSymbol, ExportKind, FileExportRecord
from tsunravel.renderer.index import (
    DECLARATION_HEADER,
    RuntimeIndexOptions,
    render_declaration_index,
    render_runtime_index,
    write_index,
)


def _record(path, *symbols):
    record = FileExportRecord(path=path)
    for symbol in symbols:
        record.add_export(symbol)
    return record


RECORDS = [
    _record(
        "/p/src/shapes/circle.ts",
        ExportedSymbol("Circle", ExportKind.CLASS),
        ExportedSymbol("Radius", ExportKind.TYPE),
        ExportedSymbol("makeCircle", ExportKind.FUNC, is_default=True),
    ),
    _record("/p/src/empty.ts"),
    _record("/p/src/types.ts", ExportedSymbol("Point", ExportKind.INTERFACE)),
    _record("/p/lib/util.ts", ExportedSymbol("PI", ExportKind.VAR)),
]


class TestDeclarationIndex:
    def test_one_line_per_exporting_file(self):
        text = render_declaration_index(RECORDS, "/p/src/index.ts")
        assert text == (
            DECLARATION_HEADER + "\n"
            "export { default as makeCircle, Circle, Radius } from './shapes/circle';\n"
            "export { Point } from './types';\n"
            "export { PI } from '../lib/util';\n"
        )

    def test_empty(self):
        assert render_declaration_index([], "/p/index.ts") == DECLARATION_HEADER + "\n"


class TestRuntimeIndex:
    OPTIONS = RuntimeIndexOptions(dist_path="assets/script/index.js", relative_index_path="src/index.ts")

    def test_body(self):
        text = render_runtime_index(RECORDS, "/p/src/index.ts", self.OPTIONS)
        assert 'var circle_1 = require("./shapes/circle");' in text
        assert "exports.makeCircle = circle_1.default;" in text
        assert (
            'Object.defineProperty(exports, "Circle", '
            "{ enumerable: true, get: function () { return circle_1.Circle; } });"
        ) in text
        assert 'var util_1 = require("../lib/util");' in text
        # virtual-only files and types produce nothing at runtime
        assert "Radius" not in text
        assert "types" not in text
        assert "empty" not in text

    def test_wrapper(self):
        text = render_runtime_index(RECORDS, "/p/src/index.ts", self.OPTIONS)
        module_id = hashlib.md5(b"assets/script/index.js").hexdigest()[:23]
        assert "var __filename = 'assets/script/index.js';" in text
        assert f"cc._RF.push(module, '{module_id}', 'index');" in text
        assert "// src/index.ts" in text
        assert "$" not in text

    def test_explicit_module_id(self):
        options = RuntimeIndexOptions("a/index.js", "index.ts", module_id="fixed")
        text = render_runtime_index([], "/p/index.ts", options)
        assert "'fixed'" in text

    def test_alias_collisions(self):
        records = [
            _record("/p/a/util.ts", ExportedSymbol("A", ExportKind.VAR)),
            _record("/p/b/util.ts", ExportedSymbol("B", ExportKind.VAR)),
            _record("/p/c/2d-shape.ts", ExportedSymbol("C", ExportKind.VAR)),
        ]
        text = render_runtime_index(records, "/p/index.ts", self.OPTIONS)
        assert 'var util_1 = require("./a/util");' in text
        assert 'var util_2 = require("./b/util");' in text
        assert 'var _2d_shape_1 = require("./c/2d-shape");' in text


class TestWriteIndex:
    def test_declaration_only(self, tmp_path):
        index = tmp_path / "gen" / "index.ts"
        written = write_index(RECORDS[:1], str(index))
        assert written == [index.as_posix()]
        assert index.read_text().startswith(DECLARATION_HEADER)

    def test_with_runtime(self, tmp_path):
        index = tmp_path / "index.ts"
        runtime = RuntimeIndexOptions("dist/index.js", "index.ts")
        written = write_index(RECORDS, str(index), runtime)
        assert written == [index.as_posix(), (tmp_path / "index.js").as_posix()]
        assert "circle_1" in (tmp_path / "index.js").read_text()

    def test_runtime_output_override(self, tmp_path):
        index = tmp_path / "index.ts"
        out = tmp_path / "build" / "runtime.js"
        write_index(RECORDS, str(index), RuntimeIndexOptions("dist/index.js", "index.ts", str(out)))
        assert out.exists()
