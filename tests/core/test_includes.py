# SPDX-License-Identifier: MIT
"""Tests for polybuild.core.includes."""

from pathlib import Path, PurePath

from polybuild.core.includes import (
    HeaderReference,
    IncludeClosure,
    IncludeResolver,
    IncludeSyntax,
    parse_include_line,
)


def write(root: Path, name: str, text: str = "") -> None:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


def paths(closure: IncludeClosure) -> list[str]:
    return closure.as_posix()


class TestParseIncludeLine:
    def test_angled(self):
        ref = parse_include_line("#include <stdio.h>")
        assert ref == HeaderReference("stdio.h", IncludeSyntax.ANGLED)

    def test_quoted(self):
        ref = parse_include_line('#include "util.h"')
        assert ref == HeaderReference("util.h", IncludeSyntax.QUOTED)

    def test_whitespace_around_hash(self):
        ref = parse_include_line('   #   include   "sub/util.h"  // trailing\n')
        assert ref == HeaderReference("sub/util.h", IncludeSyntax.QUOTED)

    def test_no_space_after_include(self):
        ref = parse_include_line("#include<vector>")
        assert ref == HeaderReference("vector", IncludeSyntax.ANGLED)

    def test_not_an_include(self):
        assert parse_include_line("int main(void) {") is None
        assert parse_include_line("#define INCLUDE 1") is None
        assert parse_include_line("// #include <stdio.h>") is None
        assert parse_include_line("#include") is None
        assert parse_include_line("") is None

    def test_crlf_line(self):
        ref = parse_include_line('#include "win.h"\r\n')
        assert ref == HeaderReference("win.h", IncludeSyntax.QUOTED)


class TestIncludeResolver:
    def test_no_includes(self, tmp_path):
        """A file without includes has an empty closure."""
        write(tmp_path, "main.c", "int main(void) { return 0; }\n")

        closure = IncludeResolver(tmp_path).resolve("main.c")

        assert len(closure) == 0
        assert list(closure) == []

    def test_local_header(self, tmp_path):
        write(tmp_path, "src/main.c", '#include "util.h"\n')
        write(tmp_path, "src/util.h")

        closure = IncludeResolver(tmp_path).resolve("src/main.c")

        assert paths(closure) == ["src/util.h"]
        assert PurePath("src/util.h") in closure

    def test_unresolved_includes_are_dropped(self, tmp_path):
        """System headers outside the project are not errors."""
        write(tmp_path, "main.c", "#include <stdio.h>\n#include \"missing.h\"\n")

        closure = IncludeResolver(tmp_path).resolve("main.c", ["include"])

        assert paths(closure) == []

    def test_missing_source_yields_empty_closure(self, tmp_path):
        closure = IncludeResolver(tmp_path).resolve("nowhere.c")
        assert paths(closure) == []

    def test_transitive_depth_first_order(self, tmp_path):
        """A header's own includes come before the next sibling."""
        write(tmp_path, "main.c", '#include "a.h"\n#include "b.h"\n')
        write(tmp_path, "a.h", '#include "c.h"\n')
        write(tmp_path, "b.h")
        write(tmp_path, "c.h")

        closure = IncludeResolver(tmp_path).resolve("main.c")

        assert paths(closure) == ["a.h", "c.h", "b.h"]

    def test_cycle_terminates(self, tmp_path):
        write(tmp_path, "main.c", '#include "a.h"\n')
        write(tmp_path, "a.h", '#include "b.h"\n')
        write(tmp_path, "b.h", '#include "a.h"\n')

        closure = IncludeResolver(tmp_path).resolve("main.c")

        assert paths(closure) == ["a.h", "b.h"]

    def test_self_include_terminates(self, tmp_path):
        write(tmp_path, "main.c", '#include "a.h"\n')
        write(tmp_path, "a.h", '#include "a.h"\n')

        closure = IncludeResolver(tmp_path).resolve("main.c")

        assert paths(closure) == ["a.h"]

    def test_repeated_reference_recorded_once(self, tmp_path):
        write(tmp_path, "main.c", '#include "a.h"\n#include "b.h"\n#include "a.h"\n')
        write(tmp_path, "a.h")
        write(tmp_path, "b.h", '#include "a.h"\n')

        closure = IncludeResolver(tmp_path).resolve("main.c")

        assert paths(closure) == ["a.h", "b.h"]

    def test_search_path_hits_follow_reference_order(self, tmp_path):
        write(tmp_path, "src/main.c", "#include <one.h>\n#include <two.h>\n")
        write(tmp_path, "inc2/one.h")
        write(tmp_path, "inc1/two.h")

        closure = IncludeResolver(tmp_path).resolve("src/main.c", ["inc1", "inc2"])

        assert paths(closure) == ["inc2/one.h", "inc1/two.h"]

    def test_header_in_two_search_paths_recorded_twice(self, tmp_path):
        """Every search directory holding the header contributes a dependency.

        This is unlike a compiler, which stops at the first match.
        """
        write(tmp_path, "src/main.c", "#include <x.h>\n")
        write(tmp_path, "inc1/x.h")
        write(tmp_path, "inc2/x.h")

        closure = IncludeResolver(tmp_path).resolve("src/main.c", ["inc1", "inc2"])

        assert paths(closure) == ["inc1/x.h", "inc2/x.h"]

    def test_each_search_path_match_is_scanned(self, tmp_path):
        write(tmp_path, "main.c", "#include <x.h>\n")
        write(tmp_path, "inc1/x.h", '#include "y.h"\n')
        write(tmp_path, "inc1/y.h")
        write(tmp_path, "inc2/x.h", '#include "z.h"\n')
        write(tmp_path, "inc2/z.h")

        closure = IncludeResolver(tmp_path).resolve("main.c", ["inc1", "inc2"])

        assert paths(closure) == ["inc1/x.h", "inc1/y.h", "inc2/x.h", "inc2/z.h"]

    def test_local_match_skips_search_paths(self, tmp_path):
        write(tmp_path, "src/main.c", '#include "x.h"\n')
        write(tmp_path, "src/x.h")
        write(tmp_path, "include/x.h")

        closure = IncludeResolver(tmp_path).resolve("src/main.c", ["include"])

        assert paths(closure) == ["src/x.h"]

    def test_local_lookup_uses_including_file_directory(self, tmp_path):
        """Headers found via a search path resolve their own includes locally."""
        write(tmp_path, "src/main.c", "#include <lib/api.h>\n")
        write(tmp_path, "include/lib/api.h", '#include "detail.h"\n')
        write(tmp_path, "include/lib/detail.h")

        closure = IncludeResolver(tmp_path).resolve("src/main.c", ["include"])

        assert paths(closure) == ["include/lib/api.h", "include/lib/detail.h"]

    def test_parent_relative_paths_are_normalized(self, tmp_path):
        """``..`` components cannot make the same header look new."""
        write(tmp_path, "main.c", '#include "sub/a.h"\n')
        write(tmp_path, "sub/a.h", '#include "../b.h"\n')
        write(tmp_path, "b.h", '#include "sub/a.h"\n')

        closure = IncludeResolver(tmp_path).resolve("main.c")

        assert paths(closure) == ["sub/a.h", "b.h"]

    def test_directories_are_not_headers(self, tmp_path):
        write(tmp_path, "main.c", '#include "dir"\n')
        (tmp_path / "dir").mkdir()

        closure = IncludeResolver(tmp_path).resolve("main.c")

        assert paths(closure) == []

    def test_resolver_holds_no_state_between_calls(self, tmp_path):
        write(tmp_path, "a.c", '#include "x.h"\n')
        write(tmp_path, "b.c", '#include "x.h"\n')
        write(tmp_path, "x.h")

        resolver = IncludeResolver(tmp_path)

        assert paths(resolver.resolve("a.c")) == ["x.h"]
        assert paths(resolver.resolve("b.c")) == ["x.h"]
