# SPDX-License-Identifier: MIT
"""Tests for polybuild.generators.overlay."""

from polybuild.core.config import ConfigModel, OverlayConfig, PathsConfig, Table
from polybuild.generators.overlay import (
    expand_overlays,
    render_overlay,
    resolve_overlay,
)


def make_config(env: dict, options: dict | None = None, paths: dict | None = None):
    return ConfigModel.from_dict(
        {
            "paths": {
                "output": "app",
                "source": ["src"],
                "artifact": "obj",
                **(paths or {}),
            },
            "options": options or {},
            "env": env,
        }
    )


class TestResolveOverlay:
    def test_unset_keys_fall_back_to_base(self):
        config = make_config(
            {"BUILD": {"debug": {"options": {"c-compilation-flags": "-g"}}}},
            options={"c-compiler": "gcc", "compiler": "g++", "libraries": ["m"]},
            paths={"include": ["include"], "install": "/opt"},
        )

        view = resolve_overlay(config.overlays[0], config)

        assert view.options.c_compilation_flags == "-g"
        assert view.options.c_compiler == "gcc"
        assert view.options.cpp_compiler == "g++"
        assert view.options.libraries == ("m",)
        assert view.install == "/opt"
        assert view.static_libraries is None

    def test_overrides(self):
        config = make_config(
            {
                "TOOLCHAIN": {
                    "clang": {
                        "paths": {"library": ["/opt/llvm/lib"], "install": "/opt/bin"},
                        "options": {
                            "compiler": "clang++",
                            "static": True,
                            "static-libraries": [],
                        },
                    }
                }
            }
        )

        view = resolve_overlay(config.overlays[0], config)

        assert view.variable == "TOOLCHAIN"
        assert view.value == "clang"
        assert view.options.cpp_compiler == "clang++"
        assert view.options.static is True
        assert view.library == ("/opt/llvm/lib",)
        assert view.install == "/opt/bin"
        assert view.static_libraries == ()


class TestRenderOverlay:
    def test_block(self):
        config = make_config({"CC": {"clang": {"options": {"c-compiler": "clang"}}}})
        view = resolve_overlay(config.overlays[0], config)

        block = render_overlay(view, shared=False)

        assert block == (
            "ifeq ($(CC),clang)\n"
            "\tc_compiler := clang\n"
            "\tcpp_compiler := $(CXX)\n"
            "\tc_compilation_flags := $(CFLAGS) $(dynamic_flag)\n"
            "\tcpp_compilation_flags := $(CXXFLAGS) $(dynamic_flag)\n"
            "\tlink_time_flags := $(LDFLAGS)\n"
            "\tlibraries :=\n"
            "endif\n"
        )

    def test_static_libraries_only_when_set(self):
        config = make_config(
            {"LINK": {"static": {"options": {"static-libraries": ["libz.a"]}}}},
            options={"static-libraries": ["libbase.a"]},
        )
        view = resolve_overlay(config.overlays[0], config)

        block = render_overlay(view, shared=False)

        assert "\tstatic_libraries := libz.a\n" in block

    def test_static_libraries_inherited_from_base_are_not_rebound(self):
        config = make_config(
            {"BUILD": {"debug": {"options": {"c-compilation-flags": "-g"}}}},
            options={"static-libraries": ["libbase.a"]},
        )

        block = expand_overlays(config)[0]

        assert "static_libraries" not in block

    def test_shared_follows_base(self):
        config = make_config(
            {"BUILD": {"debug": {"options": {"shared": True}}}},
        )

        block = expand_overlays(config)[0]

        assert "$(shared_flag)" not in block

    def test_install_prefix(self):
        config = make_config({"DEST": {"opt": {"paths": {"install": "/opt/bin"}}}})

        block = expand_overlays(config)[0]

        assert "\tprefix := /opt/bin\n" in block


class TestExpandOverlays:
    def test_no_overlays(self):
        assert expand_overlays(make_config({})) == []

    def test_declaration_order(self):
        config = make_config(
            {
                "BUILD": {
                    "release": {"options": {"c-compilation-flags": "-O2"}},
                    "debug": {"options": {"c-compilation-flags": "-g"}},
                },
                "CC": {"clang": {"options": {"c-compiler": "clang"}}},
            }
        )

        blocks = expand_overlays(config)

        assert [block.splitlines()[0] for block in blocks] == [
            "ifeq ($(BUILD),release)",
            "ifeq ($(BUILD),debug)",
            "ifeq ($(CC),clang)",
        ]

    def test_duplicate_pairs_are_both_emitted(self):
        """Make evaluates both; the later block's bindings win."""
        config = ConfigModel(
            paths=PathsConfig(output="app", source=("src",), artifact="obj"),
            overlays=(
                OverlayConfig("BUILD", "debug", options=Table({"c-compiler": "gcc"})),
                OverlayConfig("BUILD", "debug", options=Table({"c-compiler": "clang"})),
            ),
        )

        blocks = expand_overlays(config)

        assert len(blocks) == 2
        assert "\tc_compiler := gcc\n" in blocks[0]
        assert "\tc_compiler := clang\n" in blocks[1]


class TestOverlayIncludePaths:
    def test_overlay_include_paths_are_ignored(self):
        """Header prerequisites come from the base search paths only."""
        config = make_config(
            {"BUILD": {"alt": {"paths": {"include": ["alt"]}}}},
            paths={"include": ["include"]},
        )

        block = expand_overlays(config)[0]

        assert "$(include_path_flag)alt" not in block
        assert (
            "\tc_compilation_flags := $(CFLAGS) $(include_path_flag)include "
            "$(dynamic_flag)\n"
        ) in block
