# SPDX-License-Identifier: MIT
"""Make rule primitives.

A BuildRule is rendered once into Makefile syntax and never modified.
Recipe lines are expected to start with ``@`` so make does not echo them;
``echo()`` builds the progress lines printed around each step instead.
"""

from __future__ import annotations

from dataclasses import dataclass

BANNER = "[POLYBUILD]"


def quoted(text: str) -> str:
    """Double-quote ``text`` for the shell, escaping quotes and backslashes."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def echo(message: str) -> str:
    """Recipe line printing a bold-tagged progress message."""
    return f'@printf "\\033[1m{BANNER}\\033[0m %s\\n" {quoted(message)}'


@dataclass(frozen=True)
class BuildRule:
    """A make rule.

    Attributes:
        target: Target name or path.
        prerequisites: Prerequisites in emission order.
        commands: Recipe lines, without the leading tab.
        phony: Whether to declare the target ``.PHONY``.
    """

    target: str
    prerequisites: tuple[str, ...] = ()
    commands: tuple[str, ...] = ()
    phony: bool = False

    def render(self) -> str:
        header = self.target + ":"
        if self.prerequisites:
            header += " " + " ".join(self.prerequisites)
        lines = [header]
        lines.extend(f"\t{command}" for command in self.commands)
        if self.phony:
            lines.append(f".PHONY: {self.target}")
        return "\n".join(lines) + "\n"


def assign(name: str, value: str, indent: bool = False) -> str:
    """Render an immediate ``:=`` assignment line."""
    prefix = "\t" if indent else ""
    return f"{prefix}{name} := {value}".rstrip() + "\n"


def conditional(variable: str, value: str, body: list[str]) -> str:
    """Wrap assignment lines in ``ifeq ($(variable),value) ... endif``."""
    return f"ifeq ($({variable}),{value})\n" + "".join(body) + "endif\n"
