"""Frozen command tree and argument resolution.

:meth:`CommandTree.freeze` is the second phase of the two-phase build:
it verifies that every edge carries its parent's inherited settings,
renders the whole tree into nested :mod:`argparse` parsers (so option
conflicts surface before dispatch), and freezes every node.  Only a
:class:`CommandTree` can be dispatched.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from aiqa.core.command import Command
from aiqa.core.models import CommandContext
from aiqa.exceptions import CommandTreeError

_COMMAND_KEY = "_aiqa_command"


@dataclass(frozen=True, slots=True)
class Resolution:
    """The single command selected by a command line, with its options."""

    command: Command
    options: Mapping[str, Any]
    extra_args: tuple[str, ...]
    parser: argparse.ArgumentParser

    def context(self) -> CommandContext:
        return CommandContext(
            command_path=self.command.path,
            options=self.options,
            settings=self.command.settings,
            extra_args=self.extra_args,
        )


class CommandTree:
    """An immutable, dispatchable command tree.

    Build one with :meth:`freeze`; the constructor is internal.
    """

    __slots__ = ("_root", "_parser", "_parsers")

    def __init__(
        self,
        root: Command,
        parser: argparse.ArgumentParser,
        parsers: dict[tuple[str, ...], argparse.ArgumentParser],
    ) -> None:
        self._root = root
        self._parser = parser
        self._parsers = parsers

    @classmethod
    def freeze(cls, root: Command) -> CommandTree:
        """Validate *root*'s subtree, build its parsers, and freeze it.

        Raises
        ------
        CommandTreeError
            If *root* is itself attached somewhere, a child is missing
            its parent's inherited settings, or two options collide.
        """
        if root.parent is not None:
            raise CommandTreeError(
                f"'{root.name}' is a subcommand of '{root.parent.name}' and cannot be a root."
            )
        for node in root.walk():
            for child in node.children:
                if not child.inherits_from(node):
                    raise CommandTreeError(
                        f"Command '{' '.join(child.path)}' is missing settings "
                        f"inherited from '{' '.join(node.path)}'."
                    )
        parsers: dict[tuple[str, ...], argparse.ArgumentParser] = {}
        parser = _build_parser(root, parsers, None)
        root.freeze()
        return cls(root, parser, parsers)

    @property
    def root(self) -> Command:
        return self._root

    def find(self, *path: str) -> Command | None:
        """Return the node at *path* below the root (``()`` is the root)."""
        node: Command | None = self._root
        for name in path:
            if node is None:
                return None
            node = node.get(name)
        return node

    def parser_for(self, command: Command) -> argparse.ArgumentParser:
        return self._parsers[command.path]

    def resolve(self, argv: Sequence[str] | None = None) -> Resolution:
        """Parse *argv* and select the deepest matching command.

        Unrecognised arguments are a usage error (argparse exits with
        status 2) unless the resolved command allows unknown options.
        """
        args = list(sys.argv[1:] if argv is None else argv)
        namespace, extras = self._parser.parse_known_args(args)
        values = vars(namespace)
        command: Command = values.pop(_COMMAND_KEY)
        parser = self._parsers[command.path]
        if extras and not command.settings.allow_unknown_options:
            parser.error(f"unrecognized arguments: {' '.join(extras)}")
        options = {key: value for key, value in values.items() if not key.startswith("_")}
        return Resolution(
            command=command,
            options=MappingProxyType(options),
            extra_args=tuple(extras),
            parser=parser,
        )


# ---------------------------------------------------------------------------
# Parser rendering
# ---------------------------------------------------------------------------

def _build_parser(
    node: Command,
    parsers: dict[tuple[str, ...], argparse.ArgumentParser],
    subparsers: Any,
) -> argparse.ArgumentParser:
    is_root = subparsers is None
    if is_root:
        parser = argparse.ArgumentParser(prog=node.name, description=node.help or None)
    else:
        parser = subparsers.add_parser(
            node.name, help=node.help, description=node.help or None,
        )
    try:
        # Inherited options keep their real default on the root only, so
        # a value given before the subcommand name survives.
        for option in node.settings.global_options:
            option.add_to(parser, suppress_default=not is_root)
        for option in node.options:
            option.add_to(parser)
    except argparse.ArgumentError as exc:
        raise CommandTreeError(
            f"Conflicting options on command '{' '.join(node.path)}': {exc}"
        ) from exc
    parser.set_defaults(**{_COMMAND_KEY: node})
    parsers[node.path] = parser

    if node.children:
        nested = parser.add_subparsers(
            title="commands",
            metavar="<command>",
            dest=f"_subcommand_{len(node.path)}",
        )
        for child in node.children:
            _build_parser(child, parsers, nested)
    return parser
