"""Command nodes and the attach/propagate pair that assembles them.

A :class:`Command` is a named unit of CLI behaviour with declared
options, an optional asynchronous action, and ordered children.  The
tree is assembled with :func:`attach`, which always follows up with
:func:`propagate` so a child sees its parent's inherited settings the
moment it joins the tree.  Help generation and option parsing never
observe a half-configured node.

Nodes stay mutable only until :class:`~aiqa.core.tree.CommandTree`
freezes them.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Iterator

from aiqa.core.models import CommandContext, InheritedSettings, OptionSpec
from aiqa.exceptions import CommandTreeError

Action = Callable[[CommandContext], Awaitable[None]]


class Command:
    """A node in the command tree.

    Parameters
    ----------
    name:
        Subcommand name as typed on the command line.
    help:
        One-line description used in help listings.
    options:
        Options and positionals owned by this command only.
    action:
        Coroutine function run when this command is the dispatch target.
        Group commands without an action print their help instead.
    settings:
        Settings this command passes on to its descendants.  Usually
        only the root declares them; every other node receives them
        through :func:`propagate`.
    """

    def __init__(
        self,
        name: str,
        *,
        help: str = "",
        options: Iterable[OptionSpec] = (),
        action: Action | None = None,
        settings: InheritedSettings | None = None,
    ) -> None:
        if not name or name.startswith("-") or any(ch.isspace() for ch in name):
            raise CommandTreeError(f"Invalid command name: {name!r}")
        self.name: str = name
        self.help: str = help
        self.options: tuple[OptionSpec, ...] = tuple(options)
        self.action: Action | None = action
        self.settings: InheritedSettings = settings or InheritedSettings()
        self.parent: Command | None = None
        self._children: dict[str, Command] = {}
        self._inherited: InheritedSettings | None = None
        self._frozen: bool = False
        self._invoked: bool = False

    def __repr__(self) -> str:
        return f"Command({' '.join(self.path)!r})"

    # ------------------------------------------------------------------
    # Tree structure
    # ------------------------------------------------------------------

    @property
    def children(self) -> tuple[Command, ...]:
        """Direct subcommands in attachment order."""
        return tuple(self._children.values())

    @property
    def path(self) -> tuple[str, ...]:
        """Command names from the root down to this node."""
        names: list[str] = []
        node: Command | None = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        return tuple(reversed(names))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Command | None:
        return self._children.get(name)

    def walk(self) -> Iterator[Command]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self._children.values():
            yield from child.walk()

    def add_command(self, child: Command) -> Command:
        """Attach *child* below this command and return it."""
        attach(self, child)
        return child

    def copy_inherited_settings(self, parent: Command) -> None:
        """Pull inherited settings from *parent* onto this command."""
        propagate(parent, self)

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def effective_options(self) -> tuple[OptionSpec, ...]:
        """Inherited global options followed by this command's own."""
        return self.settings.global_options + self.options

    def inherits_from(self, parent: Command) -> bool:
        """Whether this node already carries *parent*'s settings."""
        return (
            self.settings.covers(parent.settings)
            and self.settings.output_mode is parent.settings.output_mode
            and self.settings.allow_unknown_options == parent.settings.allow_unknown_options
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def freeze(self) -> None:
        """Forbid further structural changes to this subtree."""
        for node in self.walk():
            node._frozen = True

    async def invoke(self, context: CommandContext) -> None:
        """Run the action once.  A second call is a programming error."""
        if self.action is None:
            raise RuntimeError(f"{self!r} has no action to invoke")
        if self._invoked:
            raise RuntimeError(f"{self!r} was already invoked in this process")
        self._invoked = True
        await self.action(context)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def attach(parent: Command, child: Command) -> None:
    """Register *child* as a subcommand of *parent* and propagate settings.

    Raises
    ------
    CommandTreeError
        If *parent* is frozen, *child* already has a parent, the edge
        would create a cycle, or a sibling with the same name exists.
    """
    if parent.frozen:
        raise CommandTreeError(
            f"Cannot attach '{child.name}': '{' '.join(parent.path)}' is frozen."
        )
    node: Command | None = parent
    while node is not None:
        if node is child:
            raise CommandTreeError(
                f"Cannot attach '{child.name}' below itself or one of its descendants."
            )
        node = node.parent
    if child.parent is not None:
        raise CommandTreeError(
            f"Command '{child.name}' is already attached to "
            f"'{' '.join(child.parent.path)}'."
        )
    if child.name in parent._children:
        raise CommandTreeError(
            f"Duplicate command name '{child.name}' under '{' '.join(parent.path)}'.",
            hint="Every subcommand of a command needs a unique name.",
        )
    parent._children[child.name] = child
    child.parent = parent
    propagate(parent, child)


def propagate(parent: Command, child: Command) -> None:
    """Copy *parent*'s inherited settings onto *child* (and its subtree).

    Idempotent: repeating the call for an unchanged parent snapshot does
    nothing.  Neither the parent's action nor its children are copied.
    """
    snapshot = parent.settings
    if child._inherited == snapshot:
        return
    if child.frozen:
        raise CommandTreeError(
            f"Cannot change settings of frozen command '{' '.join(child.path)}'."
        )
    child.settings = snapshot.merged_onto(child.settings)
    child._inherited = snapshot
    for grandchild in child._children.values():
        propagate(child, grandchild)
