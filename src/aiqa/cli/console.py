"""Output consoles for aiqa: ``console`` (stderr) and ``out`` (stdout).

Rich is imported on first use, never at import time.  Without it both
proxies fall back to plain ``print()``, so failure reports keep their
``<name> <message>`` shape on minimal installs.
"""

from __future__ import annotations

import sys
from typing import Any

from aiqa.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = True) -> Any:
	"""Create a Rich console instance targeting stderr (or stdout)."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr, soft_wrap=True)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def __init__(self, *, stderr: bool = True) -> None:
		self._stderr = stderr

	def _stream(self) -> Any:
		return sys.stderr if self._stderr else sys.stdout

	def print(self, *objects: object, **kwargs: Any) -> None:
		"""Render with Rich when available, else plain print."""
		try:
			rich_console = get_rich_console(stderr=self._stderr)
		except EnvironmentError:
			print(*objects, file=self._stream())
			return
		rich_console.print(*objects, **kwargs)

	def plain(self, text: str) -> None:
		"""Write *text* verbatim: no markup, highlighting or emoji codes."""
		self.print(text, markup=False, highlight=False, emoji=False)

	def error_line(self, discriminator: str, message: str) -> None:
		"""Write ``<discriminator> <message>`` with the discriminator in red."""
		try:
			rich_console = get_rich_console(stderr=self._stderr)
			from rich.text import Text
		except (EnvironmentError, ModuleNotFoundError):
			print(discriminator, message, file=self._stream())
			return
		line = Text()
		line.append(discriminator, style="bold red")
		line.append(" ")
		line.append(message)
		rich_console.print(line)


console = _ConsoleProxy()
"""Diagnostics console (stderr)."""

out = _ConsoleProxy(stderr=False)
"""Result console (stdout)."""
