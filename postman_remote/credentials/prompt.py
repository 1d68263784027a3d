"""Interactive passkey acquisition."""

from typing import Protocol

import click


class PasskeyPrompt(Protocol):
    """Interface for reading a secret from the user.

    Implementations must not echo typed characters and must leave the
    terminal on a fresh line once the value is submitted.
    """

    def prompt_hidden(self, message: str) -> str:
        """Ask for a value without echoing it.

        Args:
            message: Prompt text shown to the user

        Returns:
            The entered value, possibly empty
        """
        ...


class TerminalPrompt:
    """Read the passkey from the controlling terminal via click.

    ``click.prompt`` with ``hide_input`` suppresses echo and writes the
    newline after submission. An empty answer is returned as ``""`` rather
    than re-prompting, so the resolver can reject it. Ctrl-C raises
    ``click.Abort``.
    """

    def prompt_hidden(self, message: str) -> str:
        return click.prompt(
            message,
            default="",
            hide_input=True,
            show_default=False,
            prompt_suffix="",
            type=str,
        )
