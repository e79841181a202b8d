"""
Command rendering

Formats a switch decision as an i3/sway command string and checks the
manager's reply to it.
"""

from __future__ import annotations
from typing import Optional

from .errors import CommandError, FatalError, ParseError
from .navigator import TreeNavigator
from .planner import (
    CreateOnCurrentOutput,
    MoveOutputToWanted,
    SwapOutputs,
    SwitchDecision,
)
from .tokenizer import StringSpan, TokenType, parse

# Longest command that fits the manager-side 512 byte command buffer
MAX_COMMAND_LENGTH = 511

FOCUS = "workspace {wanted}"
MOVE_TO_OUTPUT = '[workspace="{workspace}"] move workspace to output {output}'


def render(
    decision: SwitchDecision,
    wanted: str,
    buffer: bytes,
    max_length: int = MAX_COMMAND_LENGTH,
) -> str:
    """Render the command that carries out a switch decision.

    Args:
        decision: Result of the planner
        wanted: Name of the workspace to switch to
        buffer: Reply buffer the decision's spans point into
        max_length: Maximum encoded command length in bytes

    Raises:
        FatalError: if the command would be longer than max_length
    """
    focus = FOCUS.format(wanted=wanted)

    if isinstance(decision, CreateOnCurrentOutput):
        parts = [focus]
    elif isinstance(decision, MoveOutputToWanted):
        parts = [
            MOVE_TO_OUTPUT.format(
                workspace=wanted, output=decision.current_output.text(buffer)
            ),
            focus,
        ]
    elif isinstance(decision, SwapOutputs):
        parts = [
            MOVE_TO_OUTPUT.format(
                workspace=wanted, output=decision.current_output.text(buffer)
            ),
            MOVE_TO_OUTPUT.format(
                workspace=decision.current_workspace_name.text(buffer),
                output=decision.wanted_output.text(buffer),
            ),
            focus,
        ]
    else:
        raise TypeError(f"unknown switch decision: {decision!r}")

    command = "; ".join(parts)
    if len(command.encode("utf-8")) > max_length:
        raise FatalError("command exceeds buffer")
    return command


def check_command_reply(
    buffer: bytes, navigator: Optional[TreeNavigator] = None
) -> int:
    """Check the reply to a RUN_COMMAND request.

    The reply is an array with one {"success": bool, "error": str} object
    per command.

    Returns:
        The number of commands the manager acknowledged

    Raises:
        CommandError: if any command failed
    """
    tokens = parse(buffer)
    if tokens[0].type is not TokenType.ARRAY:
        raise ParseError("command reply is not an array")
    if navigator is None:
        navigator = TreeNavigator(tokens)

    count = 0
    for index in navigator.elements(0):
        if tokens[index].type is not TokenType.OBJECT:
            raise ParseError(f"command result {index} is not an object")

        success: Optional[bool] = None
        error: Optional[str] = None
        for key, value in navigator.members(index):
            name = StringSpan.of(tokens[key])
            if name.matches(buffer, b"success"):
                if tokens[value].type is not TokenType.PRIMITIVE:
                    raise ParseError("expected a boolean for 'success'")
                success = buffer[tokens[value].start] == 0x74
            elif name.matches(buffer, b"error") and tokens[value].type is TokenType.STRING:
                error = StringSpan.of(tokens[value]).decode(buffer)

        if not success:
            raise CommandError(f"command failed: {error or 'no error given'}")
        count += 1
    return count
