"""
wsswitch - workspace switcher for i3/sway

Switches to a workspace by name and brings it onto the focused output. If
the workspace is already shown on another output, the two workspaces swap
outputs.

This package provides:
- i3 IPC framing and a Unix socket connection
- A flat, parent-linked JSON tokenizer for manager replies
- Subtree skipping over the token table
- The switch planner and command renderer

Example usage:
    from wsswitch import WorkspaceSwitcher, SwitcherConfig

    switcher = WorkspaceSwitcher(SwitcherConfig.from_env())
    switcher.switch("3")

Or run directly:
    python -m wsswitch 3
"""

__version__ = "0.1.0"

from .errors import (
    SwitchError,
    ConfigError,
    IPCError,
    ConnectError,
    ProtocolError,
    TransportError,
    ParseError,
    FatalError,
    CommandError,
)

from .protocol import MessageType, Frame, MAGIC, HEADER_LENGTH

from .connection import IPCConnection

from .tokenizer import Token, TokenType, StringSpan, Tokenizer, parse

from .navigator import (
    AVERAGE_TOKEN_BYTES,
    TreeNavigator,
    linear_skip,
    skip_subtree,
)

from .planner import (
    WorkspaceRecord,
    CreateOnCurrentOutput,
    MoveOutputToWanted,
    SwapOutputs,
    SwitchDecision,
    SwitchPlanner,
    plan,
)

from .commands import MAX_COMMAND_LENGTH, render, check_command_reply

from .switcher import WorkspaceSwitcher, SwitcherConfig, main

from . import topics

__all__ = [
    # Version
    "__version__",
    # Errors
    "SwitchError",
    "ConfigError",
    "IPCError",
    "ConnectError",
    "ProtocolError",
    "TransportError",
    "ParseError",
    "FatalError",
    "CommandError",
    # Protocol
    "MessageType",
    "Frame",
    "MAGIC",
    "HEADER_LENGTH",
    # Connection
    "IPCConnection",
    # Tokenizer
    "Token",
    "TokenType",
    "StringSpan",
    "Tokenizer",
    "parse",
    # Navigator
    "AVERAGE_TOKEN_BYTES",
    "TreeNavigator",
    "linear_skip",
    "skip_subtree",
    # Planner
    "WorkspaceRecord",
    "CreateOnCurrentOutput",
    "MoveOutputToWanted",
    "SwapOutputs",
    "SwitchDecision",
    "SwitchPlanner",
    "plan",
    # Commands
    "MAX_COMMAND_LENGTH",
    "render",
    "check_command_reply",
    # Switcher
    "WorkspaceSwitcher",
    "SwitcherConfig",
    "main",
    # Event topics
    "topics",
]
