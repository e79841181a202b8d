"""
Workspace Switcher

Ties the pieces together for one invocation: query the workspaces, plan
the switch, render the command and send it.
"""

from __future__ import annotations
import argparse
import os
import sys
import time
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

from pubsub import pub

from . import topics
from .commands import MAX_COMMAND_LENGTH, check_command_reply, render
from .connection import IPCConnection
from .errors import ConfigError, SwitchError
from .navigator import AVERAGE_TOKEN_BYTES, TreeNavigator
from .planner import SwitchDecision, SwitchPlanner
from .protocol import MessageType
from .tokenizer import parse

DEBUG_ENV = "WSSWITCH_DEBUG"


@dataclass
class SwitcherConfig:
    """Workspace switcher configuration."""

    # Explicit socket path; when unset it is looked up in the environment
    socket_path: Optional[str] = None
    socket_env_vars: Tuple[str, ...] = ("I3SOCK", "SWAYSOCK")

    # Message type the manager uses for "get workspaces"
    workspaces_message_type: int = MessageType.GET_WORKSPACES

    max_command_length: int = MAX_COMMAND_LENGTH
    bytes_per_token: int = AVERAGE_TOKEN_BYTES

    # Print the command instead of sending it
    dry_run: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate numeric settings."""
        if self.max_command_length < 1:
            raise ValueError(
                f"max_command_length must be positive, got {self.max_command_length}"
            )
        if self.bytes_per_token < 1:
            raise ValueError(
                f"bytes_per_token must be positive, got {self.bytes_per_token}"
            )

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides
    ) -> "SwitcherConfig":
        """Build a configuration from environment variables."""
        environ = os.environ if environ is None else environ
        config = cls(**overrides)
        if not config.socket_path:
            for name in config.socket_env_vars:
                if environ.get(name):
                    config.socket_path = environ[name]
                    break
        if environ.get(DEBUG_ENV):
            config.debug = True
        return config

    def resolve_socket_path(self) -> str:
        """Return the socket path or fail if none is configured."""
        if not self.socket_path:
            names = " or ".join(self.socket_env_vars)
            raise ConfigError(f"{names} variable not present")
        return self.socket_path


class WorkspaceSwitcher:
    """
    Workspace switcher session.

    Holds the connection and instrumentation state for a single switch.
    """

    def __init__(self, config: Optional[SwitcherConfig] = None, bus=None):
        """Initialize the switcher.

        Args:
            config: Switcher configuration
            bus: Event bus instance (Pypubsub), optional
        """
        self.config = config or SwitcherConfig()
        self.bus = bus
        self.connection: Optional[IPCConnection] = None
        self.navigator: Optional[TreeNavigator] = None

        if self.bus and self.config.debug:
            self.bus.subscribe(self.debug_event_logger, self.bus.ALL_TOPICS)

    def debug_event_logger(self, topic=pub.AUTO_TOPIC, **kwargs):
        """Log all events published on the event bus."""
        timestamp = time.strftime("%H:%M:%S")
        topic_name = topic.getName()
        data_str = ", ".join(f"{k}={v}" for k, v in kwargs.items() if k != "topic")
        print(f"[{timestamp}] EVENT: {topic_name} | {data_str}", file=sys.stderr)

    def connect(self) -> IPCConnection:
        """Open the connection to the window manager."""
        if self.connection is None:
            self.connection = IPCConnection(
                self.config.resolve_socket_path(), bus=self.bus
            )
        return self.connection.connect()

    def close(self):
        if self.connection:
            self.connection.disconnect()
            self.connection = None

    def plan(self, wanted: str) -> Tuple[SwitchDecision, bytes]:
        """Query the workspaces and decide how to switch.

        Returns:
            The decision and the reply buffer its spans point into
        """
        reply = self.connect().request(self.config.workspaces_message_type)
        tokens = parse(reply)
        self.navigator = TreeNavigator(
            tokens, self.config.bytes_per_token, bus=self.bus
        )
        planner = SwitchPlanner(tokens, reply, self.navigator, bus=self.bus)
        return planner.plan(wanted), reply

    def build_command(self, wanted: str) -> str:
        """Return the command that switches to the wanted workspace."""
        decision, reply = self.plan(wanted)
        command = render(decision, wanted, reply, self.config.max_command_length)

        if self.bus:
            self.bus.sendMessage(topics.COMMAND_RENDERED, command=command)
        return command

    def switch(self, wanted: str) -> str:
        """Switch to the wanted workspace.

        Returns:
            The command that was sent (or would be, in dry run mode)
        """
        try:
            command = self.build_command(wanted)
            if not self.config.dry_run:
                reply = self.connection.request(
                    MessageType.RUN_COMMAND, command.encode("utf-8")
                )
                check_command_reply(reply)
            return command
        finally:
            self.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wsswitch",
        description="Switch to a workspace, pulling it onto the focused output.",
    )
    parser.add_argument("workspace", help="name of the workspace to switch to")
    parser.add_argument(
        "--socket", metavar="PATH", help="IPC socket path (default: $I3SOCK)"
    )
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="print the command instead of sending it",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = SwitcherConfig.from_env(socket_path=args.socket, dry_run=args.dry_run)
    switcher = WorkspaceSwitcher(config, bus=pub)

    try:
        command = switcher.switch(args.workspace)
    except SwitchError as e:
        print(f"wsswitch: {e}", file=sys.stderr)
        return 1

    if config.dry_run:
        print(command)
    return 0


if __name__ == "__main__":
    sys.exit(main())
