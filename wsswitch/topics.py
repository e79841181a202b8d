"""
Event Topics for wsswitch

All pub/sub topics are defined here for easy discovery and documentation.
Topic naming convention: <category>.<action>

Components only publish when they are given a bus; the CLI passes the
default Pypubsub bus and attaches a logger when WSSWITCH_DEBUG is set.
"""

# IPC events
IPC_CONNECTED = "ipc.connected"
"""Published after the socket connection is established."""

IPC_REQUEST_SENT = "ipc.request_sent"
"""Published when a framed request has been written to the socket."""

IPC_REPLY_RECEIVED = "ipc.reply_received"
"""Published when a complete reply frame has been read."""

# Navigation events
SUBTREE_SKIPPED = "navigator.subtree_skipped"
"""Published for every subtree skip, with the number of correction steps."""

# Planning events
WORKSPACE_SCANNED = "planner.workspace_scanned"
"""Published when a workspace record has been read and classified."""

DECISION_MADE = "planner.decision_made"
"""Published once the switch decision is known."""

# Command events
COMMAND_RENDERED = "command.rendered"
"""Published with the command text before it is sent."""
