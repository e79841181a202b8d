"""
Switch planning

Walks the GET_WORKSPACES reply to find the current (focused and visible)
workspace and the wanted one, then decides which commands bring the wanted
workspace onto the current output.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .errors import FatalError, ParseError
from .navigator import TreeNavigator
from .tokenizer import StringSpan, Token, TokenType


@dataclass
class WorkspaceRecord:
    """Fields of one workspace object, read from its direct members."""

    name: Optional[StringSpan] = None
    output: Optional[StringSpan] = None
    focused: bool = False
    visible: bool = False

    @property
    def is_current(self) -> bool:
        return self.focused and self.visible

    @property
    def is_complete(self) -> bool:
        return self.name is not None and self.output is not None


@dataclass(frozen=True)
class CreateOnCurrentOutput:
    """The wanted workspace does not exist yet; switching creates it."""


@dataclass(frozen=True)
class MoveOutputToWanted:
    """The wanted workspace exists but is hidden; pull it to the current output."""

    current_output: StringSpan


@dataclass(frozen=True)
class SwapOutputs:
    """The wanted workspace is shown elsewhere; swap it with the current one."""

    current_output: StringSpan
    current_workspace_name: StringSpan
    wanted_output: StringSpan


SwitchDecision = Union[CreateOnCurrentOutput, MoveOutputToWanted, SwapOutputs]


# Member names read from each workspace object
BOOLEAN_FIELDS = {b"focused": "focused", b"visible": "visible"}
STRING_FIELDS = {b"name": "name", b"output": "output"}


class SwitchPlanner:
    """Scans workspace records and derives the switch decision."""

    def __init__(
        self,
        tokens: Sequence[Token],
        buffer: bytes,
        navigator: Optional[TreeNavigator] = None,
        bus=None,
    ):
        """Initialize the planner.

        Args:
            tokens: Token table of the GET_WORKSPACES reply
            buffer: The reply buffer the tokens point into
            navigator: Navigator over tokens, created if not given
            bus: Event bus instance (Pypubsub), optional
        """
        self.tokens = tokens
        self.buffer = buffer
        self.navigator = navigator if navigator is not None else TreeNavigator(tokens)
        self.bus = bus

    def read_record(self, index: int) -> WorkspaceRecord:
        """Read the fields of the workspace object at index.

        Nested values (rect, window lists, ...) are skipped without being
        inspected.
        """
        tokens = self.tokens
        record = WorkspaceRecord()

        for key, value in self.navigator.members(index):
            span = StringSpan.of(tokens[key])
            for field_name, attr in BOOLEAN_FIELDS.items():
                if span.matches(self.buffer, field_name):
                    if tokens[value].type is not TokenType.PRIMITIVE:
                        raise ParseError(f"expected a boolean for {attr!r}")
                    setattr(record, attr, self.buffer[tokens[value].start] == 0x74)
                    break
            else:
                for field_name, attr in STRING_FIELDS.items():
                    if span.matches(self.buffer, field_name):
                        if tokens[value].type is not TokenType.STRING:
                            raise ParseError(f"expected a string for {attr!r}")
                        setattr(record, attr, StringSpan.of(tokens[value]))
                        break
        return record

    def plan(self, wanted: Union[str, bytes]) -> SwitchDecision:
        """Decide how to switch to the wanted workspace.

        Raises:
            ParseError: if the reply is not an array of objects
            FatalError: if there is not exactly one current workspace
        """
        if isinstance(wanted, str):
            wanted = wanted.encode("utf-8")
        tokens = self.tokens
        if not tokens or tokens[0].type is not TokenType.ARRAY:
            raise ParseError("workspace reply is not an array")

        current: Optional[WorkspaceRecord] = None
        target: Optional[WorkspaceRecord] = None

        for index in self.navigator.elements(0):
            if tokens[index].type is not TokenType.OBJECT:
                raise ParseError(f"workspace entry {index} is not an object")

            record = self.read_record(index)
            if record.is_complete:
                is_wanted = record.name.equals(self.buffer, wanted)
                if record.is_current:
                    if current is not None:
                        raise FatalError("more than one focused/visible workspace")
                    current = record
                    if is_wanted:
                        target = record
                elif is_wanted:
                    target = record

                if self.bus:
                    from . import topics

                    self.bus.sendMessage(
                        topics.WORKSPACE_SCANNED,
                        name=record.name.text(self.buffer),
                        current=record is current,
                        wanted=record is target,
                    )

            if current is not None and target is not None:
                break

        if current is None:
            raise FatalError("no focused/visible current workspace found")

        decision = self._decide(current, target)
        if self.bus:
            from . import topics

            self.bus.sendMessage(topics.DECISION_MADE, decision=decision)
        return decision

    @staticmethod
    def _decide(
        current: WorkspaceRecord, target: Optional[WorkspaceRecord]
    ) -> SwitchDecision:
        if target is None:
            return CreateOnCurrentOutput()
        if not target.visible:
            return MoveOutputToWanted(current.output)
        return SwapOutputs(current.output, current.name, target.output)


def plan(
    tokens: Sequence[Token],
    buffer: bytes,
    wanted: Union[str, bytes],
    navigator: Optional[TreeNavigator] = None,
) -> SwitchDecision:
    """Decide how to switch to the wanted workspace.

    Args:
        tokens: Token table of the GET_WORKSPACES reply
        buffer: The reply buffer the tokens point into
        wanted: Name of the workspace to switch to
        navigator: Navigator over tokens, optional

    Returns:
        One of CreateOnCurrentOutput, MoveOutputToWanted, SwapOutputs
    """
    return SwitchPlanner(tokens, buffer, navigator).plan(wanted)
