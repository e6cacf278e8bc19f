"""Command parsing: descriptors, rule-based parser, multi-action splitter and strategies."""

from .descriptors import DESTRUCTIVE_ACTIONS, Action, ActionDescriptor, parse_action
from .rules import parse_command
from .splitter import split
from .strategies import CommandParser, LlmParseStrategy, ParseStrategy, RuleParseStrategy

__all__ = [
    "DESTRUCTIVE_ACTIONS",
    "Action",
    "ActionDescriptor",
    "CommandParser",
    "LlmParseStrategy",
    "ParseStrategy",
    "RuleParseStrategy",
    "parse_action",
    "parse_command",
    "split",
]
