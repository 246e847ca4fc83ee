"""Agents for the FieldOps voice console."""

from .response_parser import ResponseParser, status_line
from .context_assembler import ContextAssembler
from .reply_agent import ReplyAgent

__all__ = [
    "ResponseParser",
    "status_line",
    "ContextAssembler",
    "ReplyAgent",
]
