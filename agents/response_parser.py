"""Tolerant parser for the completion service's reply payload."""

import json
import logging
import math
from typing import Optional

from schemas.context import RequestContext
from schemas.responses import AgentReply, ParsedReply, ParsePath, SfxKind

logger = logging.getLogger(__name__)

CRITICAL_BATTERY = 10


def whole(value: float) -> int:
    """Round half up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def status_line(context: Optional[RequestContext]) -> str:
    """
    Render the telemetry status line appended to spoken replies.

    Returns an empty string when no telemetry field is available.
    """
    if context is None:
        return ""

    parts = []
    battery = context.battery
    if battery is not None:
        parts.append(f"Batt {whole(battery)}%")
    if context.distance is not None:
        parts.append(f"Dist {whole(context.distance)}m")
    if context.altitude is not None:
        parts.append(f"Alt {whole(context.altitude)}m")
    if context.heading is not None:
        parts.append(f"Hdg {whole(context.heading) % 360}deg")
    if context.ops_mode is not None:
        parts.append(f"Mode {context.ops_mode.value}")
    if context.route:
        parts.append(f"Route {context.route}")
    if battery is not None:
        parts.append(f"Safe {'Critical' if battery <= CRITICAL_BATTERY else 'Nominal'}")

    if not parts:
        return ""
    return "Status - " + " | ".join(parts)


class ResponseParser:
    """
    Two-tier decode of the completion output.

    The strict tier expects ``{"reply": str, "sfx": "none"|"alert"|"alarm"|"siren"}``;
    anything else falls back to using the raw text as the reply. Neither
    tier raises.
    """

    def parse(
        self,
        raw: str,
        context: Optional[RequestContext] = None
    ) -> ParsedReply:
        """
        Parse raw completion text into an AgentReply.

        Args:
            raw: Completion output
            context: Context the reply was generated for (drives the status line)

        Returns:
            ParsedReply tagged with the decode path that fired
        """
        status = status_line(context)
        strict = self._parse_strict(raw)

        if strict is not None:
            text, sfx = strict
            path = ParsePath.STRICT
        else:
            logger.info("Reply payload did not match schema; using raw text")
            text, sfx = raw, SfxKind.NONE
            path = ParsePath.FALLBACK

        if status:
            text = f"{text}\n{status}"

        return ParsedReply(
            reply=AgentReply(reply_text=text, sfx=sfx),
            path=path,
            status_line=status
        )

    def _parse_strict(self, raw: str) -> Optional[tuple]:
        """Return (reply, sfx) if raw conforms to the schema, else None."""
        content = (raw or "").strip()

        # Handle potential markdown code blocks
        if content.startswith("```"):
            segments = content.split("```")
            if len(segments) >= 2:
                content = segments[1]
                if content.startswith("json"):
                    content = content[4:]
                content = content.strip()

        try:
            parsed = json.loads(content)
        except (json.JSONDecodeError, TypeError):
            return None

        if not isinstance(parsed, dict):
            return None

        reply = parsed.get("reply")
        if not isinstance(reply, str) or not reply.strip():
            return None

        return reply, self._parse_sfx(parsed.get("sfx"))

    @staticmethod
    def _parse_sfx(value) -> SfxKind:
        if not isinstance(value, str):
            return SfxKind.NONE
        try:
            return SfxKind(value.strip().lower())
        except ValueError:
            logger.warning(f"Unknown sfx '{value}', defaulting to none")
            return SfxKind.NONE
