#!/usr/bin/env python3
"""FieldOps voice console CLI."""

import argparse
import asyncio
import logging
import sys

from config.settings import Settings
from orchestrator import FieldOpsOrchestrator
from schemas.responses import SynthesizedAudio
from services.errors import FieldOpsError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="FieldOps voice console - talk to the GBird field-ops drone"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to a YAML settings file"
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the offline sample reply instead of live reply services"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("console", help="Interactive push-to-talk loop")

    ask = subparsers.add_parser("ask", help="Get one spoken reply for a typed transcript")
    ask.add_argument("--transcript", "-t", type=str, required=True, help="What the operator said")
    ask.add_argument("--out", "-o", type=str, help="Write the synthesized audio to this file")

    refresh = subparsers.add_parser("refresh", help="Advance the telemetry simulation")
    refresh.add_argument("--count", "-n", type=int, default=1, help="Number of refresh steps (default: 1)")

    memory = subparsers.add_parser("memory", help="Show recent conversation memory")
    memory.add_argument("--limit", type=int, default=8, help="Number of turns to show (default: 8)")

    say = subparsers.add_parser("say", help="Send a text message over comms")
    say.add_argument("text", type=str, help="Message text")

    return parser


def print_telemetry(orchestrator: FieldOpsOrchestrator):
    state = orchestrator.telemetry
    print(
        f"Battery {state.battery_percent}% (reserve {state.reserve_percent}%) | "
        f"Distance {state.distance_meters}m | Uptime {state.uptime_minutes}m | "
        f"Heading {state.heading_degrees:.0f}deg | "
        f"Position {state.lat:.4f}, {state.lng:.4f}"
    )


async def run_console(orchestrator: FieldOpsOrchestrator):
    """Enter to start talking, Enter again to stop; 'q' quits."""
    controller = orchestrator.controller
    controller.add_transcript_listener(lambda text: print(f"  > {text}"))

    print("GBird voice console. Press Enter to talk, Enter again to send, 'q' to quit.")
    while True:
        command = await asyncio.to_thread(input, "[idle] ")
        if command.strip().lower() in ("q", "quit", "exit"):
            break
        if command.strip().lower() == "refresh":
            orchestrator.refresh_telemetry()
            print_telemetry(orchestrator)
            continue

        await controller.start()
        if controller.last_error:
            continue
        await asyncio.to_thread(input, "[recording] press Enter to stop ")
        await controller.stop()
        orchestrator.stop_alerts()


def main():
    """Main CLI entry point."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    overrides = {"demo_mode": True if args.demo else None, "verbose": args.verbose or None}
    if args.config:
        settings = Settings.from_yaml(args.config, **overrides)
    else:
        settings = Settings(**{k: v for k, v in overrides.items() if v is not None})

    orchestrator = FieldOpsOrchestrator(settings=settings)

    try:
        if args.command == "console":
            asyncio.run(run_console(orchestrator))

        elif args.command == "ask":
            payload = orchestrator.respond(args.transcript)
            print(payload.reply)
            print(f"[sfx: {payload.sfx.value}, audio: {payload.media_type}]")
            if args.out:
                audio = SynthesizedAudio(audio_base64=payload.audio_base64, media_type=payload.media_type)
                with open(args.out, "wb") as f:
                    f.write(audio.decode())
                print(f"Audio written to {args.out}")

        elif args.command == "refresh":
            for _ in range(max(1, args.count)):
                result = orchestrator.refresh_telemetry()
                if result.announcement is not None:
                    print(f"GBird: {result.announcement.text}")
            print_telemetry(orchestrator)

        elif args.command == "memory":
            turns = orchestrator.memory.latest_first(args.limit)
            if not turns:
                print("No memory yet.")
            for turn in turns:
                print(f"[{turn.time_label}] {turn.speaker.value} ({turn.channel.value}): {turn.text}")

        elif args.command == "say":
            if orchestrator.submit_text(args.text):
                print(orchestrator.live_transcript)

    except (FieldOpsError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)
    except KeyboardInterrupt:
        pass
    finally:
        orchestrator.close()


if __name__ == "__main__":
    main()
