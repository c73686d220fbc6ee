from __future__ import annotations

import argparse
import json
import math
import random
import sys


def _valid_port(value: str) -> int:
    """Validate port is an integer in range 1-65535."""
    port = int(value)
    if port < 1 or port > 65535:
        raise argparse.ArgumentTypeError(f"port must be 1-65535, got {port}")
    return port


def _valid_hours(value: str) -> float:
    """Validate sleep hours is a finite number in range 0-24."""
    try:
        hours = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"sleep hours must be a number, got {value!r}")
    if not math.isfinite(hours) or hours < 0 or hours > 24:
        raise argparse.ArgumentTypeError(f"sleep hours must be 0-24, got {value}")
    return hours


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="mindbot",
        description="MindBot -- local supportive chat triage",
    )
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Start the MindBot API server")
    serve_parser.add_argument(
        "--port", type=_valid_port, default=8430, help="Port to run on (default: 8430)"
    )
    serve_parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)"
    )

    ask_parser = subparsers.add_parser("ask", help="Triage a single message")
    ask_parser.add_argument("text", help="Message to answer")
    ask_parser.add_argument("--sleep-hours", type=_valid_hours, default=None, help="Hours slept last night")
    ask_parser.add_argument("--mode", choices=["calm", "motivate", "grounding"], default=None, help="Reply tone")
    ask_parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible replies")
    ask_parser.add_argument("--json", dest="output_json", action="store_true", help="Output the full result as JSON")

    chat_parser = subparsers.add_parser("chat", help="Interactive chat in the terminal")
    chat_parser.add_argument("--mode", choices=["calm", "motivate", "grounding"], default=None, help="Reply tone")
    chat_parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible replies")

    args = parser.parse_args(argv)

    if args.command == "serve":
        if args.host not in ("127.0.0.1", "localhost", "::1"):
            print("Warning: binding to non-loopback address exposes the chat API to the network", file=sys.stderr)
        _serve(host=args.host, port=args.port)
    elif args.command == "ask":
        _ask(args)
    elif args.command == "chat":
        _chat(mode=args.mode, seed=args.seed)
    else:
        parser.print_help()
        sys.exit(1)


def _serve(host: str, port: int) -> None:
    import uvicorn
    from mindbot import __version__

    print()
    print(f"  MindBot v{__version__}")
    print(f"  Chat API:   http://{host}:{port}/chat")
    print(f"  API docs:   http://{host}:{port}/docs")
    print()

    uvicorn.run("mindbot.api:app", host=host, port=port, log_level="warning")


def _ask(args: argparse.Namespace) -> None:
    from mindbot.backend import respond
    from mindbot.intelligence.models import TriageContext

    rng = random.Random(args.seed) if args.seed is not None else None
    context = TriageContext(sleep_hours=args.sleep_hours, mode=args.mode)
    result = respond(args.text, [], context, rng=rng)

    if args.output_json:
        print(json.dumps(result.model_dump(), indent=2))
        return

    print(f"  [{result.kind}] {result.reply}")
    if result.tool:
        print(f"  Suggested exercise: {result.tool}")


def _chat(mode: str | None, seed: int | None) -> None:
    from mindbot import Conversation

    rng = random.Random(seed) if seed is not None else None
    convo = Conversation(use_backend=True)

    print()
    print("  MindBot -- basic support and tips, not a replacement for a professional.")
    print("  If you are in crisis, contact local emergency services or a crisis hotline.")
    print("  Type 'quit' to exit.")
    print()

    while True:
        try:
            text = input("you> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if text.strip().lower() in ("quit", "exit"):
            break
        result = convo.send(text, mode=mode, rng=rng)
        print(f"mindbot> {result.reply}")
        if result.tool:
            print(f"         (try the {result.tool} exercise)")


if __name__ == "__main__":
    main()
