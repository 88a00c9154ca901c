from __future__ import annotations

import argparse
import sys

from .config import get_settings
from .log import configure_logging
from .sender import SmsSender


def send_once(to: str, text: str) -> int:
    """
    Run the outbound flow once from the terminal.

    Prints the same status line the web form shows and returns a process
    exit code (0 on success, 1 otherwise).
    """
    sender = SmsSender.from_settings(get_settings())
    outcome = sender.send(to=to, text=text)
    print(outcome.message)
    return 0 if outcome.ok else 1


def serve(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("sms_bridge.main:app", host=host, port=port)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="sms-bridge")
    sub = parser.add_subparsers(dest="command", required=True)

    send_parser = sub.add_parser("send", help="send a single SMS")
    send_parser.add_argument("to", type=str)
    send_parser.add_argument("text", type=str)

    serve_parser = sub.add_parser("serve", help="run the web app")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    configure_logging(get_settings())

    if args.command == "send":
        return send_once(args.to, args.text)

    serve(args.host, args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
