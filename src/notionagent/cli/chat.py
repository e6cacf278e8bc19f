"""CLI entrypoint for one conversation turn against the Notion workspace."""

from __future__ import annotations

import argparse
import json
import logging

from dotenv import load_dotenv

load_dotenv()

from notionagent.agent.factory import build_orchestrator_from_env
from notionagent.agent.orchestrator import process_chat
from notionagent.agent.sessions import SqliteSessionStore
from notionagent.parsing.splitter import split


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send one natural-language request to the Notion agent")
    parser.add_argument("--input", required=True, help="Request text, e.g. 'add buy milk as todo in Tasks page'")
    parser.add_argument("--confirm", action="store_true", help="Skip the confirmation prompt for this request")
    parser.add_argument("--identity", default="cli", help="Session identity shared between invocations")
    parser.add_argument("--db-path", default=".notionagent-sessions.db", help="SQLite session database path")
    parser.add_argument("--use-llm", action="store_true", help="Use the completion service when configured")
    parser.add_argument("--parse-only", action="store_true", help="Print parsed actions without touching Notion")
    args = parser.parse_args(argv)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING,
    )

    if args.parse_only:
        payload = {"input": args.input, "actions": [descriptor.to_dict() for descriptor in split(args.input)]}
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    with SqliteSessionStore(args.db_path) as sessions:
        try:
            orchestrator = build_orchestrator_from_env(use_llm=args.use_llm, sessions=sessions)
        except ValueError as error:
            print(json.dumps({"error": str(error)}, ensure_ascii=False, indent=2))
            return 2
        payload = process_chat(orchestrator, args.identity, args.input, confirm=args.confirm)

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
