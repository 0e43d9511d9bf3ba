"""CLI entry point for personal-assistant."""

from __future__ import annotations

import argparse
import asyncio
import sys

from personal_assistant.ai.use_cases import UseCaseCatalog
from personal_assistant.app import AssistantApp
from personal_assistant.client.session import DEFAULT_USE_CASE, ChatSession
from personal_assistant.config import AppConfig, load_config
from personal_assistant.core.identity import static_identity
from personal_assistant.core.models import TurnRecord
from personal_assistant.errors import AssistantError, AuthenticationUnavailable
from personal_assistant.log import setup_logging

REPL_HELP = """Commands:
  /history            list your past turns
  /reseed <id>        continue from a past turn
  /use-case <id>      switch use case
  /reset              start a new conversation
  /quit               exit"""


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c", "--config", default="config.yaml", help="Path to config file"
    )
    parser.add_argument(
        "-e", "--env", default=".env", help="Path to .env file"
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="personal-assistant",
        description="QA chat assistant backed by Claude, with per-user chat history",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    chat_parser = subparsers.add_parser("chat", help="Start an interactive chat")
    _add_common_args(chat_parser)
    chat_parser.add_argument("-u", "--use-case", default=DEFAULT_USE_CASE, help="Use case selector")
    chat_parser.add_argument("--user", default=None, help="Identity to chat as (overrides config)")
    chat_parser.add_argument("--from-turn", default=None, help="Reseed from a past turn id")

    history_parser = subparsers.add_parser("history", help="List past turns, newest first")
    _add_common_args(history_parser)
    history_parser.add_argument("--user", default=None, help="Identity whose history to list")

    use_cases_parser = subparsers.add_parser("use-cases", help="List available use cases")
    _add_common_args(use_cases_parser)

    check_parser = subparsers.add_parser("config-check", help="Validate configuration")
    _add_common_args(check_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(2)

    config = _load(args.config, args.env)

    if args.command == "config-check":
        _check_config(config, args.config)
    elif args.command == "use-cases":
        _list_use_cases(config)
    elif args.command == "history":
        _run(_history(config, args.user))
    elif args.command == "chat":
        _run(_chat(config, args.user, args.use_case, args.from_turn))


def _load(config_path: str, env_path: str) -> AppConfig:
    try:
        config = load_config(config_path, env_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Copy config.example.yaml to config.yaml and fill in your keys")
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    setup_logging(config.log_level, json_output=config.log_json)
    return config


def _run(coro) -> None:
    try:
        asyncio.run(coro)
    except AssistantError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        # backend misconfiguration surfaces when the turn handler is first built
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass


def _check_config(config: AppConfig, config_path: str) -> None:
    """Print a configuration summary."""
    print(f"Configuration valid: {config_path}")
    print(f"  Backend     : {config.ai.backend}")
    print(f"  Model       : {config.model_name}")
    print(f"  Max tokens  : {config.ai.max_tokens}")
    print(f"  Temperature : {config.ai.temperature}")
    print(f"  Storage     : {config.storage.db_path} ({config.storage.persistence.value})")
    print(f"  Identity    : {config.identity or '(not set)'}")
    print(f"  Use cases   : {len(AssistantApp(config).use_cases)} configured")


def _list_use_cases(config: AppConfig) -> None:
    app = AssistantApp(config)
    for use_case in app.use_cases:
        print(f"  {use_case.id:<14} {use_case.title}")
        print(f"  {'':<14} {use_case.objective}")


def _print_history(records: tuple[TurnRecord, ...] | list[TurnRecord], catalog: UseCaseCatalog) -> None:
    if not records:
        print("No chat history found")
        return
    for record in records:
        question = record.question.replace("\n", " ")
        answer = record.response.text.replace("\n", " ")
        print(f"[{record.timestamp}] {record.id}  {catalog.describe(record.use_case)}")
        print(f"    Q: {question[:100]}")
        print(f"    A: {answer[:100]}")


async def _history(config: AppConfig, user: str | None) -> None:
    identity = static_identity(user or config.identity)()
    async with AssistantApp(config) as app:
        records = await app.history_reader.list_history(identity)
        _print_history(records, app.use_cases)


async def _chat(config: AppConfig, user: str | None, use_case: str, from_turn: str | None) -> None:
    async with AssistantApp(config) as app:
        session = app.open_session(static_identity(user or config.identity), use_case=use_case)
        if session.banner:
            print(f"! {session.banner}")
        if from_turn:
            await _reseed(app, session, from_turn)
        print(f"Use case: {app.use_cases.describe(session.use_case)}")
        print("Type /help for commands.")

        while True:
            try:
                line = await asyncio.to_thread(input, "you> ")
            except EOFError:
                break
            line = line.strip()
            if not line:
                continue
            if line.startswith("/"):
                if not await _command(app, session, line):
                    break
                continue
            try:
                reply = await session.submit(line)
            except AssistantError as e:
                print(f"! {e}", file=sys.stderr)
                continue
            if reply is not None:
                print(f"assistant> {reply.text}")


async def _reseed(app: AssistantApp, session: ChatSession, turn_id: str) -> None:
    if not session.identity:
        raise AuthenticationUnavailable(session.banner or "No identity")
    record = await app.history_reader.get_turn(session.identity, turn_id)
    if record is None:
        print(f"! No turn {turn_id!r} in your history", file=sys.stderr)
        return
    session.reseed(record)
    for msg in session.conversation:
        print(f"{msg.role.value}> {msg.text}")


async def _command(app: AssistantApp, session: ChatSession, line: str) -> bool:
    """Run a REPL command. Returns False when the REPL should exit."""
    name, _, arg = line.partition(" ")
    arg = arg.strip()
    try:
        match name:
            case "/quit" | "/exit":
                return False
            case "/help":
                print(REPL_HELP)
            case "/history":
                _print_history(await session.refresh_history(), app.use_cases)
            case "/reseed" if arg:
                await _reseed(app, session, arg)
            case "/use-case" if arg:
                session.select_use_case(arg)
                print(f"Use case: {app.use_cases.describe(arg)}")
            case "/reset":
                session.reset()
                print("Conversation cleared.")
            case _:
                print(REPL_HELP)
    except AssistantError as e:
        print(f"! {e}", file=sys.stderr)
    return True


if __name__ == "__main__":
    main()
