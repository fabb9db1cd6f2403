from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from typing import Optional, Sequence

from .api import dumps, serialize_result
from .bootstrap import configure_logging
from .domain import CommandResult, Event
from .errors import ChatcalError, StorageUnavailableError
from .llm import CommandModel
from .orchestrator import ChatSession, CommandDispatcher, parse_command
from .services import ServiceContext

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"/quit", "/exit"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="chatcal command line interface.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("chat", help="Manage the schedule by talking to the language model.")

    run_parser = subparsers.add_parser("run", help="Execute one ACTION:<NAME>(...) command without a model.")
    run_parser.add_argument("text", help='For example: ACTION:READ_EVENTS(title="")')
    run_parser.add_argument("--json", action="store_true", help="Print event results as JSON.")

    events_parser = subparsers.add_parser("events", help="List stored events.")
    events_parser.add_argument("--date", type=date.fromisoformat, default=None, help="Only events starting on YYYY-MM-DD.")
    events_parser.add_argument("--json", action="store_true", help="Print events as JSON.")

    history_parser = subparsers.add_parser("history", help="Show the chat transcript.")
    history_parser.add_argument("--clear", action="store_true", help="Delete the transcript instead of printing it.")

    return parser


def format_event(event: Event) -> str:
    start = event.start_time.astimezone().strftime("%Y-%m-%d %H:%M")
    end = event.end_time.astimezone().strftime("%H:%M")
    line = f"{start}-{end}  {event.title}"
    if event.description:
        line += f" ({event.description})"
    return line


def render_result(result: CommandResult, *, as_json: bool = False) -> str:
    if as_json:
        return dumps(serialize_result(result))
    if isinstance(result, str):
        return result
    if not result:
        return "No events found."
    return "\n".join(format_event(event) for event in result)


async def _chat(context: ServiceContext) -> None:
    session = ChatSession(
        CommandModel(context.settings.llm),
        CommandDispatcher(context.store),
        transcript=context.transcript,
    )
    print("Type a request, or /quit to leave.")
    while True:
        try:
            message = (await asyncio.to_thread(input, "you> ")).strip()
        except EOFError:
            break
        if not message:
            continue
        if message in EXIT_COMMANDS:
            break
        turn = await session.handle(message)
        print(render_result(turn.reply))


async def _run(context: ServiceContext, text: str, as_json: bool) -> int:
    command = parse_command(text)
    if command is None:
        print("No ACTION command found in the given text.", file=sys.stderr)
        return 2
    result = CommandDispatcher(context.store).dispatch(command)
    print(render_result(result, as_json=as_json))
    return 0


async def _events(context: ServiceContext, day: Optional[date], as_json: bool) -> int:
    events = context.store.get_for_date(day) if day else context.store.get_all()
    print(render_result(events, as_json=as_json))
    return 0


async def _history(context: ServiceContext, clear: bool) -> int:
    if clear:
        await context.transcript.clear_all()
        print("Chat history cleared.")
        return 0
    for message in await context.transcript.get_all_messages():
        print(f"{message.role.value}> {render_result(message.content)}")
    return 0


async def _main(args: argparse.Namespace) -> int:
    context = ServiceContext()
    try:
        try:
            await context.start()
        except StorageUnavailableError as exc:
            print(f"Calendar storage is unavailable: {exc}", file=sys.stderr)
            return 1
        if args.command == "chat":
            await _chat(context)
            return 0
        if args.command == "run":
            return await _run(context, args.text, args.json)
        if args.command == "events":
            return await _events(context, args.date, args.json)
        if args.command == "history":
            return await _history(context, args.clear)
        return 2  # pragma: no cover - argparse enforces choices
    except ChatcalError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    finally:
        await context.close()


def main(argv: Optional[Sequence[str]] = None) -> None:
    configure_logging()
    logger.info("chatcal CLI starting")
    parser = build_parser()
    args = parser.parse_args(argv)
    raise SystemExit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
