"""Console entry point for cart_pilot."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

from cart_pilot.config import CONFIG

logger = logging.getLogger(__name__)

PROVIDER_CHOICES = ("openai", "google")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cart-pilot",
        description="Drive a browser with an LLM to carry out shopping and navigation requests",
    )
    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="Run the browser agent on a goal")
    run.add_argument("goal", help='What to do, e.g. "Go to amazon.com and add blue headphones to the cart"')
    run.add_argument("--url", default=None, help="Page to open before the agent starts")
    run.add_argument("--provider", choices=PROVIDER_CHOICES, default=None, help="LLM provider (guessed from --model)")
    run.add_argument("--model", default=None, help=f"Model name (default: {CONFIG.CART_PILOT_MODEL})")
    run.add_argument("--max-steps", type=int, default=None)
    run.add_argument("--headless", action="store_true", default=None, help="Run Chromium without a window")
    run.add_argument("--user-data-dir", default=None, help="Persistent Chromium profile directory")
    run.add_argument("--no-history", action="store_true", help="Do not save the conversation to storage")

    intent = subparsers.add_parser("intent", help="Parse a shopping request into structured attributes")
    intent.add_argument("text")

    history = subparsers.add_parser("history", help="Show or clear the stored chat history")
    history.add_argument("--clear", action="store_true")
    history.add_argument("--limit", type=int, default=20)
    return parser


def _make_llm(provider: Optional[str], model: Optional[str]):
    model = model or CONFIG.CART_PILOT_MODEL
    if provider is None:
        provider = "google" if model.startswith("gemini") else "openai"
    if provider == "google":
        from cart_pilot.llm.google.chat import ChatGoogle

        return ChatGoogle(model=model)
    from cart_pilot.llm.openai.chat import ChatOpenAI

    return ChatOpenAI(model=model)


async def _run_agent(args: argparse.Namespace) -> int:
    from cart_pilot.agent.events import CallbackEventSink, ProgressEvent
    from cart_pilot.agent.service import Agent
    from cart_pilot.agent.settings import AgentSettings
    from cart_pilot.agent.state import AgentStatus
    from cart_pilot.browser.session import BrowserProfile, BrowserSession
    from cart_pilot.browser.transport import PageTransport
    from cart_pilot.storage.service import StorageManager
    from cart_pilot.storage.views import ChatEntry

    transcript: list[ChatEntry] = [ChatEntry(role="user", content=args.goal)]

    def on_event(event: ProgressEvent) -> None:
        print(event.message, flush=True)
        transcript.append(ChatEntry(role="agent", content=event.message))

    profile_kwargs = {}
    if args.headless is not None:
        profile_kwargs["headless"] = args.headless
    if args.user_data_dir:
        profile_kwargs["user_data_dir"] = args.user_data_dir
    settings = AgentSettings()
    if args.max_steps is not None:
        settings.max_steps = args.max_steps

    llm = _make_llm(args.provider, args.model)
    async with BrowserSession(browser_profile=BrowserProfile(**profile_kwargs)) as session:
        context_id = await session.new_tab(args.url)
        agent = Agent(llm, PageTransport(session), settings=settings, event_sink=CallbackEventSink(on_event))
        try:
            outcome = await agent.run(args.goal, context_id)
        except (KeyboardInterrupt, asyncio.CancelledError):
            agent.stop_task()
            raise
        finally:
            if not args.no_history:
                await StorageManager().append_chat(*transcript)

    return 0 if outcome.status is AgentStatus.COMPLETED else 1


def run_intent(args: argparse.Namespace) -> int:
    from cart_pilot.intent.parser import IntentParser

    parser = IntentParser()
    intent = parser.parse(args.text)
    payload = intent.model_dump()
    payload["search_query"] = parser.generate_search_query(intent)
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    if not parser.is_actionable(intent):
        print(f"Confidence {intent.confidence} is below the actionable threshold", file=sys.stderr)
        return 1
    return 0


async def _history(args: argparse.Namespace) -> int:
    from cart_pilot.storage.service import StorageManager

    storage = StorageManager()
    if args.clear:
        await storage.clear_chat_history()
        print("Chat history cleared")
        return 0
    entries = await storage.get_chat_history()
    for entry in entries[-args.limit :]:
        print(f"[{entry.timestamp}] {entry.role}: {entry.content}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(sys.argv[1:] if argv is None else argv))
    try:
        if args.command == "run":
            return asyncio.run(_run_agent(args))
        if args.command == "intent":
            return run_intent(args)
        if args.command == "history":
            return asyncio.run(_history(args))
        parser.print_help()
        return 2
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
