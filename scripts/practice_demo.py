#!/usr/bin/env python3
"""
SignSprout Practice Demo

Runs one practical test against the local webcam: countdown, a timed
recording, upload + evaluation through the running API server, and a
pass/fail result. Passing or skipping records lesson progress the same
way the lesson flow does (score 1 on pass, 0 on skip).

Usage:
    uvicorn src.api.app:app                       # in another terminal
    python scripts/practice_demo.py --sign HELLO --instructions "Wave from the forehead"
    python scripts/practice_demo.py --sign THANK-YOU --category GREETINGS --lesson 2 --total 8
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path for ``src`` imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.models import (  # noqa: E402
    EvaluationVerdict,
    PracticalTestItem,
    SessionEvent,
    SessionState,
    TestScore,
)
from src.services.practice_session import PracticeSession  # noqa: E402
from src.services.storage.database import close_db, get_session, init_db  # noqa: E402
from src.services.storage.progress import ProgressLedger  # noqa: E402

logger = logging.getLogger(__name__)


async def _print_event(event: SessionEvent) -> None:
    if event.state is SessionState.countdown and event.countdown_remaining > 0:
        print(f"  {event.countdown_remaining}...")
    elif event.state is SessionState.recording:
        print(f"  recording {event.elapsed_seconds}s", end="\r", flush=True)
    elif event.error is not None:
        print(f"  ! {event.error.message}")


def _print_verdict(verdict: EvaluationVerdict) -> None:
    print(f"\n  Accuracy: {verdict.accuracy_score:.0f}%")
    print(f"  Hand shape: {verdict.hand_shape_detected}")
    print(f"  Movement: {verdict.movement_pattern_detected}")
    for strength in verdict.strengths:
        print(f"  + {strength}")
    for improvement in verdict.improvements:
        print(f"  - [{improvement.priority}] {improvement.aspect}: {improvement.suggestion}")
    if verdict.encouragement:
        print(f"  {verdict.encouragement}")


async def _record_progress(args: argparse.Namespace, item: PracticalTestItem, passed: bool) -> None:
    async with get_session() as session:
        entry = await ProgressLedger(session).update(
            args.category,
            lesson_index=args.lesson,
            total_lessons=args.total,
            test_score=TestScore(lesson_id=item.id, score=1 if passed else 0, passed=passed),
        )
    print(f"  Progress in {args.category}: {entry.completion_percentage}%")


def _ask(prompt: str, choices: str) -> str:
    while True:
        answer = input(f"{prompt} [{'/'.join(choices)}] ").strip().lower()[:1]
        if answer in choices:
            return answer


async def run(args: argparse.Namespace) -> int:
    item = PracticalTestItem(
        id=args.lesson,
        sign_to_perform=args.sign,
        instructions=args.instructions,
        hints=args.hint or [],
        sign_description=args.description,
    )
    outcome: dict[str, bool] = {}

    async def on_pass(verdict: EvaluationVerdict) -> None:
        outcome["passed"] = True
        await _record_progress(args, item, passed=True)

    async def on_skip() -> None:
        outcome["passed"] = False
        await _record_progress(args, item, passed=False)

    await init_db()
    session = PracticeSession.from_settings(
        item,
        countdown_seconds=args.countdown,
        max_recording_seconds=args.seconds,
        notify=_print_event,
        on_pass=on_pass,
        on_skip=on_skip,
    )
    try:
        async with session:
            print(f"Sign to perform: {item.sign_to_perform}\n  {item.instructions}")
            await session.request_camera()
            if session.state is not SessionState.ready:
                print("Camera not available; skipping test.")
                await session.skip()
                return 1

            while not session.is_closed:
                if session.state is SessionState.ready:
                    if _ask("Start recording?", "ys") == "s":
                        await session.skip()
                        break
                    await session.start_countdown()
                    while session.state in (SessionState.countdown, SessionState.recording):
                        await asyncio.sleep(0.1)
                    print()
                elif session.state is SessionState.recorded:
                    choice = _ask("Submit, re-record or skip?", "urs")
                    if choice == "u":
                        await session.submit()
                    elif choice == "r":
                        await session.retry()
                    else:
                        await session.skip()
                elif session.state is SessionState.result:
                    _print_verdict(session.verdict)
                    if session.gate_result.passed:
                        await session.pass_test()
                    else:
                        if session.gate_result.hint:
                            print(f"  Hint: {session.gate_result.hint}")
                        if _ask("Try again or skip?", "ts") == "t":
                            await session.retry()
                        else:
                            await session.skip()
                else:
                    await session.skip()
    finally:
        await close_db()

    return 0 if outcome.get("passed") else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Run one sign practice test on the local webcam")
    parser.add_argument("--sign", required=True, help="Sign to perform, e.g. HELLO")
    parser.add_argument("--instructions", default="Perform the sign facing the camera.")
    parser.add_argument("--description", default=None, help="Optional sign description")
    parser.add_argument("--hint", action="append", help="Hint shown after a failed attempt")
    parser.add_argument("--category", default="PRACTICE")
    parser.add_argument("--lesson", type=int, default=0, help="Lesson index within the category")
    parser.add_argument("--total", type=int, default=1, help="Lessons in the category")
    parser.add_argument("--countdown", type=int, default=None)
    parser.add_argument("--seconds", type=int, default=None, help="Recording window")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
