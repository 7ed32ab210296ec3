"""CLI entrypoint for the adaptive Morse code trainer."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from loguru import logger

from . import __version__
from .codes import decode_code, encode_item, is_valid_code
from .progression import current_tier
from .service import TrainerService
from .session import ExitReason, SessionController, SessionResult, is_quit
from .storage import StorageError

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]

EXIT_OK = 0
EXIT_INPUT_FAILURE = 2
DEFAULT_DATA_DIR = Path(".morsetrainer")
BANNER = "=" * 48


def _configure_logging(verbose: bool) -> None:
    """Send diagnostics to stderr, keeping stdout for the drill itself."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<level>{level: <8}</level> | {message}",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="morsetrainer", description="Adaptive Morse code practice")
    parser.add_argument("command", nargs="?", default="practice", choices=["practice", "status", "table"])
    parser.add_argument("--data-dir", type=Path, default=DEFAULT_DATA_DIR, help="directory for config and stats")
    parser.add_argument("--words", type=Path, default=None, help="word list for word practice (one per line)")
    parser.add_argument("--duration", type=int, default=None, help="session time budget in minutes")
    parser.add_argument("--verbose", action="store_true", help="show debug diagnostics")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _service(args: argparse.Namespace) -> TrainerService:
    """Create app service for the configured data directory."""
    return TrainerService(data_dir=args.data_dir, words_path=args.words)


def run(argv: list[str] | None = None, input_fn: InputFn = input, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.duration is not None and args.duration < 1:
        parser.error("--duration must be at least 1 minute")
    _configure_logging(args.verbose)

    service = _service(args)
    if args.duration is not None:
        try:
            service.set_session_duration(args.duration)
        except StorageError as exc:
            logger.error("Could not save session duration: {}", exc)
            print_fn(f"Warning: session duration not saved ({exc}).")

    if args.command == "status":
        _status_flow(service, print_fn)
        return EXIT_OK
    if args.command == "table":
        _table_flow(service, print_fn)
        return EXIT_OK

    try:
        practice_flow(service, input_fn, print_fn)
    except (EOFError, OSError) as exc:
        logger.error("Input stream failed: {!r}", exc)
        print_fn("\nInput closed; session aborted without saving.")
        return EXIT_INPUT_FAILURE
    return EXIT_OK


def practice_flow(service: TrainerService, input_fn: InputFn, print_fn: PrintFn) -> SessionResult:
    """Run one full practice session in the terminal."""
    print_fn(BANNER)
    print_fn("              MORSE CODE LEARNER")
    print_fn(BANNER)

    controller = service.new_session()
    state = controller.start()
    if state.word_mode:
        print_fn("Word practice: type the code for each word, symbols separated by spaces.")
    else:
        tier = current_tier(controller.profile, controller.tier_table)
        if tier is not None:
            print_fn(f"Level {tier.level}: new symbols {' '.join(tier.symbols)}")
            for symbol in tier.symbols:
                print_fn(f"  {symbol}  {encode_item(symbol)}")
        print_fn(f"Session budget: {service.profile.session_duration} min.")
    print_fn(f"Items this session: {len(state.queue)}")
    print_fn("Use . for short and - for long. Type q to quit.")

    _drill(controller, input_fn, print_fn)
    result = controller.finish()
    _report(result, print_fn)
    return result


def _drill(controller: SessionController, input_fn: InputFn, print_fn: PrintFn) -> None:
    """Present items until the queue empties, time runs out or the user quits."""
    while True:
        item = controller.next_item()
        if item is None:
            return
        label = "Word" if len(item) > 1 else "Symbol"
        print_fn(f"\n{label}: {item}")
        answer = input_fn("Code: ")
        if is_quit(answer):
            controller.quit()
            return
        outcome = controller.submit(answer)
        if outcome.correct:
            print_fn(f"Correct. ({outcome.elapsed_seconds:.1f}s)")
        elif not is_valid_code(outcome.answer):
            print_fn(f"Incorrect. {outcome.item} is {outcome.expected} (use only . and -)")
        else:
            sent = decode_code(outcome.answer) if len(outcome.item) == 1 else None
            hint = f" (you sent {sent})" if sent else ""
            print_fn(f"Incorrect. {outcome.item} is {outcome.expected}{hint}")


def _report(result: SessionResult, print_fn: PrintFn) -> None:
    """Print session summary and progression outcome."""
    headings = {
        ExitReason.COMPLETED: "Session complete",
        ExitReason.TIMEOUT: "Time is up",
        ExitReason.QUIT: "Session ended early",
    }
    summary = result.summary
    print_fn(f"\n=== {headings[result.reason]} ===")
    print_fn(f"Accuracy: {summary.accuracy * 100:.1f}% ({summary.correct}/{summary.total})")
    print_fn(f"Average response: {summary.avg_response_time:.1f}s")
    print_fn(f"Duration: {_format_duration(summary.duration_seconds)}")

    decision = result.decision
    if result.word_mode:
        print_fn("Word practice has no further levels. Keep going!")
    elif decision is not None and decision.advanced:
        if result.new_symbols:
            print_fn(f"Level up! New symbols: {' '.join(result.new_symbols)}")
        else:
            print_fn("Level up!")
    elif decision is not None and result.tier is not None:
        needs: list[str] = []
        if not decision.accuracy_met:
            needs.append(f"accuracy >= {result.tier.accuracy_requirement * 100:.0f}%")
        if not decision.speed_met:
            needs.append(f"average <= {result.tier.speed_requirement:.1f}s")
        print_fn(f"Stay at level {result.level}. Needed: {', '.join(needs)}.")

    if not result.saved:
        print_fn("Warning: progress could not be saved.")
        for error in result.errors:
            print_fn(f"- {error}")


def _status_flow(service: TrainerService, print_fn: PrintFn) -> None:
    """Print learner progress."""
    status = service.status()
    print_fn("\n=== Status ===")
    if status.word_mode:
        print_fn("Stage: word practice")
    elif status.tier is not None:
        tier = status.tier
        print_fn(f"Level: {status.level}")
        print_fn(f"- New symbols: {' '.join(tier.symbols)}")
        print_fn(
            f"- To advance: accuracy >= {tier.accuracy_requirement * 100:.0f}%, "
            f"average <= {tier.speed_requirement:.1f}s"
        )
    known = " ".join(status.known_chars) if status.known_chars else "none"
    print_fn(f"Known symbols ({len(status.known_chars)}): {known}")
    print_fn(f"Session budget: {status.session_duration} min")
    print_fn(f"Sessions completed: {status.sessions_completed}")
    print_fn(f"Overall accuracy: {status.overall_accuracy * 100:.1f}%")

    if status.recent_sessions:
        header = f"{'When (local)':<16} {'Level':>5} {'Items':>5} {'Acc':>6} Duration"
        print_fn("\nRecent sessions:")
        print_fn(header)
        print_fn("-" * len(header))
        for entry in status.recent_sessions:
            print_fn(
                f"{_format_local_time(entry.timestamp):<16} "
                f"{entry.level:>5} "
                f"{entry.items_practiced:>5} "
                f"{entry.accuracy * 100:>5.0f}% "
                f"{_format_duration(entry.duration_seconds)}"
            )

    if status.slowest:
        print_fn("\nSlowest recent answers:")
        for item, seconds in status.slowest:
            print_fn(f"- {item}: {seconds:.1f}s")


def _table_flow(service: TrainerService, print_fn: PrintFn) -> None:
    """Print the code table, marking known symbols."""
    print_fn("\n=== Code Table ===")
    for reference in service.code_references():
        marker = "*" if reference.known else " "
        print_fn(f"{marker} {reference.symbol}  {reference.code}")
    print_fn("* known")


def _format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}m {secs:02d}s"


def _format_local_time(timestamp: str) -> str:
    """Convert ISO timestamp to local human-readable datetime."""
    try:
        dt = datetime.fromisoformat(timestamp)
    except ValueError:
        return timestamp
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
