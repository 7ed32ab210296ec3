import json
import re
from pathlib import Path
from typing import Any

import morsetrainer.main as main
from morsetrainer.codes import encode_item


class Terminal:
    """Scripted operator that answers the last presented item."""

    def __init__(self, plan: dict[str, list[str]] | None = None, quit_after: int | None = None) -> None:
        self.outputs: list[str] = []
        self.plan = plan or {}
        self.quit_after = quit_after
        self.answered = 0

    def print_fn(self, text: str) -> None:
        self.outputs.append(text)

    def current_item(self) -> str:
        for line in reversed(self.outputs):
            match = re.match(r"^\n(?:Symbol|Word): (.+)$", line)
            if match:
                return match.group(1)
        raise AssertionError("No item presented.")

    def input_fn(self, prompt: str) -> str:
        if self.quit_after is not None and self.answered >= self.quit_after:
            return "Q"
        self.answered += 1
        item = self.current_item()
        planned = self.plan.get(item)
        if planned:
            return planned.pop(0)
        return f"  {encode_item(item).lower()}  "

    @property
    def text(self) -> str:
        return "\n".join(self.outputs)


def test_run_dispatches_default_practice(monkeypatch: Any, tmp_path: Path) -> None:
    called: dict[str, object] = {}
    monkeypatch.setattr(main, "practice_flow", lambda service, input_fn, print_fn: called.setdefault("service", service))
    assert main.run(["--data-dir", str(tmp_path)]) == main.EXIT_OK
    assert "service" in called


def test_practice_session_advances_fresh_profile(tmp_path: Path) -> None:
    terminal = Terminal()
    code = main.run(["--data-dir", str(tmp_path)], terminal.input_fn, terminal.print_fn)
    assert code == main.EXIT_OK
    assert "MORSE CODE LEARNER" in terminal.text
    assert "Level 1: new symbols E T" in terminal.text
    assert "=== Session complete ===" in terminal.text
    assert "Accuracy: 100.0% (2/2)" in terminal.text
    assert "Level up! New symbols:" in terminal.text

    config = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
    assert config["difficulty_level"] == 2
    assert set(config["known_chars"]) == {"E", "T", "A", "I", "M", "N"}


def test_practice_session_with_retries_stays_at_level(tmp_path: Path) -> None:
    terminal = Terminal(plan={"T": [".", "--"]})
    assert main.run(["--data-dir", str(tmp_path)], terminal.input_fn, terminal.print_fn) == main.EXIT_OK
    assert terminal.text.count("Incorrect. T is -") == 2
    assert "Incorrect. T is - (you sent E)" in terminal.text
    assert "Accuracy: 50.0% (2/4)" in terminal.text
    assert "Stay at level 1. Needed: accuracy >= 70%." in terminal.text

    config = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
    assert config["difficulty_level"] == 1
    assert config["known_chars"] == []


def test_quit_persists_partial_session(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text(
        json.dumps({"difficulty_level": 2, "known_chars": ["E", "T"], "session_duration": 5}), encoding="utf-8"
    )
    terminal = Terminal(quit_after=1)
    assert main.run(["--data-dir", str(tmp_path)], terminal.input_fn, terminal.print_fn) == main.EXIT_OK
    assert "=== Session ended early ===" in terminal.text
    assert "Accuracy: 100.0% (1/1)" in terminal.text
    assert sum(1 for line in terminal.outputs if line.startswith("Correct.")) == 1

    stats = json.loads((tmp_path / "stats.json").read_text(encoding="utf-8"))
    assert stats["sessions_completed"] == 1
    assert stats["session_history"][-1]["items_practiced"] == 1


def test_input_failure_exits_without_saving(tmp_path: Path) -> None:
    outputs: list[str] = []

    def closed_input(prompt: str) -> str:
        raise EOFError

    code = main.run(["--data-dir", str(tmp_path)], closed_input, outputs.append)
    assert code == main.EXIT_INPUT_FAILURE
    assert any("Input closed" in line for line in outputs)
    assert not (tmp_path / "stats.json").exists()


def test_word_practice_reports_no_gating(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text(
        json.dumps({"difficulty_level": 6, "known_chars": [], "session_duration": 5}), encoding="utf-8"
    )
    words_path = tmp_path / "words.txt"
    words_path.write_text("sos\ncq\n", encoding="utf-8")
    terminal = Terminal()
    assert main.run(["--data-dir", str(tmp_path)], terminal.input_fn, terminal.print_fn) == main.EXIT_OK
    assert "Word practice:" in terminal.text
    assert "Items this session: 2" in terminal.text
    assert "Word practice has no further levels." in terminal.text


def test_duration_option_is_saved(tmp_path: Path) -> None:
    outputs: list[str] = []
    assert main.run(["status", "--data-dir", str(tmp_path), "--duration", "9"], print_fn=outputs.append) == 0
    assert "Session budget: 9 min" in outputs
    config = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
    assert config["session_duration"] == 9


def test_status_shows_history_and_slowest(tmp_path: Path) -> None:
    terminal = Terminal()
    main.run(["--data-dir", str(tmp_path)], terminal.input_fn, terminal.print_fn)
    outputs: list[str] = []
    assert main.run(["status", "--data-dir", str(tmp_path)], print_fn=outputs.append) == 0
    assert "Level: 2" in outputs
    assert "- New symbols: A I M N" in outputs
    assert "Sessions completed: 1" in outputs
    assert "\nRecent sessions:" in outputs
    assert "\nSlowest recent answers:" in outputs


def test_status_in_word_mode(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text(
        json.dumps({"difficulty_level": 9, "known_chars": ["E"], "session_duration": 5}), encoding="utf-8"
    )
    outputs: list[str] = []
    main.run(["status", "--data-dir", str(tmp_path)], print_fn=outputs.append)
    assert "Stage: word practice" in outputs
    assert "Known symbols (1): E" in outputs


def test_table_marks_known_symbols(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text(
        json.dumps({"difficulty_level": 2, "known_chars": ["E", "T"], "session_duration": 5}), encoding="utf-8"
    )
    outputs: list[str] = []
    assert main.run(["table", "--data-dir", str(tmp_path)], print_fn=outputs.append) == 0
    assert "* E  ." in outputs
    assert "  A  .-" in outputs


def test_invalid_duration_is_rejected(tmp_path: Path) -> None:
    try:
        main.run(["--data-dir", str(tmp_path), "--duration", "0"])
        raise AssertionError("Expected SystemExit from argparse.")
    except SystemExit as exc:
        assert exc.code == 2


def test_format_helpers() -> None:
    assert main._format_duration(125.4) == "2m 05s"  # noqa: SLF001
    assert main._format_local_time("not-a-time") == "not-a-time"  # noqa: SLF001


def test_non_code_answer_gets_alphabet_hint(tmp_path: Path) -> None:
    terminal = Terminal(plan={"E": ["dit"]})
    main.run(["--data-dir", str(tmp_path)], terminal.input_fn, terminal.print_fn)
    assert "Incorrect. E is . (use only . and -)" in terminal.text


def test_corrupt_stats_are_replaced_and_session_still_saved(tmp_path: Path) -> None:
    (tmp_path / "stats.json").write_text(
        json.dumps(
            {
                "sessions_completed": -1,
                "overall_accuracy": 0.0,
                "char_times": {},
                "word_times": {},
                "session_history": [],
            }
        ),
        encoding="utf-8",
    )
    terminal = Terminal(quit_after=0)
    assert main.run(["--data-dir", str(tmp_path)], terminal.input_fn, terminal.print_fn) == main.EXIT_OK
    assert "=== Session ended early ===" in terminal.text
    stats = json.loads((tmp_path / "stats.json").read_text(encoding="utf-8"))
    assert stats["sessions_completed"] == 1
