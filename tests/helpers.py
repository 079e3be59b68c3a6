"""
Test doubles shared across the test modules.
"""

from __future__ import annotations

from dabootstrap.core.engine.executor import Reporter


class RecordingReporter(Reporter):
    """Reporter that keeps everything it was told."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.warnings: list[str] = []
        self.blocks: list[tuple[str, str]] = []

    def step(self, index: int, total: int, title: str) -> None:
        self.lines.append(f"[{index}/{total}] {title}")

    def info(self, message: str) -> None:
        self.lines.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def block(self, title: str, text: str) -> None:
        self.blocks.append((title, text))


class ScriptedConfirm:
    """Confirmation callback with canned answers; records the questions."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.questions: list[str] = []

    def __call__(self, question: str) -> bool:
        self.questions.append(question)
        return self.answer
