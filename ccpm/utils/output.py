from math import floor
from typing import Dict, List, Optional, TextIO


class ProgressBarString:
    def __init__(self, progress: float = 0.0, part: str = "■", parts: int = 10) -> None:
        self.progress = progress
        self.part = part
        self.parts = parts

    def __str__(self) -> str:
        filled = floor(self.progress * self.parts)
        percent = f"{floor(self.progress * 100)}%".rjust(5)
        return f"▮{(self.part * filled).ljust(self.parts)}▮{percent}"


class ConsoleOutput:
    """
    Writes step progress lines, tables and plain messages to the console.

    A step line is rewritten in place while it progresses and finished with a ✓ or ✗ once it completes or fails.
    """

    def __init__(self, file: Optional[TextIO] = None) -> None:
        self.file = file
        self._step_name = ""
        self._bar = ProgressBarString()

    def write(self, text: str = "", end: Optional[str] = None) -> None:
        print(str(text), end=end, file=self.file)

    def write_line(self, line: str = "", end: Optional[str] = "\n") -> None:
        self._finish_step()
        self.write(line, end=end)

    def _step_string(self, state: str, error: Optional[str] = None) -> str:
        result = f"{state} {self._bar} {self._step_name}"
        if error:
            result += f" ({error})"
        return result

    def _finish_step(self, state: str = "•", error: Optional[str] = None) -> None:
        if not self._step_name:
            return
        self.write(self._step_string(state, error), "\n")
        self._step_name = ""
        self._bar.progress = 0.0

    def write_step_progress(self, name: str, progress: float) -> None:
        if self._step_name != name:
            self._finish_step()
            self._step_name = name
        self._bar.progress = progress
        self.write(self._step_string("•"), end="\r")

    def write_step_complete(self, name: str) -> None:
        if self._step_name != name:
            self._finish_step()
            self._step_name = name
        self._bar.progress = 1.0
        self._finish_step("✓")

    def write_step_error(self, name: str, error: str) -> None:
        if self._step_name != name:
            self._finish_step()
            self._step_name = name
        self._finish_step("✗", error)

    def write_table(self, rows: List[List[str]]) -> None:
        self._finish_step()

        columns: Dict[int, int] = {}
        for row in rows:
            for column, cell in enumerate(row):
                columns[column] = max(columns.get(column, 0), len(cell))
        for row in rows:
            self.write("".join(cell.ljust(columns[column] + 2) for column, cell in enumerate(row)).rstrip())

    def end(self) -> None:
        self._finish_step()
