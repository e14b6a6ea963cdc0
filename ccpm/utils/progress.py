from typing import Callable

ProgressCallback = Callable[[float], None]


def progress_noop(progress: float) -> None:
    return


class StepProgress:
    """
    Maps the progress of one step out of a fixed number of steps onto overall progress.
    """

    def __init__(self, step_mult: float, on_progress: ProgressCallback) -> None:
        self.step_no = 0
        self.step_mult = step_mult
        self.on_progress = on_progress

    @staticmethod
    def from_step_count(step_count: int, on_progress: ProgressCallback) -> "StepProgress":
        return StepProgress(step_mult=1 / step_count if step_count != 0 else 1, on_progress=on_progress)

    def __call__(self, progress: float) -> None:
        self.on_progress((self.step_no + progress) * self.step_mult)

    def advance(self) -> None:
        """ Increments the current step number. """
        self.__call__(1.0)
        self.step_no += 1
