import time
from datetime import timedelta


class PerformanceTimer:
    """Context manager measuring wall time of a code block with time.perf_counter().

    Example:
    >>> with PerformanceTimer() as timer:
    ...     rules = inducer.generate_rules(unions)
    >>> print(timer)
    """

    def __init__(self) -> None:
        self.start_time: float = None
        self.end_time: float = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.end_time = None
        return self

    def __exit__(self, *args, **kwargs):
        self.end_time = time.perf_counter()

    def __str__(self) -> str:
        return str(self.timedelta)

    @property
    def time(self) -> float:
        """
        Returns:
            float: measured time in seconds, or time elapsed so far when the block
            is still running
        """
        if self.start_time is None:
            return 0.0
        end_time: float = (
            self.end_time if self.end_time is not None else time.perf_counter()
        )
        return end_time - self.start_time

    @property
    def timedelta(self) -> timedelta:
        return timedelta(seconds=self.time)
