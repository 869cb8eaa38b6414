from typing import Protocol


class AppHooks(Protocol):
    """
    Protocol for application hooks supplied by the host application.

    Used by the statistics pipeline and collectors to report progress and
    to honour a user's request to stop a long-running computation.
    """
    def report_step(self, info: str = None, target: int = None, reset_counter: bool = False, plus_step: int = 1) -> None:
        """
        Report progress of the statistics computation.

        Args:
            info (str): Progress message.
            target (int): Target count for progress.
            reset_counter (bool): Whether to reset the counter.
            plus_step (int): Incremental step count.
        """
        pass

    def stop_requested(self) -> bool:
        """
        Check if a stop has been requested by the user.

        Returns:
            bool: True if stop is requested, False otherwise.
        """
        return False
