"""Session inactivity exception."""


class InactivityTimeoutError(Exception):
    """No traffic in either direction for longer than the idle timeout.

    Attributes:
        idle_s: Seconds since the last observed message.
    """

    def __init__(self, idle_s: float) -> None:
        super().__init__(f"no activity for {idle_s:.1f}s")
        self.idle_s = float(idle_s)


__all__ = ["InactivityTimeoutError"]
