"""
Exception classes for the text reveal engines.

Degenerate timing input (empty text, non-positive durations) is never an
error: the config models clamp it and the engines complete or idle.
"""


class EngineClosedError(Exception):
    """
    Raised when a torn-down engine is asked to start a new run.

    After close() an engine has released every timer it owned. Starting
    another run would schedule timers against a destroyed consumer, so the
    request is refused instead.

    Attributes:
        engine: Name of the engine class that was closed
    """

    def __init__(self, engine: str) -> None:
        self.engine = engine
        super().__init__(
            f"{engine} has been closed. "
            f"Create a new instance to start another run."
        )
