"""Fire-and-forget navigation target for hosted verification sessions."""

from typing import Callable


class RecordingNavigator:
    """Record navigation requests so the HTTP surface can tell the client where to go."""

    def __init__(self, on_navigate: Callable[[str], None] | None = None) -> None:
        self.history: list[str] = []
        self._on_navigate = on_navigate

    def __call__(self, path: str) -> None:
        self.history.append(path)
        if self._on_navigate is not None:
            self._on_navigate(path)

    @property
    def location(self) -> str | None:
        return self.history[-1] if self.history else None
