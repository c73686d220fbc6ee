from __future__ import annotations

__version__ = "0.1.0"

from mindbot.intelligence.models import Message, TriageContext, TriageResult
from mindbot.intelligence.triage import triage
from mindbot.backend import respond


class Conversation:
    """Rolling chat window for one user, for embedding MindBot in a script.

    The engine itself is stateless; this keeps the trailing history a UI
    would normally own and feeds it to each call.

    Usage:
        import mindbot
        convo = mindbot.Conversation()
        print(convo.send("I can't sleep lately").reply)
    """

    def __init__(self, window: int = 10, *, use_backend: bool = False) -> None:
        if not isinstance(window, int) or window < 1:
            raise ValueError("window must be a positive integer")
        self._window = window
        self._use_backend = use_backend
        self._history: list[Message] = []

    @property
    def history(self) -> list[Message]:
        return list(self._history)

    def send(self, text: str, *, sleep_hours: float | None = None, mode: str | None = None,
             rng=None) -> TriageResult:
        """Answer one message and append both turns to the window."""
        context = TriageContext(sleep_hours=sleep_hours, mode=mode)
        answer = respond if self._use_backend else triage
        result = answer(text, self._history, context, rng=rng)
        if result.kind != "empty":
            self._history.append(Message(role="user", text=text.strip()))
            self._history.append(Message(role="assistant", text=result.reply))
            self._history = self._history[-self._window:]
        return result

    def clear(self) -> None:
        self._history.clear()
