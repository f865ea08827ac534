from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Tuple

INTERVIEWER = "interviewer"
CANDIDATE = "candidate"


class Phase(str, Enum):
    WAITING = "waiting"
    ANSWERING = "answering"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Turn:
    role: str
    content: str
    timestamp: str = field(default_factory=_now, compare=False)


class ConversationState:
    """Turn history and answer phase for one interview."""

    def __init__(self):
        self.history: List[Turn] = []
        self.phase = Phase.WAITING

    def begin(self, question: str) -> None:
        if self.phase is Phase.ANSWERING:
            raise RuntimeError("An answer is already being generated for this interview.")
        self.history.append(Turn(INTERVIEWER, question))
        self.phase = Phase.ANSWERING

    def finish(self, answer: str) -> None:
        self.history.append(Turn(CANDIDATE, answer))
        self.phase = Phase.WAITING

    def abort(self) -> None:
        self.phase = Phase.WAITING

    def reset(self) -> None:
        self.history = []
        self.phase = Phase.WAITING

    def recent(self, limit: int) -> List[Turn]:
        return self.history[-limit:] if limit > 0 else []

    def turn_pairs(self) -> Iterator[Tuple[str, str]]:
        """(question, answer) pairs of completed turns."""
        question = None
        for turn in self.history:
            if turn.role == INTERVIEWER:
                question = turn.content
            elif question is not None:
                yield question, turn.content
                question = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "history": [asdict(turn) for turn in self.history],
        }
