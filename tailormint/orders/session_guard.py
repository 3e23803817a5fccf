# module tailormint.orders.session_guard
"""
Garde anti-doublons en mémoire pour /checkout/verify.

Purement consultatif: il absorbe les rafraîchissements de la page de succès
dans un même processus. L'unicité réelle est garantie par UNIQUE(bag_id)
côté base, jamais par ce garde (plusieurs workers ne le partagent pas).

États d'une entrée:
- in_progress: une réconciliation est en cours pour cette session
- completed: résultat mémorisé, rejoué tant que la fenêtre n'est pas expirée
"""
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

PROCEED = "proceed"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"


@dataclass
class _Entry:
    state: str
    at: float
    outcome: Dict[str, Any] = field(default_factory=dict)


class ProcessedSessionGuard:
    def __init__(self, window_seconds: float = 60, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, _Entry] = {}

    def _evict(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if now - e.at >= self.window_seconds]
        for k in expired:
            del self._entries[k]

    def begin(self, session_id: str) -> Tuple[str, Optional[Dict[str, Any]]]:
        """
        Réserve la session de manière atomique.
        Retour: (PROCEED, None), (IN_PROGRESS, None) ou (COMPLETED, outcome)
        """
        with self._lock:
            now = self._clock()
            self._evict(now)
            entry = self._entries.get(session_id)
            if entry is None:
                self._entries[session_id] = _Entry(state=IN_PROGRESS, at=now)
                return PROCEED, None
            if entry.state == COMPLETED:
                return COMPLETED, dict(entry.outcome)
            return IN_PROGRESS, None

    def record(self, session_id: str, outcome: Dict[str, Any]) -> None:
        with self._lock:
            self._entries[session_id] = _Entry(state=COMPLETED, at=self._clock(), outcome=dict(outcome))

    def discard(self, session_id: str) -> None:
        """Oublie la session (échec): un nouvel essai relancera la réconciliation."""
        with self._lock:
            self._entries.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            self._evict(self._clock())
            return len(self._entries)
