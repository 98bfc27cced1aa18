from collections import OrderedDict
from typing import List, Optional

from .models import ConversationTurn


class ConversationStore:
    """Ordered user/model turns for one conversation. Mutated only by append and trim."""

    def __init__(self) -> None:
        self._turns: List[ConversationTurn] = []

    def append(self, role: str, text: str) -> None:
        self._turns.append(ConversationTurn(role=role, text=text))

    def history(self) -> List[ConversationTurn]:
        return list(self._turns)

    def trim_to_last(self, n: int) -> None:
        if n <= 0:
            self._turns.clear()
        elif len(self._turns) > n:
            del self._turns[:-n]

    def reset(self) -> None:
        self._turns.clear()

    def __len__(self) -> int:
        return len(self._turns)


class ConversationRegistry:
    """
    One ConversationStore per session (or user) key, least recently used first out.

    Requests carrying neither a session nor a user id get a throwaway store that
    is never registered, so anonymous callers never see each other's turns.
    """

    def __init__(self, max_sessions: int = 1000) -> None:
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, ConversationStore]" = OrderedDict()

    @staticmethod
    def key_for(session_id: Optional[str], user_id: Optional[str]) -> Optional[str]:
        return session_id or user_id or None

    def session(self, key: Optional[str]) -> ConversationStore:
        if key is None:
            return ConversationStore()
        store = self._sessions.get(key)
        if store is None:
            store = ConversationStore()
            self._sessions[key] = store
            while len(self._sessions) > max(self.max_sessions, 1):
                self._sessions.popitem(last=False)
        else:
            self._sessions.move_to_end(key)
        return store

    def reset(self, key: str) -> bool:
        store = self._sessions.pop(key, None)
        return store is not None

    def __contains__(self, key: str) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
