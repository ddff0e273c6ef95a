from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

InvalidationHook = Callable[["AuthSession"], None]


@dataclass
class AuthSession:
    """
    Client-side auth state: the bearer token and the public user view.
    Callers pass it to TaskManagerClient explicitly; ``clear()`` fires every
    registered invalidation hook (e.g. "send the user back to login").
    """

    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    _on_invalidate: List[InvalidationHook] = field(default_factory=list, init=False, repr=False)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def establish(self, token: str, user: Dict[str, Any]) -> None:
        self.token = token
        self.user = user

    def on_invalidate(self, hook: InvalidationHook) -> InvalidationHook:
        self._on_invalidate.append(hook)
        return hook

    def clear(self) -> None:
        self.token = None
        self.user = None
        for hook in list(self._on_invalidate):
            try:
                hook(self)
            except Exception:
                logger.exception("Session invalidation hook failed")
