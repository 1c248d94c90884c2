import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from .engine import CurveEngine
from .errors import ConfigurationError
from .params import CurveParams

log = logging.getLogger(__name__)


class CurveRegistry:
    """Keeps one CurveEngine per token id.

    Engines are not thread-safe, so every quote-then-execute sequence
    against a token should run inside ``session(token_id)``.
    """

    def __init__(self) -> None:
        self._engines: Dict[str, CurveEngine] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def create(self, token_id: str, params: Optional[CurveParams] = None, **overrides: Any) -> CurveEngine:
        engine = CurveEngine(params, **overrides)
        with self._guard:
            if token_id in self._engines:
                raise ConfigurationError(f"Curve for {token_id} already exists")
            self._engines[token_id] = engine
            self._locks[token_id] = threading.Lock()
        log.info(f"Created curve for {token_id}")
        return engine

    def get(self, token_id: str) -> CurveEngine:
        with self._guard:
            try:
                return self._engines[token_id]
            except KeyError:
                raise KeyError(f"No curve for token {token_id}") from None

    def token_ids(self) -> List[str]:
        with self._guard:
            return list(self._engines)

    def __contains__(self, token_id: object) -> bool:
        with self._guard:
            return token_id in self._engines

    def __len__(self) -> int:
        with self._guard:
            return len(self._engines)

    @contextmanager
    def session(self, token_id: str) -> Iterator[CurveEngine]:
        engine = self.get(token_id)
        with self._guard:
            lock = self._locks[token_id]
        with lock:
            yield engine
