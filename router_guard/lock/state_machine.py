"""SingleEntryLock — reentrancy guard точки входа роутера.

Две позиции: UNLOCKED (начальная/конечная) и LOCKED.
- acquire(): UNLOCKED → LOCKED, либо ReentrantCall если уже LOCKED
- release(): LOCKED → UNLOCKED безусловно, на любом пути выхода
- guard(): scoped-обёртка, release в finally

Движок может сам вызвать роутер во время скрипта. Такой вложенный вызов
отклоняется и не меняет состояние lock: освобождает его только владелец.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from router_guard.core.domain.errors import ReentrantCall


logger = logging.getLogger(__name__)


class LockState(str, Enum):
    """Состояние single-entry lock."""
    UNLOCKED = "UNLOCKED"
    LOCKED = "LOCKED"


@dataclass(frozen=True)
class LockTransitionResult:
    """Результат перехода lock."""

    new_state: LockState
    previous_state: LockState
    transition_reason: str

    # Диагностика
    entries: int
    rejected_entries: int


class SingleEntryLock:
    """Single-entry lock с явными состояниями.

    Не сериализует независимые top-level вызовы разных экземпляров роутера:
    защищает только от вложенного входа в тот же экземпляр.
    """

    def __init__(self):
        self._state = LockState.UNLOCKED

        # Счётчики для диагностики
        self._entries = 0
        self._rejected_entries = 0

    @property
    def state(self) -> LockState:
        return self._state

    @property
    def locked(self) -> bool:
        return self._state == LockState.LOCKED

    @property
    def entries(self) -> int:
        return self._entries

    @property
    def rejected_entries(self) -> int:
        return self._rejected_entries

    def acquire(self) -> LockTransitionResult:
        """Захват lock.

        Returns:
            LockTransitionResult с переходом UNLOCKED → LOCKED

        Raises:
            ReentrantCall: если lock уже захвачен (состояние не меняется)
        """
        if self._state == LockState.LOCKED:
            self._rejected_entries += 1
            logger.warning(
                "Reentrant call rejected (rejected_entries=%d)", self._rejected_entries
            )
            raise ReentrantCall("router is already executing a top-level call")

        self._state = LockState.LOCKED
        self._entries += 1
        return self._create_result(
            new_state=LockState.LOCKED,
            previous_state=LockState.UNLOCKED,
            transition_reason="acquired",
        )

    def release(self) -> LockTransitionResult:
        """Освобождение lock (безусловное)."""
        previous_state = self._state
        self._state = LockState.UNLOCKED
        return self._create_result(
            new_state=LockState.UNLOCKED,
            previous_state=previous_state,
            transition_reason="released" if previous_state == LockState.LOCKED else "release_noop",
        )

    @contextmanager
    def guard(self) -> Iterator[LockTransitionResult]:
        """Scoped захват: release на любом пути выхода, включая исключения.

        acquire() выполняется до входа в try, поэтому отклонённый вход
        не освобождает lock владельца.
        """
        result = self.acquire()
        try:
            yield result
        finally:
            self.release()

    def _create_result(
        self,
        new_state: LockState,
        previous_state: LockState,
        transition_reason: str
    ) -> LockTransitionResult:
        """Создание результата перехода."""
        return LockTransitionResult(
            new_state=new_state,
            previous_state=previous_state,
            transition_reason=transition_reason,
            entries=self._entries,
            rejected_entries=self._rejected_entries,
        )
