"""GuardedRouter — точка входа guarded-исполнения скриптов.

Порядок одного top-level вызова:
1. SingleEntryLock.acquire (ReentrantCall при вложенном входе)
2. Открытие транзакции леджера
3. STAGE 0: снапшот нативного баланса роутера
4. Зачисление прикреплённого нативного значения (caller → router)
5. STAGE 1: FundEscrow по approval_tokens
6. STAGE 2: ExecutionDelegate (внешний движок)
7. STAGE 3: InvariantChecker по checks
8. STAGE 4: NativeBalanceGuard.assert_unchanged
9. Фиксация транзакции, SingleEntryLock.release

Любая ошибка на любой стадии откатывает транзакцию целиком (включая
эскроу и прикреплённое значение), освобождает lock и пробрасывается
вызывающему. Частичного успеха нет.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from router_guard.core.contracts.validators import validate_execute_request
from router_guard.core.domain.addresses import normalize_address
from router_guard.core.domain.errors import RouterAbort
from router_guard.core.domain.postcondition import PostconditionCheck
from router_guard.core.domain.request import ExecuteRequest
from router_guard.core.domain.token_move import TokenMove
from router_guard.engine.interfaces import DelegateCallPolicy, ScriptEngine
from router_guard.engine.scripted import ScriptedEngine
from router_guard.ledger.interfaces import AssetLedger
from router_guard.lock.state_machine import SingleEntryLock
from router_guard.pipeline.stages import (
    EscrowResult,
    ExecutionDelegate,
    FundEscrow,
    InvariantChecker,
    NativeBalanceGuard,
    NativeBalanceResult,
    VerificationResult,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouterConfig:
    """Конфигурация роутера.

    delegate_call_policy применяется к движку по умолчанию (ScriptedEngine);
    внешний движок, переданный явно, отвечает за политику сам.
    """
    router_address: str = "0x" + "0" * 39 + "1"
    delegate_call_policy: DelegateCallPolicy = DelegateCallPolicy.ALLOW


@dataclass(frozen=True)
class ExecutionContext:
    """Контекст одного вызова; не переживает вызов."""

    caller: str
    value: int
    native_balance_before: int


@dataclass(frozen=True)
class ExecutionResult:
    """Результат успешного top-level вызова."""

    output: Tuple[bytes, ...]
    context: ExecutionContext

    # Диагностика стадий
    escrow: EscrowResult
    verification: VerificationResult
    native_balance: NativeBalanceResult


class GuardedRouter:
    """Guarded-фронтенд внешнего движка исполнения команд."""

    def __init__(
        self,
        ledger: AssetLedger,
        engine: Optional[ScriptEngine] = None,
        config: Optional[RouterConfig] = None,
        targets: Optional[Mapping[str, Callable[..., Any]]] = None
    ):
        """
        Args:
            ledger: внешний леджер активов (балансы, переводы, транзакции)
            engine: внешний движок (default: ScriptedEngine с политикой из config)
            config: конфигурация роутера
            targets: реестр именованных callable движка по умолчанию для
                JSON-команд execute_payload (вместе с engine не задаётся)
        """
        if engine is not None and targets is not None:
            raise ValueError("targets configure the default engine; pass them to the injected engine instead")

        self.config = config or RouterConfig()
        self.address = normalize_address(self.config.router_address)
        self.ledger = ledger
        self.engine = engine or ScriptedEngine(self.config.delegate_call_policy, targets=targets)

        self.lock = SingleEntryLock()
        self.native_guard = NativeBalanceGuard(ledger, self.address)
        self.escrow = FundEscrow(ledger, self.address)
        self.delegate = ExecutionDelegate(self.engine)
        self.checker = InvariantChecker(ledger)

    def execute(
        self,
        commands: Sequence[Any],
        state: Sequence[bytes],
        approval_tokens: Sequence[TokenMove | Dict[str, Any]] = (),
        checks: Sequence[PostconditionCheck | Dict[str, Any]] = (),
        *,
        caller: str,
        value: int = 0
    ) -> ExecutionResult:
        """Исполнение скрипта с эскроу и постусловиями.

        Args:
            commands: непрозрачные команды движка
            state: начальное состояние движка
            approval_tokens: переводы от caller до исполнения
            checks: постусловия после исполнения
            caller: адрес вызывающего
            value: прикреплённое нативное значение

        Returns:
            ExecutionResult с выходом движка и диагностикой стадий

        Raises:
            RouterAbort: ZERO_ADDRESS / POSTCONDITION_FAILED /
                NATIVE_BALANCE_MISMATCH / REENTRANT_CALL / EXECUTION_FAILED
            LedgerError: ошибка внешнего актива
            pydantic.ValidationError: некорректный вход
        """
        request = ExecuteRequest(
            commands=tuple(commands),
            state=tuple(state),
            approval_tokens=tuple(approval_tokens),
            checks=tuple(checks),
            value=value,
        )
        return self.execute_request(request, caller=caller)

    def execute_payload(self, payload: Dict[str, Any], *, caller: str) -> ExecutionResult:
        """Исполнение из сырого JSON payload (валидируется схемой execute_request).

        JSON-команды передаются движку как есть. Движок по умолчанию
        декодирует их по имени через `targets` (см. engine.scripted);
        внешний движок декодирует свой формат сам. Неизвестное имя
        команды → ExecutionFailed с полным откатом.

        Raises:
            jsonschema.ValidationError: payload не соответствует контракту
        """
        validate_execute_request(payload)
        return self.execute_request(ExecuteRequest.model_validate(payload), caller=caller)

    def execute_request(self, request: ExecuteRequest, *, caller: str) -> ExecutionResult:
        """Исполнение ExecuteRequest под single-entry lock и транзакцией."""
        caller = normalize_address(caller)

        try:
            with self.lock.guard():
                with self.ledger.transaction():
                    result = self._run(request, caller)
        except RouterAbort as exc:
            logger.warning("Router call aborted: kind=%s details=%s", exc.kind.value, exc.details)
            raise

        logger.info(
            "Router call committed: caller=%s moves=%d checks=%d value=%d",
            caller,
            len(request.approval_tokens),
            len(request.checks),
            request.value,
        )
        return result

    def receive(self, sender: str, value: int) -> None:
        """Receive-путь: приём нативного значения без валидации.

        Используется движком для маршрутизации значения через роутер во
        время скрипта; застрявшее значение ловит STAGE 4.
        """
        self.ledger.transfer_native(sender, self.address, value)

    def _run(self, request: ExecuteRequest, caller: str) -> ExecutionResult:
        # STAGE 0
        balance_before = self.native_guard.snapshot()
        context = ExecutionContext(
            caller=caller,
            value=request.value,
            native_balance_before=balance_before,
        )

        if request.value:
            self.ledger.transfer_native(caller, self.address, request.value)

        # STAGE 1-4
        escrow = self.escrow.stage(request.approval_tokens, caller)
        output = self.delegate.run(request.commands, request.state)
        verification = self.checker.verify(request.checks)
        native_balance = self.native_guard.assert_unchanged(context.native_balance_before)

        return ExecutionResult(
            output=output,
            context=context,
            escrow=escrow,
            verification=verification,
            native_balance=native_balance,
        )
