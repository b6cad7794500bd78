"""Тесты GuardedRouter: полный guarded-вызов.

Coverage:
- Примеры: escrow → скрипт переводит userX → постусловие (успех / откат)
- Атомарность: любой сбой откатывает эскроу, значение и эффекты скрипта
- Порядок переводов эскроу
- Полнота постусловий
- Сохранение нативного баланса (включая receive-путь)
- Отклонение повторного входа
- Отклонение нулевого назначения
- DelegateCallPolicy через RouterConfig
- JSON payload вход
"""

import logging

import pytest
from jsonschema import ValidationError as SchemaValidationError

from router_guard import (
    ErrorClassification,
    GuardedRouter,
    PostconditionCheck,
    RelationalOperator,
    RouterAbort,
    RouterConfig,
    TokenMove,
)
from router_guard.core.domain import NATIVE_ASSET, ZERO_ADDRESS, ExecutionFailed, ReentrantCall
from router_guard.engine import CallType, Command, DelegateCallPolicy, EngineError, ScriptedEngine
from router_guard.ledger import InMemoryLedger, InsufficientAllowance, InsufficientBalance, TransferRecord
from router_guard.lock import LockState


TOKEN_A = "0x" + "aa" * 20
TOKEN_B = "0x" + "bb" * 20
CALLER = "0x" + "c0" * 20
USER_X = "0x" + "11" * 20
ROUTER = "0x" + "0" * 39 + "1"


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def ledger():
    """Caller: 1000 TOKEN_A, 1000 TOKEN_B, 100 native; allowance роутеру."""
    ledger = InMemoryLedger()
    ledger.mint(TOKEN_A, CALLER, 1000)
    ledger.mint(TOKEN_B, CALLER, 1000)
    ledger.approve(TOKEN_A, CALLER, ROUTER, 1000)
    ledger.approve(TOKEN_B, CALLER, ROUTER, 1000)
    ledger.fund_native(CALLER, 100)
    return ledger


@pytest.fixture
def router(ledger):
    return GuardedRouter(ledger, config=RouterConfig(router_address=ROUTER))


def snapshot(ledger):
    """Снапшот всех наблюдаемых балансов для проверки атомарности."""
    holders = (CALLER, USER_X, ROUTER)
    return {
        "tokens": {(t, h): ledger.balance_of(t, h) for t in (TOKEN_A, TOKEN_B) for h in holders},
        "native": {h: ledger.native_balance(h) for h in holders},
        "allowances": {t: ledger.allowance(t, CALLER, ROUTER) for t in (TOKEN_A, TOKEN_B)},
        "transfers": ledger.transfers,
    }


def pay_user_x(ledger, token=TOKEN_A, amount=100):
    """Команда скрипта: перевод с роутера на USER_X."""
    return Command(target=lambda: ledger.transfer(token, ROUTER, USER_X, amount))


def escrow_to_router(amount=100, token=TOKEN_A):
    return TokenMove(token=token, amount=amount, to=ROUTER)


def user_x_at_least(threshold, token=TOKEN_A):
    return PostconditionCheck(
        target=USER_X, context=token, compare_to=threshold, op=RelationalOperator.GTE
    )


# =============================================================================
# EXAMPLES
# =============================================================================


class TestExamples:
    def test_escrow_script_postcondition_success(self, router, ledger):
        """approval 100 A → router, скрипт переводит 100 A userX, check userX >= 100."""
        result = router.execute(
            [pay_user_x(ledger)],
            [],
            approval_tokens=[escrow_to_router(100)],
            checks=[user_x_at_least(100)],
            caller=CALLER,
        )

        assert ledger.balance_of(TOKEN_A, USER_X) == 100
        assert ledger.balance_of(TOKEN_A, CALLER) == 900
        assert ledger.balance_of(TOKEN_A, ROUTER) == 0
        assert result.verification.checks_passed == 1
        assert result.escrow.applied_moves == (escrow_to_router(100),)
        assert router.lock.state == LockState.UNLOCKED

    def test_failed_postcondition_rolls_back_escrow(self, router, ledger):
        """Тот же вызов с порогом 200 → POSTCONDITION_FAILED, эффекты откатаны."""
        before = snapshot(ledger)

        with pytest.raises(RouterAbort) as exc_info:
            router.execute(
                [pay_user_x(ledger)],
                [],
                approval_tokens=[escrow_to_router(100)],
                checks=[user_x_at_least(200)],
                caller=CALLER,
            )

        assert exc_info.value.kind == ErrorClassification.POSTCONDITION_FAILED
        assert ledger.balance_of(TOKEN_A, USER_X) == 0
        assert snapshot(ledger) == before

    def test_output_state_returned(self, router):
        result = router.execute(
            [Command(target=lambda a: a[::-1], args=(0,), output=1)],
            [b"\x01\x02"],
            caller=CALLER,
        )

        assert result.output == (b"\x01\x02", b"\x02\x01")
        assert result.context.caller == CALLER


# =============================================================================
# ATOMICITY
# =============================================================================


class TestAtomicity:
    def test_engine_failure_rolls_back_escrow(self, router, ledger):
        before = snapshot(ledger)

        def revert():
            raise RuntimeError("script revert")

        with pytest.raises(ExecutionFailed) as exc_info:
            router.execute(
                [pay_user_x(ledger), Command(target=revert)],
                [],
                approval_tokens=[escrow_to_router(100)],
                caller=CALLER,
            )

        assert isinstance(exc_info.value.__cause__, EngineError)
        assert snapshot(ledger) == before

    def test_ledger_failure_in_escrow_rolls_back_earlier_moves(self, router, ledger):
        """Allowance достаточен, баланса нет → InsufficientBalance, откат первого перевода."""
        ledger.approve(TOKEN_B, CALLER, ROUTER, 5000)
        before = snapshot(ledger)

        with pytest.raises(InsufficientBalance):
            router.execute(
                [],
                [],
                approval_tokens=[escrow_to_router(100), escrow_to_router(5000, TOKEN_B)],
                caller=CALLER,
            )

        assert snapshot(ledger) == before

    def test_allowance_failure_in_escrow_rolls_back_earlier_moves(self, router, ledger):
        """Allowance 1000 < 5000 → InsufficientAllowance, откат первого перевода."""
        before = snapshot(ledger)

        with pytest.raises(InsufficientAllowance):
            router.execute(
                [],
                [],
                approval_tokens=[escrow_to_router(100), escrow_to_router(5000, TOKEN_B)],
                caller=CALLER,
            )

        assert snapshot(ledger) == before

    def test_lock_released_after_failure(self, router, ledger):
        with pytest.raises(RouterAbort):
            router.execute([], [], checks=[user_x_at_least(1)], caller=CALLER)

        assert router.lock.state == LockState.UNLOCKED
        router.execute([], [], caller=CALLER)
        assert router.lock.entries == 2


# =============================================================================
# ORDERING
# =============================================================================


def test_escrow_moves_applied_in_list_order(router, ledger):
    """Журнал переводов и промежуточные балансы отражают порядок списка."""
    observed = []

    def record_balances():
        observed.append((ledger.balance_of(TOKEN_A, USER_X), ledger.balance_of(TOKEN_B, USER_X)))

    router.execute(
        [Command(target=record_balances)],
        [],
        approval_tokens=[
            TokenMove(token=TOKEN_B, amount=7, to=USER_X),
            TokenMove(token=TOKEN_A, amount=3, to=USER_X),
            TokenMove(token=TOKEN_B, amount=1, to=USER_X),
        ],
        caller=CALLER,
    )

    assert ledger.transfers == [
        TransferRecord(TOKEN_B, CALLER, USER_X, 7),
        TransferRecord(TOKEN_A, CALLER, USER_X, 3),
        TransferRecord(TOKEN_B, CALLER, USER_X, 1),
    ]
    assert observed == [(3, 8)]


# =============================================================================
# POSTCONDITION COMPLETENESS
# =============================================================================


@pytest.mark.parametrize("failing_index", [0, 1, 2])
def test_any_single_false_check_aborts(router, ledger, failing_index):
    checks = [user_x_at_least(100) for _ in range(3)]
    checks[failing_index] = user_x_at_least(101)
    before = snapshot(ledger)

    with pytest.raises(RouterAbort) as exc_info:
        router.execute(
            [pay_user_x(ledger)],
            [],
            approval_tokens=[escrow_to_router(100)],
            checks=checks,
            caller=CALLER,
        )

    assert exc_info.value.kind == ErrorClassification.POSTCONDITION_FAILED
    assert f"check #{failing_index}" in exc_info.value.details
    assert snapshot(ledger) == before


# =============================================================================
# NATIVE BALANCE CONSERVATION
# =============================================================================


class TestNativeBalance:
    def test_attached_value_forwarded(self, router, ledger):
        """Прикреплённое значение выведено скриптом → успех."""
        result = router.execute(
            [Command(target=lambda: ledger.transfer_native(ROUTER, USER_X, 40))],
            [],
            checks=[
                PostconditionCheck(target=USER_X, context=NATIVE_ASSET, compare_to=40, op=RelationalOperator.EQ)
            ],
            caller=CALLER,
            value=40,
        )

        assert ledger.native_balance(USER_X) == 40
        assert ledger.native_balance(CALLER) == 60
        assert ledger.native_balance(ROUTER) == 0
        assert result.context.value == 40
        assert result.native_balance.balance_after == result.context.native_balance_before

    def test_stranded_attached_value_aborts(self, router, ledger):
        before = snapshot(ledger)

        with pytest.raises(RouterAbort) as exc_info:
            router.execute([], [], caller=CALLER, value=10)

        assert exc_info.value.kind == ErrorClassification.NATIVE_BALANCE_MISMATCH
        assert snapshot(ledger) == before

    def test_value_routed_through_receive_path(self, router, ledger):
        """Значение, прошедшее через receive и выведенное обратно, не нарушает guard."""
        ledger.fund_native(USER_X, 30)

        router.execute(
            [
                Command(target=lambda: router.receive(USER_X, 30)),
                Command(target=lambda: ledger.transfer_native(ROUTER, CALLER, 30)),
            ],
            [],
            caller=CALLER,
        )

        assert ledger.native_balance(ROUTER) == 0
        assert ledger.native_balance(CALLER) == 130

    def test_value_stranded_via_receive_aborts(self, router, ledger):
        ledger.fund_native(USER_X, 30)

        with pytest.raises(RouterAbort) as exc_info:
            router.execute([Command(target=lambda: router.receive(USER_X, 30))], [], caller=CALLER)

        assert exc_info.value.kind == ErrorClassification.NATIVE_BALANCE_MISMATCH
        assert ledger.native_balance(USER_X) == 30

    def test_preexisting_router_balance_must_not_leak(self, router, ledger):
        ledger.fund_native(ROUTER, 5)

        with pytest.raises(RouterAbort) as exc_info:
            router.execute(
                [Command(target=lambda: ledger.transfer_native(ROUTER, USER_X, 5))], [], caller=CALLER
            )

        assert exc_info.value.kind == ErrorClassification.NATIVE_BALANCE_MISMATCH
        assert ledger.native_balance(ROUTER) == 5

    def test_insufficient_attached_value(self, router, ledger):
        with pytest.raises(InsufficientBalance):
            router.execute([], [], caller=CALLER, value=101)

        assert router.lock.state == LockState.UNLOCKED


# =============================================================================
# REENTRANCY
# =============================================================================


class TestReentrancy:
    def test_inner_call_rejected_outer_succeeds(self, router, ledger):
        """Вложенный вызов из скрипта → ReentrantCall; внешний вызов успешен."""
        rejections = []

        def reenter():
            try:
                router.execute([], [], approval_tokens=[escrow_to_router(1)], caller=CALLER)
            except ReentrantCall as exc:
                rejections.append(exc.kind)

        router.execute(
            [Command(target=reenter), pay_user_x(ledger)],
            [],
            approval_tokens=[escrow_to_router(100)],
            checks=[user_x_at_least(100)],
            caller=CALLER,
        )

        assert rejections == [ErrorClassification.REENTRANT_CALL]
        assert ledger.balance_of(TOKEN_A, CALLER) == 900
        assert router.lock.rejected_entries == 1
        assert router.lock.state == LockState.UNLOCKED

    def test_uncaught_inner_rejection_fails_outer(self, router, ledger):
        before = snapshot(ledger)

        with pytest.raises(ExecutionFailed) as exc_info:
            router.execute(
                [Command(target=lambda: router.execute([], [], caller=CALLER))],
                [],
                approval_tokens=[escrow_to_router(100)],
                caller=CALLER,
            )

        assert isinstance(exc_info.value.__cause__.__cause__, ReentrantCall)
        assert snapshot(ledger) == before
        assert router.lock.state == LockState.UNLOCKED

    def test_independent_routers_do_not_block_each_other(self, router, ledger):
        other = GuardedRouter(ledger, config=RouterConfig(router_address="0x" + "0" * 39 + "2"))
        inner_results = []

        router.execute(
            [Command(target=lambda: inner_results.append(other.execute([], [], caller=CALLER)))],
            [],
            caller=CALLER,
        )

        assert len(inner_results) == 1


# =============================================================================
# ZERO ADDRESS
# =============================================================================


def test_zero_destination_aborts_before_any_transfer(router, ledger):
    before = snapshot(ledger)
    script_ran = []

    with pytest.raises(RouterAbort) as exc_info:
        router.execute(
            [Command(target=lambda: script_ran.append(True))],
            [],
            approval_tokens=[escrow_to_router(100), TokenMove(token=TOKEN_A, amount=1, to=ZERO_ADDRESS)],
            caller=CALLER,
        )

    assert exc_info.value.kind == ErrorClassification.ZERO_ADDRESS
    assert script_ran == []
    assert snapshot(ledger) == before


# =============================================================================
# CONFIG / PAYLOAD / LOGGING
# =============================================================================


def test_delegate_call_policy_deny(ledger):
    router = GuardedRouter(
        ledger,
        config=RouterConfig(router_address=ROUTER, delegate_call_policy=DelegateCallPolicy.DENY),
    )
    before = snapshot(ledger)

    with pytest.raises(ExecutionFailed, match="DelegateCallDenied"):
        router.execute(
            [Command(target=lambda: None, call_type=CallType.DELEGATECALL)],
            [],
            approval_tokens=[escrow_to_router(10)],
            caller=CALLER,
        )

    assert snapshot(ledger) == before


def test_execute_payload(router, ledger):
    payload = {
        "commands": [],
        "state": ["0x00ff"],
        "approval_tokens": [{"token": TOKEN_A, "amount": 25, "to": USER_X}],
        "checks": [{"target": USER_X, "context": TOKEN_A, "compare_to": 25, "op": "EQ"}],
    }

    result = router.execute_payload(payload, caller=CALLER)

    assert result.output == (b"\x00\xff",)
    assert ledger.balance_of(TOKEN_A, USER_X) == 25


class TestPayloadScript:
    """Непустой JSON-скрипт через реестр targets движка по умолчанию."""

    @pytest.fixture
    def named_router(self, ledger):
        return GuardedRouter(
            ledger,
            config=RouterConfig(router_address=ROUTER),
            targets={
                "pay_user_x": lambda: ledger.transfer(TOKEN_A, ROUTER, USER_X, 25),
                "echo": lambda buffer: buffer,
            },
        )

    def test_escrow_script_postcondition(self, named_router, ledger):
        payload = {
            "commands": [
                {"target": "pay_user_x"},
                {"target": "echo", "args": [0], "output": 1},
            ],
            "state": ["0x00ff"],
            "approval_tokens": [{"token": TOKEN_A, "amount": 25, "to": ROUTER}],
            "checks": [{"target": USER_X, "context": TOKEN_A, "compare_to": 25, "op": "EQ"}],
        }

        result = named_router.execute_payload(payload, caller=CALLER)

        assert result.output == (b"\x00\xff", b"\x00\xff")
        assert ledger.balance_of(TOKEN_A, USER_X) == 25
        assert ledger.balance_of(TOKEN_A, ROUTER) == 0

    def test_unknown_command_rolls_back(self, named_router, ledger):
        before = snapshot(ledger)
        payload = {
            "commands": [{"target": "pay_user_x"}, {"target": "selfdestruct"}],
            "state": [],
            "approval_tokens": [{"token": TOKEN_A, "amount": 25, "to": ROUTER}],
        }

        with pytest.raises(ExecutionFailed, match="unknown target 'selfdestruct'"):
            named_router.execute_payload(payload, caller=CALLER)

        assert snapshot(ledger) == before

    def test_default_router_without_targets_fails_cleanly(self, router, ledger):
        before = snapshot(ledger)

        with pytest.raises(ExecutionFailed, match="unknown target"):
            router.execute_payload({"commands": [{"target": "pay_user_x"}], "state": []}, caller=CALLER)

        assert snapshot(ledger) == before
        assert router.lock.state == LockState.UNLOCKED

    def test_targets_with_injected_engine_rejected(self, ledger):
        with pytest.raises(ValueError, match="targets configure the default engine"):
            GuardedRouter(ledger, engine=ScriptedEngine(), targets={"echo": lambda b: b})


def test_execute_payload_rejects_invalid_contract(router):
    with pytest.raises(SchemaValidationError):
        router.execute_payload({"commands": [], "state": [], "checks": [{"op": "EQ"}]}, caller=CALLER)

    assert router.lock.entries == 0


def test_abort_logged(router, caplog):
    with caplog.at_level(logging.WARNING, logger="router_guard.router"):
        with pytest.raises(RouterAbort):
            router.execute([], [], checks=[user_x_at_least(1)], caller=CALLER)

    assert any("POSTCONDITION_FAILED" in record.getMessage() for record in caplog.records)
