"""
AssetLedger — внешний интерфейс балансов и переводов

Роутер не реализует семантику активов: балансы, allowance и переводы
принадлежат внешним контрактам и считаются доверенными. Роутеру нужны
только запросы балансов, transfer-on-behalf и транзакционная граница
для полного отката при прерывании.
"""

from typing import ContextManager, Protocol, runtime_checkable


@runtime_checkable
class AssetLedger(Protocol):
    """Внешнее состояние активов, видимое роутеру."""

    def balance_of(self, token: str, holder: str) -> int:
        """Баланс `holder` в токене `token`."""
        ...

    def native_balance(self, holder: str) -> int:
        """Нативный баланс `holder`."""
        ...

    def transfer_from(self, token: str, owner: str, spender: str, to: str, amount: int) -> None:
        """Перевод от имени `owner` силами `spender` (требует allowance)."""
        ...

    def transfer_native(self, sender: str, to: str, amount: int) -> None:
        """Перевод нативного значения."""
        ...

    def transaction(self) -> ContextManager[None]:
        """
        Транзакционная граница.

        Успешный выход фиксирует эффекты; исключение откатывает все
        эффекты внутри границы и пробрасывается дальше. Допускает вложенность.
        """
        ...
