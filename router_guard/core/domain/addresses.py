"""
Address — адреса участников и активов

Адрес: строка `0x` + 40 hex-символов, нормализуется в нижний регистр.
Нулевой адрес используется как null-адрес назначения и как идентификатор
нативного актива в постусловиях.
"""

import re
from typing import Annotated, Final

from pydantic import AfterValidator


_ADDRESS_RE: Final = re.compile(r"^0x[0-9a-fA-F]{40}$")

ZERO_ADDRESS: Final[str] = "0x" + "0" * 40

# Идентификатор нативного актива в PostconditionCheck.context
NATIVE_ASSET: Final[str] = ZERO_ADDRESS


def normalize_address(value: str) -> str:
    """
    Валидация и нормализация адреса.

    Raises:
        ValueError: Если строка не является адресом
    """
    if not isinstance(value, str) or not _ADDRESS_RE.match(value):
        raise ValueError(f"Invalid address: {value!r}")
    return value.lower()


def is_zero_address(value: str) -> bool:
    return normalize_address(value) == ZERO_ADDRESS


Address = Annotated[str, AfterValidator(normalize_address)]
