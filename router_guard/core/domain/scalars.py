"""Uint256 — аннотированный тип pydantic для сумм, балансов и порогов.

Strict: bool, строки и float не приводятся к int.
"""

from typing import Annotated

from pydantic import AfterValidator, Strict

from router_guard.core.math.uint import require_uint256

Uint256 = Annotated[int, Strict(), AfterValidator(require_uint256)]
