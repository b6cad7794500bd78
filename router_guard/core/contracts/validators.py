"""
JSON Schema Contract Validators

Модуль для валидации сырых JSON payload вызывающего согласно формальным
JSON Schema контрактам. Использует библиотеку jsonschema.

Схемы (router_guard/core/contracts/schema/):
- token_move.json
- postcondition_check.json
- execute_request.json (ссылается на две предыдущие через $ref)
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator, ValidationError
from referencing import Registry, Resource


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы поставляются внутри пакета, рядом с этим модулем.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'token_move')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема не проходит meta-validation
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Валидируем саму схему (meta-validation)
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema

    def registry(self) -> Registry:
        """
        Registry со всеми схемами каталога для разрешения $ref.

        Ключ ресурса — `$id` схемы (совпадает с именем файла).
        """
        resources = []
        for path in sorted(self._schema_dir.glob("*.json")):
            schema = self.load_schema(path.stem)
            resources.append((schema.get("$id", path.name), Resource.from_contents(schema)))
        return Registry().with_resources(resources)


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        """
        Args:
            schema_name: Имя схемы для валидации
        """
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema, registry=_SCHEMA_LOADER.registry())

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        """
        Итератор по всем ошибкам валидации.

        Yields:
            ValidationError объекты для каждой найденной ошибки
        """
        return self.validator.iter_errors(data)


class TokenMoveValidator(ContractValidator):
    """Валидатор для token_move контракта."""

    def __init__(self):
        super().__init__("token_move")


class PostconditionCheckValidator(ContractValidator):
    """Валидатор для postcondition_check контракта."""

    def __init__(self):
        super().__init__("postcondition_check")


class ExecuteRequestValidator(ContractValidator):
    """Валидатор для execute_request контракта."""

    def __init__(self):
        super().__init__("execute_request")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_token_move(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    TokenMoveValidator().validate(data)


def validate_postcondition_check(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    PostconditionCheckValidator().validate(data)


def validate_execute_request(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    ExecuteRequestValidator().validate(data)


__all__ = [
    "ValidationError",
    "SchemaLoader",
    "ContractValidator",
    "TokenMoveValidator",
    "PostconditionCheckValidator",
    "ExecuteRequestValidator",
    "validate_token_move",
    "validate_postcondition_check",
    "validate_execute_request",
]
