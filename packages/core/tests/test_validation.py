import pytest
from pydantic import BaseModel, Field

from rawql_core.request import Operation
from rawql_core.response import FieldError
from rawql_core.validation import (
    CompositeSchema,
    PydanticSchema,
    RegistryValidator,
    SchemaRegistry,
    ValidationResult,
)

# --- Test Models ---


class Address(BaseModel):
    city: str = Field(..., min_length=2)


class UserCreate(BaseModel):
    name: str = Field(..., min_length=3)
    age: int = Field(..., gt=0)
    address: Address | None = None


class UniqueEmail:
    """Async schema standing in for a database uniqueness check."""

    def __init__(self, taken: set[str]) -> None:
        self.taken = taken

    async def validate(self, payload):
        if payload.get("email") in self.taken:
            return ValidationResult.failure(
                [FieldError(field="email", message="already registered")]
            )
        return ValidationResult.success()


# --- ValidationResult ---


def test_validation_result_defaults_to_valid() -> None:
    result = ValidationResult.success()

    assert result.valid
    assert bool(result) is True
    assert result.errors == []


def test_validation_result_add_error_and_merge() -> None:
    first = ValidationResult.success()
    first.add_error("name", "is required")
    second = ValidationResult.failure([FieldError(field="age", message="too low")])

    merged = first.merge(second)

    assert not merged.valid
    assert [e.field for e in merged.errors] == ["name", "age"]
    assert len(first.errors) == 1


# --- PydanticSchema ---


def test_pydantic_schema_success() -> None:
    result = PydanticSchema(UserCreate).validate({"name": "Alice", "age": 30})

    assert result.valid


def test_pydantic_schema_reports_dotted_locations() -> None:
    result = PydanticSchema(UserCreate).validate(
        {"name": "Al", "age": -5, "address": {"city": "X"}}
    )

    fields = {e.field for e in result.errors}
    assert not result.valid
    assert fields == {"name", "age", "address.city"}


def test_pydantic_schema_reports_root_errors() -> None:
    result = PydanticSchema(UserCreate).validate("not a mapping")

    assert [e.field for e in result.errors] == ["__root__"]


# --- CompositeSchema ---


@pytest.mark.asyncio
async def test_composite_schema_collects_all_errors() -> None:
    schema = CompositeSchema([PydanticSchema(UserCreate)])
    schema.add(UniqueEmail({"taken@example.com"}))

    result = await schema.validate(
        {"name": "Al", "age": 20, "email": "taken@example.com"}
    )

    assert {e.field for e in result.errors} == {"name", "email"}


# --- RegistryValidator ---


@pytest.mark.asyncio
async def test_registry_validator_without_rule_is_valid() -> None:
    validator = RegistryValidator(SchemaRegistry())

    result = await validator.validate("users", "create", {"anything": True})

    assert result.valid


@pytest.mark.asyncio
async def test_registry_validator_runs_registered_schema() -> None:
    registry = SchemaRegistry()
    registry.register("users", Operation.CREATE, PydanticSchema(UserCreate))
    validator = RegistryValidator(registry)

    invalid = await validator.validate("users", "create", {"name": "Al", "age": 1})
    other_op = await validator.validate("users", "update", {"name": "Al"})

    assert not invalid.valid
    assert other_op.valid


@pytest.mark.asyncio
async def test_registry_validator_awaits_async_schema() -> None:
    registry = SchemaRegistry()
    registry.register("users", "create", UniqueEmail({"a@b.c"}))
    validator = RegistryValidator(registry)

    result = await validator.validate("users", "create", {"email": "a@b.c"})

    assert result.errors == [FieldError(field="email", message="already registered")]


def test_schema_registry_get_and_clear() -> None:
    registry = SchemaRegistry()
    schema = PydanticSchema(UserCreate)
    registry.register("users", "create", schema)

    assert registry.get("users", "create") is schema
    assert registry.get("users", Operation.CREATE) is schema
    assert registry.get("posts", "create") is None

    registry.clear()

    assert registry.get("users", "create") is None
