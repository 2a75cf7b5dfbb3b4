# Overview: Argument specs for commands and their validation before any store I/O.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

from ..validation import ValidationError


class Kind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


def _is_kind(value: Any, kind: Kind) -> bool:
    if kind is Kind.STRING:
        return isinstance(value, str)
    if kind is Kind.BOOLEAN:
        return isinstance(value, bool)
    if kind is Kind.INTEGER:
        if isinstance(value, float):
            return value.is_integer()
        return isinstance(value, int) and not isinstance(value, bool)
    if kind is Kind.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind is Kind.ARRAY:
        return isinstance(value, list)
    return isinstance(value, dict)


@dataclass(frozen=True)
class Arg:
    kind: Kind
    description: str = ""
    required: bool = False
    choices: Sequence[str] | None = None

    def to_schema(self) -> dict:
        schema = {"type": self.kind.value}
        if self.description:
            schema["description"] = self.description
        if self.choices:
            schema["enum"] = list(self.choices)
        return schema


def validate_arguments(
    args: Mapping[str, Arg],
    one_of: Sequence[Sequence[str]],
    arguments: Mapping[str, Any] | None,
) -> dict:
    """
    Check arguments against the declared specs and return a clean dict.

    None is treated as "not supplied": it satisfies nothing and is dropped
    from the result. Checks run in this order, first failure wins: shape,
    unknown keys, missing required keys, kinds, enumerated domains, one-of
    groups.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise ValidationError("Arguments must be an object")

    for key in arguments:
        if key not in args:
            raise ValidationError(f"Unknown argument: {key}")

    supplied = {k: v for k, v in arguments.items() if v is not None}

    missing = [k for k, spec in args.items() if spec.required and k not in supplied]
    if missing:
        raise ValidationError(f"Missing required argument(s): {', '.join(missing)}")

    cleaned = {}
    for key, value in supplied.items():
        spec = args[key]
        if not _is_kind(value, spec.kind):
            article = "an" if spec.kind.value[0] in "aeiou" else "a"
            raise ValidationError(f"{key} must be {article} {spec.kind.value}")
        if spec.kind is Kind.INTEGER and isinstance(value, float):
            value = int(value)
        if spec.choices is not None and value not in spec.choices:
            raise ValidationError(f"{key} must be one of: {', '.join(spec.choices)}")
        cleaned[key] = value

    for group in one_of:
        if not any(k in cleaned for k in group):
            raise ValidationError(f"Either {' or '.join(group)} is required")

    return cleaned
