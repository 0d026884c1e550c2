# ==============================
# Parameter Schema Contracts
# ==============================
"""
Parameter schema capability used by tool descriptors.

A schema is anything with `validate(raw) -> ValidationOutcome`. Validation
failures are values, not exceptions: the request handler branches on the
outcome type and never sees pydantic errors directly.

PydanticSchema is the default adapter. It accepts a BaseModel subclass or any
type pydantic can validate (TypedDict, dataclass, Dict[str, int], ...).
"""

# ==============================
# Imports
# ==============================
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, TypeAdapter, ValidationError


# ==============================
# Outcomes
# ==============================
@dataclass(frozen=True)
class ValidationSuccess:
    value: Any
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ValidationFailure:
    issues: List[Dict[str, Any]]
    ok: bool = field(default=False, init=False)


ValidationOutcome = Union[ValidationSuccess, ValidationFailure]


@runtime_checkable
class ParamsSchema(Protocol):
    def validate(self, raw: Any) -> ValidationOutcome: ...


# ==============================
# Pydantic Adapter
# ==============================
class PydanticSchema:
    """Wraps a pydantic-validatable type as a ParamsSchema."""

    def __init__(self, type_: Any, *, strict: Optional[bool] = None) -> None:
        self.type_ = type_
        self.strict = strict
        self._adapter: TypeAdapter[Any] = TypeAdapter(type_)

    def validate(self, raw: Any) -> ValidationOutcome:
        try:
            value = self._adapter.validate_python(raw, strict=self.strict)
        except ValidationError as exc:
            return ValidationFailure(issues=issues_from_error(exc))
        return ValidationSuccess(value=value)

    def json_schema(self) -> Dict[str, Any]:
        return self._adapter.json_schema()

    def __repr__(self) -> str:
        name = getattr(self.type_, "__name__", repr(self.type_))
        return f"PydanticSchema({name})"


def issues_from_error(exc: ValidationError) -> List[Dict[str, Any]]:
    """Flatten a pydantic ValidationError into JSON-friendly issue dicts."""
    issues: List[Dict[str, Any]] = []
    for err in exc.errors(include_url=False, include_context=False):
        issues.append(
            {
                "type": err.get("type"),
                "loc": [p for p in err.get("loc", ())],
                "msg": err.get("msg"),
                "input": _plain(err.get("input")),
            }
        )
    return issues


def _plain(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return repr(value)


def as_schema(obj: Any) -> ParamsSchema:
    """
    Coerce a tool's `parameters` argument into a ParamsSchema.

    Accepts an object already implementing validate() or a BaseModel subclass.
    """
    if isinstance(obj, type) and issubclass(obj, BaseModel):
        return PydanticSchema(obj)
    if isinstance(obj, ParamsSchema):
        return obj
    raise TypeError(
        "parameters must be a pydantic BaseModel subclass or an object with validate(raw); "
        f"got {type(obj).__name__}"
    )
