"""
Contract - declared inputs and outputs of a unit type.

A ``Contract`` is an immutable value built when a unit class is defined. A
subclass starts from its parent's contract and extends it; redeclaring a
name replaces the inherited entry in place. Nothing is shared mutably
between parent and child.

    class ChargeCard(Unit):
        inputs = (FieldSpec("order", Order), FieldSpec("coupon", str, optional=True))
        outputs = ("charge_id",)

Validation runs against the shared state:

- a required field whose key is absent raises ``MissingInput`` / ``MissingOutput``
- a present field whose value is not an instance of the declared type raises
  ``TypeMismatch`` (subclass instances are accepted)
- an absent optional field is skipped
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from unitline.core.errors import ContractErrorKind, contract_error
from unitline.core.settings import get_settings

if TYPE_CHECKING:
    from unitline.orchestration.state import SharedState


class FieldKind(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


_MISSING = {
    FieldKind.INPUT: ContractErrorKind.MISSING_INPUT,
    FieldKind.OUTPUT: ContractErrorKind.MISSING_OUTPUT,
}


def _type_label(t: Any) -> str:
    # Unions such as ``int | None`` carry no __name__.
    return t.__name__ if isinstance(t, type) else repr(t)


@dataclass(frozen=True)
class FieldSpec:
    """A single declared input or output."""

    name: str
    type: Any = None
    optional: bool = False

    def type_name(self) -> str:
        if self.type is None:
            return "Any"
        if isinstance(self.type, tuple):
            return " | ".join(_type_label(t) for t in self.type)
        return _type_label(self.type)


FieldDeclaration = Union[FieldSpec, str]


def as_field(declaration: FieldDeclaration) -> FieldSpec:
    """Accept a ``FieldSpec`` or a bare name (required, untyped)."""
    if isinstance(declaration, FieldSpec):
        return declaration
    if isinstance(declaration, str):
        return FieldSpec(declaration)
    raise TypeError(f"Expected a FieldSpec or a field name, got {declaration!r}")


def _merge(fields: tuple[FieldSpec, ...], spec: FieldSpec) -> tuple[FieldSpec, ...]:
    for index, existing in enumerate(fields):
        if existing.name == spec.name:
            return fields[:index] + (spec,) + fields[index + 1 :]
    return fields + (spec,)


@dataclass(frozen=True)
class Contract:
    """Immutable set of declared inputs and outputs."""

    inputs: tuple[FieldSpec, ...] = field(default_factory=tuple)
    outputs: tuple[FieldSpec, ...] = field(default_factory=tuple)

    # =========================================================================
    # Copy-then-extend builders
    # =========================================================================

    def with_input(self, name: str, type: Any = None, optional: bool = False) -> Contract:
        return replace(self, inputs=_merge(self.inputs, FieldSpec(name, type, optional)))

    def with_output(self, name: str, type: Any = None, optional: bool = False) -> Contract:
        return replace(self, outputs=_merge(self.outputs, FieldSpec(name, type, optional)))

    def extend(
        self,
        inputs: Iterable[FieldDeclaration] = (),
        outputs: Iterable[FieldDeclaration] = (),
    ) -> Contract:
        contract = self
        for spec in map(as_field, inputs):
            contract = replace(contract, inputs=_merge(contract.inputs, spec))
        for spec in map(as_field, outputs):
            contract = replace(contract, outputs=_merge(contract.outputs, spec))
        return contract

    def fields(self, kind: FieldKind | str) -> tuple[FieldSpec, ...]:
        return self.inputs if FieldKind(kind) is FieldKind.INPUT else self.outputs

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self, kind: FieldKind | str, state: SharedState, unit: str | None = None) -> None:
        """
        Check the declared ``kind`` fields against ``state``.

        Raises:
            MissingInput / MissingOutput: required key absent
            TypeMismatch: value of the wrong type
        """
        kind = FieldKind(kind)
        check_types = get_settings().check_types

        for spec in self.fields(kind):
            if not state.has(spec.name):
                if spec.optional:
                    continue
                raise contract_error(
                    _MISSING[kind],
                    f"Missing required {kind.value}: {spec.name}",
                    state=state,
                    unit=unit,
                    field=spec.name,
                )

            value = state.get(spec.name)
            if check_types and spec.type is not None and not isinstance(value, spec.type):
                raise contract_error(
                    ContractErrorKind.TYPE_MISMATCH,
                    f"Expected {spec.name} to be of type {spec.type_name()}, "
                    f"got {type(value).__name__}",
                    state=state,
                    unit=unit,
                    field=spec.name,
                    expected=spec.type if isinstance(spec.type, type) else None,
                    actual=type(value),
                )


__all__ = ["Contract", "FieldKind", "FieldSpec", "as_field"]
