"""
Popcorn Runtime Values
======================
The closed set of values the Interpreter produces.

Primitive values (null, boolean, number, string) are frozen dataclasses and
compare by value. Arrays, objects, and functions are mutable or carry an
environment, so they compare by identity.

ReturnSignal is not a RuntimeValue: it is the control-flow
result of a `pop` statement and is unwrapped at the function-call boundary.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, ClassVar

if TYPE_CHECKING:
    from .environment import Environment
    from .nodes import ASTNode


class RuntimeValue:
    """Base class for every value visible to Popcorn programs."""
    type_name: ClassVar[str] = "value"


@dataclass(frozen=True)
class NullValue(RuntimeValue):
    type_name: ClassVar[str] = "null"


NULL = NullValue()


@dataclass(frozen=True)
class BooleanValue(RuntimeValue):
    value: bool
    type_name: ClassVar[str] = "boolean"


TRUE = BooleanValue(True)
FALSE = BooleanValue(False)


def boolean(flag: bool) -> BooleanValue:
    return TRUE if flag else FALSE


@dataclass(frozen=True)
class NumberValue(RuntimeValue):
    value: float
    type_name: ClassVar[str] = "number"


@dataclass(frozen=True)
class StringValue(RuntimeValue):
    value: str
    type_name: ClassVar[str] = "string"


@dataclass(eq=False)
class ArrayValue(RuntimeValue):
    elements: list[RuntimeValue] = field(default_factory=list)
    type_name: ClassVar[str] = "array"


@dataclass(eq=False)
class ObjectValue(RuntimeValue):
    properties: dict[str, RuntimeValue] = field(default_factory=dict)
    type_name: ClassVar[str] = "object"


@dataclass(eq=False)
class FunctionValue(RuntimeValue):
    """A user function closed over the environment it was declared in."""
    name: str
    params: list[str]
    declaration_env: Environment = field(repr=False)
    body: list[ASTNode] = field(repr=False, default_factory=list)
    type_name: ClassVar[str] = "function"


NativeCall = Callable[[list[RuntimeValue], "Environment"], RuntimeValue]


@dataclass(eq=False)
class NativeFunctionValue(RuntimeValue):
    """A host-provided callable: call(args, env) -> RuntimeValue."""
    name: str
    call: NativeCall = field(repr=False)
    type_name: ClassVar[str] = "native-function"


@dataclass(frozen=True)
class ReturnSignal:
    """Raised-by-value marker for `pop`; never escapes a function call."""
    value: RuntimeValue = NULL


# ─────────────────────────────────────────────────────────────
#  Formatting & conversion
# ─────────────────────────────────────────────────────────────

def format_number(number: float) -> str:
    if number != number:
        return "NaN"
    if number in (float("inf"), float("-inf")):
        return "Infinity" if number > 0 else "-Infinity"
    if number == int(number):
        return str(int(number))
    return str(number)


def format_value(value: RuntimeValue, nested: bool = False) -> str:
    """Render a value the way the REPL and runner print results."""
    match value:
        case NullValue():
            return "null"
        case BooleanValue(flag):
            return "true" if flag else "false"
        case NumberValue(number):
            return format_number(number)
        case StringValue(text):
            return f'"{text}"' if nested else text
        case ArrayValue():
            return "[" + ", ".join(format_value(v, nested=True) for v in value.elements) + "]"
        case ObjectValue():
            items = [f"{k}: {format_value(v, nested=True)}" for k, v in value.properties.items()]
            return "{" + ", ".join(items) + "}"
        case FunctionValue():
            return f"<fn {value.name}({', '.join(value.params)})>"
        case NativeFunctionValue():
            return f"<native fn {value.name}>"
    return repr(value)


def to_python(value: RuntimeValue) -> Any:
    """Convert a value into JSON-compatible Python data."""
    match value:
        case NullValue():
            return None
        case BooleanValue(flag):
            return flag
        case NumberValue(number):
            if number != number or number in (float("inf"), float("-inf")):
                return format_number(number)
            return int(number) if number == int(number) else number
        case StringValue(text):
            return text
        case ArrayValue():
            return [to_python(v) for v in value.elements]
        case ObjectValue():
            return {k: to_python(v) for k, v in value.properties.items()}
    return format_value(value)
