"""
Popcorn Environment
===================
Lexical scopes: a name → value mapping, a set of constant names, and a
link to the enclosing scope.

Scopes are shared by reference. A FunctionValue keeps its declaration
environment alive, so an assignment through any holder is visible to all
of them (closures observe and mutate the same binding).
"""
from __future__ import annotations

import logging
from typing import Callable

from .errors import ConstantError, RedeclarationError, TypeMismatchError, UndefinedVariableError
from .values import (
    NULL, ArrayValue, NativeFunctionValue, NullValue, NumberValue, ObjectValue,
    RuntimeValue, StringValue, format_value,
)

logger = logging.getLogger(__name__)


class Environment:
    """A single lexical scope."""

    def __init__(self, parent: Environment | None = None):
        self.parent = parent
        self.variables: dict[str, RuntimeValue] = {}
        self.constants: set[str] = set()

    def __repr__(self) -> str:
        depth = 0
        env = self.parent
        while env is not None:
            depth += 1
            env = env.parent
        return f"Environment(depth={depth}, names={sorted(self.variables)})"

    def child(self) -> Environment:
        return Environment(parent=self)

    def has(self, name: str) -> bool:
        """True if `name` is declared in this scope (parents are not checked)."""
        return name in self.variables

    def resolve(self, name: str) -> Environment:
        """Return the nearest scope that declares `name`."""
        env = self
        while env is not None:
            if name in env.variables:
                return env
            env = env.parent
        raise UndefinedVariableError(name)

    def get(self, name: str) -> RuntimeValue:
        return self.resolve(name).variables[name]

    def declare(self, name: str, value: RuntimeValue | None = None,
                constant: bool = False) -> RuntimeValue:
        """Bind `name` in this scope. Shadowing a parent binding is allowed."""
        if name in self.variables:
            raise RedeclarationError(name)

        if constant:
            if value is None or isinstance(value, NullValue):
                raise ConstantError(
                    name, f"Cannot declare constant variable '{name}' without a value"
                )
            self.constants.add(name)

        value = NULL if value is None else value
        self.variables[name] = value
        return value

    def assign(self, name: str, value: RuntimeValue) -> RuntimeValue:
        env = self.resolve(name)
        if name in env.constants:
            raise ConstantError(name)
        env.variables[name] = value
        return value


# ─────────────────────────────────────────────────────────────
#  Native functions
# ─────────────────────────────────────────────────────────────

def _native_print(output_fn: Callable[[str], None]):
    def call(args: list[RuntimeValue], env: Environment) -> RuntimeValue:
        output_fn(" ".join(format_value(arg) for arg in args))
        return NULL
    return call


def _native_len(args: list[RuntimeValue], env: Environment) -> RuntimeValue:
    target = args[0] if args else NULL
    match target:
        case ArrayValue():
            return NumberValue(float(len(target.elements)))
        case ObjectValue():
            return NumberValue(float(len(target.properties)))
        case StringValue(text):
            return NumberValue(float(len(text)))
    raise TypeMismatchError(f"len() expects an array, object, or string, got {target.type_name}")


def make_environment(output_fn: Callable[[str], None] | None = None) -> Environment:
    """Create a root environment (no parent) with the native functions declared."""
    env = Environment()
    natives = {
        "print": _native_print(output_fn or print),
        "len": _native_len,
    }
    for name, call in natives.items():
        env.declare(name, NativeFunctionValue(name=name, call=call), constant=True)
    logger.debug("created root environment with natives: %s", ", ".join(natives))
    return env
