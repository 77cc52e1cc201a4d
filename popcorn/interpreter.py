"""
Popcorn Interpreter
===================
Tree-walking interpreter that executes the AST produced by the Parser
against a chain of Environments.

Statement results are either a RuntimeValue or a ReturnSignal. The signal
short-circuits blocks, conditionals, and loops, and is unwrapped at the
function-call boundary (or at the top of the program), so it never reaches
a caller as an ordinary value.
"""
import logging
import math
from typing import Callable

from .environment import Environment, make_environment
from .errors import (
    InvalidAssignmentError, IndexOutOfRangeError, NotCallableError,
    PopcornError, PopcornRuntimeError, TypeMismatchError,
    ZeroDivisionRuntimeError,
)
from .lexer import tokenize
from .nodes import (
    ASTNode, ProgramNode, VariableDeclarationNode, FunctionDeclarationNode,
    ReturnStatementNode, BlockStatementNode, IfStatementNode,
    WhileStatementNode, ForStatementNode, AssignmentExprNode, IdentifierNode,
    BinaryExprNode, LogicalExprNode, UnaryExprNode, CallExprNode,
    MemberExprNode, NumericLiteralNode, StringLiteralNode, BooleanLiteralNode,
    NullLiteralNode, ArrayLiteralNode, ObjectLiteralNode,
)
from .parser import produce_ast
from .values import (
    NULL, FALSE, TRUE, ArrayValue, BooleanValue, FunctionValue,
    NativeFunctionValue, NullValue, NumberValue, ObjectValue, ReturnSignal,
    RuntimeValue, StringValue, boolean, format_number, format_value,
)

logger = logging.getLogger(__name__)

StatementResult = RuntimeValue | ReturnSignal


class Interpreter:
    """
    Tree-walking interpreter for Popcorn programs.

    Usage:
        interp = Interpreter()
        env = interp.make_environment()
        result = interp.evaluate(ast, env)
    """

    def __init__(self, output_fn: Callable[[str], None] | None = None):
        self.output_fn = output_fn or (lambda s: print(s))

    def make_environment(self) -> Environment:
        """Root environment whose `print` writes through this interpreter's output_fn."""
        return make_environment(self.output_fn)

    def evaluate(self, node: ASTNode, env: Environment) -> RuntimeValue:
        """Evaluate a node to a value. A stray ReturnSignal is unwrapped here."""
        try:
            result = self.execute(node, env)
        except RecursionError:
            raise PopcornRuntimeError("Maximum call depth exceeded") from None
        if isinstance(result, ReturnSignal):
            return result.value
        return result

    def run(self, source: str, env: Environment | None = None) -> RuntimeValue:
        """Tokenize, parse, and evaluate `source` in one call."""
        program = produce_ast(tokenize(source))
        return self.evaluate(program, env if env is not None else self.make_environment())

    def execute(self, node: ASTNode, env: Environment) -> StatementResult:
        """Execute an AST node and return its result."""
        method = f"_exec_{node.node_type.lower()}"
        executor = getattr(self, method, None)
        if executor is None:
            raise PopcornRuntimeError(
                f"Node of type '{node.node_type}' is not set up for evaluation",
                node.line, node.col,
            )
        try:
            return executor(node, env)
        except PopcornError as e:
            if not e.line and node.line:
                e.locate(node.line, node.col)
            raise

    def _value(self, node: ASTNode, env: Environment) -> RuntimeValue:
        """Evaluate an expression node."""
        result = self.execute(node, env)
        if isinstance(result, ReturnSignal):
            raise PopcornRuntimeError("'pop' used where a value was expected", node.line, node.col)
        return result

    # ─────────────────────────────────────────────────────────
    #  Program & Statements
    # ─────────────────────────────────────────────────────────

    def _exec_program(self, node: ProgramNode, env: Environment) -> RuntimeValue:
        """Execute all statements; the last statement's value is the result."""
        result: StatementResult = NULL
        for stmt in node.body:
            result = self.execute(stmt, env)
            if isinstance(result, ReturnSignal):
                return result.value
        return result

    def _exec_variabledeclaration(self, node: VariableDeclarationNode, env: Environment) -> RuntimeValue:
        value = self._value(node.value, env) if node.value is not None else None
        return env.declare(node.identifier, value, constant=node.constant)

    def _exec_functiondeclaration(self, node: FunctionDeclarationNode, env: Environment) -> RuntimeValue:
        fn = FunctionValue(
            name=node.name,
            params=list(node.params),
            declaration_env=env,
            body=node.body,
        )
        return env.declare(node.name, fn, constant=True)

    def _exec_returnstatement(self, node: ReturnStatementNode, env: Environment) -> ReturnSignal:
        value = self._value(node.value, env) if node.value is not None else NULL
        return ReturnSignal(value)

    def _run_statements(self, statements: list[ASTNode], env: Environment) -> StatementResult:
        """Run statements in `env`; stop at the first ReturnSignal."""
        for stmt in statements:
            result = self.execute(stmt, env)
            if isinstance(result, ReturnSignal):
                return result
        return NULL

    def _run_body(self, body: ASTNode, env: Environment) -> StatementResult:
        """Run a loop body directly in the loop's scope."""
        if isinstance(body, BlockStatementNode):
            return self._run_statements(body.body, env)
        result = self.execute(body, env)
        return result if isinstance(result, ReturnSignal) else NULL

    def _condition(self, node: ASTNode, env: Environment, keyword: str) -> bool:
        value = self._value(node, env)
        if not isinstance(value, BooleanValue):
            raise TypeMismatchError(
                f"'{keyword}' condition must be a boolean, got {value.type_name}",
                node.line, node.col,
            )
        return value.value

    def _exec_blockstatement(self, node: BlockStatementNode, env: Environment) -> StatementResult:
        """Standalone blocks (loaded or hand-built ASTs) get their own scope."""
        return self._run_statements(node.body, env.child())

    def _exec_ifstatement(self, node: IfStatementNode, env: Environment) -> StatementResult:
        scope = env.child()
        taken = self._condition(node.condition, scope, "if")

        if not isinstance(node.consequent, BlockStatementNode):
            raise PopcornRuntimeError("'if' consequent must be a block statement", node.line, node.col)

        if taken:
            return self._run_statements(node.consequent.body, scope)

        if node.alternate is None:
            return NULL
        if isinstance(node.alternate, BlockStatementNode):
            return self._run_statements(node.alternate.body, scope)

        # else-if chain
        result = self.execute(node.alternate, scope)
        return result if isinstance(result, ReturnSignal) else NULL

    def _exec_whilestatement(self, node: WhileStatementNode, env: Environment) -> StatementResult:
        scope = env.child()
        while self._condition(node.condition, scope, "while"):
            result = self._run_body(node.body, scope)
            if isinstance(result, ReturnSignal):
                return result
        return NULL

    def _exec_forstatement(self, node: ForStatementNode, env: Environment) -> StatementResult:
        scope = env.child()
        if node.init is not None:
            self.execute(node.init, scope)

        while node.condition is None or self._condition(node.condition, scope, "for"):
            result = self._run_body(node.body, scope)
            if isinstance(result, ReturnSignal):
                return result
            if node.update is not None:
                self._value(node.update, scope)
        return NULL

    # ─────────────────────────────────────────────────────────
    #  Assignment, Identifiers & Calls
    # ─────────────────────────────────────────────────────────

    def _exec_assignmentexpr(self, node: AssignmentExprNode, env: Environment) -> RuntimeValue:
        if not isinstance(node.assignee, IdentifierNode):
            raise InvalidAssignmentError(
                f"Invalid left-hand side in assignment: {node.assignee.node_type}",
                node.line, node.col,
            )
        value = self._value(node.value, env)
        return env.assign(node.assignee.symbol, value)

    def _exec_identifier(self, node: IdentifierNode, env: Environment) -> RuntimeValue:
        return env.get(node.symbol)

    def _exec_callexpr(self, node: CallExprNode, env: Environment) -> RuntimeValue:
        callee = self._value(node.caller, env)
        args = [self._value(arg, env) for arg in node.args]

        match callee:
            case NativeFunctionValue():
                return callee.call(args, env)
            case FunctionValue():
                return self._call_function(callee, args)

        raise NotCallableError(
            f"Cannot call value that is not a function: {format_value(callee)}",
            node.line, node.col,
        )

    def _call_function(self, fn: FunctionValue, args: list[RuntimeValue]) -> RuntimeValue:
        """Run a user function in a fresh scope parented to its declaration env."""
        logger.debug("call %s with %d argument(s)", fn.name, len(args))
        scope = Environment(parent=fn.declaration_env)
        for i, param in enumerate(fn.params):
            scope.declare(param, args[i] if i < len(args) else NULL)

        result: StatementResult = NULL
        for stmt in fn.body:
            result = self.execute(stmt, scope)
            if isinstance(result, ReturnSignal):
                return result.value
        return result

    # ─────────────────────────────────────────────────────────
    #  Operators
    # ─────────────────────────────────────────────────────────

    def _exec_binaryexpr(self, node: BinaryExprNode, env: Environment) -> RuntimeValue:
        left = self._value(node.left, env)
        right = self._value(node.right, env)
        op = node.operator

        if op in ("==", "!="):
            equal = values_equal(left, right)
            return boolean(equal if op == "==" else not equal)

        if not isinstance(left, NumberValue) or not isinstance(right, NumberValue):
            raise TypeMismatchError(
                f"Cannot apply '{op}' to {left.type_name} and {right.type_name}",
                node.line, node.col,
            )

        a, b = left.value, right.value
        match op:
            case "+":
                return NumberValue(a + b)
            case "-":
                return NumberValue(a - b)
            case "*":
                return NumberValue(a * b)
            case "/":
                return NumberValue(divide(a, b))
            case "%":
                return NumberValue(remainder(a, b))
            case "<":
                return boolean(a < b)
            case ">":
                return boolean(a > b)
            case "<=":
                return boolean(a <= b)
            case ">=":
                return boolean(a >= b)

        raise PopcornRuntimeError(f"Unknown binary operator: {op}", node.line, node.col)

    def _exec_logicalexpr(self, node: LogicalExprNode, env: Environment) -> RuntimeValue:
        left = self._boolean_operand(node.left, env, node.operator)

        if node.operator == "&&" and not left:
            return FALSE
        if node.operator == "||" and left:
            return TRUE

        return boolean(self._boolean_operand(node.right, env, node.operator))

    def _boolean_operand(self, node: ASTNode, env: Environment, op: str) -> bool:
        value = self._value(node, env)
        if not isinstance(value, BooleanValue):
            raise TypeMismatchError(
                f"Operands of '{op}' must be booleans, got {value.type_name}",
                node.line, node.col,
            )
        return value.value

    def _exec_unaryexpr(self, node: UnaryExprNode, env: Environment) -> RuntimeValue:
        operand = self._value(node.operand, env)

        if node.operator == "!":
            if not isinstance(operand, BooleanValue):
                raise TypeMismatchError(
                    f"Operand of '!' must be a boolean, got {operand.type_name}",
                    node.line, node.col,
                )
            return boolean(not operand.value)

        if node.operator == "-":
            if not isinstance(operand, NumberValue):
                raise TypeMismatchError(
                    f"Operand of unary '-' must be a number, got {operand.type_name}",
                    node.line, node.col,
                )
            return NumberValue(-operand.value)

        raise PopcornRuntimeError(f"Unknown unary operator: {node.operator}", node.line, node.col)

    # ─────────────────────────────────────────────────────────
    #  Member Access
    # ─────────────────────────────────────────────────────────

    def _exec_memberexpr(self, node: MemberExprNode, env: Environment) -> RuntimeValue:
        obj = self._value(node.object, env)

        if not node.computed:
            if not isinstance(obj, ObjectValue):
                raise TypeMismatchError(
                    f"Cannot access property on non-object: {obj.type_name}",
                    node.line, node.col,
                )
            if not isinstance(node.property, IdentifierNode):
                raise PopcornRuntimeError(
                    "Property in dot notation must be an identifier", node.line, node.col,
                )
            return obj.properties.get(node.property.symbol, NULL)

        key = self._value(node.property, env)

        if isinstance(obj, ArrayValue):
            return obj.elements[array_index(obj, key)]

        if isinstance(obj, ObjectValue):
            return obj.properties.get(property_key(key), NULL)

        raise TypeMismatchError(
            f"Cannot use computed access on non-object/array: {obj.type_name}",
            node.line, node.col,
        )

    # ─────────────────────────────────────────────────────────
    #  Literals
    # ─────────────────────────────────────────────────────────

    def _exec_numericliteral(self, node: NumericLiteralNode, env: Environment) -> RuntimeValue:
        return NumberValue(float(node.value))

    def _exec_stringliteral(self, node: StringLiteralNode, env: Environment) -> RuntimeValue:
        return StringValue(node.value)

    def _exec_booleanliteral(self, node: BooleanLiteralNode, env: Environment) -> RuntimeValue:
        return boolean(node.value)

    def _exec_nullliteral(self, node: NullLiteralNode, env: Environment) -> RuntimeValue:
        return NULL

    def _exec_arrayliteral(self, node: ArrayLiteralNode, env: Environment) -> RuntimeValue:
        return ArrayValue([self._value(el, env) for el in node.elements])

    def _exec_objectliteral(self, node: ObjectLiteralNode, env: Environment) -> RuntimeValue:
        obj = ObjectValue()
        for prop in node.properties:
            if prop.value is None:
                obj.properties[prop.key] = env.get(prop.key)
            else:
                obj.properties[prop.key] = self._value(prop.value, env)
        return obj


# ─────────────────────────────────────────────────────────────
#  Operator helpers
# ─────────────────────────────────────────────────────────────

def values_equal(left: RuntimeValue, right: RuntimeValue) -> bool:
    """Same-type structural equality for primitives, identity otherwise."""
    if type(left) is not type(right):
        return False
    match left:
        case NullValue():
            return True
        case BooleanValue() | NumberValue() | StringValue():
            return left.value == right.value
    return left is right


def divide(a: float, b: float) -> float:
    """IEEE-754 division: x/0 is ±inf and 0/0 is nan."""
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def remainder(a: float, b: float) -> float:
    """Truncate both operands to integers, then take the truncated remainder."""
    if not math.isfinite(a) or not math.isfinite(b):
        raise TypeMismatchError("Cannot take the remainder of a non-finite number")
    ia, ib = int(a), int(b)
    if ib == 0:
        raise ZeroDivisionRuntimeError("Integer remainder by zero")
    r = abs(ia) % abs(ib)
    return float(-r if ia < 0 else r)


def array_index(array: ArrayValue, key: RuntimeValue) -> int:
    if not isinstance(key, NumberValue):
        raise TypeMismatchError(f"Array index must be a number, got {key.type_name}")
    if not math.isfinite(key.value) or key.value != int(key.value):
        raise IndexOutOfRangeError(f"Array index must be an integer, got {format_number(key.value)}")
    idx = int(key.value)
    if idx < 0 or idx >= len(array.elements):
        raise IndexOutOfRangeError(
            f"Array index out of bounds: {idx} (length: {len(array.elements)})"
        )
    return idx


def property_key(key: RuntimeValue) -> str:
    """Stringify a computed object key."""
    match key:
        case StringValue(text):
            return text
        case NumberValue(number):
            return format_number(number)
        case BooleanValue() | NullValue():
            return format_value(key)
    raise TypeMismatchError(f"Object key must be a string or number, got {key.type_name}")


def evaluate(node: ASTNode, env: Environment) -> RuntimeValue:
    """Evaluate `node` against `env` with a default Interpreter."""
    return Interpreter().evaluate(node, env)
