"""
Popcorn AST
===========
The closed set of node types produced by the Parser and consumed by the
Interpreter, plus the tagged JSON form used for AST debug dumps.

Every node carries a `node_type` tag; the Interpreter dispatches on it and
the JSON dump writes it as `"kind"`.
"""
import json
from dataclasses import dataclass, field, fields
from typing import Any


@dataclass
class ASTNode:
    """Base class for all AST nodes."""
    node_type: str = ""
    line: int = 0
    col: int = 0


# ─────────────────────────────────────────────────────────────
#  Statements
# ─────────────────────────────────────────────────────────────

@dataclass
class ProgramNode(ASTNode):
    """Root node containing all top-level statements."""
    body: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "Program"


@dataclass
class VariableDeclarationNode(ASTNode):
    """`let name = value` or `const name = value`."""
    identifier: str = ""
    constant: bool = False
    value: ASTNode | None = None

    def __post_init__(self):
        self.node_type = "VariableDeclaration"


@dataclass
class FunctionDeclarationNode(ASTNode):
    """`fn name(a, b) { ... }`."""
    name: str = ""
    params: list[str] = field(default_factory=list)
    body: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "FunctionDeclaration"


@dataclass
class ReturnStatementNode(ASTNode):
    """`pop value`; value is None for a bare `pop`."""
    value: ASTNode | None = None

    def __post_init__(self):
        self.node_type = "ReturnStatement"


@dataclass
class BlockStatementNode(ASTNode):
    """A brace-delimited statement list with its own scope."""
    body: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "BlockStatement"


@dataclass
class IfStatementNode(ASTNode):
    """`if (cond) { ... } else ...`; alternate is a block or another if."""
    condition: ASTNode | None = None
    consequent: ASTNode | None = None
    alternate: ASTNode | None = None

    def __post_init__(self):
        self.node_type = "IfStatement"


@dataclass
class WhileStatementNode(ASTNode):
    condition: ASTNode | None = None
    body: ASTNode | None = None

    def __post_init__(self):
        self.node_type = "WhileStatement"


@dataclass
class ForStatementNode(ASTNode):
    """`for (init; condition; update) { ... }`; every clause is optional."""
    init: ASTNode | None = None
    condition: ASTNode | None = None
    update: ASTNode | None = None
    body: ASTNode | None = None

    def __post_init__(self):
        self.node_type = "ForStatement"


# ─────────────────────────────────────────────────────────────
#  Expressions
# ─────────────────────────────────────────────────────────────

@dataclass
class AssignmentExprNode(ASTNode):
    """`assignee = value`. Only identifier assignees evaluate."""
    assignee: ASTNode | None = None
    value: ASTNode | None = None

    def __post_init__(self):
        self.node_type = "AssignmentExpr"


@dataclass
class IdentifierNode(ASTNode):
    """A reference to a named binding."""
    symbol: str = ""

    def __post_init__(self):
        self.node_type = "Identifier"


@dataclass
class BinaryExprNode(ASTNode):
    """Arithmetic (+ - * / %) or comparison (== != < > <= >=)."""
    left: ASTNode | None = None
    right: ASTNode | None = None
    operator: str = ""

    def __post_init__(self):
        self.node_type = "BinaryExpr"


@dataclass
class LogicalExprNode(ASTNode):
    """`&&` or `||`."""
    left: ASTNode | None = None
    right: ASTNode | None = None
    operator: str = ""

    def __post_init__(self):
        self.node_type = "LogicalExpr"


@dataclass
class UnaryExprNode(ASTNode):
    """Prefix `!` or `-`."""
    operator: str = ""
    operand: ASTNode | None = None

    def __post_init__(self):
        self.node_type = "UnaryExpr"


@dataclass
class CallExprNode(ASTNode):
    caller: ASTNode | None = None
    args: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "CallExpr"


@dataclass
class MemberExprNode(ASTNode):
    """`object.property` (computed=False) or `object[property]` (computed=True)."""
    object: ASTNode | None = None
    property: ASTNode | None = None
    computed: bool = False

    def __post_init__(self):
        self.node_type = "MemberExpr"


# ─────────────────────────────────────────────────────────────
#  Literals
# ─────────────────────────────────────────────────────────────

@dataclass
class NumericLiteralNode(ASTNode):
    value: float = 0.0

    def __post_init__(self):
        self.node_type = "NumericLiteral"


@dataclass
class StringLiteralNode(ASTNode):
    value: str = ""

    def __post_init__(self):
        self.node_type = "StringLiteral"


@dataclass
class BooleanLiteralNode(ASTNode):
    value: bool = False

    def __post_init__(self):
        self.node_type = "BooleanLiteral"


@dataclass
class NullLiteralNode(ASTNode):

    def __post_init__(self):
        self.node_type = "NullLiteral"


@dataclass
class ArrayLiteralNode(ASTNode):
    elements: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "ArrayLiteral"


@dataclass
class PropertyNode(ASTNode):
    """An object literal entry. A None value means shorthand `{ key }`."""
    key: str = ""
    value: ASTNode | None = None

    def __post_init__(self):
        self.node_type = "Property"


@dataclass
class ObjectLiteralNode(ASTNode):
    properties: list[PropertyNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "ObjectLiteral"


NODE_CLASSES: dict[str, type[ASTNode]] = {
    cls().node_type: cls
    for cls in (
        ProgramNode, VariableDeclarationNode, FunctionDeclarationNode,
        ReturnStatementNode, BlockStatementNode, IfStatementNode,
        WhileStatementNode, ForStatementNode, AssignmentExprNode,
        IdentifierNode, BinaryExprNode, LogicalExprNode, UnaryExprNode,
        CallExprNode, MemberExprNode, NumericLiteralNode, StringLiteralNode,
        BooleanLiteralNode, NullLiteralNode, ArrayLiteralNode, PropertyNode,
        ObjectLiteralNode,
    )
}


# ─────────────────────────────────────────────────────────────
#  Tagged JSON dump / load
# ─────────────────────────────────────────────────────────────

def dump_ast(node: ASTNode) -> dict[str, Any]:
    """Convert a node tree to plain dicts, each tagged with its `kind`."""
    data: dict[str, Any] = {"kind": node.node_type}
    for f in fields(node):
        if f.name == "node_type":
            continue
        data[f.name] = _dump_value(getattr(node, f.name))
    return data


def _dump_value(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return dump_ast(value)
    if isinstance(value, list):
        return [_dump_value(v) for v in value]
    return value


def load_ast(data: dict[str, Any]) -> ASTNode:
    """Rebuild a node tree from the output of dump_ast."""
    kind = data.get("kind")
    cls = NODE_CLASSES.get(kind)
    if cls is None:
        raise ValueError(f"Unknown node kind: {kind!r}")
    kwargs = {key: _load_value(value) for key, value in data.items() if key != "kind"}
    return cls(**kwargs)


def _load_value(value: Any) -> Any:
    if isinstance(value, dict) and "kind" in value:
        return load_ast(value)
    if isinstance(value, list):
        return [_load_value(v) for v in value]
    return value


def ast_to_json(node: ASTNode, indent: int | None = 2) -> str:
    return json.dumps(dump_ast(node), indent=indent)


def ast_from_json(text: str) -> ASTNode:
    return load_ast(json.loads(text))
