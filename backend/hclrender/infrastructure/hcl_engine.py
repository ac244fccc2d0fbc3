"""HCL Engine — lark grammar + tree walker for the HCL subset documents use.

Two entry points:
    parse_document(text)             structural parse, expressions not evaluated
    evaluate_document(text, context) full evaluation against bound variables/functions

Invariants:
    - Labeled blocks nest by label and deep-merge when repeated
    - A repeated unlabeled block turns its key into a list of bodies
    - A duplicate attribute in one body is a DocumentParseError
    - Structural parse keeps literals as values; any other expression becomes
      its source text wrapped as "${<source>}"
    - A template that is exactly one interpolation yields the raw value
    - FunctionError results are raised via from_function_error, naming the function
    - Syntax errors never escape as lark exceptions: always DocumentParseError

Design Decisions:
    - LALR with a contextual lexer: one grammar, two start symbols (document
      body and single expression for template interpolations)
    - Explicit dispatch dict on node type over lark Transformer magic
      (ADR: every mapping visible in one place)
    - Outside the subset (for-expressions, splats, heredocs, template
      directives) is a parse error or literal text, never a partial evaluation
"""

import math
from string import hexdigits

from lark import Lark, Token, Tree
from lark.exceptions import LarkError, UnexpectedEOF, UnexpectedInput

from hclrender.core.domain_types import Value
from hclrender.core.errors import (
    DocumentEvaluationError,
    DocumentParseError,
    from_function_error,
)
from hclrender.core.evaluation_context import EvaluationContext
from hclrender.core.function_types import FunctionError, FunctionName
from hclrender.core.values import is_number, normalize_number, stringify, type_name, values_equal

_GRAMMAR = r"""
    body: (attribute | block)*
    attribute: IDENTIFIER "=" expression
    block: IDENTIFIER (IDENTIFIER | STRING)* "{" body "}"

    expression_start: expression

    ?expression: or_expr "?" expression ":" expression -> conditional
               | or_expr
    ?or_expr: or_expr "||" and_expr -> or_op
            | and_expr
    ?and_expr: and_expr "&&" eq_expr -> and_op
             | eq_expr
    ?eq_expr: eq_expr eq_op cmp_expr -> binary
            | cmp_expr
    ?cmp_expr: cmp_expr cmp_op add_expr -> binary
             | add_expr
    ?add_expr: add_expr add_op mul_expr -> binary
             | mul_expr
    ?mul_expr: mul_expr mul_op unary -> binary
             | unary
    ?unary: unary_op unary -> unary_expr
          | postfix
    ?postfix: postfix "." IDENTIFIER -> get_attr
            | postfix "[" expression "]" -> index
            | primary
    ?primary: NUMBER -> number
            | STRING -> template
            | IDENTIFIER -> variable
            | function_call
            | tuple
            | object
            | "(" expression ")"

    function_call: func_name "(" [arguments] ")"
    func_name: IDENTIFIER ("::" IDENTIFIER)*
    arguments: expression ("," expression)* ("," | ELLIPSIS)?
    tuple: "[" [expression ("," expression)* [","]] "]"
    object: "{" object_elem* "}"
    object_elem: (IDENTIFIER | STRING) ("=" | ":") expression [","]

    !eq_op: "==" | "!="
    !cmp_op: "<" | ">" | "<=" | ">="
    !add_op: "+" | "-"
    !mul_op: "*" | "/" | "%"
    !unary_op: "-" | "!"

    IDENTIFIER: /[a-zA-Z_][a-zA-Z0-9_-]*/
    NUMBER: /\d+(\.\d+)?([eE][+-]?\d+)?/
    STRING: /"(?:[^"\\$\n]|\\.|\$(?!\{)|\$\{(?:[^}"]|"(?:[^"\\\n]|\\.)*")*\})*"/
    ELLIPSIS: "..."

    COMMENT: /#[^\n]*/ | /\/\/[^\n]*/
    BLOCK_COMMENT: /\/\*[\s\S]*?\*\//

    %import common.WS
    %ignore WS
    %ignore COMMENT
    %ignore BLOCK_COMMENT
"""

_PARSER = Lark(
    _GRAMMAR,
    parser="lalr",
    start=["body", "expression_start"],
    propagate_positions=True,
    maybe_placeholders=False,
)

_LITERAL_NAMES = {"true": True, "false": False, "null": None}
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}

# Body entry shapes
_ATTRIBUTE = "attribute"
_BLOCK = "block"
_BLOCKS = "repeated block"
_LABELED = "labeled block"


class _NotLiteral:
    """Marker: expression needs evaluation."""


_NOT_LITERAL = _NotLiteral()


# ─── Parsing ────────────────────────────────────────────────────

def _parse(text: str, start: str) -> Tree:
    try:
        return _PARSER.parse(text, start=start)
    except UnexpectedEOF as e:
        raise DocumentParseError("unexpected end of input") from e
    except UnexpectedInput as e:
        raise DocumentParseError(
            f"syntax error at line {e.line}, column {e.column}",
        ) from e
    except LarkError as e:
        raise DocumentParseError(str(e)) from e


def _interpolation_end(body: str, start: int) -> int:
    """Index of the `}` closing an interpolation opened just before start."""
    depth = 0
    in_string = False
    i = start
    while i < len(body):
        char = body[i]
        if in_string:
            if char == "\\":
                i += 2
                continue
            if char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            if depth == 0:
                return i
            depth -= 1
        i += 1
    raise DocumentParseError("unterminated template interpolation")


def _split_template(raw: str) -> list[tuple[str, str]]:
    """Split a quoted string token into ("text", str) and ("expr", source) parts."""
    body = raw[1:-1]
    parts: list[tuple[str, str]] = []
    text: list[str] = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\":
            escape = body[i + 1] if i + 1 < len(body) else ""
            if escape in _ESCAPES:
                text.append(_ESCAPES[escape])
                i += 2
                continue
            if escape in ("u", "U"):
                width = 4 if escape == "u" else 8
                digits = body[i + 2:i + 2 + width]
                if len(digits) != width or any(d not in hexdigits for d in digits):
                    raise DocumentParseError(f"invalid unicode escape in {raw}")
                text.append(chr(int(digits, 16)))
                i += 2 + width
                continue
            raise DocumentParseError(f"invalid escape sequence \\{escape} in {raw}")
        if body.startswith("$${", i) or body.startswith("%%{", i):
            text.append(body[i + 1:i + 3])
            i += 3
            continue
        if body.startswith("${", i):
            end = _interpolation_end(body, i + 2)
            if text:
                parts.append(("text", "".join(text)))
                text = []
            parts.append(("expr", body[i + 2:end].strip()))
            i = end + 1
            continue
        text.append(char)
        i += 1
    if text or not parts:
        parts.append(("text", "".join(text)))
    return parts


def _parse_number(token: Token) -> int | float:
    text = str(token)
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


def _deep_merge(target: dict[str, Value], incoming: dict[str, Value]) -> None:
    for key, value in incoming.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            _deep_merge(existing, value)
        else:
            target[key] = value


# ─── Tree Walker ────────────────────────────────────────────────

class _Walker:
    """Turns a parse tree into a value tree.

    context=None selects structural mode: nothing is evaluated and
    non-literal expressions come back as "${<source>}".
    """

    def __init__(self, source: str, context: EvaluationContext | None):
        self.source = source
        self.context = context
        self._dispatch = {
            "number": self._number,
            "template": self._template,
            "variable": self._variable,
            "function_call": self._function_call,
            "tuple": self._tuple,
            "object": self._object,
            "get_attr": self._get_attr,
            "index": self._index,
            "binary": self._binary,
            "and_op": self._logical,
            "or_op": self._logical,
            "unary_expr": self._unary,
            "conditional": self._conditional,
        }

    # ─── Bodies ─────────────────────────────────────────────────

    def body(self, tree: Tree) -> dict[str, Value]:
        result: dict[str, Value] = {}
        shapes: dict[str, str] = {}
        for item in tree.children:
            if item.data == "attribute":
                name_token, expression = item.children
                name = str(name_token)
                if name in shapes:
                    raise DocumentParseError(
                        f"duplicate attribute '{name}' at line {name_token.line}",
                    )
                shapes[name] = _ATTRIBUTE
                result[name] = self.expression(expression)
            else:
                self._add_block(result, shapes, item)
        return result

    def _add_block(self, result: dict[str, Value], shapes: dict[str, str], tree: Tree) -> None:
        name_token, *label_tokens, body_tree = tree.children
        name = str(name_token)
        labels = [self._label(token) for token in label_tokens]
        value = self.body(body_tree)
        for label in reversed(labels):
            value = {label: value}

        shape = _LABELED if labels else _BLOCK
        previous = shapes.get(name)
        if previous is None:
            shapes[name] = shape
            result[name] = value
            return
        if previous == _BLOCKS and shape == _BLOCK:
            result[name].append(value)
            return
        if previous != shape:
            raise DocumentParseError(
                f"'{name}' at line {name_token.line} is already declared as {previous}",
            )
        if shape == _LABELED:
            _deep_merge(result[name], value)
        else:
            result[name] = [result[name], value]
            shapes[name] = _BLOCKS

    def _label(self, token: Token) -> str:
        if token.type == "IDENTIFIER":
            return str(token)
        parts = _split_template(str(token))
        if len(parts) != 1 or parts[0][0] != "text":
            raise DocumentParseError(
                f"block label {token} at line {token.line} cannot be a template",
            )
        return parts[0][1]

    # ─── Expressions ────────────────────────────────────────────

    def expression(self, node: Tree) -> Value:
        if self.context is None:
            value = self._literal(node)
            if value is _NOT_LITERAL:
                return self._wrapped_source(node)
            return value
        return self._dispatch[node.data](node)

    def _source_of(self, node: Tree) -> str:
        return self.source[node.meta.start_pos:node.meta.end_pos]

    def _wrapped_source(self, node: Tree) -> str:
        if node.data == "template":
            parts = self._template_parts(node.children[0])
            if len(parts) == 1 and parts[0][0] == "expr":
                return "${" + parts[0][1] + "}"
        return "${" + self._source_of(node) + "}"

    def _literal(self, node: Tree) -> Value | _NotLiteral:
        """Value of a literal expression, or _NOT_LITERAL."""
        kind = node.data
        if kind == "number":
            return _parse_number(node.children[0])
        if kind == "template":
            parts = self._template_parts(node.children[0])
            if all(part_kind == "text" for part_kind, _ in parts):
                return "".join(text for _, text in parts)
            return _NOT_LITERAL
        if kind == "variable":
            return _LITERAL_NAMES.get(str(node.children[0]), _NOT_LITERAL)
        if kind == "unary_expr":
            op, operand = node.children
            if str(op.children[0]) == "-" and operand.data == "number":
                return -_parse_number(operand.children[0])
            return _NOT_LITERAL
        if kind == "tuple":
            items = [self._literal(child) for child in node.children]
            if any(item is _NOT_LITERAL for item in items):
                return _NOT_LITERAL
            return items
        if kind == "object":
            result: dict[str, Value] = {}
            for elem in node.children:
                key_token, value_node = elem.children
                key = self._literal_key(key_token)
                value = self._literal(value_node)
                if key is _NOT_LITERAL or value is _NOT_LITERAL:
                    return _NOT_LITERAL
                result[key] = value
            return result
        return _NOT_LITERAL

    def _literal_key(self, token: Token) -> str | _NotLiteral:
        if token.type == "IDENTIFIER":
            return str(token)
        parts = _split_template(str(token))
        if all(part_kind == "text" for part_kind, _ in parts):
            return "".join(text for _, text in parts)
        return _NOT_LITERAL

    def _template_parts(self, token: Token) -> list[tuple[str, str]]:
        """Split a template and check every interpolation parses."""
        parts = _split_template(str(token))
        for part_kind, text in parts:
            if part_kind == "expr":
                _parse(text, "expression_start")
        return parts

    # ─── Evaluation ─────────────────────────────────────────────

    def _number(self, node: Tree) -> Value:
        return _parse_number(node.children[0])

    def _template(self, node: Tree) -> Value:
        token = node.children[0]
        parts = _split_template(str(token))
        if len(parts) == 1 and parts[0][0] == "expr":
            return self._interpolate(parts[0][1])
        out: list[str] = []
        for part_kind, text in parts:
            if part_kind == "text":
                out.append(text)
                continue
            value = self._interpolate(text)
            if value is None or isinstance(value, (list, dict)):
                raise DocumentEvaluationError(
                    f"Cannot include {type_name(value)} value in string template "
                    f"at line {token.line}",
                )
            out.append(stringify(value))
        return "".join(out)

    def _interpolate(self, source: str) -> Value:
        tree = _parse(source, "expression_start")
        return _Walker(source, self.context).expression(tree.children[0])

    def _variable(self, node: Tree) -> Value:
        name = str(node.children[0])
        if name in _LITERAL_NAMES:
            return _LITERAL_NAMES[name]
        found, value = self.context.lookup(name)
        if not found:
            raise DocumentEvaluationError(
                f"Unknown variable '{name}' at line {node.children[0].line}",
            )
        return value

    def _function_call(self, node: Tree) -> Value:
        name_tree, *rest = node.children
        *namespace, last = (str(token) for token in name_tree.children)
        name = str(FunctionName(last, tuple(namespace)))
        args: list[Value] = []
        expand = False
        if rest:
            for child in rest[0].children:
                if isinstance(child, Token) and child.type == "ELLIPSIS":
                    expand = True
                else:
                    args.append(self.expression(child))
        if expand:
            spread = args.pop()
            if not isinstance(spread, list):
                raise DocumentEvaluationError(
                    f"Cannot expand {type_name(spread)} into arguments of {name}()",
                )
            args.extend(spread)

        result = self.context.functions.call(name, args)
        if isinstance(result, FunctionError):
            raise from_function_error(name, result.message, result.kind)
        return result

    def _tuple(self, node: Tree) -> Value:
        return [self.expression(child) for child in node.children]

    def _object(self, node: Tree) -> Value:
        result: dict[str, Value] = {}
        for elem in node.children:
            key_token, value_node = elem.children
            if key_token.type == "IDENTIFIER":
                key = str(key_token)
            else:
                key = self._template(Tree("template", [key_token]))
                if not isinstance(key, str):
                    raise DocumentEvaluationError(
                        f"Object key must be a string, got {type_name(key)} "
                        f"at line {key_token.line}",
                    )
            result[key] = self.expression(value_node)
        return result

    def _get_attr(self, node: Tree) -> Value:
        target_node, attr_token = node.children
        target = self.expression(target_node)
        attr = str(attr_token)
        if not isinstance(target, dict):
            raise DocumentEvaluationError(
                f"Cannot access attribute '{attr}' of {type_name(target)} "
                f"at line {attr_token.line}",
            )
        if attr not in target:
            raise DocumentEvaluationError(
                f"Unsupported attribute '{attr}' at line {attr_token.line}",
            )
        return target[attr]

    def _index(self, node: Tree) -> Value:
        target_node, key_node = node.children
        target = self.expression(target_node)
        key = self.expression(key_node)
        if isinstance(target, list):
            position = normalize_number(key) if is_number(key) else None
            if not isinstance(position, int) or not 0 <= position < len(target):
                raise DocumentEvaluationError(
                    f"Invalid index {stringify(key)} for array of length {len(target)}",
                )
            return target[position]
        if isinstance(target, dict):
            if not isinstance(key, str):
                raise DocumentEvaluationError(
                    f"Object key must be a string, got {type_name(key)}",
                )
            if key not in target:
                raise DocumentEvaluationError(f"Object has no key '{key}'")
            return target[key]
        raise DocumentEvaluationError(f"Cannot index {type_name(target)}")

    def _binary(self, node: Tree) -> Value:
        left_node, op_tree, right_node = node.children
        op = str(op_tree.children[0])
        left = self.expression(left_node)
        right = self.expression(right_node)
        if op == "==":
            return values_equal(left, right)
        if op == "!=":
            return not values_equal(left, right)
        if not (is_number(left) and is_number(right)):
            raise DocumentEvaluationError(
                f"Unsupported operand types for '{op}': "
                f"{type_name(left)} and {type_name(right)}",
            )
        return _ARITHMETIC[op](left, right)

    def _logical(self, node: Tree) -> Value:
        left_node, right_node = node.children
        op = "&&" if node.data == "and_op" else "||"
        left = self._boolean(self.expression(left_node), op)
        if op == "&&" and not left:
            return False
        if op == "||" and left:
            return True
        return self._boolean(self.expression(right_node), op)

    def _unary(self, node: Tree) -> Value:
        op_tree, operand_node = node.children
        op = str(op_tree.children[0])
        operand = self.expression(operand_node)
        if op == "!":
            return not self._boolean(operand, op)
        if not is_number(operand):
            raise DocumentEvaluationError(
                f"Unsupported operand type for '-': {type_name(operand)}",
            )
        return -operand

    def _conditional(self, node: Tree) -> Value:
        condition_node, then_node, else_node = node.children
        condition = self._boolean(self.expression(condition_node), "?")
        return self.expression(then_node if condition else else_node)

    @staticmethod
    def _boolean(value: Value, op: str) -> bool:
        if not isinstance(value, bool):
            raise DocumentEvaluationError(
                f"Operator '{op}' requires boolean operands, got {type_name(value)}",
            )
        return value


def _divide(left: int | float, right: int | float) -> int | float:
    if right == 0:
        raise DocumentEvaluationError("Division by zero")
    return normalize_number(left / right)


def _modulo(left: int | float, right: int | float) -> int | float:
    if right == 0:
        raise DocumentEvaluationError("Modulo by zero")
    if isinstance(left, int) and isinstance(right, int):
        remainder = abs(left) % abs(right)
        return -remainder if left < 0 else remainder
    return normalize_number(math.fmod(left, right))


_ARITHMETIC = {
    "+": lambda left, right: left + right,
    "-": lambda left, right: left - right,
    "*": lambda left, right: left * right,
    "/": _divide,
    "%": _modulo,
    "<": lambda left, right: left < right,
    ">": lambda left, right: left > right,
    "<=": lambda left, right: left <= right,
    ">=": lambda left, right: left >= right,
}


# ─── Public API ─────────────────────────────────────────────────

def parse_document(text: str) -> dict[str, Value]:
    """Structural parse: blocks and literals, expressions kept as "${...}" text."""
    tree = _parse(text, "body")
    return _Walker(text, None).body(tree)


def evaluate_document(text: str, context: EvaluationContext) -> dict[str, Value]:
    """Evaluate every expression against the context's variables and functions."""
    tree = _parse(text, "body")
    return _Walker(text, context).body(tree)
