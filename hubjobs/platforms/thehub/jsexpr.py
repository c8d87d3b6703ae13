"""Capability-free evaluator for serialized JavaScript state payloads.

Nuxt serializes its server state as an immediately-invoked function whose
parameters stand in for repeated literal values:

    (function(a,b,c){return {title:a,company:{name:b},tags:[a,c]}}("x","y",null))

This module evaluates that micro-language without a JavaScript engine.
Supported: literals, arrays, objects, parameter binding, member access and
member assignment, ``var``/``let``/``const``, ``while`` and ``for(;;)`` loops,
``!``/``-``/``+``/``void``/``typeof`` unary operators and ``new Date(...)``.
There are no global names and no callable values other than function
expressions, so a payload cannot reach anything outside its own literals.

Every evaluation step checks a wall-clock deadline.
"""

import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


class JsSyntaxError(ValueError):
    """The payload uses syntax outside the supported subset."""


class JsEvaluationError(ValueError):
    """The payload raised while being evaluated."""


class JsTimeoutError(TimeoutError):
    """Evaluation exceeded its wall-clock budget."""


class _Undefined:
    _instance: "_Undefined | None" = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()

_TICK_EVERY = 4096
_MAX_ARRAY_LENGTH = 1_000_000
_PUNCTUATORS = ("===", "!==", "==", "!=", "(", ")", "[", "]", "{", "}", ",", ";", ":", ".", "=", "!", "-", "+")
_SIMPLE_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0",
}
_RESERVED = {
    "function", "return", "var", "let", "const", "while", "for", "new",
    "void", "typeof", "true", "false", "null",
}


@dataclass(slots=True)
class Token:
    kind: str  # "num" | "str" | "name" | "punct" | "eof"
    value: Any
    pos: int


# --- Tokenizer ---


def tokenize(source: str, clock: "_Deadline | None" = None) -> list[Token]:
    """Split a payload into tokens, decoding string and number literals.

    With a ``clock``, the deadline is checked every ``_TICK_EVERY`` steps.
    """
    tokens: list[Token] = []
    i = 0
    n = len(source)
    steps = 0
    while i < n:
        steps += 1
        if clock is not None and steps % _TICK_EVERY == 0:
            clock.tick()
        ch = source[i]
        if ch.isspace():
            i += 1
            continue
        if source.startswith("//", i):
            end = source.find("\n", i)
            i = n if end == -1 else end + 1
            continue
        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            if end == -1:
                raise JsSyntaxError(f"Unterminated comment at {i}")
            i = end + 2
            continue
        if ch in "\"'`":
            value, i_next = _read_string(source, i)
            tokens.append(Token("str", value, i))
            i = i_next
            continue
        if ch.isdigit() or (ch == "." and i + 1 < n and source[i + 1].isdigit()):
            value, i_next = _read_number(source, i)
            tokens.append(Token("num", value, i))
            i = i_next
            continue
        if ch.isalpha() or ch in "_$":
            j = i + 1
            while j < n and (source[j].isalnum() or source[j] in "_$"):
                j += 1
            tokens.append(Token("name", source[i:j], i))
            i = j
            continue
        for punct in _PUNCTUATORS:
            if source.startswith(punct, i):
                tokens.append(Token("punct", punct, i))
                i += len(punct)
                break
        else:
            raise JsSyntaxError(f"Unexpected character {ch!r} at {i}")
    tokens.append(Token("eof", None, n))
    return tokens


def _read_string(source: str, start: int) -> tuple[str, int]:
    quote = source[start]
    units: list[str] = []
    i = start + 1
    n = len(source)
    while i < n:
        ch = source[i]
        if ch == quote:
            text = "".join(units)
            return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "replace"), i + 1
        if quote == "`" and source.startswith("${", i):
            raise JsSyntaxError(f"Template substitutions are not supported (at {i})")
        if ch == "\\":
            i += 1
            if i >= n:
                break
            esc = source[i]
            if esc in _SIMPLE_ESCAPES:
                units.append(_SIMPLE_ESCAPES[esc])
                i += 1
            elif esc == "x":
                units.append(chr(_hex(source[i + 1:i + 3], i)))
                i += 3
            elif esc == "u":
                if source.startswith("{", i + 1):
                    end = source.find("}", i + 2)
                    if end == -1:
                        raise JsSyntaxError(f"Bad unicode escape at {i}")
                    units.append(_code_point(_hex(source[i + 2:end], i), i))
                    i = end + 1
                else:
                    units.append(chr(_hex(source[i + 1:i + 5], i)))
                    i += 5
            elif esc == "\r":
                i += 2 if source.startswith("\r\n", i) else 1
            elif esc in "\n\u2028\u2029":
                i += 1
            else:
                units.append(esc)
                i += 1
            continue
        if ch == "\n" and quote != "`":
            raise JsSyntaxError(f"Unterminated string at {start}")
        units.append(ch)
        i += 1
    raise JsSyntaxError(f"Unterminated string at {start}")


def _hex(digits: str, pos: int) -> int:
    try:
        return int(digits, 16)
    except ValueError:
        raise JsSyntaxError(f"Bad escape sequence at {pos}") from None


def _code_point(value: int, pos: int) -> str:
    if value > 0x10FFFF:
        raise JsSyntaxError(f"Code point out of range at {pos}")
    return chr(value)


def _read_number(source: str, start: int) -> tuple[int | float, int]:
    n = len(source)
    if source.startswith(("0x", "0X"), start):
        j = start + 2
        while j < n and source[j] in "0123456789abcdefABCDEF":
            j += 1
        if j == start + 2:
            raise JsSyntaxError(f"Missing hexadecimal digits at {start}")
        return int(source[start + 2:j], 16), j
    j = start
    while j < n and source[j].isdigit():
        j += 1
    is_float = False
    if j < n and source[j] == ".":
        is_float = True
        j += 1
        while j < n and source[j].isdigit():
            j += 1
    if j < n and source[j] in "eE":
        k = j + 1
        if k < n and source[k] in "+-":
            k += 1
        if k < n and source[k].isdigit():
            is_float = True
            j = k
            while j < n and source[j].isdigit():
                j += 1
    text = source[start:j]
    if is_float:
        value = float(text)
        return (int(value) if value.is_integer() else value), j
    return int(text), j


# --- AST ---


@dataclass(slots=True)
class Literal:
    value: Any


@dataclass(slots=True)
class Name:
    id: str


@dataclass(slots=True)
class ArrayLit:
    items: list[Any]


@dataclass(slots=True)
class ObjectLit:
    props: list[tuple[str, Any]]


@dataclass(slots=True)
class Member:
    obj: Any
    prop: Any


@dataclass(slots=True)
class Call:
    callee: Any
    args: list[Any]


@dataclass(slots=True)
class New:
    name: str
    args: list[Any]


@dataclass(slots=True)
class Unary:
    op: str
    operand: Any


@dataclass(slots=True)
class Compare:
    op: str
    left: Any
    right: Any


@dataclass(slots=True)
class FunctionExpr:
    params: list[str]
    body: list[Any]


@dataclass(slots=True)
class Return:
    value: Any


@dataclass(slots=True)
class Assign:
    target: Any
    value: Any


@dataclass(slots=True)
class VarDecl:
    names: list[tuple[str, Any]]


@dataclass(slots=True)
class While:
    cond: Any
    body: list[Any]


@dataclass(slots=True)
class ExprStmt:
    expr: Any


# --- Parser ---


class Parser:
    """Recursive-descent parser for the supported subset."""

    def __init__(self, tokens: list[Token], clock: "_Deadline") -> None:
        self._tokens = tokens
        self._i = 0
        self._clock = clock

    def parse_program(self) -> Any:
        expr = self.parse_expression()
        while self._accept("punct", ";"):
            pass
        self._expect("eof")
        return expr

    # Token helpers

    def _peek(self, offset: int = 0) -> Token:
        return self._tokens[min(self._i + offset, len(self._tokens) - 1)]

    def _next(self) -> Token:
        self._clock.tick()
        tok = self._tokens[self._i]
        if tok.kind != "eof":
            self._i += 1
        return tok

    def _at(self, kind: str, value: Any = None) -> bool:
        tok = self._peek()
        return tok.kind == kind and (value is None or tok.value == value)

    def _accept(self, kind: str, value: Any = None) -> Token | None:
        if self._at(kind, value):
            return self._next()
        return None

    def _expect(self, kind: str, value: Any = None) -> Token:
        tok = self._peek()
        if not self._at(kind, value):
            wanted = value if value is not None else kind
            raise JsSyntaxError(f"Expected {wanted!r} at {tok.pos}, got {tok.value!r}")
        return self._next()

    # Expressions

    def parse_expression(self) -> Any:
        left = self._parse_unary()
        if self._peek().kind == "punct" and self._peek().value in ("===", "!==", "==", "!="):
            op = self._next().value
            return Compare(op, left, self._parse_unary())
        return left

    def _parse_unary(self) -> Any:
        tok = self._peek()
        if tok.kind == "punct" and tok.value in ("!", "-", "+"):
            self._next()
            return Unary(tok.value, self._parse_unary())
        if tok.kind == "name" and tok.value in ("void", "typeof"):
            self._next()
            return Unary(tok.value, self._parse_unary())
        return self._parse_postfix()

    def _parse_postfix(self) -> Any:
        node = self._parse_primary()
        while True:
            if self._accept("punct", "."):
                name = self._expect("name")
                node = Member(node, Literal(name.value))
            elif self._accept("punct", "["):
                prop = self.parse_expression()
                self._expect("punct", "]")
                node = Member(node, prop)
            elif self._accept("punct", "("):
                node = Call(node, self._parse_args())
            else:
                return node

    def _parse_args(self) -> list[Any]:
        args: list[Any] = []
        while not self._accept("punct", ")"):
            args.append(self.parse_expression())
            if not self._accept("punct", ","):
                self._expect("punct", ")")
                break
        return args

    def _parse_primary(self) -> Any:
        tok = self._next()
        if tok.kind in ("num", "str"):
            return Literal(tok.value)
        if tok.kind == "punct":
            if tok.value == "(":
                expr = self.parse_expression()
                self._expect("punct", ")")
                return expr
            if tok.value == "[":
                return self._parse_array()
            if tok.value == "{":
                return self._parse_object()
        if tok.kind == "name":
            if tok.value == "true":
                return Literal(True)
            if tok.value == "false":
                return Literal(False)
            if tok.value == "null":
                return Literal(None)
            if tok.value == "function":
                return self._parse_function()
            if tok.value == "new":
                name = self._expect("name").value
                args = self._parse_args() if self._accept("punct", "(") else []
                return New(name, args)
            if tok.value in _RESERVED:
                raise JsSyntaxError(f"Unexpected keyword {tok.value!r} at {tok.pos}")
            return Name(tok.value)
        raise JsSyntaxError(f"Unexpected token {tok.value!r} at {tok.pos}")

    def _parse_array(self) -> ArrayLit:
        items: list[Any] = []
        while not self._accept("punct", "]"):
            if self._at("punct", ","):
                self._next()
                items.append(None)  # hole
                continue
            items.append(self.parse_expression())
            if not self._accept("punct", ","):
                self._expect("punct", "]")
                break
        return ArrayLit(items)

    def _parse_object(self) -> ObjectLit:
        props: list[tuple[str, Any]] = []
        while not self._accept("punct", "}"):
            tok = self._next()
            if tok.kind == "name":
                key = tok.value
                if not self._at("punct", ":"):
                    props.append((key, Name(key)))
                    if not self._accept("punct", ","):
                        self._expect("punct", "}")
                        break
                    continue
            elif tok.kind == "str":
                key = tok.value
            elif tok.kind == "num":
                key = _number_key(tok.value)
            else:
                raise JsSyntaxError(f"Bad object key {tok.value!r} at {tok.pos}")
            self._expect("punct", ":")
            props.append((key, self.parse_expression()))
            if not self._accept("punct", ","):
                self._expect("punct", "}")
                break
        return ObjectLit(props)

    def _parse_function(self) -> FunctionExpr:
        if self._at("name"):
            self._next()  # function name is irrelevant
        self._expect("punct", "(")
        params: list[str] = []
        while not self._accept("punct", ")"):
            params.append(self._expect("name").value)
            if not self._accept("punct", ","):
                self._expect("punct", ")")
                break
        return FunctionExpr(params, self._parse_block())

    # Statements

    def _parse_block(self) -> list[Any]:
        self._expect("punct", "{")
        body: list[Any] = []
        while not self._accept("punct", "}"):
            stmt = self._parse_statement()
            if stmt is not None:
                body.append(stmt)
        return body

    def _parse_statement(self) -> Any:
        if self._accept("punct", ";"):
            return None
        tok = self._peek()
        if tok.kind == "punct" and tok.value == "{":
            raise JsSyntaxError(f"Nested blocks are not supported (at {tok.pos})")
        if tok.kind == "name":
            if tok.value == "return":
                self._next()
                value = Literal(UNDEFINED) if self._at("punct", ";") or self._at("punct", "}") else self.parse_expression()
                self._accept("punct", ";")
                return Return(value)
            if tok.value in ("var", "let", "const"):
                self._next()
                return self._parse_var_decl()
            if tok.value == "while":
                self._next()
                self._expect("punct", "(")
                cond = self.parse_expression()
                self._expect("punct", ")")
                return While(cond, self._parse_loop_body())
            if tok.value == "for":
                self._next()
                return self._parse_for()
        expr = self.parse_expression()
        if self._accept("punct", "="):
            if not isinstance(expr, (Name, Member)):
                raise JsSyntaxError(f"Invalid assignment target at {tok.pos}")
            stmt: Any = Assign(expr, self.parse_expression())
        else:
            stmt = ExprStmt(expr)
        self._accept("punct", ";")
        return stmt

    def _parse_var_decl(self) -> VarDecl:
        names: list[tuple[str, Any]] = []
        while True:
            name = self._expect("name").value
            value = self.parse_expression() if self._accept("punct", "=") else None
            names.append((name, value))
            if not self._accept("punct", ","):
                break
        self._accept("punct", ";")
        return VarDecl(names)

    def _parse_for(self) -> While:
        self._expect("punct", "(")
        if not self._accept("punct", ";"):
            raise JsSyntaxError("Only for(;cond;) loops are supported")
        cond: Any = Literal(True)
        if not self._at("punct", ";"):
            cond = self.parse_expression()
        self._expect("punct", ";")
        self._expect("punct", ")")
        return While(cond, self._parse_loop_body())

    def _parse_loop_body(self) -> list[Any]:
        if self._at("punct", "{"):
            return self._parse_block()
        stmt = self._parse_statement()
        return [] if stmt is None else [stmt]


def _number_key(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# --- Evaluator ---


class _Deadline:
    def __init__(self, timeout: float) -> None:
        self._deadline = time.monotonic() + timeout
        self._timeout = timeout

    def tick(self) -> None:
        if time.monotonic() > self._deadline:
            raise JsTimeoutError(f"Evaluation exceeded {self._timeout:.3f}s")


@dataclass
class Scope:
    vars: dict[str, Any] = field(default_factory=dict)
    parent: "Scope | None" = None

    def lookup(self, name: str) -> Any:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.vars:
                return scope.vars[name]
            scope = scope.parent
        if name == "undefined":
            return UNDEFINED
        if name == "NaN":
            return math.nan
        if name == "Infinity":
            return math.inf
        raise JsEvaluationError(f"ReferenceError: {name} is not defined")

    def assign(self, name: str, value: Any) -> None:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.vars:
                scope.vars[name] = value
                return
            scope = scope.parent
        raise JsEvaluationError(f"ReferenceError: assignment to undeclared {name}")


@dataclass
class JsFunction:
    params: list[str]
    body: list[Any]
    closure: Scope


_NO_RETURN = object()


class Evaluator:
    """Walks the AST. Each node visit checks the deadline."""

    def __init__(self, clock: _Deadline) -> None:
        self._clock = clock

    def eval(self, node: Any, scope: Scope) -> Any:
        self._clock.tick()
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Name):
            return scope.lookup(node.id)
        if isinstance(node, ArrayLit):
            return [UNDEFINED if item is None else self.eval(item, scope) for item in node.items]
        if isinstance(node, ObjectLit):
            return {key: self.eval(value, scope) for key, value in node.props}
        if isinstance(node, Member):
            return _get_member(self.eval(node.obj, scope), self.eval(node.prop, scope))
        if isinstance(node, Unary):
            return self._eval_unary(node, scope)
        if isinstance(node, Compare):
            return _compare(node.op, self.eval(node.left, scope), self.eval(node.right, scope))
        if isinstance(node, FunctionExpr):
            return JsFunction(node.params, node.body, scope)
        if isinstance(node, Call):
            callee = self.eval(node.callee, scope)
            args = [self.eval(a, scope) for a in node.args]
            return self.call(callee, args)
        if isinstance(node, New):
            return self._eval_new(node, scope)
        raise JsEvaluationError(f"Unsupported node {type(node).__name__}")

    def call(self, callee: Any, args: list[Any]) -> Any:
        if not isinstance(callee, JsFunction):
            raise JsEvaluationError(f"TypeError: {_type_name(callee)} is not a function")
        local = Scope(parent=callee.closure)
        for index, param in enumerate(callee.params):
            local.vars[param] = args[index] if index < len(args) else UNDEFINED
        result = self.run(callee.body, local)
        return UNDEFINED if result is _NO_RETURN else result

    def run(self, body: list[Any], scope: Scope) -> Any:
        for stmt in body:
            self._clock.tick()
            if isinstance(stmt, Return):
                return self.eval(stmt.value, scope)
            if isinstance(stmt, Assign):
                self._assign(stmt, scope)
            elif isinstance(stmt, VarDecl):
                for name, value in stmt.names:
                    scope.vars[name] = UNDEFINED if value is None else self.eval(value, scope)
            elif isinstance(stmt, While):
                while truthy(self.eval(stmt.cond, scope)):
                    result = self.run(stmt.body, scope)
                    if result is not _NO_RETURN:
                        return result
            elif isinstance(stmt, ExprStmt):
                self.eval(stmt.expr, scope)
            else:
                raise JsEvaluationError(f"Unsupported statement {type(stmt).__name__}")
        return _NO_RETURN

    def _assign(self, stmt: Assign, scope: Scope) -> None:
        value = self.eval(stmt.value, scope)
        target = stmt.target
        if isinstance(target, Name):
            scope.assign(target.id, value)
            return
        obj = self.eval(target.obj, scope)
        prop = self.eval(target.prop, scope)
        if isinstance(obj, dict):
            obj[_property_key(prop)] = value
        elif isinstance(obj, list) and _is_index(prop):
            index = _array_length(int(prop) + 1) - 1
            if index >= len(obj):
                obj.extend([UNDEFINED] * (index + 1 - len(obj)))
            obj[index] = value
        else:
            raise JsEvaluationError(f"TypeError: cannot set property {prop!r} of {_type_name(obj)}")

    def _eval_unary(self, node: Unary, scope: Scope) -> Any:
        value = self.eval(node.operand, scope)
        if node.op == "!":
            return not truthy(value)
        if node.op == "void":
            return UNDEFINED
        if node.op == "typeof":
            return _type_name(value)
        number = _to_number(value)
        return -number if node.op == "-" else number

    def _eval_new(self, node: New, scope: Scope) -> Any:
        args = [self.eval(a, scope) for a in node.args]
        if node.name == "Date":
            return _date_to_iso(args)
        if node.name == "Object" and not args:
            return {}
        if node.name == "Array":
            if len(args) == 1 and _is_index(args[0]):
                return [UNDEFINED] * _array_length(int(args[0]))
            return list(args)
        raise JsEvaluationError(f"Constructor {node.name} is not available")


def truthy(value: Any) -> bool:
    if value is None or value is UNDEFINED or value is False:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def _to_number(value: Any) -> int | float:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return 0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            try:
                return float(text)
            except ValueError:
                return math.nan
    return math.nan


def _compare(op: str, left: Any, right: Any) -> bool:
    strict_equal = left == right and type(left) is type(right)
    if op == "===":
        return strict_equal
    if op == "!==":
        return not strict_equal
    if op == "==":
        return left == right
    return left != right


def _type_name(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, JsFunction):
        return "function"
    return "object"


def _is_index(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and float(value).is_integer() and value >= 0


def _array_length(length: int) -> int:
    if length > _MAX_ARRAY_LENGTH:
        raise JsEvaluationError(f"RangeError: array length {length} exceeds {_MAX_ARRAY_LENGTH}")
    return length


def _property_key(prop: Any) -> str:
    if isinstance(prop, str):
        return prop
    if isinstance(prop, bool):
        return "true" if prop else "false"
    if isinstance(prop, (int, float)):
        return _number_key(prop)
    if prop is None:
        return "null"
    if prop is UNDEFINED:
        return "undefined"
    raise JsEvaluationError(f"Unsupported property key {prop!r}")


def _get_member(obj: Any, prop: Any) -> Any:
    if obj is None or obj is UNDEFINED:
        raise JsEvaluationError(f"TypeError: cannot read property {prop!r} of {_type_name(obj)}")
    if isinstance(obj, list):
        if _is_index(prop):
            index = int(prop)
            return obj[index] if index < len(obj) else UNDEFINED
        if prop == "length":
            return len(obj)
        return UNDEFINED
    if isinstance(obj, str):
        if prop == "length":
            return len(obj)
        if _is_index(prop) and int(prop) < len(obj):
            return obj[int(prop)]
        return UNDEFINED
    if isinstance(obj, dict):
        return obj.get(_property_key(prop), UNDEFINED)
    return UNDEFINED


def _date_to_iso(args: list[Any]) -> str:
    if not args:
        msg = "new Date() without arguments depends on the current time"
        raise JsEvaluationError(msg)
    value = args[0]
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise JsEvaluationError(f"Invalid time value {value!r}") from None
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    raise JsEvaluationError(f"Unsupported Date argument {value!r}")


def to_python(value: Any) -> Any:
    """Convert an evaluated value to plain JSON-like Python data.

    ``undefined`` object members are dropped and ``undefined`` array items
    become None, as ``JSON.stringify`` does.
    """
    return _to_python(value, set())


def _to_python(value: Any, active: set[int]) -> Any:
    if isinstance(value, dict):
        if id(value) in active:
            raise JsEvaluationError("Cyclic structure cannot be converted")
        active.add(id(value))
        out = {k: _to_python(v, active) for k, v in value.items() if v is not UNDEFINED and not isinstance(v, JsFunction)}
        active.discard(id(value))
        return out
    if isinstance(value, list):
        if id(value) in active:
            raise JsEvaluationError("Cyclic structure cannot be converted")
        active.add(id(value))
        out_list = [None if v is UNDEFINED or isinstance(v, JsFunction) else _to_python(v, active) for v in value]
        active.discard(id(value))
        return out_list
    if value is UNDEFINED or isinstance(value, JsFunction):
        return None
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    return value


def evaluate_expression(source: str, *, timeout: float) -> Any:
    """Parse and evaluate one expression, returning plain Python data.

    Raises JsSyntaxError, JsEvaluationError, or JsTimeoutError.
    """
    clock = _Deadline(timeout)
    clock.tick()
    try:
        tree = Parser(tokenize(source, clock), clock).parse_program()
        value = Evaluator(clock).eval(tree, Scope())
        return to_python(value)
    except RecursionError:
        raise JsEvaluationError("Payload nesting is too deep") from None
