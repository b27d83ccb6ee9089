"""
Parser de expressões do Atlas Stacks.

Converte o texto de uma expressão (valor string de um atributo de
configuração) em uma árvore de nós imutáveis (`core.expr.nodes`),
via descida recursiva sobre caracteres.

Sintaxe suportada (v1):
    - strings: "texto", escapes \\n \\t \\r \\" \\\\ \\uXXXX,
      interpolação "${ expr }" e escape "$${" para um "${" literal
    - números: 1, -2, 3.5, 1e3
    - literais: true, false, null
    - listas: [a, b, ] (vírgula final opcional)
    - objetos: { chave = valor, "chave": valor }
    - referências: nome, nome.atributo, nome[indice]
    - chamadas de função: nome(arg, ...)
    - parênteses e comentários `#` até o fim da linha

Limites explícitos:
    - Não avalia nada (ver `core.expr.evaluator`)
    - Não possui operadores aritméticos, lógicos ou condicionais
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from atlas_stacks.core.exceptions import ParsingConfigError

from .nodes import (
    Call,
    Expr,
    GetAttr,
    Index,
    ListExpr,
    Literal,
    MapExpr,
    SourceRange,
    Template,
    Variable,
)
from .values import NULL, Value


@dataclass(eq=False)
class ExpressionSyntaxError(ParsingConfigError):
    """Texto de expressão sintaticamente inválido."""


_NUMBER_RE = re.compile(r"-?[0-9]+(\.[0-9]+)?([eE][+-]?[0-9]+)?")
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}
_KEYWORDS = {"true": Value.bool_(True), "false": Value.bool_(False), "null": NULL}


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_ident_char(ch: str) -> bool:
    return ch != "" and (ch.isalnum() or ch in "_-")


def _is_digit(ch: str) -> bool:
    return ch != "" and ch in "0123456789"


class _Parser:
    def __init__(self, source: str, origin: str, line: Optional[int], column: Optional[int]) -> None:
        self.src = source
        self.pos = 0
        self.origin = origin
        self.base_line = line
        self.base_column = column

    # -----------------------------
    # Posições e erros
    # -----------------------------
    def _range(self, pos: int) -> SourceRange:
        line = self.src.count("\n", 0, pos) + 1
        column = pos - (self.src.rfind("\n", 0, pos) + 1) + 1
        if self.base_line is None:
            return SourceRange(self.origin, line, column)
        if line == 1 and self.base_column is not None:
            return SourceRange(self.origin, self.base_line, self.base_column + column - 1)
        return SourceRange(self.origin, self.base_line + line - 1, column)

    def _fail(self, message: str, pos: Optional[int] = None) -> ExpressionSyntaxError:
        where = self._range(self.pos if pos is None else pos)
        return ExpressionSyntaxError(
            message=f"{where}: {message}",
            details={"origin": where.origin, "line": where.line, "column": where.column},
        )

    # -----------------------------
    # Primitivas de leitura
    # -----------------------------
    def _peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        return self.src[i] if i < len(self.src) else ""

    def _skip_ws(self) -> None:
        while self.pos < len(self.src):
            ch = self.src[self.pos]
            if ch.isspace():
                self.pos += 1
            elif ch == "#":
                end = self.src.find("\n", self.pos)
                self.pos = len(self.src) if end < 0 else end + 1
            else:
                break

    def _expect(self, ch: str) -> None:
        self._skip_ws()
        if self._peek() != ch:
            found = self._peek() or "end of expression"
            raise self._fail(f"expected '{ch}', found '{found}'")
        self.pos += 1

    # -----------------------------
    # Gramática
    # -----------------------------
    def parse(self) -> Expr:
        self._skip_ws()
        if self.pos >= len(self.src):
            raise self._fail("empty expression")
        expr = self._expression()
        self._skip_ws()
        if self.pos < len(self.src):
            raise self._fail(f"unexpected trailing input '{self.src[self.pos:self.pos + 10]}'")
        return expr

    def _expression(self) -> Expr:
        node = self._primary()
        while True:
            self._skip_ws()
            ch = self._peek()
            start = self.pos
            if ch == ".":
                self.pos += 1
                self._skip_ws()
                if _is_digit(self._peek()):
                    key = Literal(Value.number(self._to_number(self._digits())), self._range(start))
                    node = Index(node, key, self._range(start))
                else:
                    node = GetAttr(node, self._ident(), self._range(start))
            elif ch == "[":
                self.pos += 1
                key = self._expression()
                self._expect("]")
                node = Index(node, key, self._range(start))
            else:
                return node

    def _primary(self) -> Expr:
        self._skip_ws()
        ch = self._peek()
        start = self.pos
        if ch == "":
            raise self._fail("unexpected end of expression")
        if ch == '"':
            return self._string()
        if _is_digit(ch) or (ch == "-" and _is_digit(self._peek(1))):
            return self._number()
        if ch == "[":
            return self._list()
        if ch == "{":
            return self._map()
        if ch == "(":
            self.pos += 1
            inner = self._expression()
            self._expect(")")
            return inner
        if _is_ident_start(ch):
            name = self._ident()
            if name in _KEYWORDS:
                return Literal(_KEYWORDS[name], self._range(start))
            save = self.pos
            while self._peek() in (" ", "\t"):
                self.pos += 1
            if self._peek() == "(":
                self.pos += 1
                return Call(name, self._args(), self._range(start))
            self.pos = save
            return Variable(name, self._range(start))
        raise self._fail(f"unexpected character '{ch}'")

    def _ident(self) -> str:
        start = self.pos
        if not _is_ident_start(self._peek()):
            raise self._fail("expected identifier")
        while _is_ident_char(self._peek()):
            self.pos += 1
        return self.src[start:self.pos]

    def _digits(self) -> str:
        start = self.pos
        while _is_digit(self._peek()):
            self.pos += 1
        return self.src[start:self.pos]

    def _number(self) -> Literal:
        m = _NUMBER_RE.match(self.src, self.pos)
        if m is None:  # pragma: no cover
            raise self._fail("invalid number")
        start = self.pos
        self.pos = m.end()
        text = m.group(0)
        value = float(text) if (m.group(1) or m.group(2)) else self._to_number(text)
        return Literal(Value.number(value), self._range(start))

    def _to_number(self, digits: str) -> int:
        try:
            return int(digits)
        except ValueError as e:
            raise self._fail(f"invalid number: {e}") from e

    def _args(self) -> Tuple[Expr, ...]:
        args: List[Expr] = []
        self._skip_ws()
        if self._peek() == ")":
            self.pos += 1
            return ()
        while True:
            args.append(self._expression())
            self._skip_ws()
            ch = self._peek()
            if ch == ",":
                self.pos += 1
                self._skip_ws()
                if self._peek() == ")":
                    self.pos += 1
                    return tuple(args)
            elif ch == ")":
                self.pos += 1
                return tuple(args)
            else:
                raise self._fail(f"expected ',' or ')' in function arguments, found '{ch or 'end of expression'}'")

    def _list(self) -> ListExpr:
        start = self.pos
        self.pos += 1
        items: List[Expr] = []
        while True:
            self._skip_ws()
            if self._peek() == "]":
                self.pos += 1
                return ListExpr(tuple(items), self._range(start))
            items.append(self._expression())
            self._skip_ws()
            ch = self._peek()
            if ch == ",":
                self.pos += 1
            elif ch != "]":
                raise self._fail(f"expected ',' or ']' in list, found '{ch or 'end of expression'}'")

    def _map(self) -> MapExpr:
        start = self.pos
        self.pos += 1
        entries: List[Tuple[str, Expr]] = []
        seen = set()
        while True:
            self._skip_ws()
            ch = self._peek()
            if ch == "}":
                self.pos += 1
                return MapExpr(tuple(entries), self._range(start))
            key_pos = self.pos
            if ch == '"':
                key_node = self._string()
                if not isinstance(key_node, Literal):
                    raise self._fail("object keys cannot use interpolation", key_pos)
                key = key_node.value.as_string()
            elif _is_ident_start(ch):
                key = self._ident()
            else:
                raise self._fail(f"expected object key, found '{ch or 'end of expression'}'")
            if key in seen:
                raise self._fail(f"duplicate object key '{key}'", key_pos)
            seen.add(key)
            self._skip_ws()
            if self._peek() not in ("=", ":"):
                raise self._fail(f"expected '=' or ':' after object key '{key}'")
            self.pos += 1
            entries.append((key, self._expression()))
            self._skip_ws()
            if self._peek() == ",":
                self.pos += 1

    def _string(self) -> Expr:
        start = self.pos
        self.pos += 1
        parts: List[Expr] = []
        buf: List[str] = []
        while True:
            ch = self._peek()
            if ch == "":
                raise self._fail("unterminated string", start)
            if ch == '"':
                self.pos += 1
                break
            if ch == "\\":
                esc = self._peek(1)
                if esc in _ESCAPES:
                    buf.append(_ESCAPES[esc])
                    self.pos += 2
                elif esc == "u":
                    code = self.src[self.pos + 2:self.pos + 6]
                    if len(code) != 4 or not all(c in "0123456789abcdefABCDEF" for c in code):
                        raise self._fail("invalid unicode escape")
                    buf.append(chr(int(code, 16)))
                    self.pos += 6
                else:
                    raise self._fail(f"invalid escape sequence '\\{esc}'")
                continue
            if self.src.startswith("$${", self.pos):
                buf.append("${")
                self.pos += 3
                continue
            if self.src.startswith("${", self.pos):
                if buf:
                    parts.append(Literal(Value.string("".join(buf))))
                    buf = []
                self.pos += 2
                parts.append(self._expression())
                self._expect("}")
                continue
            buf.append(ch)
            self.pos += 1

        if not parts:
            return Literal(Value.string("".join(buf)), self._range(start))
        if buf:
            parts.append(Literal(Value.string("".join(buf))))
        return Template(tuple(parts), self._range(start))


def parse_expression(
    source: str,
    *,
    origin: str = "<expression>",
    line: Optional[int] = None,
    column: Optional[int] = None,
) -> Expr:
    """Parseia o texto de uma expressão.

    Args:
        source: texto da expressão.
        origin: arquivo (ou rótulo) de onde a expressão veio.
        line/column: posição do texto dentro de `origin`, quando conhecida.

    Raises:
        ExpressionSyntaxError: se o texto não for uma expressão válida.
    """
    if not isinstance(source, str):
        raise TypeError(f"expression source must be str, got {type(source).__name__}")
    return _Parser(source, origin, line, column).parse()
