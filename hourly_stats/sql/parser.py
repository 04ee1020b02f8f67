"""Parse MySQL ``CREATE TABLE`` statements.

``sqlparse`` splits the text into statements and lexes it (quoting,
comments, keywords); this module walks the lexed tokens of each statement
and builds the tree in :mod:`hourly_stats.sql.ast`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import sqlparse
from sqlparse import sql as sqlparse_sql
from sqlparse import tokens as T
from sqlparse.exceptions import SQLParseError

from hourly_stats.core.errors import ParseError

from .ast import (
    ColumnDef,
    ColumnOption,
    ColumnOptionKind,
    ConstraintKind,
    CreateTableStatement,
    SqlType,
    Statement,
    TableConstraint,
)

# Words that open a table-level constraint instead of a column definition.
_CONSTRAINT_WORDS = {
    "PRIMARY",
    "UNIQUE",
    "KEY",
    "INDEX",
    "CONSTRAINT",
    "FOREIGN",
    "FULLTEXT",
    "SPATIAL",
}

_REFERENCE_ACTIONS = (
    ("CASCADE",),
    ("RESTRICT",),
    ("SET", "NULL"),
    ("SET", "DEFAULT"),
    ("NO", "ACTION"),
)


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int
    column: int

    @property
    def is_identifier(self) -> bool:
        return self.kind in ("word", "quoted")

    def is_keyword(self, *words: str) -> bool:
        return self.kind == "word" and self.value.upper() in words

    def is_punct(self, value: str) -> bool:
        return self.kind == "punct" and self.value == value

    def describe(self) -> str:
        if self.kind == "eof":
            return "end of input"
        return repr(self.value)


class _Position:
    """Tracks the 1-based line and column while walking the source text."""

    def __init__(self) -> None:
        self.line = 1
        self.column = 1

    def advance(self, text: str) -> None:
        newlines = text.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(text) - text.rfind("\n")
        else:
            self.column += len(text)


def _convert(leaf: sqlparse_sql.Token, position: _Position) -> Iterator[Token]:
    ttype, value = leaf.ttype, leaf.value
    line, column = position.line, position.column
    if leaf.is_whitespace or ttype in T.Comment:
        return
    if ttype in T.Error:
        raise ParseError(f"unexpected character {value!r}", line, column)
    if ttype in T.String.Single:
        body = value[1:-1].replace("''", "'")
        yield Token("string", re.sub(r"\\(.)", r"\1", body), line, column)
    elif ttype in T.String.Symbol:
        yield Token("quoted", value[1:-1].replace('""', '"'), line, column)
    elif ttype in T.Name and value.startswith("`"):
        yield Token("quoted", value[1:-1].replace("``", "`"), line, column)
    elif ttype in T.Number:
        yield Token("number", value, line, column)
    elif ttype in T.Punctuation or (ttype in T.Operator.Comparison and value == "="):
        yield Token("punct", value, line, column)
    elif ttype in T.Keyword or ttype in T.Name:
        # multi-word keywords such as ``NOT NULL`` or ``PRIMARY KEY`` come as one token
        for word in re.finditer(r"\S+", value):
            offset = value[: word.start()]
            if "\n" in offset:
                word_line = line + offset.count("\n")
                word_column = len(offset) - offset.rfind("\n")
            else:
                word_line, word_column = line, column + len(offset)
            yield Token("word", word.group(), word_line, word_column)
    else:
        yield Token("other", value, line, column)


def _statement_tokens(
    statement: sqlparse_sql.Statement, position: _Position
) -> list[Token]:
    tokens: list[Token] = []
    for leaf in statement.flatten():
        tokens.extend(_convert(leaf, position))
        position.advance(leaf.value)
    return tokens


def _split(sql: str) -> Iterator[tuple[sqlparse_sql.Statement, list[Token]]]:
    try:
        statements = sqlparse.parse(sql)
    except SQLParseError as exc:
        raise ParseError(f"could not split statements: {exc}") from exc
    position = _Position()
    for statement in statements:
        tokens = _statement_tokens(statement, position)
        if tokens and tokens[-1].is_punct(";"):
            tokens.pop()
        if tokens:
            yield statement, tokens


def tokenize(sql: str) -> list[Token]:
    """Lex ``sql`` into tokens without whitespace and comments."""

    tokens: list[Token] = []
    position = _Position()
    try:
        statements = sqlparse.parse(sql)
    except SQLParseError as exc:
        raise ParseError(f"could not split statements: {exc}") from exc
    for statement in statements:
        tokens.extend(_statement_tokens(statement, position))
    tokens.append(Token("eof", "", position.line, position.column))
    return tokens


class _Parser:
    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens = list(tokens)
        last = self._tokens[-1] if self._tokens else None
        end_column = last.column + len(last.value) if last is not None else 1
        self._tokens.append(Token("eof", "", last.line if last else 1, end_column))
        self._index = 0

    # token helpers -------------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        index = min(self._index + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def advance(self) -> Token:
        token = self.peek()
        if token.kind != "eof":
            self._index += 1
        return token

    def error(self, expected: str, token: Optional[Token] = None) -> ParseError:
        token = token or self.peek()
        return ParseError(f"expected {expected}, found {token.describe()}", token.line, token.column)

    def accept_keyword(self, *words: str) -> bool:
        """Consume the keyword sequence ``words`` if it comes next."""

        for offset, word in enumerate(words):
            if not self.peek(offset).is_keyword(word):
                return False
        for _ in words:
            self.advance()
        return True

    def expect_keyword(self, *words: str) -> None:
        for word in words:
            if not self.peek().is_keyword(word):
                raise self.error(word)
            self.advance()

    def accept_punct(self, value: str) -> bool:
        if self.peek().is_punct(value):
            self.advance()
            return True
        return False

    def expect_punct(self, value: str) -> None:
        if not self.accept_punct(value):
            raise self.error(repr(value))

    def expect_identifier(self, what: str = "identifier") -> str:
        token = self.peek()
        if not token.is_identifier:
            raise self.error(what)
        self.advance()
        return token.value

    def expect_integer(self) -> int:
        token = self.peek()
        if token.kind != "number" or not re.fullmatch(r"[+-]?\d+", token.value):
            raise self.error("integer")
        self.advance()
        return int(token.value)

    def expect_end(self) -> None:
        if self.peek().kind != "eof":
            raise self.error("';' or end of input")

    # statements ----------------------------------------------------------

    def parse_create_table(self) -> CreateTableStatement:
        self.expect_keyword("CREATE", "TABLE")
        if_not_exists = self.accept_keyword("IF", "NOT", "EXISTS")
        statement = CreateTableStatement(name=self.parse_object_name(), if_not_exists=if_not_exists)

        self.expect_punct("(")
        while True:
            token = self.peek()
            if token.kind == "word" and token.value.upper() in _CONSTRAINT_WORDS:
                statement.constraints.append(self.parse_table_constraint())
            else:
                statement.columns.append(self.parse_column_def())
            if self.accept_punct(","):
                continue
            self.expect_punct(")")
            break

        statement.options = self.parse_table_options()
        self.expect_end()
        return statement

    def parse_object_name(self) -> list[str]:
        parts = [self.expect_identifier("table name")]
        while self.accept_punct("."):
            parts.append(self.expect_identifier("table name"))
        return parts

    # columns -------------------------------------------------------------

    def parse_column_def(self) -> ColumnDef:
        name = self.expect_identifier("column name")
        return ColumnDef(name=name, data_type=self.parse_type(), options=self.parse_column_options())

    def parse_type(self) -> SqlType:
        token = self.peek()
        if token.kind != "word":
            raise self.error("column type")
        self.advance()
        type_name = token.value.lower()
        if type_name == "double" and self.accept_keyword("PRECISION"):
            type_name = "double precision"

        args: list[int | str] = []
        if self.accept_punct("("):
            args.append(self.parse_type_argument())
            while self.accept_punct(","):
                args.append(self.parse_type_argument())
            self.expect_punct(")")

        unsigned = False
        while True:
            if self.accept_keyword("UNSIGNED"):
                unsigned = True
            elif not (self.accept_keyword("SIGNED") or self.accept_keyword("ZEROFILL")):
                break
        return SqlType(type_name, tuple(args), unsigned)

    def parse_type_argument(self) -> int | str:
        # enum('a','b') and set(...) list strings instead of widths
        token = self.peek()
        if token.kind == "string":
            self.advance()
            return token.value
        return self.expect_integer()

    def parse_column_options(self) -> list[ColumnOption]:
        options: list[ColumnOption] = []
        while not (self.peek().is_punct(",") or self.peek().is_punct(")")):
            if self.accept_keyword("NOT", "NULL"):
                options.append(ColumnOption(ColumnOptionKind.NOT_NULL))
            elif self.accept_keyword("NULL"):
                options.append(ColumnOption(ColumnOptionKind.NULL))
            elif self.accept_keyword("PRIMARY", "KEY") or self.accept_keyword("KEY"):
                options.append(ColumnOption(ColumnOptionKind.PRIMARY_KEY))
            elif self.accept_keyword("UNIQUE"):
                self.accept_keyword("KEY")
                options.append(ColumnOption(ColumnOptionKind.UNIQUE))
            elif self.accept_keyword("COMMENT"):
                token = self.peek()
                if token.kind != "string":
                    raise self.error("comment string")
                self.advance()
                options.append(ColumnOption(ColumnOptionKind.COMMENT, token.value))
            elif self.accept_keyword("DEFAULT"):
                options.append(ColumnOption(ColumnOptionKind.DEFAULT, self.parse_default_value()))
            elif self.accept_keyword("AUTO_INCREMENT"):
                options.append(ColumnOption(ColumnOptionKind.AUTO_INCREMENT))
            elif self.accept_keyword("ON", "UPDATE"):
                options.append(ColumnOption(ColumnOptionKind.ON_UPDATE, self.parse_default_value()))
            elif self.accept_keyword("CHARACTER", "SET") or self.accept_keyword("CHARSET"):
                options.append(
                    ColumnOption(ColumnOptionKind.CHARACTER_SET, self.expect_identifier("charset name"))
                )
            elif self.accept_keyword("COLLATE"):
                options.append(
                    ColumnOption(ColumnOptionKind.COLLATE, self.expect_identifier("collation name"))
                )
            else:
                raise self.error("column option")
        return options

    def parse_default_value(self) -> str:
        token = self.peek()
        if token.kind in ("string", "number"):
            self.advance()
            return token.value
        if token.kind == "word":
            self.advance()
            value = token.value.upper()
            # CURRENT_TIMESTAMP(), NOW(3), ...
            if self.accept_punct("("):
                precision = "" if self.peek().is_punct(")") else str(self.expect_integer())
                self.expect_punct(")")
                value = f"{value}({precision})"
            return value
        raise self.error("default value")

    # constraints -----------------------------------------------------------

    def parse_table_constraint(self) -> TableConstraint:
        name: str | None = None
        if self.accept_keyword("CONSTRAINT"):
            if not self.peek().is_keyword("PRIMARY", "UNIQUE", "FOREIGN"):
                name = self.expect_identifier("constraint name")

        if self.accept_keyword("PRIMARY", "KEY"):
            kind = ConstraintKind.PRIMARY_KEY
        elif self.accept_keyword("UNIQUE"):
            kind = ConstraintKind.UNIQUE
            if not self.accept_keyword("KEY"):
                self.accept_keyword("INDEX")
        elif self.accept_keyword("FOREIGN", "KEY"):
            kind = ConstraintKind.FOREIGN_KEY
        elif self.accept_keyword("FULLTEXT") or self.accept_keyword("SPATIAL"):
            kind = ConstraintKind.INDEX
            if not self.accept_keyword("KEY"):
                self.accept_keyword("INDEX")
        elif self.accept_keyword("KEY") or self.accept_keyword("INDEX"):
            kind = ConstraintKind.INDEX
        else:
            raise self.error("PRIMARY KEY, UNIQUE, FOREIGN KEY, KEY or INDEX")

        if self.peek().is_identifier:
            name = self.advance().value
        constraint = TableConstraint(kind=kind, columns=self.parse_index_columns(), name=name)
        if kind is ConstraintKind.FOREIGN_KEY:
            self.parse_references(constraint)
        return constraint

    def parse_index_columns(self) -> list[str]:
        self.expect_punct("(")
        columns: list[str] = []
        while True:
            columns.append(self.expect_identifier("column name"))
            # prefix length and sort order do not change which columns are keyed
            if self.accept_punct("("):
                self.expect_integer()
                self.expect_punct(")")
            if not self.accept_keyword("ASC"):
                self.accept_keyword("DESC")
            if not self.accept_punct(","):
                break
        self.expect_punct(")")
        return columns

    def parse_references(self, constraint: TableConstraint) -> None:
        self.expect_keyword("REFERENCES")
        constraint.ref_table = self.parse_object_name()
        constraint.ref_columns = self.parse_index_columns()
        while self.accept_keyword("ON"):
            if self.accept_keyword("DELETE"):
                constraint.on_delete = self.parse_reference_action()
            elif self.accept_keyword("UPDATE"):
                constraint.on_update = self.parse_reference_action()
            else:
                raise self.error("DELETE or UPDATE")

    def parse_reference_action(self) -> str:
        for words in _REFERENCE_ACTIONS:
            if self.accept_keyword(*words):
                return " ".join(words)
        raise self.error("referential action")

    def parse_table_options(self) -> dict[str, str]:
        options: dict[str, str] = {}
        words: list[str] = []
        while self.peek().kind != "eof":
            token = self.peek()
            if token.is_punct("="):
                self.advance()
                if not words:
                    raise self.error("table option name", token)
                value = self.advance()
                if value.kind in ("eof", "punct", "other"):
                    raise self.error("table option value", value)
                options[_option_key(words)] = value.value
                words = []
            elif token.kind in ("word", "number", "string", "quoted"):
                words.append(self.advance().value)
            elif token.is_punct(","):
                self.advance()
            else:
                raise self.error("table option", token)
        if len(words) == 1:
            raise self.error("table option value")
        if words:
            options[_option_key(words[:-1])] = words[-1]
        return options


def _option_key(words: list[str]) -> str:
    key = " ".join(word.upper() for word in words)
    if key.startswith("DEFAULT "):
        key = key[len("DEFAULT "):]
    return key


def _unsupported(statement: sqlparse_sql.Statement, tokens: list[Token]) -> ParseError:
    first = tokens[0]
    keyword = statement.get_type()
    if keyword == "UNKNOWN":
        keyword = first.value.upper()
    if keyword == "CREATE" and len(tokens) > 1 and tokens[1].kind == "word":
        keyword = f"CREATE {tokens[1].value.upper()}"
    return ParseError(f"unsupported statement {keyword}", first.line, first.column)


def parse(sql: str) -> list[Statement]:
    """Parse ``sql`` into a list of statements.

    Raises:
        ParseError: when the text is not a sequence of ``CREATE TABLE`` statements.
    """

    statements: list[Statement] = []
    for statement, tokens in _split(sql):
        if not (tokens[0].is_keyword("CREATE") and len(tokens) > 1 and tokens[1].is_keyword("TABLE")):
            raise _unsupported(statement, tokens)
        statements.append(_Parser(tokens).parse_create_table())
    return statements


def parse_one(sql: str) -> CreateTableStatement:
    """Parse exactly one ``CREATE TABLE`` statement."""

    statements = parse(sql)
    if len(statements) != 1:
        raise ParseError(f"expected exactly one statement, found {len(statements)}")
    return statements[0]
