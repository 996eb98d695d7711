"""Statement parser using sqlglot.

This module turns one line of the store's SQL dialect into a Statement
value that maps one-to-one onto a Catalog call. sqlglot parses the
standard statements; the few forms it does not model uniformly across
versions (SHOW TABLES, ALTER TABLE ... ADD/DROP, exit) are matched first.

Supported statements:
    - CREATE TABLE name (col type, ...)
    - INSERT INTO name [(col, ...)] VALUES (v, ...)[, (v, ...)]
    - SELECT * FROM name [WHERE col = val] [ORDER BY col [ASC|DESC]] [LIMIT n]
    - SELECT FUNC(col) FROM name        (COUNT, SUM, AVG, MIN, MAX)
    - UPDATE name SET col = val WHERE col = val
    - DELETE FROM name WHERE col = val
    - DROP TABLE name
    - SHOW TABLES
    - ALTER TABLE name ADD col type | DROP [COLUMN] col
    - exit / quit

Values keep their text: quotes are removed, numbers are not converted,
NULL becomes the literal "NULL". Type parameters such as VARCHAR(20) are
accepted and dropped.

References:
    - sqlglot documentation: https://sqlglot.com/
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError
from sqlglot.tokens import TokenType

from minidb.domain.entities import Column
from minidb.domain.services import NULL_TEXT
from minidb.domain.value_objects import parse_type


class StatementType(Enum):
    """Types of statements."""

    CREATE_TABLE = "create_table"
    INSERT = "insert"
    SELECT = "select"
    AGGREGATE = "aggregate"
    UPDATE = "update"
    DELETE = "delete"
    DROP_TABLE = "drop_table"
    SHOW_TABLES = "show_tables"
    ADD_COLUMN = "add_column"
    DROP_COLUMN = "drop_column"
    EXIT = "exit"


@dataclass
class Statement(ABC):
    """Base class for parsed statements."""

    @property
    @abstractmethod
    def statement_type(self) -> StatementType:
        pass


@dataclass
class CreateTableStatement(Statement):
    """Create a new table."""

    table_name: str
    columns: list[Column] = field(default_factory=list)

    @property
    def statement_type(self) -> StatementType:
        return StatementType.CREATE_TABLE

    def __str__(self) -> str:
        cols = ", ".join(str(c) for c in self.columns)
        return f"CreateTable({self.table_name}, [{cols}])"


@dataclass
class InsertStatement(Statement):
    """Insert one or more rows."""

    table_name: str
    rows: list[list[str]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)

    @property
    def statement_type(self) -> StatementType:
        return StatementType.INSERT

    def __str__(self) -> str:
        return f"Insert({self.table_name}, cols={self.columns}, rows={len(self.rows)})"


@dataclass
class SelectStatement(Statement):
    """Select rows with optional predicate, ordering and limit."""

    table_name: str
    where_column: str | None = None
    where_value: str | None = None
    order_by: str | None = None
    desc: bool = False
    limit: int | None = None

    @property
    def statement_type(self) -> StatementType:
        return StatementType.SELECT

    def __str__(self) -> str:
        parts = [self.table_name]
        if self.where_column:
            parts.append(f"WHERE {self.where_column}={self.where_value!r}")
        if self.order_by:
            parts.append(f"ORDER BY {self.order_by} {'DESC' if self.desc else 'ASC'}")
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        return f"Select({' '.join(parts)})"


@dataclass
class AggregateStatement(Statement):
    """Compute an aggregate over one column."""

    table_name: str
    function: str
    column: str

    @property
    def statement_type(self) -> StatementType:
        return StatementType.AGGREGATE

    def __str__(self) -> str:
        return f"Aggregate({self.function}({self.column}) FROM {self.table_name})"


@dataclass
class UpdateStatement(Statement):
    """Set one column on rows matching an equality predicate."""

    table_name: str
    target_column: str
    new_value: str
    where_column: str
    where_value: str

    @property
    def statement_type(self) -> StatementType:
        return StatementType.UPDATE

    def __str__(self) -> str:
        return (
            f"Update({self.table_name}, SET {self.target_column}={self.new_value!r} "
            f"WHERE {self.where_column}={self.where_value!r})"
        )


@dataclass
class DeleteStatement(Statement):
    """Delete rows matching an equality predicate."""

    table_name: str
    where_column: str
    where_value: str

    @property
    def statement_type(self) -> StatementType:
        return StatementType.DELETE

    def __str__(self) -> str:
        return f"Delete({self.table_name} WHERE {self.where_column}={self.where_value!r})"


@dataclass
class DropTableStatement(Statement):
    """Drop a table."""

    table_name: str

    @property
    def statement_type(self) -> StatementType:
        return StatementType.DROP_TABLE

    def __str__(self) -> str:
        return f"DropTable({self.table_name})"


@dataclass
class ShowTablesStatement(Statement):
    """List tables."""

    @property
    def statement_type(self) -> StatementType:
        return StatementType.SHOW_TABLES

    def __str__(self) -> str:
        return "ShowTables()"


@dataclass
class AddColumnStatement(Statement):
    """ALTER TABLE ... ADD."""

    table_name: str
    column: Column

    @property
    def statement_type(self) -> StatementType:
        return StatementType.ADD_COLUMN

    def __str__(self) -> str:
        return f"AddColumn({self.table_name}, {self.column})"


@dataclass
class DropColumnStatement(Statement):
    """ALTER TABLE ... DROP."""

    table_name: str
    column_name: str

    @property
    def statement_type(self) -> StatementType:
        return StatementType.DROP_COLUMN

    def __str__(self) -> str:
        return f"DropColumn({self.table_name}, {self.column_name})"


@dataclass
class ExitStatement(Statement):
    """End the session."""

    @property
    def statement_type(self) -> StatementType:
        return StatementType.EXIT

    def __str__(self) -> str:
        return "Exit()"


class ParseError(Exception):
    """Error during statement parsing."""

    pass


_EXIT_TOKENS = frozenset({"exit", "quit"})

_SHOW_TABLES = re.compile(r"^SHOW\s+TABLES$", re.IGNORECASE)

_ALTER_TABLE = re.compile(
    r"""^ALTER\s+TABLE\s+(?P<table>\w+)\s+
        (?P<action>ADD|DROP)\s+(?:COLUMN\s+)?
        (?P<column>\w+)
        (?:\s+(?P<type>\w+)\s*(?:\([^)]*\))?)?$""",
    re.IGNORECASE | re.VERBOSE,
)

_AGGREGATE_TYPES = (exp.AggFunc, exp.Anonymous)


class StatementParser:
    """Statement parser using sqlglot.

    Example:
        >>> parser = StatementParser()
        >>> print(parser.parse("SELECT * FROM users WHERE name = 'Bob' LIMIT 1"))
        Select(users WHERE name='Bob' LIMIT 1)
    """

    def __init__(self, dialect: str | None = None) -> None:
        """Initialize the parser.

        Args:
            dialect: sqlglot dialect to read (default: sqlglot's own).
        """
        self._dialect = dialect

    def parse(self, sql: str) -> Statement:
        """Parse one statement.

        Args:
            sql: The statement text; a trailing ';' is allowed.

        Returns:
            The parsed statement.

        Raises:
            ParseError: If the text is invalid or unsupported.
            InvalidTypeError: If a column type token is unknown.
        """
        text = sql.strip().rstrip(";").strip()
        if not text:
            raise ParseError("Empty SQL statement")

        if text.lower() in _EXIT_TOKENS:
            return ExitStatement()

        if _SHOW_TABLES.match(text):
            return ShowTablesStatement()

        if text.split(None, 1)[0].upper() == "ALTER":
            return self._parse_alter(text)

        try:
            statements = sqlglot.parse(text, read=self._dialect)
        except SqlglotError as e:
            raise ParseError(f"Failed to parse SQL: {e}") from e

        if len(statements) != 1 or statements[0] is None:
            raise ParseError("Expected exactly one statement")

        return self._convert_statement(statements[0], text)

    def _parse_alter(self, text: str) -> Statement:
        match = _ALTER_TABLE.match(text)
        if match is None:
            raise ParseError(
                "Invalid ALTER TABLE command. Use: ALTER TABLE <name> ADD <col> <type> "
                "| DROP <col>"
            )

        table = match.group("table")
        column = match.group("column")
        if match.group("action").upper() == "ADD":
            type_token = match.group("type")
            if type_token is None:
                raise ParseError("ALTER TABLE ... ADD requires a column type")
            return AddColumnStatement(table, Column(column, parse_type(type_token)))

        if match.group("type") is not None:
            raise ParseError("ALTER TABLE ... DROP takes only a column name")
        return DropColumnStatement(table, column)

    def _convert_statement(self, stmt: exp.Expression, text: str) -> Statement:
        """Convert a sqlglot expression to a statement."""
        if isinstance(stmt, exp.Select):
            return self._convert_select(stmt)
        elif isinstance(stmt, exp.Insert):
            return self._convert_insert(stmt)
        elif isinstance(stmt, exp.Update):
            return self._convert_update(stmt)
        elif isinstance(stmt, exp.Delete):
            return self._convert_delete(stmt)
        elif isinstance(stmt, exp.Create):
            return self._convert_create(stmt, text)
        elif isinstance(stmt, exp.Drop):
            return self._convert_drop(stmt)
        else:
            raise ParseError(f"Unsupported statement type: {type(stmt).__name__}")

    def _convert_select(self, stmt: exp.Select) -> Statement:
        """Convert a SELECT statement."""
        table_name = self._table_name(stmt.find(exp.From), "SELECT requires FROM clause")

        for unsupported in ("joins", "group", "having"):
            if stmt.args.get(unsupported):
                raise ParseError(f"Unsupported clause in SELECT: {unsupported.upper()}")

        items = stmt.expressions
        if len(items) != 1:
            raise ParseError("SELECT supports only * or a single aggregate")

        item = items[0]
        if isinstance(item, _AGGREGATE_TYPES):
            for clause in ("where", "order", "limit"):
                if stmt.args.get(clause):
                    raise ParseError(
                        f"Aggregate SELECT does not support {clause.upper()}"
                    )
            return self._convert_aggregate(item, table_name)
        if not isinstance(item, exp.Star):
            raise ParseError("SELECT supports only * or a single aggregate")

        select = SelectStatement(table_name=table_name)

        where = stmt.args.get("where")
        if where is not None:
            select.where_column, select.where_value = self._convert_equality(where.this)

        order = stmt.find(exp.Order)
        if order is not None:
            if len(order.expressions) != 1:
                raise ParseError("ORDER BY supports a single column")
            ordered = order.expressions[0]
            key = ordered.this if isinstance(ordered, exp.Ordered) else ordered
            select.order_by = self._column_name(key)
            select.desc = isinstance(ordered, exp.Ordered) and bool(ordered.args.get("desc"))

        limit = stmt.args.get("limit")
        if limit is not None:
            select.limit = self._limit_count(limit)

        return select

    def _convert_aggregate(self, func: exp.Expression, table_name: str) -> Statement:
        """Convert SELECT FUNC(col) FROM ..."""
        if isinstance(func, exp.Anonymous):
            name = func.name.upper()
            args = func.expressions
            arg = args[0] if len(args) == 1 else None
        else:
            name = func.key.upper()
            arg = func.this

        if arg is None or isinstance(arg, exp.Star):
            raise ParseError(f"{name} requires a column argument")

        return AggregateStatement(
            table_name=table_name, function=name, column=self._column_name(arg)
        )

    def _convert_insert(self, stmt: exp.Insert) -> Statement:
        """Convert an INSERT statement."""
        target = stmt.this
        columns: list[str] = []
        if isinstance(target, exp.Schema):
            columns = [self._column_name(col) for col in target.expressions]
            target = target.this
        if not isinstance(target, exp.Table):
            raise ParseError("INSERT requires table name")

        values = stmt.expression
        if not isinstance(values, exp.Values):
            raise ParseError("INSERT requires VALUES")

        rows: list[list[str]] = []
        for tuple_expr in values.expressions:
            cells = tuple_expr.expressions if isinstance(tuple_expr, exp.Tuple) else [tuple_expr]
            rows.append([self._value_text(val) for val in cells])

        return InsertStatement(table_name=target.name, rows=rows, columns=columns)

    def _convert_update(self, stmt: exp.Update) -> Statement:
        """Convert an UPDATE statement."""
        table_name = self._table_name(stmt, "UPDATE requires table name")

        assignments = stmt.expressions
        if len(assignments) != 1:
            raise ParseError("UPDATE supports a single SET assignment")
        target_column, new_value = self._convert_equality(assignments[0])

        where = stmt.args.get("where")
        if where is None:
            raise ParseError("UPDATE requires WHERE <col> = <value>")
        where_column, where_value = self._convert_equality(where.this)

        return UpdateStatement(
            table_name=table_name,
            target_column=target_column,
            new_value=new_value,
            where_column=where_column,
            where_value=where_value,
        )

    def _convert_delete(self, stmt: exp.Delete) -> Statement:
        """Convert a DELETE statement."""
        table_name = self._table_name(stmt, "DELETE requires table name")

        where = stmt.args.get("where")
        if where is None:
            raise ParseError("DELETE requires WHERE <col> = <value>")
        where_column, where_value = self._convert_equality(where.this)

        return DeleteStatement(
            table_name=table_name, where_column=where_column, where_value=where_value
        )

    def _convert_create(self, stmt: exp.Create, text: str) -> Statement:
        """Convert a CREATE TABLE statement.

        sqlglot normalizes type names (INTEGER becomes INT, STRING becomes
        TEXT), so the type tokens are read from the statement text instead.
        """
        if str(stmt.args.get("kind", "")).upper() != "TABLE":
            raise ParseError(
                "Invalid CREATE syntax. Use: CREATE TABLE <table_name> (<col1> <type1>, ...)"
            )

        schema = stmt.this
        if not isinstance(schema, exp.Schema) or not isinstance(schema.this, exp.Table):
            raise ParseError("CREATE TABLE requires a column list")

        col_defs = schema.expressions
        type_tokens = self._written_types(text)
        if len(type_tokens) != len(col_defs):
            raise ParseError("Invalid column list in CREATE TABLE")

        columns = []
        for col_def, type_token in zip(col_defs, type_tokens):
            if not isinstance(col_def, exp.ColumnDef) or not type_token:
                raise ParseError(f"Invalid column definition: {col_def.sql()}")
            columns.append(Column(col_def.name, parse_type(type_token)))

        return CreateTableStatement(table_name=schema.this.name, columns=columns)

    def _written_types(self, text: str) -> list[str]:
        """Return the type token of each column definition as written.

        The type is the second token of a definition at the top level of
        the column list; parameters such as (20) are nested and skipped.
        """
        try:
            tokens = sqlglot.tokenize(text, read=self._dialect)
        except SqlglotError as e:
            raise ParseError(f"Failed to parse SQL: {e}") from e

        types: list[str] = []
        definition: list[str] = []
        depth = 0
        for token in tokens:
            if token.token_type == TokenType.L_PAREN:
                depth += 1
            elif token.token_type == TokenType.R_PAREN:
                depth -= 1
                if depth == 0:
                    break
            elif depth != 1:
                continue
            elif token.token_type == TokenType.COMMA:
                types.append(definition[1] if len(definition) > 1 else "")
                definition = []
            else:
                definition.append(token.text)

        if definition:
            types.append(definition[1] if len(definition) > 1 else "")
        return types

    def _convert_drop(self, stmt: exp.Drop) -> Statement:
        """Convert a DROP TABLE statement."""
        if str(stmt.args.get("kind", "")).upper() != "TABLE":
            raise ParseError("Only DROP TABLE is supported")
        return DropTableStatement(table_name=self._table_name(stmt, "DROP TABLE requires table name"))

    # Expression helpers

    def _convert_equality(self, expr: exp.Expression) -> tuple[str, str]:
        """Split `col = value` into (column name, value text)."""
        if not isinstance(expr, exp.EQ):
            raise ParseError(f"Expected <col> = <value>, got: {expr.sql()}")
        return self._column_name(expr.left), self._value_text(expr.right)

    def _column_name(self, expr: exp.Expression) -> str:
        if isinstance(expr, (exp.Column, exp.Identifier)):
            return expr.name
        raise ParseError(f"Expected a column name, got: {expr.sql()}")

    def _value_text(self, expr: exp.Expression) -> str:
        """Render a value expression as cell text."""
        if isinstance(expr, exp.Literal):
            return expr.this
        elif isinstance(expr, exp.Null):
            return NULL_TEXT
        elif isinstance(expr, exp.Boolean):
            return "true" if expr.this else "false"
        elif isinstance(expr, exp.Neg) and isinstance(expr.this, exp.Literal):
            return f"-{expr.this.this}"
        elif isinstance(expr, exp.Column):
            # Unquoted words are taken as values: WHERE name = Alice
            return expr.name
        raise ParseError(f"Unsupported value: {expr.sql()}")

    def _table_name(self, node: exp.Expression | None, message: str) -> str:
        table = node if isinstance(node, exp.Table) else None
        if table is None and node is not None:
            table = node.this if isinstance(node.this, exp.Table) else node.find(exp.Table)
        if table is None or not table.name:
            raise ParseError(message)
        return table.name

    def _limit_count(self, limit: exp.Expression) -> int:
        """Read the row count from a LIMIT clause."""
        value = limit.args.get("expression") or limit.args.get("this")
        negative = False
        if isinstance(value, exp.Neg):
            negative = True
            value = value.this
        if not isinstance(value, exp.Literal) or not value.is_int:
            raise ParseError(f"LIMIT requires an integer, got: {limit.sql()}")
        count = int(value.this)
        return -count if negative else count
