"""Domain entities for the tabular store.

Entities are objects with identity that have a lifecycle. Unlike value objects,
two entities with the same attributes may not be equal if they have different
identities.

Exports:
    Table:
        - Column: Named, typed schema entry
        - Row: Text cells aligned to the schema
        - Table: Schema + rows, queries, schema evolution, flat-file codec
        - COLUMN_NOT_FOUND: Sentinel returned by Table.column_index
"""

from minidb.domain.entities.table import COLUMN_NOT_FOUND, Column, Row, Table

__all__ = [
    "Column",
    "Row",
    "Table",
    "COLUMN_NOT_FOUND",
]
