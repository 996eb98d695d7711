"""
minidb - Embedded Tabular Store

A process-local tabular store with typed schemas, predicate/sort/limit
queries, schema evolution, aggregates and one flat file per table.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
