"""
db/ - Database Layer
====================
Single-connection access to PostgreSQL: parameter binding, statement
execution, result shaping and transaction control.
This layer depends only on `config` and `utils`.
"""
