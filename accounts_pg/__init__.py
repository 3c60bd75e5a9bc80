"""
PostgreSQL modules for the accounts_test demonstration.

All database access goes through psycopg2 via DatabaseManager; the table
operations in accounts_table take the open manager as their first argument.
"""
