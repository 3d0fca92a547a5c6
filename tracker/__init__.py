"""
Expense and task tracker API.

A FastAPI service exposing CRUD routes over a JSON document store, with a
login endpoint issuing signed bearer tokens and a backup file that survives
hosts with an ephemeral filesystem.
"""
