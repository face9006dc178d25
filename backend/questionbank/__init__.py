"""Question bank backend: email/PIN accounts plus subject-organized questions.

`main` holds the FastAPI routes, `services` the auth, catalog and
question logic, `repositories` the SQL, and `models` the tables.
"""
