"""
Account and access layer.

Responsibilities:
- Hash and verify passwords with bcrypt.
- Issue and verify signed, time-limited bearer tokens.
- Register and authenticate users against the record store.
- FastAPI dependencies that gate catalog routes on a valid token.
"""
