"""
Session gating and login for the browser gateway.

Design goals:
- Fail closed: a session is only trusted after the backend confirms it.
- Cookie-based session (HttpOnly) carrying the backend's opaque token.
- Local credential table as a fallback when the backend cannot issue tokens.
"""
