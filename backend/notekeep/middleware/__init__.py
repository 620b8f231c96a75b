"""
NoteKeep Backend — Middleware Package
=====================================

Request → [Request ID] → [Access log] → [GZip] → [CORS] → route

Authentication is not middleware: /api/notes routes declare the
get_current_user dependency, so /health and /api/token stay open.
"""
