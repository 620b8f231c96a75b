# Services package init
"""
NoteKeep Backend — Services Layer
=================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
Why:   Routes handle HTTP, services handle business rules.

Service Inventory:
    - NoteService: owner-scoped note CRUD (the Note Store)
    - TokenService: credential verification and bearer token issuance
    - PasswordHasher: passlib-backed hashing used by TokenService
"""
