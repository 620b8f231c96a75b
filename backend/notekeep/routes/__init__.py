# Routes package init
"""
NoteKeep Backend — API Routes Package
=====================================

Route Inventory:
    - token.py:   POST   /api/token            (issue bearer token)
    - notes.py:   POST   /api/notes            (create note)
                  GET    /api/notes            (list caller's notes)
                  GET    /api/notes/{id}       (note detail)
                  PUT    /api/notes/{id}       (update note)
                  DELETE /api/notes/{id}       (delete note)
    - health.py:  GET    /health               (service health check)

Routes are THIN: extract request data, call the service, map the result
to a status code. Business logic belongs in services.
"""
