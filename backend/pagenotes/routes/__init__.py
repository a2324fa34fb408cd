"""
PageNotes Backend — API Routes Package
========================================

Route Inventory:
    - auth.py:    POST /auth/register        (create account, returns token)
                  POST /auth/login           (returns token)
    - notes.py:   POST /notes                (save page content, bearer token)
                  GET  /notes/{page}         (latest page content, bearer token)
                  GET  /stats                (caller's note count, bearer token)
    - health.py:  GET  /health               (database probe)

Routes are thin: they parse input, call a service, and return a schema.
Errors travel as exceptions to the handlers registered in main.py.
"""
