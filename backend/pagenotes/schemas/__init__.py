"""
PageNotes Backend — API Schemas
================================

    - auth.py:  register/login request and token response bodies
    - note.py:  note, stats, health and error bodies
"""
