"""
PageNotes Backend — Services Layer
====================================

Service Inventory:
    - security.py:            Hasher / TokenSigner interfaces, bcrypt + JWT implementations
    - credential_service.py:  Credential store (users, password hashes)
    - token_service.py:       Token issue / verify, signing key resolution
    - auth_gate.py:           Bearer header → user id
    - auth_service.py:        register / login composition
    - note_service.py:        Owner-scoped, append-only page notes

Services take their collaborators as constructor arguments and the
database session per call; create_app() wires them together.
"""
