"""
Session subsystem.

Components:
- storage.py: durable key/value backends (JSON file, shared in-memory area)
- credential_store.py: token + remembered email on top of a backend
- controller.py: authenticated/unauthenticated state machine and navigation
"""
