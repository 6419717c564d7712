"""
External service integrations.

Thin clients for the breeder-management API. Engine code never imports these.

- http.py           - shared requests session with retry/backoff
- settings_store.py - tenant date-validation config (GET/PUT)
- audit.py          - warning-override audit log with a persistent retry queue
"""
