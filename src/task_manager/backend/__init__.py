"""
Remote service client.

Components:
- errors.py: BackendError and the Result (data, error) pair
- session.py: Session/User and the local session.json file
- auth.py: sign in/up/out, refresh, session-change subscriptions
- rest.py: CRUD over one table
- client.py: builds all of the above from Settings
"""
