"""
Infrastructure module: store sessions, deadlines and external collaborators.

Provides:
- Database sessions and transactions (db.py)
- Request deadlines (deadline.py)
- Correlation IDs (correlation.py)
- Blob store for uploaded images (blob_store.py)
- Email notifier (notifier.py)
"""
