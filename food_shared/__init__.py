"""
Shared module for cross-cutting concerns of the nano-food backend.

STRUCTURE:
- food_shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Roles, OrderStatus, catalog kinds

- food_shared.infrastructure: Store and external collaborators
  - db.py: SQLAlchemy sessions, safe_commit(), store_step()
  - deadline.py: Per-request time budget for store work
  - correlation.py: X-Request-ID middleware and log filter
  - blob_store.py: Object storage put/delete
  - notifier.py: Outbound email

- food_shared.security: Identity and access
  - auth.py: JWT signing/verification, current_user_context
  - password.py: Bcrypt hashing
  - rate_limit.py: slowapi limiter

- food_shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - money.py: Decimal <-> integer cents conversion
  - schemas.py: Pydantic request/response schemas

IMPORT EXAMPLES:
    from food_shared.config.settings import settings
    from food_shared.infrastructure.db import get_db, safe_commit
    from food_shared.utils.exceptions import NotFoundError
"""
