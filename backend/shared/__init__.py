"""
Shared module for common utilities used by the REST API and the CLI.

STRUCTURE:
- shared.security: Identity provider boundary
  - auth.py: identity token verification, current_identity dependency
  - request_signing.py: HMAC signatures for identity webhooks

- shared.infrastructure: Database and request plumbing
  - db.py: SQLAlchemy engine/sessions, safe_commit()
  - correlation.py: X-Request-ID propagation into logs

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging, security audit helpers
  - constants.py: Roles, complaint categories/statuses, rating scale

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Search sanitizing, rating and text checks
  - schemas.py: Shared Pydantic types and error bodies

IMPORT EXAMPLES:
    from shared.security.auth import CallerIdentity, current_identity
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import Roles, ComplaintStatus
    from shared.utils.exceptions import NotFoundError, AuthorizationError
"""
