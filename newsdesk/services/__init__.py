# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single domain aggregate:
#
#   article_service  — create/publish/update/delete + published feed + categories
#   comment_service  — threaded comments, author-only edits, like toggle
#   user_service     — sign-up, sign-in, profiles, admin user management
#   admin_service    — read-only dashboard rollups
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Failures are raised as ``newsdesk.errors``
# exceptions rather than returned as None.
