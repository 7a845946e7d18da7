# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single concern:
#
#   name_resolver    find-or-create Tag / Category records by name
#   post_service     CRUD + pagination + cascading delete for Post
#   comment_service  CRUD for Comment, scoped to a post
#   like_service     like / unlike / count for Post
#   user_service     create and fetch User
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Failures are raised as the exceptions defined
# in ``blog_service.exceptions``.
