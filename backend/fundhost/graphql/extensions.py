"""GraphQL Error Extensions — expose domain error codes to GraphQL clients.

Invariants:
    - Every GraphQL error caused by a FundhostError carries code, category and severity
      in its extensions
    - Other errors are left untouched (Strawberry already logs them)
"""

import logging

from strawberry.extensions import SchemaExtension

from fundhost.core.errors import FundhostError

logger = logging.getLogger(__name__)


class FundhostErrorExtension(SchemaExtension):
    """Copy FundhostError metadata into the extensions of the GraphQL errors."""

    def on_operation(self):
        yield
        result = self.execution_context.result
        if not result or not getattr(result, "errors", None):
            return
        for error in result.errors:
            original = error.original_error
            if isinstance(original, FundhostError):
                error.extensions = {
                    **(error.extensions or {}),
                    **original.to_graphql_extensions(),
                }
                logger.warning(
                    f"GraphQL {original.code}: {original.message}",
                    extra={"error_code": original.code, "user_id": original.context.user_id},
                )
