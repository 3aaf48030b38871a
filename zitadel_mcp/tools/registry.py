"""Tool registry and dispatcher.

The registry is built once at startup from a fixed operation list. Dispatch
never raises: unknown names and handler failures come back as error results,
with exceptions translated by ``describe_error`` at this single point.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..core.zitadel.exceptions import describe_error
from .base import HandlerContext, Operation, ToolResult, error_response

logger = logging.getLogger(__name__)

REDACTED_FIELDS = frozenset({
    "email",
    "firstName",
    "lastName",
    "userName",
    "redirectUris",
    "postLogoutRedirectUris",
    "appUrl",
    "iconUrl",
})
REDACTION_MARKER = "[REDACTED]"


def redact_args(args: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Copy of ``args`` with personal data and URLs masked for logging."""
    if not args:
        return {}
    return {key: REDACTION_MARKER if key in REDACTED_FIELDS else value for key, value in args.items()}


class ToolRegistry:
    """Immutable name -> operation table bound to a handler context."""

    def __init__(self, operations: Iterable[Operation], context: HandlerContext):
        self._operations: Dict[str, Operation] = {}
        for op in operations:
            if op.name in self._operations:
                raise ValueError(f"Duplicate tool name: {op.name}")
            self._operations[op.name] = op
        self.context = context

    @property
    def operations(self) -> List[Operation]:
        return list(self._operations.values())

    @property
    def names(self) -> List[str]:
        return list(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def get(self, name: str) -> Optional[Operation]:
        return self._operations.get(name)

    def list_operations(self) -> List[Dict[str, Any]]:
        """Public definitions in registration order."""
        return [op.definition() for op in self._operations.values()]

    def dispatch(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolResult:
        arguments = arguments or {}
        logger.debug("Tool call: %s args=%s", name, redact_args(arguments))

        op = self._operations.get(name)
        if op is None:
            logger.warning("Unknown tool requested: %s", name)
            return error_response(f"Unknown tool: {name}")

        try:
            return op.handler(arguments, self.context)
        except Exception as exc:
            logger.error("Tool %s failed: %s", name, exc)
            return error_response(f"Error: {describe_error(exc)}")
