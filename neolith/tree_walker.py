"""Dispatch of syntax tree nodes to handlers keyed by parse token."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Union

Handler = Callable[[Any, Any], Any]
HandlerTable = Union[Mapping[Any, Handler], Iterable[tuple[Any, Handler]]]


def find_handler(table: HandlerTable, token: Any) -> Handler | None:
    """Return the first handler registered for the token, or None."""
    if isinstance(table, Mapping):
        return table.get(token)
    return next((handler for key, handler in table if key == token), None)


def call_handler(table: HandlerTable, token: Any, data: Any, dest_type: Any) -> Any:
    """Call the token's handler with the data and destination type.

    Returns the handler's result, or None when no handler is registered.
    """
    handler = find_handler(table, token)
    if handler is None:
        return None
    return handler(data, dest_type)