"""Invoke helper: call sync or async members uniformly.

Handler members, mount sub-handlers and middleware may be ``def`` or
``async def``. Anything that calls user code goes through ``invoke`` so
the awaitable check lives in one place.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
