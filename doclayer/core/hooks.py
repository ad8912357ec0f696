"""Lifecycle hooks for collection writes.

``CollectionHooks`` is a container of optional callables injected into a
``Collection``.  ``before*`` hooks receive ``(data, ctx)`` and return the
(possibly transformed) data; ``after*`` hooks receive ``(doc, ctx)`` and
their return value is ignored.  Sync and async callables both work, and
hook errors propagate to the caller.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .context import Context

Hook = Callable[[Any, Context], Any]


@dataclass
class CollectionHooks:
    """Hook container — pass to ``Collection(hooks=...)``.

    Unset ``before*`` hooks leave the data untouched; unset ``after*`` hooks
    do nothing.
    """

    before: Optional[Hook] = None
    before_create: Optional[Hook] = None
    before_save: Optional[Hook] = None
    before_remove: Optional[Hook] = None
    after: Optional[Hook] = None
    after_create: Optional[Hook] = None
    after_save: Optional[Hook] = None
    after_remove: Optional[Hook] = None


async def _call(hook: Hook, value: Any, ctx: Context) -> Any:
    result = hook(value, ctx)
    if inspect.isawaitable(result):
        result = await result
    return result


async def run_before(hook: Optional[Hook], data: Any, ctx: Context) -> Any:
    """Run a transforming hook; identity when *hook* is None."""
    if hook is None:
        return data
    return await _call(hook, data, ctx)


async def fire_after(hook: Optional[Hook], doc: Any, ctx: Context) -> None:
    """Run a side-effect hook; the return value is discarded."""
    if hook is None:
        return
    await _call(hook, doc, ctx)
