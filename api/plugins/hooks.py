"""Hook registry - filters and actions plugins subscribe to."""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 10


@dataclass
class HookCallback:
    """A callback subscribed to a hook."""

    callback: Callable
    priority: int = DEFAULT_PRIORITY
    accepted_args: int = 1
    owner: Optional[str] = None  # plugin id, for logging

    def context_for(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """Keep only the keyword context the callback can accept."""
        if not context:
            return {}
        try:
            params = inspect.signature(self.callback).parameters
        except (TypeError, ValueError):
            return {}
        if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in params.values()):
            return dict(context)
        return {k: v for k, v in context.items() if k in params}


class HookRegistry:
    """Filters transform a value, actions only get notified.

    Callbacks run in ascending priority, then registration order. A callback
    receives at most ``accepted_args`` positional arguments plus whichever
    request context keywords (e.g. ``force_check``) its signature names.
    Coroutine callbacks are awaited.
    """

    def __init__(self):
        self._filters: Dict[str, List[HookCallback]] = {}
        self._actions: Dict[str, List[HookCallback]] = {}

    def add_filter(
        self,
        hook_name: str,
        callback: Callable,
        priority: int = DEFAULT_PRIORITY,
        accepted_args: int = 1,
        owner: Optional[str] = None,
    ) -> None:
        """Subscribe ``callback`` to the filter ``hook_name``."""
        self._filters.setdefault(hook_name, []).append(
            HookCallback(callback, priority, accepted_args, owner)
        )
        logger.debug(f"Added filter '{hook_name}' (priority={priority}, owner={owner})")

    def add_action(
        self,
        hook_name: str,
        callback: Callable,
        priority: int = DEFAULT_PRIORITY,
        accepted_args: int = 1,
        owner: Optional[str] = None,
    ) -> None:
        """Subscribe ``callback`` to the action ``hook_name``."""
        self._actions.setdefault(hook_name, []).append(
            HookCallback(callback, priority, accepted_args, owner)
        )
        logger.debug(f"Added action '{hook_name}' (priority={priority}, owner={owner})")

    def has_filter(self, hook_name: str) -> bool:
        return bool(self._filters.get(hook_name))

    def has_action(self, hook_name: str) -> bool:
        return bool(self._actions.get(hook_name))

    async def apply_filters(self, hook_name: str, value: Any, *args: Any, **context: Any) -> Any:
        """Pass ``value`` through every callback of ``hook_name`` and return the result.

        A callback that raises is logged and skipped; the value it received
        is passed on unchanged.
        """
        for hook in self._ordered(self._filters, hook_name):
            try:
                value = await self._invoke(hook, (value, *args), context)
            except Exception as e:
                logger.error(
                    f"Filter '{hook_name}' callback from {hook.owner or 'unknown'} failed: {e}",
                    exc_info=True,
                )
        return value

    async def do_action(self, hook_name: str, *args: Any, **context: Any) -> None:
        """Notify every callback of ``hook_name``."""
        for hook in self._ordered(self._actions, hook_name):
            try:
                await self._invoke(hook, args, context)
            except Exception as e:
                logger.error(
                    f"Action '{hook_name}' callback from {hook.owner or 'unknown'} failed: {e}",
                    exc_info=True,
                )

    @staticmethod
    def _ordered(table: Dict[str, List[HookCallback]], hook_name: str) -> List[HookCallback]:
        return sorted(table.get(hook_name, []), key=lambda h: h.priority)

    @staticmethod
    async def _invoke(hook: HookCallback, args: tuple, context: Dict[str, Any]) -> Any:
        result = hook.callback(*args[: hook.accepted_args], **hook.context_for(context))
        if inspect.isawaitable(result):
            result = await result
        return result
