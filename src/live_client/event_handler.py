import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable, Optional, Set

logger = logging.getLogger(__name__)


class LiveEventHandler:
    """
    Manages registration and dispatching of event handlers.

    Handlers may be plain callables or coroutine functions. Errors raised by
    a handler are logged and never propagate to the dispatcher.
    """

    def __init__(self) -> None:
        self.event_handlers = defaultdict(list)
        self._handler_tasks: Set[asyncio.Task] = set()

    def on(self, event_name: str, handler: Callable[..., Any]) -> None:
        """
        Register an event handler for a specific event.

        Args:
            event_name (str): Name of the event.
            handler (Callable): Function or coroutine to handle the event.
        """
        if not callable(handler):
            raise TypeError(f"Handler for '{event_name}' must be callable")
        self.event_handlers[event_name].append(handler)
        logger.debug(f"Handler registered for event: {event_name}")

    def off(self, event_name: str, handler: Optional[Callable[..., Any]] = None) -> None:
        """
        Remove one handler, or every handler when none is given.
        """
        if handler is None:
            self.event_handlers.pop(event_name, None)
            return
        handlers = self.event_handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    def dispatch(self, event_name: str, *args: Any) -> None:
        """
        Dispatch an event to all registered handlers without waiting.

        Coroutine handlers are scheduled as tasks on the running loop.

        Args:
            event_name (str): Name of the event.
            *args: Positional arguments passed to every handler.
        """
        handlers = list(self.event_handlers.get(event_name, []))
        logger.debug(f"Dispatching event: {event_name} to {len(handlers)} handler(s)")
        for handler in handlers:
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    task = asyncio.ensure_future(result)
                    self._handler_tasks.add(task)
                    task.add_done_callback(self._on_handler_task_done(event_name))
            except Exception as e:
                logger.error(f"Error dispatching event {event_name}: {e}", exc_info=True)

    async def dispatch_async(self, event_name: str, *args: Any) -> None:
        """
        Dispatch an event and await each handler in registration order.
        """
        handlers = list(self.event_handlers.get(event_name, []))
        for handler in handlers:
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Error dispatching event {event_name}: {e}", exc_info=True)

    def _on_handler_task_done(self, event_name: str) -> Callable[[asyncio.Task], None]:
        def _done(task: asyncio.Task) -> None:
            self._handler_tasks.discard(task)
            if task.cancelled():
                return
            error = task.exception()
            if error is not None:
                logger.error(
                    f"Handler for event {event_name} failed: {error}",
                    exc_info=(type(error), error, error.__traceback__),
                )

        return _done

    async def wait_for_next(self, event_name: str) -> tuple:
        """
        Wait for the next occurrence of a specific event.

        Args:
            event_name (str): Name of the event to wait for.

        Returns:
            tuple: Arguments the event was dispatched with.
        """
        future = asyncio.get_running_loop().create_future()

        def handler(*args):
            if not future.done():
                future.set_result(args)

        self.on(event_name, handler)
        logger.debug(f"Waiting for next event: {event_name}")
        try:
            return await future
        finally:
            self.off(event_name, handler)
