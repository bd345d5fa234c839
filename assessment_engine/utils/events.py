from typing import Dict, List, Callable, Any, Set
import asyncio
from concurrent.futures import ThreadPoolExecutor
import logging

logger = logging.getLogger(__name__)

class EventBus:
    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}
        self._executor = ThreadPoolExecutor(max_workers=4)
        self._pending: Set[asyncio.Task] = set()

    def subscribe(self, event_type: str, handler: Callable):
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: Callable):
        if event_type in self._handlers:
            self._handlers[event_type].remove(handler)

    async def publish(self, event_type: str, data: Dict[str, Any]):
        handlers = list(self._handlers.get(event_type, []))
        if not handlers:
            return

        loop = asyncio.get_running_loop()
        tasks = []
        for handler in handlers:
            if asyncio.iscoroutinefunction(handler):
                tasks.append(asyncio.create_task(handler(data)))
            else:
                tasks.append(loop.run_in_executor(self._executor, self._run_sync_handler, handler, data))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(f"Error in event handler {handler.__name__} for {event_type}: {result}")

    def publish_nowait(self, event_type: str, data: Dict[str, Any]) -> None:
        """
        Dispatch an event without waiting for its handlers.

        Inside a running loop the handlers run as a background task, otherwise
        on the bus's worker pool. Handler failures are only logged.
        """
        if not self._handlers.get(event_type):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(self.publish(event_type, data))
            # keep a reference until the task finishes
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        else:
            self._executor.submit(asyncio.run, self.publish(event_type, data))

    def _run_sync_handler(self, handler: Callable, data: Dict[str, Any]):
        try:
            handler(data)
        except Exception as e:
            logger.error(f"Error in sync event handler {handler.__name__}: {e}")
            raise

event_bus = EventBus()
