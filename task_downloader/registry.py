"""
In-memory task registry.

All mutations (new task, counter, new object, slot reservations) happen while
holding one lock. Downloads run outside the lock; a slot is reserved for them
first so that parallel attaches cannot overfill a task.
"""
import logging
import threading
from collections import defaultdict
from typing import List

from .errors import CapacityExceeded, InvalidRequest, ServiceStopping, TaskNotFound
from .fetcher import RemoteFetcher
from .models import ObjectEntry, Task
from .shutdown import ShutdownCoordinator

logger = logging.getLogger(__name__)

MAX_TASKS = 3
MAX_OBJECTS = 3


class TaskRegistry:
    def __init__(
        self,
        fetcher: RemoteFetcher,
        coordinator: ShutdownCoordinator,
        max_tasks: int = MAX_TASKS,
        max_objects: int = MAX_OBJECTS,
    ):
        self.fetcher = fetcher
        self.coordinator = coordinator
        self.max_tasks = max_tasks
        self.max_objects = max_objects
        self._lock = threading.Lock()
        self._tasks: List[Task] = []
        self._next_task = 1
        self._reserved = defaultdict(int)  # task number -> attaches in flight

    def _find(self, number: str) -> Task:
        # linear scan, there are at most max_tasks tasks
        for task in self._tasks:
            if task.number == number:
                return task
        raise TaskNotFound(f"Task {number} not found")

    def create_task(self) -> str:
        if self.coordinator.stopping:
            raise ServiceStopping()
        with self._lock:
            if len(self._tasks) >= self.max_tasks:
                raise CapacityExceeded()
            task = Task(number=str(self._next_task))
            self._tasks.append(task)
            self._next_task += 1
        logger.info("Task %s created", task.number)
        return task.number

    def attach_object(self, task_number: str, url: str) -> ObjectEntry:
        task_number = str(task_number)
        with self._lock:
            task = self._find(task_number)
            if len(task.objects) + self._reserved[task_number] >= self.max_objects:
                raise CapacityExceeded("Exceeding the maximum number of objects")
            if not isinstance(url, str) or not url.strip():
                raise InvalidRequest("url is required")
            url = url.strip()
            self._reserved[task_number] += 1

        try:
            # the entry is recorded before the work unit is released, so the
            # storage cleanup never runs ahead of it
            with self.coordinator.work():
                obj = self.fetcher.download(url, task_number)
                with self._lock:
                    task.objects.append(obj)
        finally:
            with self._lock:
                self._reserved[task_number] -= 1

        logger.info("Task %s: added %s as %s", task_number, url, obj.name)
        return obj

    def list_tasks(self) -> List[Task]:
        with self._lock:
            return [t.snapshot() for t in self._tasks]

    def get_task(self, task_number: str) -> Task:
        with self._lock:
            return self._find(str(task_number)).snapshot()
