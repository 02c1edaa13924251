import asyncio
import logging
from typing import Awaitable, Callable

logging.basicConfig(
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger("session_controller")

Job = Callable[[], Awaitable[None]]


class SessionController:
    """
    Lifecycle owner for ONE connection.

    Every inbound message (and the delayed greeting) becomes a job on a FIFO
    queue drained by a single worker, so session state is only ever mutated
    by one job at a time.
    """

    def __init__(self, connection_id: str = ""):
        self.connection_id = connection_id
        self.stop_event = asyncio.Event()
        self.tasks: list[asyncio.Task] = []
        self._jobs: asyncio.Queue = asyncio.Queue()
        self._worker: asyncio.Task | None = None
        self.jobs_completed = 0

    def start(self) -> None:
        if self._worker is None:
            self._worker = asyncio.create_task(self._run_jobs())

    def create_task(self, coro):
        task = asyncio.create_task(coro)
        self.tasks.append(task)
        return task

    async def submit(self, job: Job) -> bool:
        if self.stop_event.is_set():
            return False
        await self._jobs.put(job)
        return True

    def schedule(self, delay_sec: float, job: Job) -> asyncio.Task:
        async def _delayed():
            await asyncio.sleep(max(0.0, float(delay_sec)))
            await self.submit(job)

        return self.create_task(_delayed())

    async def join(self) -> None:
        """Wait until every job queued so far has finished."""
        await self._jobs.join()

    async def _run_jobs(self):
        while True:
            job = await self._jobs.get()
            try:
                if job is None:
                    return
                await job()
                self.jobs_completed += 1
            except Exception as exc:
                logger.exception("Job failed | connection_id=%s err=%s", self.connection_id, exc)
            finally:
                self._jobs.task_done()

    async def stop(self):
        """
        Refuse new jobs, cancel pending timers, then drain what is already queued.

        Jobs queued before the disconnect still run (a session_complete sent right
        before closing must reach the profile); they see stop_event set and can
        skip work whose only output would be sent to the client.
        """
        if not self.stop_event.is_set():
            self.stop_event.set()

        for task in self.tasks:
            task.cancel()
        await asyncio.gather(*self.tasks, return_exceptions=True)

        if self._worker is not None:
            await self._jobs.put(None)
            await asyncio.gather(self._worker, return_exceptions=True)
            self._worker = None
