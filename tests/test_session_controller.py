import asyncio

import pytest

from resonance.session_controller import SessionController


@pytest.mark.asyncio
async def test_jobs_run_one_at_a_time_in_order():
    controller = SessionController(connection_id="c1")
    controller.start()
    running = 0
    peak = 0
    order = []

    def _job(index: int):
        async def _run():
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.001)
            order.append(index)
            running -= 1
        return _run

    for index in range(10):
        assert await controller.submit(_job(index)) is True
    await controller.join()

    assert order == list(range(10))
    assert peak == 1
    assert controller.jobs_completed == 10
    await controller.stop()


@pytest.mark.asyncio
async def test_failed_job_does_not_stop_the_worker():
    controller = SessionController(connection_id="c1")
    controller.start()
    seen = []

    async def _boom():
        raise RuntimeError("boom")

    async def _ok():
        seen.append("ok")

    await controller.submit(_boom)
    await controller.submit(_ok)
    await controller.join()

    assert seen == ["ok"]
    await controller.stop()


@pytest.mark.asyncio
async def test_scheduled_job_joins_the_same_queue():
    controller = SessionController(connection_id="c1")
    controller.start()
    order = []

    async def _greet():
        order.append("greet")

    async def _turn():
        order.append("turn")

    controller.schedule(0, _greet)
    await asyncio.sleep(0.01)
    await controller.submit(_turn)
    await controller.join()

    assert order == ["greet", "turn"]
    await controller.stop()


@pytest.mark.asyncio
async def test_stop_drains_queued_jobs_and_refuses_new_ones():
    controller = SessionController(connection_id="c1")
    controller.start()
    ran = []

    async def _slow_turn():
        await asyncio.sleep(0.05)
        ran.append("turn")

    async def _session_complete():
        ran.append("session_complete")

    async def _late():
        ran.append("late")

    await controller.submit(_slow_turn)
    await controller.submit(_session_complete)
    controller.schedule(10, _late)
    await asyncio.sleep(0)

    await controller.stop()

    assert ran == ["turn", "session_complete"]
    assert controller.stop_event.is_set()
    assert await controller.submit(_late) is False
    assert all(task.done() for task in controller.tasks)
