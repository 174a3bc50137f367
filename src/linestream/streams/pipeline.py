"""
Pump chunks from a source through a line transform into a sink.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from linestream.sources import as_byte_source
from linestream.streams.transform import LineTransform

logger = logging.getLogger(__name__)

LineSink = Callable[[str], Union[None, Awaitable[None]]]


async def pipeline(source: Any, transform: Optional[LineTransform], sink: LineSink) -> None:
    """
    Stream every line of ``source`` into ``sink``.

    Writing into the transform and draining it into the sink run as two
    tasks. The first failure of the source, the transform or the sink
    destroys the transform, cancels the other task, releases the source and
    is raised.

    Args:
        source: Anything ``as_byte_source`` accepts
        transform: Transform to push through (None for a new LineTransform)
        sink: Called with each line, may be a coroutine function
    """
    byte_source = as_byte_source(source)
    if transform is None:
        transform = LineTransform()
    # Out-of-band source failures abort the transform right away
    byte_source.add_error_listener(transform.destroy)

    async def pump():
        try:
            while True:
                chunk = await byte_source.read()
                if chunk is None:
                    break
                await transform.write(chunk)
            await transform.end()
        finally:
            await byte_source.close()

    async def drain():
        async for line in transform:
            result = sink(line)
            if inspect.isawaitable(result):
                await result

    loop = asyncio.get_running_loop()
    tasks = [loop.create_task(pump()), loop.create_task(drain())]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        transform.destroy()
        for task in tasks:
            task.cancel()
        await asyncio.wait(tasks)
        raise

    failure = None
    for task in tasks:
        if task in done and not task.cancelled() and task.exception() is not None:
            failure = task.exception()
            break

    if failure is None:
        return

    transform.destroy(failure)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.wait(pending)
    for task in tasks:
        if not task.cancelled():
            task.exception()

    failure = transform.error or failure
    logger.debug(f"Pipeline failed: {failure!r}")
    raise failure
