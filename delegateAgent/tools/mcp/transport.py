"""Line-delimited JSON-RPC transport over a spawned process's standard streams.

Works like ``mcp.client.stdio.stdio_client`` but keeps the process handle, so
the owning connection learns the exit code when the server goes away.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Dict, List, Optional, Tuple

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp import types
from mcp.shared.message import SessionMessage

LOGGER = logging.getLogger(__name__)

# asyncio's default 64 KiB line limit is too small for large tool listings
STREAM_LIMIT = 16 * 1024 * 1024
TERMINATE_TIMEOUT = 5.0


@dataclass(frozen=True)
class ExitEvent:
    """A downstream process exited."""

    server_id: str
    returncode: Optional[int]


ExitHandler = Callable[[ExitEvent], None]


@asynccontextmanager
async def process_client(
    server_id: str,
    command: str,
    args: List[str],
    env: Dict[str, str],
    on_exit: ExitHandler,
) -> AsyncIterator[
    Tuple[MemoryObjectReceiveStream[SessionMessage | Exception], MemoryObjectSendStream[SessionMessage]]
]:
    """Spawn an MCP server and yield (read_stream, write_stream) for ``ClientSession``.

    Args:
        server_id: Server identifier (for logging and exit events)
        command: Executable to launch
        args: Command arguments
        env: Full environment for the child process
        on_exit: Called once with an ``ExitEvent`` when the process exits
    """
    read_stream_writer, read_stream = anyio.create_memory_object_stream(0)
    write_stream, write_stream_reader = anyio.create_memory_object_stream(0)

    LOGGER.debug(f"  Starting stdio server: {command} {' '.join(args)}")
    process = await asyncio.create_subprocess_exec(
        command,
        *args,
        env=env,
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        limit=STREAM_LIMIT,
    )

    async def stdout_reader():
        async with read_stream_writer:
            while True:
                line = await process.stdout.readline()
                if not line:
                    break
                line = line.strip()
                if not line:
                    continue
                try:
                    message = types.JSONRPCMessage.model_validate_json(line)
                except Exception as exc:
                    LOGGER.debug(f"  Unparseable line from {server_id}: {line[:200]!r}")
                    item = exc
                else:
                    item = SessionMessage(message)
                try:
                    await read_stream_writer.send(item)
                except (anyio.ClosedResourceError, anyio.BrokenResourceError):
                    break

    async def stdin_writer():
        async with write_stream_reader:
            async for session_message in write_stream_reader:
                payload = session_message.message.model_dump_json(by_alias=True, exclude_none=True)
                try:
                    process.stdin.write((payload + "\n").encode("utf-8"))
                    await process.stdin.drain()
                except (BrokenPipeError, ConnectionResetError) as e:
                    LOGGER.warning(f"  Write to {server_id} failed: {e}")
                    break

    async def stderr_drain():
        while True:
            line = await process.stderr.readline()
            if not line:
                break
            LOGGER.debug(f"  [{server_id} stderr] {line.decode('utf-8', errors='replace').rstrip()}")

    async def exit_watcher():
        returncode = await process.wait()
        on_exit(ExitEvent(server_id=server_id, returncode=returncode))

    io_tasks = [
        asyncio.create_task(stdout_reader(), name=f"{server_id}-stdout"),
        asyncio.create_task(stdin_writer(), name=f"{server_id}-stdin"),
        asyncio.create_task(stderr_drain(), name=f"{server_id}-stderr"),
    ]
    watcher = asyncio.create_task(exit_watcher(), name=f"{server_id}-exit")

    try:
        yield read_stream, write_stream
    finally:
        await write_stream.aclose()

        if process.returncode is None:
            try:
                if process.stdin and not process.stdin.is_closing():
                    process.stdin.close()
                process.terminate()
                await asyncio.wait_for(process.wait(), timeout=TERMINATE_TIMEOUT)
            except asyncio.TimeoutError:
                LOGGER.warning(f"  {server_id} did not exit after terminate, killing")
                process.kill()
                await process.wait()
            except ProcessLookupError:
                pass

        # Let the watcher deliver the exit event before tearing down I/O
        await watcher

        for task in io_tasks:
            task.cancel()
        await asyncio.gather(*io_tasks, return_exceptions=True)

        await read_stream.aclose()
        LOGGER.debug(f"  Stdio transport closed for server: {server_id}")
