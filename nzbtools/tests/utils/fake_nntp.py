"""
Scripted in-process NNTP server for tests.
"""

import asyncio
import contextlib
import threading
from collections.abc import Awaitable, Callable, Iterator

from nzbtools.yenc.codec import encode_lines

_STATUS = {
    "STAT": "223 0 {id} status",
    "HEAD": "221 0 {id} head",
    "BODY": "222 0 {id} body",
    "ARTICLE": "220 0 {id} article",
}


def yenc_body(data: bytes, *, name: str = "file.bin", line_length: int = 128) -> list[str]:
    """Build the body lines of a single-part yEnc article as sent on the wire."""
    lines = [f"=ybegin line={line_length} size={len(data)} name={name}"]
    lines.extend(line.decode("latin-1") for line in encode_lines(data, line_length))
    lines.append(f"=yend size={len(data)}")
    return lines


class FakeNNTPServer:
    """
    Minimal NNTP peer listening on 127.0.0.1.

    Args:
        greeting: First line sent; None keeps the server silent.
        password: Required password; None accepts AUTHINFO USER alone.
        user_response: Overrides the reply to AUTHINFO USER.
        stall_on: Command verb that never gets a reply.
        reply_delay: Seconds to wait before answering each command.
        articles: Body lines by message id (with angle brackets).
        payload_mode: "full", "truncated" (close mid-payload) or "stalled".
        post_ready: Reply to POST.
        post_result: Reply after the article terminator.
    """

    def __init__(
        self,
        *,
        greeting: str | None = "200 fake news server ready",
        password: str | None = None,
        user_response: str | None = None,
        stall_on: str | None = None,
        reply_delay: float = 0.0,
        articles: dict[str, list[str]] | None = None,
        payload_mode: str = "full",
        post_ready: str = "340 send article",
        post_result: str = "240 article posted",
    ) -> None:
        self.greeting = greeting
        self.password = password
        self.user_response = user_response
        self.stall_on = stall_on
        self.reply_delay = reply_delay
        self.articles = articles or {}
        self.payload_mode = payload_mode
        self.post_ready = post_ready
        self.post_result = post_result
        self.commands: list[str] = []
        self.posted: list[str] = []
        self.port = 0
        self._server: asyncio.Server | None = None
        self._writers: set[asyncio.StreamWriter] = set()
        self._handlers: set[asyncio.Task[None]] = set()

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        for writer in list(self._writers):
            writer.close()
        for task in list(self._handlers):
            task.cancel()
        await asyncio.gather(*self._handlers, return_exceptions=True)
        await self._server.wait_closed()

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writers.add(writer)
        task = asyncio.current_task()
        if task is not None:
            self._handlers.add(task)
        try:
            with contextlib.suppress(ConnectionError):
                await self._serve(reader, writer)
        finally:
            writer.close()
            self._writers.discard(writer)
            self._handlers.discard(task)  # type: ignore[arg-type]

    async def _serve(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        if self.greeting is None:
            await reader.read()
            return
        await self._send(writer, self.greeting)

        while raw := await reader.readline():
            command = raw.decode("latin-1").rstrip("\r\n")
            self.commands.append(command)
            verb, _, arg = command.partition(" ")
            verb = verb.upper()

            if verb == self.stall_on:
                await reader.read()
                return
            if self.reply_delay:
                await asyncio.sleep(self.reply_delay)
            if verb == "QUIT":
                await self._send(writer, "205 closing connection")
                return
            if verb == "AUTHINFO":
                await self._send(writer, self._auth_reply(arg))
            elif verb == "POST":
                await self._post(reader, writer)
            elif verb in _STATUS:
                if not await self._article(reader, writer, verb, arg):
                    return
            else:
                await self._send(writer, "500 command not recognized")

    def _auth_reply(self, arg: str) -> str:
        sub, _, value = arg.partition(" ")
        if sub.upper() == "USER":
            if self.user_response is not None:
                return self.user_response
            return "281 authentication accepted" if self.password is None else "381 password required"
        if value == self.password:
            return "281 authentication accepted"
        return "481 authentication failed"

    async def _post(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        await self._send(writer, self.post_ready)
        if not self.post_ready.startswith("340"):
            return
        while raw := await reader.readline():
            line = raw.decode("latin-1").rstrip("\r\n")
            if line == ".":
                break
            self.posted.append(line[1:] if line.startswith("..") else line)
        await self._send(writer, self.post_result)

    async def _article(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter, verb: str, message_id: str
    ) -> bool:
        body = self.articles.get(message_id)
        if body is None:
            await self._send(writer, "430 no such article")
            return True
        await self._send(writer, _STATUS[verb].format(id=message_id))
        if verb == "STAT":
            return True

        headers = [f"Message-ID: {message_id}", "Subject: test"]
        if verb == "HEAD":
            payload = headers
        elif verb == "ARTICLE":
            payload = [*headers, "", *body]
        else:
            payload = body

        if self.payload_mode == "truncated":
            await self._send(writer, payload[0])
            return False
        if self.payload_mode == "stalled":
            await reader.read()
            return False

        for line in payload:
            await self._send(writer, "." + line if line.startswith(".") else line)
        await self._send(writer, ".")
        return True

    @staticmethod
    async def _send(writer: asyncio.StreamWriter, line: str) -> None:
        writer.write(line.encode("latin-1") + b"\r\n")
        await writer.drain()


StartServer = Callable[..., Awaitable[FakeNNTPServer]]


@contextlib.contextmanager
def serve_in_thread(**options: object) -> Iterator[FakeNNTPServer]:
    """Run a FakeNNTPServer on its own event loop, for callers that block."""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    server = FakeNNTPServer(**options)  # type: ignore[arg-type]
    try:
        asyncio.run_coroutine_threadsafe(server.start(), loop).result(timeout=5)
        yield server
    finally:
        asyncio.run_coroutine_threadsafe(server.stop(), loop).result(timeout=5)
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=5)
        loop.close()
