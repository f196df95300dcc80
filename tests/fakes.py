"""Test doubles shared across the fan-out tests."""
import json

import anyio


class FakeWebSocket:
    def __init__(self, fail_on_send: bool = False, stall_on_send: bool = False) -> None:
        self.accepted = False
        self.closed = False
        self.close_code = None
        self.close_reason = None
        self.sent: list[str] = []
        self.fail_on_send = fail_on_send
        self.stall_on_send = stall_on_send

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, data: str) -> None:
        if self.fail_on_send:
            raise RuntimeError("socket closed")
        if self.stall_on_send:
            await anyio.sleep_forever()
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = True
        self.close_code = code
        self.close_reason = reason

    @property
    def events(self) -> list[dict]:
        return [json.loads(frame) for frame in self.sent]
