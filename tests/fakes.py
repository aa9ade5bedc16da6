# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field

from todo_backend.utils.email import MailDeliveryError


@dataclass(slots=True)
class SentCode:
    to_email: str
    otp: int
    kind: str


@dataclass
class FakeMailer:
    """
    Stand-in for Mailer used by route tests.

    - Records every code it is asked to send
    - Raises MailDeliveryError when `fail` is set
    """

    fail: bool = False
    sent: list[SentCode] = field(default_factory=list)

    async def _send(self, to_email: str, otp: int, kind: str) -> None:
        if self.fail:
            raise MailDeliveryError("smtp down")
        self.sent.append(SentCode(to_email=to_email, otp=otp, kind=kind))

    async def send_verification_code(self, to_email: str, otp: int) -> None:
        await self._send(to_email, otp, "verify")

    async def send_password_reset_code(self, to_email: str, otp: int) -> None:
        await self._send(to_email, otp, "reset")
