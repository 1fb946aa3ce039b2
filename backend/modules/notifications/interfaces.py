"""
Notification interface.

Every method returns True when the provider accepted the message. A
False return is never fatal to the caller.
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class INotifier(Protocol):
    async def send_otp(self, to: str, code: str, name: Optional[str] = None) -> bool:
        ...

    async def send_password_reset(self, to: str, code: str) -> bool:
        ...

    async def send_verification_link(self, to: str, url: str) -> bool:
        ...

    async def send_welcome(self, to: str, name: str, user_type: str) -> bool:
        ...
