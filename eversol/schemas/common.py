# eversol/schemas/common.py
from typing import Literal

from sqlmodel import SQLModel

from eversol.core.errors import ErrorKind

NotificationType = Literal["success", "error", "info"]


class Notification(SQLModel):
    """
    Payload of the "show-toast" channel.
    """

    message: str
    type: NotificationType = "success"


class OperationResult(SQLModel):
    """
    Result descriptor returned by mutating engine operations.

    Failures are reported here instead of being raised.
    """

    success: bool
    message: str | None = None
    error: ErrorKind | None = None
