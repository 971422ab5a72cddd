from __future__ import annotations


class CompileNotifyError(Exception):
    pass


class FatalRunError(CompileNotifyError):
    """The source could not be read or the compile service could not be reached."""


class NotificationDeliveryError(CompileNotifyError):
    """The chat webhook rejected or never received the card."""
