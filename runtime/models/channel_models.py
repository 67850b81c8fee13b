"""
Messages relayed from the helper process to the UI.

Each helper session produces any number of `output` / `error` messages
followed by exactly one `close`.
"""

from typing import Literal, Optional

from pydantic import BaseModel


class ChannelMessage(BaseModel):
    event: Literal["output", "error", "close"]
    session_id: str
    text: Optional[str] = None   # output / error
    code: Optional[int] = None   # close

    @classmethod
    def output(cls, session_id: str, text: str) -> "ChannelMessage":
        return cls(event="output", session_id=session_id, text=text)

    @classmethod
    def error(cls, session_id: str, text: str) -> "ChannelMessage":
        return cls(event="error", session_id=session_id, text=text)

    @classmethod
    def close(cls, session_id: str, code: Optional[int]) -> "ChannelMessage":
        return cls(event="close", session_id=session_id, code=code)
