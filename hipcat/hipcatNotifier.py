"""
hipcatNotifier.py

Posts plain-text messages to a HipChat v2 room:

  POST {hipchat_url}/v2/room/{room}/message
  Authorization: Bearer {api_token}
  Content-Type: application/json

  {"message": "<text>"}

A 201 Created response is success; anything else is a failure carrying the
status code and raw body. There are no retries: the first failure stops
the batch.

Basic usage:
  from hipcat import ConfigResolver, HipcatNotifier
  cfg = ConfigResolver().resolve().with_room("devs").require_room()
  with HipcatNotifier(cfg) as hn:
      hn.send_text("Deploy finished")
"""

from __future__ import annotations

import json
import typing as t
from dataclasses import dataclass
from loguru import logger
import requests
from hipcat.hipcatConfig import HipcatConfig, HipcatError


MESSAGE_PATH = "/v2/room/{room}/message"
SUCCESS_STATUS = 201


@dataclass(frozen=True)
class RoomMessage:
    text: str

    def encode(self) -> bytes:
        """Serialize to the compact UTF-8 JSON wire payload."""
        try:
            return json.dumps(
                {"message": self.text}, ensure_ascii=False, separators=(",", ":")
            ).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Could not encode message: {e}") from e

    @classmethod
    def decode(cls, payload: bytes | str) -> "RoomMessage":
        data = json.loads(payload)
        if not isinstance(data, dict) or not isinstance(data.get("message"), str):
            raise ValueError("payload is not a room message object")
        return cls(text=data["message"])


@dataclass(frozen=True)
class DeliveryOutcome:
    ok: bool
    status_code: int
    body: str = ""


class HipcatNotifier:
    """
    Sequential HipChat room client.

    - One requests.Session is reused for every message of a run.
    - deliver() reports the outcome; send_text() raises on failure.
    - send_all() stops at the first failure.
    """

    def __init__(
        self,
        config: HipcatConfig,
        *,
        session: requests.Session | None = None,
    ) -> None:
        if not config.room:
            raise ValueError("HipcatNotifier needs a resolved room")
        self._cfg = config
        self._session = session or requests.Session()

    # ----------------------------- Public API -----------------------------

    @property
    def url(self) -> str:
        # room goes into the path verbatim
        return self._cfg.hipchat_url.rstrip("/") + MESSAGE_PATH.format(room=self._cfg.room)

    def deliver(self, text: str) -> DeliveryOutcome:
        """
        POST one message and report how the server answered.

        Raises:
            SerializationError: If the text cannot be encoded
            TransportError: If no response was received
        """
        payload = RoomMessage(text).encode()
        headers = {
            "Authorization": f"Bearer {self._cfg.api_token}",
            "Content-Type": "application/json",
        }

        logger.debug(f"Posting {len(payload)} byte message to room {self._cfg.room}")
        try:
            with self._session.post(self.url, data=payload, headers=headers) as resp:
                if resp.status_code == SUCCESS_STATUS:
                    return DeliveryOutcome(ok=True, status_code=resp.status_code)
                return DeliveryOutcome(ok=False, status_code=resp.status_code, body=resp.text)
        except requests.RequestException as e:
            raise TransportError(f"Request to {self.url} failed: {e}") from e

    def send_text(self, text: str) -> DeliveryOutcome:
        outcome = self.deliver(text)
        if not outcome.ok:
            logger.debug(f"Server rejected message with status {outcome.status_code}")
            raise ProtocolError(outcome.status_code, outcome.body)
        return outcome

    def send_all(self, messages: t.Iterable[str]) -> int:
        """Send each message in order, stopping at the first error. Returns the number sent."""
        sent = 0
        for text in messages:
            self.send_text(text)
            sent += 1
        logger.debug(f"Delivered {sent} message(s) to room {self._cfg.room}")
        return sent

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "HipcatNotifier":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


# ------------------------------ Exceptions -------------------------------

class SerializationError(HipcatError):
    """The message could not be turned into a JSON payload."""


class TransportError(HipcatError):
    """The request could not be sent or no response came back."""


class ProtocolError(HipcatError):
    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Not OK: {status_code}, {body}")
        self.status_code = status_code
        self.body = body
