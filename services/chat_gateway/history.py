"""
File-backed chat history.

One ``<chatId>.json`` file per saved conversation, written verbatim. Chat ids
are restricted to a safe charset so they can never escape the directory.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from services.chat_gateway.dependencies import get_history, read_json_body
from shared.errors import ChatNotFoundError, ValidationError
from shared.logging.logger import log_fields

logger = logging.getLogger(__name__)

CHAT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")

_LIST_FIELDS = ("chatId", "title", "savedAt", "messageCount")


def _invalid_id(chat_id: Any) -> ValidationError:
    return ValidationError(
        "Invalid chat id",
        details=[
            {
                "field": "chatId",
                "message": "chatId must be 1-128 letters, digits, '-' or '_'",
                "value": chat_id,
            }
        ],
    )


class ChatHistoryStore:

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    @property
    def directory(self) -> Path:
        return self._dir

    def _path(self, chat_id: Any) -> Path:
        if not isinstance(chat_id, str) or not CHAT_ID_PATTERN.match(chat_id):
            raise _invalid_id(chat_id)
        return self._dir / f"{chat_id}.json"

    def save(self, record: Any) -> str:
        if not isinstance(record, dict):
            raise ValidationError(
                details=[{"field": "body", "message": "Chat record must be a JSON object", "value": None}]
            )
        chat_id = record.get("chatId")
        path = self._path(chat_id)
        try:
            content = json.dumps(record, indent=2, allow_nan=False)
        except ValueError as exc:
            raise ValidationError(
                details=[{"field": "body", "message": "Chat record must not contain NaN or Infinity", "value": None}]
            ) from exc
        self._dir.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info("Chat saved", extra=log_fields(chat_id=chat_id))
        return chat_id

    def load(self, chat_id: str) -> Any:
        path = self._path(chat_id)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ChatNotFoundError(chat_id) from exc
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable chat file %s", path.name, exc_info=True)
            raise ChatNotFoundError(chat_id) from exc

    def list(self) -> list[dict[str, Any]]:
        """Metadata of every readable record, newest ``savedAt`` first."""
        if not self._dir.is_dir():
            return []
        entries = []
        for path in self._dir.glob("*.json"):
            try:
                record = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                logger.warning("Skipping unreadable chat file %s", path.name, exc_info=True)
                continue
            if not isinstance(record, dict):
                logger.warning("Skipping chat file %s: not an object", path.name)
                continue
            entries.append({field: record.get(field) for field in _LIST_FIELDS})
        # ISO-8601 timestamps sort chronologically as strings.
        entries.sort(key=lambda entry: str(entry.get("savedAt") or ""), reverse=True)
        return entries

    def delete(self, chat_id: str) -> None:
        path = self._path(chat_id)
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise ChatNotFoundError(chat_id) from exc
        logger.info("Chat deleted", extra=log_fields(chat_id=chat_id))

    def clear(self) -> int:
        if not self._dir.is_dir():
            return 0
        deleted = 0
        for path in self._dir.glob("*.json"):
            path.unlink(missing_ok=True)
            deleted += 1
        logger.info("Chat history cleared", extra=log_fields(deleted=deleted))
        return deleted


router = APIRouter(prefix="/api", tags=["history"])


@router.post("/save-chat")
async def save_chat(request: Request, store: ChatHistoryStore = Depends(get_history)):
    record = await read_json_body(request)
    chat_id = await run_in_threadpool(store.save, record)
    return {"success": True, "message": "Chat saved successfully", "chatId": chat_id}


@router.get("/load-chat/{chat_id}")
def load_chat(chat_id: str, store: ChatHistoryStore = Depends(get_history)):
    return store.load(chat_id)


@router.get("/chat-history")
def chat_history(store: ChatHistoryStore = Depends(get_history)):
    return store.list()


@router.delete("/delete-chat/{chat_id}")
def delete_chat(chat_id: str, store: ChatHistoryStore = Depends(get_history)):
    store.delete(chat_id)
    return {"success": True, "message": "Chat deleted successfully"}


@router.delete("/clear-chat-history")
def clear_chat_history(store: ChatHistoryStore = Depends(get_history)):
    deleted = store.clear()
    return {"success": True, "message": "All chat history cleared", "deleted": deleted}
