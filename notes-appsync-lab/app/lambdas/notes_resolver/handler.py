# app/lambdas/notes_resolver/handler.py
import json
import logging
import os
import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import boto3

logger = logging.getLogger()
logger.setLevel(logging.INFO)


@dataclass(frozen=True)
class Config:
    table_name: str
    endpoint_url: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            table_name=os.environ["NOTES_TABLE"],
            endpoint_url=os.environ.get("DYNAMODB_ENDPOINT_URL") or None,
        )


class Field(str, Enum):
    """GraphQL fields wired to this function by the AppSync data source."""

    GET_NOTE_BY_ID = "getNoteById"
    LIST_NOTES = "listNotes"
    CREATE_NOTE = "createNote"
    UPDATE_NOTE = "updateNote"
    DELETE_NOTE = "deleteNote"


def _to_item(note: Dict[str, Any]) -> Dict[str, Any]:
    # boto3 rejects float attributes; JSON numbers are stored as Decimal
    return json.loads(json.dumps(note), parse_float=Decimal)


class NotesStore:
    """One storage call per operation against the notes table."""

    def __init__(self, table):
        self.table = table

    def get_note_by_id(self, note_id: str) -> Optional[Dict[str, Any]]:
        resp = self.table.get_item(Key={"id": note_id}, ConsistentRead=True)
        return resp.get("Item")

    def list_notes(self) -> List[Dict[str, Any]]:
        resp = self.table.scan()
        return resp.get("Items", [])

    def create_note(self, note: Dict[str, Any]) -> Dict[str, Any]:
        item = _to_item(note)
        if not item.get("id"):
            item["id"] = str(uuid.uuid4())
            logger.debug("Generated note id %s", item["id"])
        self.table.put_item(Item=item)
        return item

    def update_note(self, note: Dict[str, Any]) -> Dict[str, Any]:
        item = _to_item(note)
        self.table.put_item(Item=item)
        return item

    def delete_note(self, note_id: str) -> str:
        self.table.delete_item(Key={"id": note_id})
        return note_id


RESOLVERS: Dict[Field, Callable[[NotesStore, Dict[str, Any]], Any]] = {
    Field.GET_NOTE_BY_ID: lambda store, args: store.get_note_by_id(args["noteId"]),
    Field.LIST_NOTES: lambda store, args: store.list_notes(),
    Field.CREATE_NOTE: lambda store, args: store.create_note(args["note"]),
    Field.UPDATE_NOTE: lambda store, args: store.update_note(args["note"]),
    Field.DELETE_NOTE: lambda store, args: store.delete_note(args["noteId"]),
}


def build_store(config: Config) -> NotesStore:
    dynamodb = boto3.resource("dynamodb", endpoint_url=config.endpoint_url)
    return NotesStore(dynamodb.Table(config.table_name))


def route(event, store: NotesStore):
    """
    Dispatch an AppSync direct resolver event to its operation.
    Unknown field names resolve to None; storage errors propagate.
    """
    field_name = (event.get("info") or {}).get("fieldName")
    try:
        field = Field(field_name)
    except ValueError:
        logger.warning("Unknown field name: %s", field_name)
        return None

    return RESOLVERS[field](store, event.get("arguments") or {})


CONFIG = Config.from_env()
store = build_store(CONFIG)


def lambda_handler(event, context):
    logger.info("Received event: %s", json.dumps(event, default=str))
    return route(event, store)
