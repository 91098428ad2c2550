"""
CRUD services for the public content collections.

Each service owns one collection in the repository and one pydantic model.
Records are reloaded from storage on every call; nothing is cached.
"""

import uuid
from typing import Any, Dict, List, Tuple, Type

from pydantic import ValidationError as PydanticValidationError

from ..models.content import Book, ContentRecord, Post, Tip, now_ms
from ..storage.base import Repository
from ..utils.exceptions import NotFoundError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ContentService:
    """List, create, update and delete records of one content type"""

    model: Type[ContentRecord] = ContentRecord
    collection: str = ""
    label: str = "Item"
    required_fields: Tuple[str, ...] = ()
    newest_first: bool = False

    def __init__(self, repository: Repository):
        self.repository = repository

    def _parse(self, record: Dict[str, Any]) -> ContentRecord:
        return self.model.model_validate(record)

    def list(self) -> List[ContentRecord]:
        items = []
        for record in self.repository.list(self.collection):
            try:
                items.append(self._parse(record))
            except PydanticValidationError as e:
                logger.warning(
                    "Skipping invalid record",
                    collection=self.collection,
                    record_id=record.get("id"),
                    error=str(e),
                )
        if self.newest_first:
            items.sort(key=lambda item: item.created_at, reverse=True)
        return items

    def get(self, item_id: str) -> ContentRecord:
        record = self.repository.get(self.collection, item_id)
        if record is None:
            raise NotFoundError(f"{self.label} not found")
        return self._parse(record)

    def create(self, **fields: Any) -> ContentRecord:
        for name in self.required_fields:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Missing required field: {name}")

        values = {k: v for k, v in fields.items() if v is not None}
        try:
            item = self.model(id=str(uuid.uuid4()), created_at=now_ms(), **values)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {self.label.lower()}: {e.errors()[0]['msg']}")

        self.repository.insert(self.collection, item.to_public())
        logger.info(f"{self.label} created", collection=self.collection, item_id=item.id)
        return item

    def update(self, item_id: str, **changes: Any) -> ContentRecord:
        """
        Merge only the provided, non-empty fields.

        updatedAt always moves forward, even within the same millisecond
        as the previous write.
        """
        provided = {
            k: v for k, v in changes.items()
            if v is not None and not (isinstance(v, str) and v == "")
        }
        fields = self.model.model_fields
        provided_aliases = {
            fields[name].alias or name: value
            for name, value in provided.items()
            if name in fields and name not in ("id", "created_at", "updated_at")
        }

        def mutate(record: Dict[str, Any]) -> Dict[str, Any]:
            created = record.get("createdAt") or 0
            previous = record.get("updatedAt") or created
            record.update(provided_aliases)
            record["updatedAt"] = max(now_ms(), created + 1, previous + 1)
            return record

        updated = self.repository.update(self.collection, item_id, mutate)
        if updated is None:
            raise NotFoundError(f"{self.label} not found")

        logger.info(f"{self.label} updated", collection=self.collection, item_id=item_id, fields=sorted(provided))
        return self._parse(updated)

    def delete(self, item_id: str) -> ContentRecord:
        removed = self.repository.delete(self.collection, item_id)
        if removed is None:
            raise NotFoundError(f"{self.label} not found")
        logger.info(f"{self.label} deleted", collection=self.collection, item_id=item_id)
        return self._parse(removed)


class BookService(ContentService):
    model = Book
    collection = "books"
    label = "Book"
    required_fields = ("title", "url")


class TipService(ContentService):
    # Empty text is accepted
    model = Tip
    collection = "tips"
    label = "Tip"


class PostService(ContentService):
    model = Post
    collection = "posts"
    label = "Post"
    required_fields = ("title",)
    newest_first = True
