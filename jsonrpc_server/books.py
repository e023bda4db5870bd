"""Example "books" methods.

Illustrative application handlers used by the demo server and the tests.
They show the supported ways a validator can reject params: raising a
plain exception, raising a field/validation error, or returning an
``(is_valid, field_errors)`` pair.
"""

import itertools
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .errors import FieldErrors, FieldValidationError, ValidationError
from .rpc.registry import MethodRegistry

DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100
MIN_TITLE_LENGTH = 3


@dataclass(slots=True)
class Book:
    """A stored book."""

    id: int
    title: str
    author: str
    topic_id: int


@dataclass(slots=True)
class BookStore:
    """In-memory book storage."""

    books: dict[int, Book] = field(default_factory=dict)
    _ids: Iterator[int] = field(default_factory=lambda: itertools.count(1))

    def add(self, title: str, author: str, topic_id: int) -> Book:
        """Store a new book and return it."""
        book = Book(id=next(self._ids), title=title, author=author, topic_id=topic_id)
        self.books[book.id] = book
        return book


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_list_params(params: dict[str, Any]) -> bool:
    """Validator for books.list."""
    if not _is_int(params.get("page")):
        raise ValueError("page should be integer")
    per_page = params.get("per_page")
    if per_page is None:
        return True
    if not _is_int(per_page):
        raise FieldValidationError(
            "per_page",
            "per_page should be integer",
            code="invalid-per-page-value",
        )
    if per_page > MAX_PER_PAGE:
        raise FieldValidationError(
            "per_page",
            f"per_page should be at most {MAX_PER_PAGE}",
            code="invalid-per-page-value",
        )
    return True


async def list_books(params: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle books.list: one page of generated book entries."""
    page = params["page"]
    per_page = params.get("per_page") or DEFAULT_PER_PAGE
    start = (page - 1) * per_page
    items = [
        {"id": book_id, "title": f"book #{book_id} title goes here"}
        for book_id in range(start, start + per_page)
    ]
    return {"items": items}


def book_field_errors(params: dict[str, Any]) -> FieldErrors:
    """Check book properties; returns field -> reasons for invalid fields."""
    errors: FieldErrors = {}

    title = params.get("title")
    if not title:
        errors["title"] = ["required field missing"]
    elif not isinstance(title, str) or len(title.strip()) < MIN_TITLE_LENGTH:
        errors["title"] = ["too short"]

    if not params.get("author"):
        errors["author"] = ["required field missing"]

    topic_id = params.get("topic_id")
    if topic_id is None:
        errors["topic_id"] = ["required field missing"]
    else:
        reasons = []
        if isinstance(topic_id, bool) or not isinstance(topic_id, (int, float)):
            reasons.append("must be a number")
        else:
            if topic_id <= 0:
                reasons.append("must be positive")
            if isinstance(topic_id, float):
                reasons.append("must be integer not float")
        if reasons:
            errors["topic_id"] = reasons

    return errors


def validate_book_strict(params: dict[str, Any]) -> bool:
    """Validator for books.add: raises on any invalid property."""
    errors = book_field_errors(params)
    if errors:
        raise ValidationError(errors, "Invalid book properties", code="invalid-book-props")
    return True


def validate_book_pair(params: dict[str, Any]) -> tuple[bool, FieldErrors]:
    """Validator for books.add_v2: reports problems as a pair."""
    errors = book_field_errors(params)
    return not errors, errors


def register_book_methods(registry: MethodRegistry, store: BookStore | None = None) -> BookStore:
    """Register the books.* methods.

    Args:
        registry: Registry to add methods to.
        store: Backing store (a new in-memory one if omitted).

    Returns:
        The store used by the handlers.
    """
    store = store if store is not None else BookStore()

    async def add_book(params: dict[str, Any], context: Any) -> dict[str, Any]:
        book = store.add(params["title"], params["author"], params["topic_id"])
        return {"id": book.id}

    registry.register("books.list", list_books, validate_list_params)
    registry.register("books.add", add_book, validate_book_strict)
    registry.register("books.add_v2", add_book, validate_book_pair)
    return store
