"""Tests for the error taxonomy and error tagging."""

from jsonrpc_server.errors import (
    FieldValidationError,
    HandlerError,
    MethodNotFound,
    NotFoundError,
    RpcError,
    ValidationError,
    as_rpc_error,
    tag_error,
)


class BookError(Exception):
    """Handler-defined error with extra attributes."""

    def __init__(self, message: str, **attrs: object) -> None:
        super().__init__(message)
        for key, value in attrs.items():
            setattr(self, key, value)


class TestErrorShapes:
    """Default codes, statuses and messages of each error kind."""

    def test_method_not_found_names_method(self) -> None:
        error = MethodNotFound("books.remove")
        assert error.code == "method-not-found"
        assert error.message == "Method [books.remove] not found."
        assert error.http_status == 404
        assert error.method == "books.remove"

    def test_method_not_found_without_method(self) -> None:
        error = MethodNotFound()
        assert error.message == "Method not found"

    def test_method_not_found_is_not_found(self) -> None:
        assert isinstance(MethodNotFound("x"), NotFoundError)

    def test_validation_error_defaults(self) -> None:
        error = ValidationError({"title": ["too short"], "author": ["missing"]})
        assert error.code == "fields-validation"
        assert error.http_status == 400
        assert error.level == "warning"
        assert error.message == "Validation error on [title, author]"

    def test_validation_error_empty(self) -> None:
        error = ValidationError({})
        assert error.message == "Validation Error"
        assert error.validations == {}

    def test_validation_error_custom_code_and_message(self) -> None:
        error = ValidationError({"a": ["bad"]}, "Invalid thing", code="invalid-thing")
        assert error.code == "invalid-thing"
        assert error.message == "Invalid thing"

    def test_field_validation_error(self) -> None:
        error = FieldValidationError("per_page")
        assert error.code == "field-validation"
        assert error.message == "Invalid value for field [per_page]"
        assert error.validations == {"per_page": ["Invalid value for field [per_page]"]}
        assert error.level == "warning"
        assert error.http_status == 400

    def test_base_error_code_is_class_name(self) -> None:
        class StorageUnavailable(RpcError):
            pass

        assert StorageUnavailable("down").code == "StorageUnavailable"

    def test_to_dict_omits_missing_validations(self) -> None:
        assert RpcError("boom", code="x").to_dict() == {"code": "x", "message": "boom"}


class TestAsRpcError:
    """Tests for normalizing arbitrary exceptions."""

    def test_plain_exception_uses_class_name(self) -> None:
        error = as_rpc_error(RuntimeError("boom"), method="books.list")
        assert isinstance(error, HandlerError)
        assert error.code == "RuntimeError"
        assert error.message == "boom"
        assert error.http_status == 500
        assert error.method == "books.list"
        assert error.validations is None

    def test_keeps_explicit_code_and_status(self) -> None:
        exc = BookError("not yours", code="forbidden-book", http_status=403)
        error = as_rpc_error(exc)
        assert error.code == "forbidden-book"
        assert error.http_status == 403

    def test_synthesizes_validations_from_field(self) -> None:
        error = as_rpc_error(BookError("must be unique", field="title"))
        assert error.validations == {"title": ["must be unique"]}

    def test_prefers_existing_validations(self) -> None:
        exc = BookError("bad", field="title", validations={"author": ["missing"]})
        assert as_rpc_error(exc).validations == {"author": ["missing"]}

    def test_keeps_original_as_cause(self) -> None:
        exc = KeyError("title")
        assert as_rpc_error(exc).__cause__ is exc

    def test_rpc_error_passes_through(self) -> None:
        original = ValidationError({"a": ["bad"]}, method="m1")
        assert as_rpc_error(original, method="m2") is original


class TestTagError:
    """Tests for tag_error."""

    def test_fills_method_and_id(self) -> None:
        original = ValidationError({"a": ["bad"]})
        tagged = tag_error(original, method="books.add", request_id=7)
        assert tagged.method == "books.add"
        assert tagged.request_id == 7
        assert isinstance(tagged, ValidationError)
        assert tagged.validations == {"a": ["bad"]}

    def test_does_not_mutate_original(self) -> None:
        original = MethodNotFound("books.remove")
        tag_error(original, request_id="abc")
        assert original.request_id is None

    def test_keeps_existing_values(self) -> None:
        original = RpcError("x", method="first", request_id=1)
        tagged = tag_error(original, method="second", request_id=2)
        assert tagged is original
        assert tagged.method == "first"
        assert tagged.request_id == 1

    def test_keeps_message_and_code(self) -> None:
        original = FieldValidationError("per_page", "per_page should be integer", code="bad-page")
        tagged = tag_error(original, request_id=3)
        assert tagged.code == "bad-page"
        assert tagged.message == "per_page should be integer"
        assert str(tagged) == "per_page should be integer"
