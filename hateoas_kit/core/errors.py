"""Error objects and error documents for both wire formats."""

from typing import Any

from hateoas_kit.core.document import HALDocumentBuilder, JSONAPIDocumentBuilder
from hateoas_kit.exceptions import HypermediaError


class ErrorDocumentBuilder:
    """Build JSON:API error objects and HAL ``vnd.error`` documents."""

    def error_object(
        self,
        *,
        status: str | None = None,
        code: str | None = None,
        title: str | None = None,
        detail: str | None = None,
        source: dict[str, Any] | None = None,
        meta: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a JSON:API error object holding the members that are set."""
        members = {
            "status": status,
            "code": code,
            "title": title,
            "detail": detail,
            "source": source,
            "meta": meta,
        }
        error = {name: value for name, value in members.items() if value is not None}
        if not error:
            raise ValueError("Error object must include at least one field.")
        return error

    def from_exception(self, exc: HypermediaError) -> dict[str, Any]:
        """Return a JSON:API error object describing ``exc``."""
        context = exc.context
        source = {"pointer": f"/data/relationships/{exc.relation}"} if exc.relation else None
        return self.error_object(
            status=exc.status,
            code=exc.code,
            title=exc.title,
            detail=exc.message,
            source=source,
            meta=context or None,
        )

    def jsonapi_document(self, *errors: HypermediaError) -> dict[str, Any]:
        """Return a JSON:API document with an errors array."""
        return JSONAPIDocumentBuilder().build_error(self.from_exception(exc) for exc in errors)

    def hal_document(self, exc: HypermediaError) -> dict[str, Any]:
        """Return a HAL ``vnd.error`` document describing ``exc``."""
        error: dict[str, Any] = {"message": exc.message, "logref": exc.code}
        error.update(exc.context)
        return HALDocumentBuilder().build_error(error)
