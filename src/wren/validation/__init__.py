"""Form validation: composable rules, clean results.

Rules are lists of validator callables or pipe-separated strings::

    from wren.validation import validate, required, max_length, email

    result = validate(ctx.request.all_input(), {
        "title": [required, max_length(200)],
        "email": "required|email",
    })
    if not result:
        ...

Inside a handler, ``validate_request`` does the usual thing for a form
post: on failure it raises ``ValidationFailed``, which the pipeline turns
into a redirect back with the errors and the submitted input in the
session::

    def store(self, ctx):
        data = validate_request(ctx, {
            "email": "required|email|unique:users,email",
            "password": "required|min:8",
        }).data
"""

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from wren.errors import WrenError
from wren.validation.mime import check_mime, sniff_mime
from wren.validation.result import MessageBag, ValidationResult
from wren.validation.rules import (
    Validator,
    alpha_numeric,
    email,
    file,
    image,
    integer,
    matches,
    max_length,
    mime,
    min_length,
    number,
    numeric,
    one_of,
    optional,
    parse_rules,
    required,
    string,
    unique,
    url,
)

if TYPE_CHECKING:
    from wren.context import RequestContext
    from wren.data.connection import Connection

__all__ = [
    "MessageBag",
    "ValidationFailed",
    "ValidationResult",
    "Validator",
    "alpha_numeric",
    "check_mime",
    "email",
    "file",
    "image",
    "integer",
    "matches",
    "max_length",
    "mime",
    "min_length",
    "number",
    "numeric",
    "one_of",
    "optional",
    "parse_rules",
    "required",
    "sniff_mime",
    "string",
    "unique",
    "url",
    "validate",
    "validate_request",
]

type Rules = Mapping[str, list[Validator] | str]


class ValidationFailed(WrenError):  # noqa: N818
    """Input did not pass validation.

    Raised by ``validate_request``. The request pipeline answers it with
    a redirect back, storing ``errors`` and the submitted input in the
    session.
    """

    def __init__(self, errors: MessageBag, data: Mapping[str, Any] | None = None) -> None:
        self.errors = errors
        self.data = dict(data or {})
        fields = ", ".join(errors)
        super().__init__(f"Validation failed for: {fields}")


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate(
    data: Mapping[str, Any],
    rules: Rules,
    *,
    db: "Connection | Callable[[], Connection] | None" = None,
) -> ValidationResult:
    """Validate *data* against *rules*.

    Args:
        data: Field name -> value. Form strings, ``UploadFile`` objects,
            or any mapping such as ``FormData`` or ``QueryParams``.
        rules: Field name -> list of validators, or a pipe-separated
            rule string (see ``parse_rules``).
        db: Connection used by ``unique`` rules written as strings.

    A failing ``required`` stops the remaining rules for that field;
    ``optional`` skips them when the field is empty.
    """
    errors = MessageBag()
    cleaned: dict[str, Any] = {}

    for field_name, field_rules in rules.items():
        validators = parse_rules(field_rules, db=db) if isinstance(field_rules, str) else field_rules
        value = data.get(field_name)

        failed = False
        for validator in validators:
            if validator is optional:
                if _is_empty(value):
                    break
                continue
            error = validator(value)
            if error is not None:
                errors.add(field_name, error)
                failed = True
                # No point checking the format of a missing value
                if validator is required:
                    break

        if not failed:
            cleaned[field_name] = value

    return ValidationResult(data=cleaned, errors=errors)


def validate_request(ctx: "RequestContext", rules: Rules) -> ValidationResult:
    """Validate the request's query, form fields and uploads.

    Raises ``ValidationFailed`` on failure. On success, clears any
    ``errors`` left in the session by an earlier failed attempt.
    """
    request = ctx.request
    data: dict[str, Any] = {**request.all_input(), **request.files}
    needs_db = any(isinstance(r, str) and "unique:" in r for r in rules.values())
    result = validate(data, rules, db=(lambda: ctx.db) if needs_db else None)
    if not result:
        raise ValidationFailed(result.errors, request.all_input())
    if ctx.has_session:
        ctx.session.unset("errors")
    return result
