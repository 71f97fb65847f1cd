"""
commerce_cms.validation

Input validation and sanitization for write requests.

Responsibilities:
- Trim, require, HTML-escape and HTML-sanitize submitted text fields.
- Parse ids, money amounts and comma-separated tag lists.
- Report only the first failing field, with a human-readable message.

Fields are validated in declaration order, so the first error pydantic reports is
the first failing field of the form.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, TypeVar

import nh3
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, ValidationError
from pydantic_core import PydanticCustomError
from starlette.status import HTTP_400_BAD_REQUEST

from commerce_cms.errors import AppError, ErrorCode

_HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#x27;",
        "/": "&#x2F;",
        "\\": "&#x5C;",
        "`": "&#96;",
    }
)
_INT_RE = re.compile(r"^[+-]?\d+$")

# Largest value a signed 64-bit INTEGER column holds.
MAX_ID = 2**63 - 1
MAX_INVENTORY = 2**31 - 1
# Numeric(8, 2) columns.
_MAX_AMOUNT = Decimal("1000000")
_CENTS = Decimal("0.01")

NAME_MAX_LENGTH = 52
TEXT_MAX_LENGTH = 255


def escape(value: str) -> str:
    return value.translate(_HTML_ESCAPES)


def sanitize_html(value: str) -> str:
    return nh3.clean(value).strip()


def split_tags(value: Any) -> list[str] | None:
    """
    "news, tech,,  " -> ["news", "tech"]; None stays None (field not sent).
    """

    if value is None:
        return None
    parts = value if isinstance(value, list) else str(value).split(",")
    return [str(p).strip() for p in parts if str(p).strip()]


def _required(message: str) -> BeforeValidator:
    def check(value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise PydanticCustomError("required", message)
        return value.strip()

    return BeforeValidator(check)


def _not_empty_html(message: str) -> AfterValidator:
    def check(value: str) -> str:
        cleaned = sanitize_html(value)
        if not cleaned:
            raise PydanticCustomError("required", message)
        return cleaned

    return AfterValidator(check)


def _max_length(limit: int, message: str) -> AfterValidator:
    # Applied to the stored (escaped) text, which is what the column must hold.
    def check(value: str) -> str:
        if len(value) > limit:
            raise PydanticCustomError("too_long", message)
        return value

    return AfterValidator(check)


def _tag_lengths(value: list[str] | None) -> list[str] | None:
    if value and any(len(tag) > NAME_MAX_LENGTH for tag in value):
        raise PydanticCustomError(
            "too_long", "Tag must be at most {limit} characters", {"limit": NAME_MAX_LENGTH}
        )
    return value


def _int_at_least(minimum: int, message: str, *, maximum: int = MAX_ID) -> BeforeValidator:
    def check(value: Any) -> int:
        if isinstance(value, bool):
            raise PydanticCustomError("int", message)
        if isinstance(value, int):
            number = value
        elif isinstance(value, str) and _INT_RE.match(value.strip()):
            try:
                number = int(value.strip())
            except ValueError as e:
                # More digits than int() accepts from a string.
                raise PydanticCustomError("int", message) from e
        else:
            raise PydanticCustomError("int", message)
        if not minimum <= number <= maximum:
            raise PydanticCustomError("int", message)
        return number

    return BeforeValidator(check)


def _decimal(message: str, *, allow_zero: bool) -> BeforeValidator:
    def check(value: Any) -> Decimal:
        if isinstance(value, bool) or value is None:
            raise PydanticCustomError("decimal", message)
        try:
            amount = Decimal(str(value).strip())
            if not amount.is_finite() or amount < 0 or amount >= _MAX_AMOUNT:
                raise PydanticCustomError("decimal", message)
            amount = amount.quantize(_CENTS)
        except InvalidOperation as e:
            raise PydanticCustomError("decimal", message) from e
        # Rounding can land on zero or on the upper bound.
        if amount >= _MAX_AMOUNT or (amount == 0 and not allow_zero):
            raise PydanticCustomError("decimal", message)
        return amount

    return BeforeValidator(check)


Title = Annotated[
    str,
    _required("Title is required"),
    AfterValidator(escape),
    _max_length(TEXT_MAX_LENGTH, f"Title must be at most {TEXT_MAX_LENGTH} characters"),
]
Content = Annotated[str, _required("Content is required"), AfterValidator(escape)]
Body = Annotated[str, _required("Body is required"), _not_empty_html("Body is required")]
CategoryName = Annotated[
    str,
    _required("Category is required"),
    AfterValidator(escape),
    _max_length(NAME_MAX_LENGTH, f"Category must be at most {NAME_MAX_LENGTH} characters"),
]
TypeName = Annotated[
    str,
    _required("Type is required"),
    AfterValidator(escape),
    _max_length(NAME_MAX_LENGTH, f"Type must be at most {NAME_MAX_LENGTH} characters"),
]
Tags = Annotated[list[str] | None, BeforeValidator(split_tags), AfterValidator(_tag_lengths)]
PostId = Annotated[int, _int_at_least(1, "Post Id is required")]

ProductId = Annotated[int, _int_at_least(1, "Product Id is required")]
ProductName = Annotated[
    str,
    _required("Name is required"),
    AfterValidator(escape),
    _max_length(TEXT_MAX_LENGTH, f"Name must be at most {TEXT_MAX_LENGTH} characters"),
]
Description = Annotated[
    str, _required("Description is required"), _not_empty_html("Description is required")
]
Price = Annotated[Decimal, _decimal("Price is invalid", allow_zero=False)]
Discount = Annotated[Decimal, _decimal("Discount is invalid", allow_zero=True)]
Inventory = Annotated[int, _int_at_least(0, "Inventory is invalid", maximum=MAX_INVENTORY)]


class _Form(BaseModel):
    model_config = ConfigDict(validate_default=True, populate_by_name=True, extra="ignore")


class PostForm(_Form):
    title: Title = None
    content: Content = None
    body: Body = None
    category: CategoryName = None
    type: TypeName = None
    tags: Tags = None


class PostUpdateForm(_Form):
    post_id: PostId = Field(default=None, alias="postId")
    title: Title = None
    content: Content = None
    body: Body = None
    category: CategoryName = None
    type: TypeName = None
    tags: Tags = None


class PostDeleteRequest(_Form):
    post_id: PostId = Field(default=None, alias="postId")


class ProductForm(_Form):
    name: ProductName = None
    description: Description = None
    price: Price = None
    discount: Discount = None
    inventory: Inventory = None
    category: CategoryName = None
    type: TypeName = None
    tags: Tags = None


class ProductUpdateForm(_Form):
    product_id: ProductId = Field(default=None, alias="productId")
    name: ProductName = None
    description: Description = None
    price: Price = None
    discount: Discount = None
    inventory: Inventory = None
    category: CategoryName = None
    type: TypeName = None
    tags: Tags = None


class ProductDeleteRequest(_Form):
    product_id: ProductId = Field(default=None, alias="productId")


class MaintenanceRequest(BaseModel):
    mode: bool


_FormT = TypeVar("_FormT", bound=BaseModel)


def parse_form(model: type[_FormT], data: Mapping[str, Any]) -> _FormT:
    try:
        return model.model_validate(dict(data))
    except ValidationError as e:
        first = e.errors()[0]
        raise AppError(str(first["msg"]), HTTP_400_BAD_REQUEST, ErrorCode.invalid) from e


# --- Module Notes -----------------------------------------------------------
# The delete requests are JSON bodies validated by FastAPI itself; their first error
# message reaches the client through `errors.validation_error_handler`.
