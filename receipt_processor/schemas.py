import re
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import settings

# Formats published for the receipt-processor API; only enforced when
# STRICT_VALIDATION is on
RETAILER_RE = re.compile(r"^[\w\s\-&]+$")
DESCRIPTION_RE = re.compile(r"^[\w\s\-]+$")
AMOUNT_RE = re.compile(r"^[0-9]+\.[0-9]{2}$")
DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
TIME_RE = re.compile(r"^[0-9]{2}:[0-9]{2}$")


class Item(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    short_description: str = Field(default="", alias="shortDescription")
    price: str = ""


class Receipt(BaseModel):
    """
    A submitted receipt. Money, date and time stay strings here; the points
    engine parses them so a bad value only zeroes the rule that reads it.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    retailer: str = ""
    purchase_date: str = Field(default="", alias="purchaseDate")
    purchase_time: str = Field(default="", alias="purchaseTime")
    items: List[Item] = Field(default_factory=list)
    total: str = ""

    @model_validator(mode="after")
    def strict_formats(self):
        if settings.STRICT_VALIDATION:
            check_strict(self)
        return self


class ScoredReceipt(Receipt):
    points: int

    @classmethod
    def from_receipt(cls, receipt: Receipt, points: int) -> "ScoredReceipt":
        return cls(**receipt.model_dump(), points=points)


class ProcessResponse(BaseModel):
    id: str


class PointsResponse(BaseModel):
    points: int


def check_strict(receipt: Receipt) -> None:
    """Raise ValueError on the first field that breaks the published formats."""
    if not RETAILER_RE.match(receipt.retailer):
        raise ValueError(f"invalid retailer: {receipt.retailer!r}")
    if not DATE_RE.match(receipt.purchase_date):
        raise ValueError(f"invalid purchaseDate: {receipt.purchase_date!r}")
    try:
        datetime.strptime(receipt.purchase_date, "%Y-%m-%d")
    except ValueError:
        raise ValueError(f"invalid purchaseDate: {receipt.purchase_date!r}")
    if not TIME_RE.match(receipt.purchase_time):
        raise ValueError(f"invalid purchaseTime: {receipt.purchase_time!r}")
    try:
        datetime.strptime(receipt.purchase_time, "%H:%M")
    except ValueError:
        raise ValueError(f"invalid purchaseTime: {receipt.purchase_time!r}")
    if not receipt.items:
        raise ValueError("receipt must contain at least one item")
    for item in receipt.items:
        if not DESCRIPTION_RE.match(item.short_description):
            raise ValueError(f"invalid shortDescription: {item.short_description!r}")
        if not AMOUNT_RE.match(item.price):
            raise ValueError(f"invalid price: {item.price!r}")
    if not AMOUNT_RE.match(receipt.total):
        raise ValueError(f"invalid total: {receipt.total!r}")
