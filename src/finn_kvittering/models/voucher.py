from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VoucherRequest(BaseModel):
    """Completed purchase form submitted for PDF rendering."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    price: float = Field(gt=0)
    seller_name: str = Field(alias="sellerName")
    buyer_name: str = Field(alias="buyerName")
    payment_method: str = Field(alias="paymentMethod")
    location: Optional[str] = None
    notes: Optional[str] = None
    source_url: Optional[str] = Field(None, alias="sourceUrl")
    title: Optional[str] = None

    @field_validator("date", "seller_name", "buyer_name", "payment_method")
    @classmethod
    def _required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value
