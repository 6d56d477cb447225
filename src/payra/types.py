"""
Type definitions for Payra results and HTTP request bodies
"""

from typing import Optional, Union

from pydantic import BaseModel, Field


class OrderDetailsResult(BaseModel):
    """Envelope for an order details query; data fields are None when success is False"""

    success: bool
    error: Optional[str] = None
    paid: Optional[bool] = None
    token: Optional[str] = None
    amount: Optional[str] = None
    fee: Optional[str] = None
    timestamp: Optional[int] = None

    @classmethod
    def failure(cls, error: str) -> "OrderDetailsResult":
        return cls(success=False, error=error)


class OrderPaidResult(BaseModel):
    """Envelope for isOrderPaid"""

    success: bool
    error: Optional[str] = None
    paid: Optional[bool] = None

    @classmethod
    def failure(cls, error: str) -> "OrderPaidResult":
        return cls(success=False, error=error)


class SignatureResult(BaseModel):
    """Envelope for signature generation"""

    success: bool
    error: Optional[str] = None
    signature: Optional[str] = None


class SignatureRequest(BaseModel):
    """Body of a signature generation request"""

    network: str
    token_address: str = Field(alias="tokenAddress")
    order_id: str = Field(alias="orderId")
    amount: Union[int, str]
    timestamp: int
    payer_address: str = Field(alias="payerAddress")

    class Config:
        populate_by_name = True


class OrderQueryRequest(BaseModel):
    """Body of an order details / paid-status request"""

    network: str
    order_id: str = Field(alias="orderId")

    class Config:
        populate_by_name = True


class UtilsRequest(BaseModel):
    """Body of a currency / unit conversion request"""

    network: str
    amount_to_convert: float
    currency_to_convert: str
    decimals_token: str
    amount_to_wei: Union[str, float]
    currency_to_wei: str
    amount_in_wei: str
    currency_from_wei_to: str
