from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr, field_validator
from storefront.services.orders import CartItem, ShippingInfo

class RegisterPayload(BaseModel):
    name: constr(min_length=1, max_length=255)
    email: EmailStr
    password: constr(min_length=1, max_length=255)

class LoginPayload(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    id: int
    name: str
    email: str
    personal_info: Optional[Dict[str, Any]] = None

class LoginResponse(BaseModel):
    user: UserOut

class MessageResponse(BaseModel):
    message: str

class PaymentOrderPayload(BaseModel):
    amount: int = Field(..., gt=0, description="Amount in whole rupees")
    currency: str = Field("INR", min_length=3, max_length=3)

    @field_validator("currency")
    @classmethod
    def currency_uppercase(cls, v):
        return v.upper()

class PaymentOrderResponse(BaseModel):
    id: str
    amount: int
    currency: str

class OrderPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., alias="userId")
    email: EmailStr
    cart: List[CartItem] = Field(..., min_length=1)
    total: int = Field(..., ge=0)
    shipping_info: ShippingInfo = Field(..., alias="shippingInfo")

class OrderPlacedResponse(BaseModel):
    orderId: str
    invoice: str

class ForgotPasswordPayload(BaseModel):
    email: EmailStr

class VerifyOtpPayload(BaseModel):
    email: EmailStr
    otp: constr(pattern=r"^\d{6}$")

class ResetPasswordPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    otp: constr(pattern=r"^\d{6}$")
    new_password: constr(min_length=1, max_length=255) = Field(..., alias="newPassword")
