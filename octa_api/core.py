# octa_api/core.py
from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional, Dict, Any

# Request bodies. Fields a caller leaves out are not written to the record.

class LoginRequest(BaseModel):
    username: str
    password: str

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        # bcrypt takes at most 72 bytes, not characters
        if len(value.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return value

class ProductIn(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None

class CategoryIn(BaseModel):
    cname: Optional[str] = None
    parentCategoryID: Optional[str] = None

class ParentCategoryIn(BaseModel):
    # parent categories used to be written as {name}; they share the cname field now
    cname: Optional[str] = Field(None, validation_alias=AliasChoices("cname", "name"))

class CommissionIn(BaseModel):
    productID: Optional[str] = None
    commissionPercentage: Optional[float] = None
    parentCategoryID: Optional[str] = None

class CommissionUpdate(BaseModel):
    commissionPercentage: Optional[float] = None
    parentCategoryID: Optional[str] = None

class ReviewIn(BaseModel):
    productId: Optional[str] = None
    rating: Optional[float] = None
    comment: Optional[str] = None

class ReviewResponseIn(BaseModel):
    reviewId: str
    response: Optional[str] = None

def supplied_fields(payload: BaseModel) -> Dict[str, Any]:
    return payload.model_dump(exclude_unset=True)
