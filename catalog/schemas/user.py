from pydantic import BaseModel
from typing import Optional

# Fields are optional so missing values reach the handler and come back as
# a 400 with the API's own message instead of a schema error.

class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "examples": [{
                "email": "user@example.com",
                "password": "your_password"
            }]
        }
    }

class LoginRequest(RegisterRequest):
    pass

class TokenResponse(BaseModel):
    token: str

class MessageResponse(BaseModel):
    message: str
