from pydantic import BaseModel, EmailStr
from typing import Optional

class ProfileCreate(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    email_notifications: bool = True
