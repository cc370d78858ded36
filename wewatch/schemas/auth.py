"""Auth schemas — register, login and the token response."""

from pydantic import model_validator

from wewatch.core.security import EMAIL_RE, PASSWORD_RULES, is_strong_password
from wewatch.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """Sign-up form. Checks run in the order the form reports them."""

    email: str = ""
    password: str = ""
    repeat_password: str = ""
    nickname: str = ""

    @model_validator(mode="after")
    def _check_form(self) -> "RegisterRequest":
        if not (self.email and self.password and self.repeat_password and self.nickname.strip()):
            raise ValueError("All fields are required")
        if self.password != self.repeat_password:
            raise ValueError("Passwords do not match")
        if not is_strong_password(self.password):
            raise ValueError(PASSWORD_RULES)
        if not EMAIL_RE.match(self.email):
            raise ValueError("Invalid email format")
        self.email = self.email.strip()
        self.nickname = self.nickname.strip()
        return self


class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""

    @model_validator(mode="after")
    def _check_form(self) -> "LoginRequest":
        if not self.email or not self.password:
            raise ValueError("Email and password are required")
        return self


class UserRead(CamelModel):
    id: int
    email: str
    nickname: str


class AuthResponse(CamelModel):
    message: str
    token: str
    user: UserRead
