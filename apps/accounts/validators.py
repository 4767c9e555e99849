import re

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.utils.deconstruct import deconstructible


@deconstructible
class AllowedCharactersUsernameValidator(RegexValidator):
    """Chỉ cho phép chữ cái ASCII, chữ số và các ký tự -._@+ trong tên đăng nhập."""

    regex = r"^[A-Za-z0-9\-._@+]+\Z"
    message = "Tên đăng nhập chỉ được chứa chữ cái, chữ số và các ký tự -._@+"
    flags = re.ASCII

    def __init__(self, *args, **kwargs):
        allowed = getattr(settings, "IDENTITY_ALLOWED_USERNAME_CHARACTERS", None)
        if allowed and "regex" not in kwargs and not args:
            kwargs["regex"] = rf"^[{re.escape(allowed)}]+\Z"
        super().__init__(*args, **kwargs)


class PasswordComplexityValidator:
    """
    Kiểm tra độ phức tạp của mật khẩu theo chính sách tài khoản:
    chữ số, chữ thường, chữ hoa, ký tự đặc biệt (tùy chọn) và số ký tự khác nhau tối thiểu.
    """

    def __init__(
        self,
        require_digit=True,
        require_lowercase=True,
        require_uppercase=True,
        require_non_alphanumeric=False,
        required_unique_chars=1,
    ):
        self.require_digit = require_digit
        self.require_lowercase = require_lowercase
        self.require_uppercase = require_uppercase
        self.require_non_alphanumeric = require_non_alphanumeric
        self.required_unique_chars = required_unique_chars

    def validate(self, password, user=None):
        errors = []
        if self.require_digit and not any(ch.isdigit() for ch in password):
            errors.append(
                ValidationError("Mật khẩu phải có ít nhất một chữ số.", code="password_requires_digit")
            )
        if self.require_lowercase and not any(ch.islower() for ch in password):
            errors.append(
                ValidationError("Mật khẩu phải có ít nhất một chữ thường.", code="password_requires_lower")
            )
        if self.require_uppercase and not any(ch.isupper() for ch in password):
            errors.append(
                ValidationError("Mật khẩu phải có ít nhất một chữ hoa.", code="password_requires_upper")
            )
        if self.require_non_alphanumeric and all(ch.isalnum() for ch in password):
            errors.append(
                ValidationError(
                    "Mật khẩu phải có ít nhất một ký tự đặc biệt.",
                    code="password_requires_non_alphanumeric",
                )
            )
        if len(set(password)) < self.required_unique_chars:
            errors.append(
                ValidationError(
                    "Mật khẩu phải có ít nhất %(count)d ký tự khác nhau.",
                    code="password_requires_unique_chars",
                    params={"count": self.required_unique_chars},
                )
            )
        if errors:
            raise ValidationError(errors)

    def get_help_text(self):
        rules = []
        if self.require_digit:
            rules.append("một chữ số")
        if self.require_lowercase:
            rules.append("một chữ thường")
        if self.require_uppercase:
            rules.append("một chữ hoa")
        if self.require_non_alphanumeric:
            rules.append("một ký tự đặc biệt")
        return "Mật khẩu phải chứa ít nhất " + ", ".join(rules) + "."
