"""
Input validation utilities.
Security-focused validators used by the request DTOs.
"""

import re
import urllib.parse
from typing import Any, Dict, List, Optional

import bleach
import phonenumbers
from phonenumbers import NumberParseException

# Security configurations
ALLOWED_HTML_TAGS = ['p', 'br', 'strong', 'em', 'u', 'ol', 'ul', 'li']
ALLOWED_HTML_ATTRIBUTES: Dict[str, List[str]] = {}

# Regex patterns for common validation
PATTERNS = {
    'xss_basic': re.compile(r'<[^>]*script[^>]*>|javascript:|vbscript:|onload|onerror|eval\(', re.IGNORECASE),
    'email': re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'),
    'url': re.compile(r'^https?://[^\s/$.?#].[^\s]*$', re.IGNORECASE),
    'currency_code': re.compile(r'^[A-Z]{3}$'),
    'account_number': re.compile(r'^[0-9]{6,20}$'),
}

SUPPORTED_CURRENCIES = {
    'NGN', 'GHS', 'KES', 'ZAR', 'UGX', 'TZS', 'RWF', 'XOF', 'XAF', 'EGP', 'MAD',
    'USD', 'EUR', 'GBP',
}


class SecurityValidator:
    """Security-focused validators to prevent script injection."""

    @staticmethod
    def check_xss(value: str) -> str:
        """Check for potential XSS patterns."""
        if not isinstance(value, str):
            return value

        if PATTERNS['xss_basic'].search(value):
            raise ValueError("Potentially unsafe script content detected")
        return value

    @staticmethod
    def sanitize_html(value: str, allowed_tags: Optional[List[str]] = None) -> str:
        """Sanitize HTML content, removing dangerous tags and attributes."""
        if not isinstance(value, str):
            return value

        if allowed_tags is None:
            allowed_tags = ALLOWED_HTML_TAGS

        return bleach.clean(
            value,
            tags=allowed_tags,
            attributes=ALLOWED_HTML_ATTRIBUTES,
            strip=True
        )


class DataValidator:
    """Validators for common data formats."""

    @staticmethod
    def validate_email(email: str) -> str:
        if not isinstance(email, str):
            raise ValueError("Email must be a string")

        email = email.strip().lower()

        if not PATTERNS['email'].match(email):
            raise ValueError("Invalid email format")
        return email

    @staticmethod
    def validate_phone(phone: str, region: str = 'NG') -> str:
        """Validate phone number using phonenumbers library. Returns E.164."""
        if not isinstance(phone, str):
            raise ValueError("Phone must be a string")

        try:
            parsed = phonenumbers.parse(phone, region)
            if not phonenumbers.is_valid_number(parsed):
                raise ValueError("Invalid phone number")

            return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
        except NumberParseException:
            raise ValueError("Invalid phone number format")

    @staticmethod
    def validate_currency_code(code: str) -> str:
        """Validate ISO 4217 currency code."""
        if not isinstance(code, str):
            raise ValueError("Currency code must be a string")

        code = code.upper().strip()

        if not PATTERNS['currency_code'].match(code):
            raise ValueError("Invalid currency code format")
        if code not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency code: {code}")
        return code

    @staticmethod
    def validate_url(url: str) -> str:
        """Validate URL format with security checks."""
        if not isinstance(url, str):
            raise ValueError("URL must be a string")

        url = url.strip()

        if not PATTERNS['url'].match(url):
            raise ValueError("Invalid URL format")

        parsed = urllib.parse.urlparse(url)
        if parsed.scheme not in ['http', 'https']:
            raise ValueError("URL must use HTTP or HTTPS protocol")
        return url


class BusinessValidator:
    """Validators for marketplace-specific rules."""

    @staticmethod
    def validate_title(title: str, max_length: int = 255) -> str:
        if not isinstance(title, str):
            raise ValueError("Title must be a string")

        title = title.strip()
        if len(title) < 3:
            raise ValueError("Title must be at least 3 characters")
        if len(title) > max_length:
            raise ValueError("Title is too long")

        SecurityValidator.check_xss(title)
        return title

    @staticmethod
    def validate_skills(skills: List[str], max_items: int = 30) -> List[str]:
        if len(skills) > max_items:
            raise ValueError(f"At most {max_items} skills are allowed")
        cleaned = []
        for skill in skills:
            if not isinstance(skill, str):
                raise ValueError("Skills must be strings")
            skill = skill.strip()
            if len(skill) > 50:
                raise ValueError("Skill names are limited to 50 characters")
            SecurityValidator.check_xss(skill)
            if skill:
                cleaned.append(skill)
        return cleaned

    @staticmethod
    def validate_bank_details(details: Dict[str, Any]) -> Dict[str, Any]:
        """Bank details need an account number, an account name and a bank."""
        required = ('account_number', 'account_name', 'bank_name')
        missing = [key for key in required if not str(details.get(key, '')).strip()]
        if missing:
            raise ValueError(f"Missing bank details: {', '.join(missing)}")

        account_number = str(details['account_number']).strip()
        if not PATTERNS['account_number'].match(account_number):
            raise ValueError("Account number must be 6 to 20 digits")

        cleaned = {key: SecurityValidator.sanitize_html(str(value).strip()) for key, value in details.items()}
        cleaned['account_number'] = account_number
        return cleaned


def create_comprehensive_validator(*validators):
    """Create a validator that applies multiple validation functions in order."""
    def validator_func(value: Any) -> Any:
        for validate in validators:
            value = validate(value)
        return value
    return validator_func


# Pre-configured common validators
safe_text_validator = create_comprehensive_validator(
    SecurityValidator.check_xss,
    SecurityValidator.sanitize_html
)

secure_url_validator = create_comprehensive_validator(
    SecurityValidator.check_xss,
    DataValidator.validate_url
)
