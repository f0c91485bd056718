"""
Account Service

Registration, login and profile management for store owners.
Input is normalised before any uniqueness check so that "A@X.com" and
"a@x.com" are the same account and "(11) 99999-9999" is stored as digits.
"""
import html
import logging
import re

from tortoise.exceptions import IntegrityError

from app.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import User

logger = logging.getLogger("uvicorn.error")

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
USERNAME_RE = re.compile(r"^[a-zA-Z0-9À-ÿ\s]+$")
NON_DIGITS_RE = re.compile(r"[^0-9]")

USERNAME_MIN, USERNAME_MAX = 2, 50
EMAIL_MAX = 254
NUMBER_MIN, NUMBER_MAX = 10, 11
PASSWORD_MIN, PASSWORD_MAX = 6, 128


# ===== Normalisation / validation =====
def sanitize_input(value: str, max_length: int) -> str:
    value = html.escape(value.strip())
    return value[:max_length]


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_number(number: str) -> str:
    return NON_DIGITS_RE.sub("", number)


def validate_username(username: str) -> str:
    username = sanitize_input(username, USERNAME_MAX)
    if len(username) < USERNAME_MIN or not USERNAME_RE.match(username):
        raise ValidationError("Invalid store name, use only letters, numbers and spaces")
    return username


def validate_email(email: str) -> str:
    email = normalize_email(email)
    if len(email) > EMAIL_MAX or not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")
    return email


def validate_number(number: str) -> str:
    number = normalize_number(number)
    if not NUMBER_MIN <= len(number) <= NUMBER_MAX:
        raise ValidationError("Invalid phone number")
    return number


def validate_password(password: str) -> str:
    if len(password) < PASSWORD_MIN:
        raise ValidationError(f"Password must have at least {PASSWORD_MIN} characters")
    if len(password) > PASSWORD_MAX:
        raise ValidationError(f"Password too long (max {PASSWORD_MAX} characters)")
    return password


async def _ensure_unique(username=None, email=None, number=None, exclude_id=None) -> None:
    checks = (
        ("username", username, "This store name is already in use"),
        ("email", email, "This email is already in use"),
        ("number", number, "This phone number is already in use"),
    )
    for field, value, message in checks:
        if value is None:
            continue
        qs = User.filter(**{field: value})
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if await qs.exists():
            raise ConflictError(message, code=f"{field.upper()}_EXISTS")


def user_to_dict(u: User) -> dict:
    return {
        "id": u.id,
        "username": u.username,
        "email": u.email,
        "number": u.number,
        "plan_id": u.plan_id,
        "created_at": u.created_at,
    }


# ===== Operations =====
async def register_user(username: str, email: str, password: str, number: str) -> User:
    """
    Create a store owner account.

    Raises:
    - ValidationError: malformed field
    - ConflictError: username, email or number already taken
    """
    username = validate_username(username)
    email = validate_email(email)
    number = validate_number(number)
    validate_password(password)

    await _ensure_unique(username=username, email=email, number=number)
    try:
        u = await User.create(
            username=username,
            email=email,
            number=number,
            password_hash=hash_password(password),
        )
    except IntegrityError as e:
        # Lost a race against a concurrent registration
        raise ConflictError("Could not create the user, data already in use") from e
    logger.info("[accounts] registered user id=%s", u.id)
    return u


async def authenticate(email: str, password: str) -> str:
    """
    Check credentials and return a fresh access token.

    Unknown email and wrong password produce the same 401.
    """
    email = validate_email(email)
    if len(password) > PASSWORD_MAX:
        raise ValidationError("Password too long")

    user = await User.get_or_none(email=email)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthError("Invalid credentials", code="AUTH_INVALID_CREDENTIALS")
    return create_access_token(user.id)


async def get_user(user_id: int) -> User:
    u = await User.get_or_none(id=user_id)
    if u is None:
        raise NotFoundError("User not found")
    return u


async def update_profile(user_id: int, changes: dict) -> User:
    """Partial profile update; only present, non-null fields are written."""
    user = await get_user(user_id)
    validated = {}
    if changes.get("username") is not None:
        validated["username"] = validate_username(changes["username"])
    if changes.get("email") is not None:
        validated["email"] = validate_email(changes["email"])
    if changes.get("number") is not None:
        validated["number"] = validate_number(changes["number"])
    if not validated:
        raise ValidationError("No fields to update")

    await _ensure_unique(exclude_id=user.id, **validated)
    user.update_from_dict(validated)
    try:
        await user.save()
    except IntegrityError as e:
        raise ConflictError("Could not update, email, name or number already in use") from e
    return user


async def change_password(user_id: int, current_password: str, new_password: str) -> None:
    user = await get_user(user_id)
    if not verify_password(current_password, user.password_hash):
        raise AuthError("Current password is incorrect", code="AUTH_INVALID_CREDENTIALS")
    user.password_hash = hash_password(validate_password(new_password))
    await user.save()
