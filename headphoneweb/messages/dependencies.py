from email_validator import EmailNotValidError, validate_email
from fastapi import HTTPException, status
from headphoneweb.messages.constants import logger


def normalize_email_address(email: str) -> str:
    """Validate and return the normalized address; no DNS lookups, contact form only needs the syntax."""
    try:
        v = validate_email(email, check_deliverability=False)
        return v.normalized
    except EmailNotValidError as e:
        logger.info("contact.email.invalid", extra={"error": str(e)})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email address") from e
