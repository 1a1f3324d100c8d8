"""Security helpers: PII masking and safe logging (minimal)."""
import re

_PHONE_RE = re.compile(r"\+?\d[\d\s-]{7,}\d")


def mask_pii(text: str) -> str:
    # Phone numbers keep their last two digits so log lines stay correlatable
    if not text:
        return text
    return _PHONE_RE.sub(lambda m: "[REDACTED]" + re.sub(r"\D", "", m.group())[-2:], str(text))
