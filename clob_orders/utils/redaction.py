"""
Log record sanitization.

Keeps private keys, API secrets and passphrases out of log output,
including exception text.
"""

import logging
import re


class CredentialRedactionFilter(logging.Filter):
    """
    Security filter that redacts credentials from log messages.

    - Ethereum private keys (0x followed by 64 hex chars)
    - secret=/passphrase=/key= style assignments
    - Long base64 strings (API secrets)

    Addresses and decimal token IDs are left alone.

    Usage:
        >>> handler = logging.StreamHandler()
        >>> handler.addFilter(CredentialRedactionFilter())
        >>> logger.addHandler(handler)
    """

    PRIVATE_KEY_PATTERN = re.compile(r'0x[0-9a-fA-F]{64}(?![0-9a-fA-F])')
    # Keep the prefix (secret=), replace the value
    API_SECRET_PATTERN = re.compile(
        r'((?:secret|passphrase|password|private_key|key)["\']?\s*[:=]\s*["\']?)[a-zA-Z0-9+/=_-]{20,}["\']?',
        re.IGNORECASE
    )
    BASE64_SECRET_PATTERN = re.compile(r'[A-Za-z0-9+/_-]{40,}={0,2}')
    _PUBLIC_TOKEN_PATTERN = re.compile(r'0x[0-9a-fA-F]+|[0-9]+')

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact credentials from log record.

        Returns:
            Always True (record is never dropped, only sanitized)
        """
        if record.msg:
            record.msg = self.redact(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self.redact(str(v)) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self.redact(str(arg)) for arg in record.args)

        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self.redact(record.exc_text)

        return True

    def redact(self, text: str) -> str:
        """Redact all credential patterns from text."""
        if not text:
            return text

        text = self.PRIVATE_KEY_PATTERN.sub('0x[REDACTED]', text)
        text = self.API_SECRET_PATTERN.sub(r'\1[REDACTED]', text)

        def redact_base64(match: re.Match) -> str:
            b64 = match.group(0)
            if self._PUBLIC_TOKEN_PATTERN.fullmatch(b64):
                return b64
            return b64[:8] + '...[REDACTED]'

        return self.BASE64_SECRET_PATTERN.sub(redact_base64, text)
