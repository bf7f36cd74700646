"""Webhook request signature verification.

Facebook signs every webhook POST with the app secret and sends the result
in ``X-Hub-Signature`` as ``sha1=<hex digest>`` (``X-Hub-Signature-256``
carries the SHA-256 variant).
"""

import hashlib
import hmac

import logfire

_DIGESTS = {
    "sha1": hashlib.sha1,
    "sha256": hashlib.sha256,
}


class SignatureVerificationError(Exception):
    """Base exception for signature verification failures."""

    pass


class MissingSignature(SignatureVerificationError):
    """Raised when a signature is required but the header is absent."""

    pass


class SignatureMismatch(SignatureVerificationError):
    """Raised when the signature does not match the request body."""

    pass


def _hex_digest(body: bytes, app_secret: str, method: str) -> str:
    return hmac.new(app_secret.encode("utf-8"), body, _DIGESTS[method]).hexdigest()


def compute_signature(body: bytes, app_secret: str, method: str = "sha1") -> str:
    """Return the ``<method>=<hex digest>`` signature for ``body``."""
    return f"{method}={_hex_digest(body, app_secret, method)}"


def verify_request_signature(
    body: bytes,
    signature_header: str | None,
    app_secret: str,
    strict: bool = True,
) -> None:
    """
    Verify that ``body`` was signed with ``app_secret``.

    Args:
        body: Raw request body bytes, exactly as received
        signature_header: Value of the signature header, or None if absent
        app_secret: Facebook app secret
        strict: Reject requests without a signature header

    Raises:
        MissingSignature: Header absent and ``strict`` is set
        SignatureMismatch: Header malformed, unknown method, or digest mismatch
    """
    if not signature_header:
        if strict:
            logfire.warning("Webhook request without signature rejected")
            raise MissingSignature("Missing request signature")
        logfire.warning("Couldn't validate the signature: header missing")
        return

    method, sep, received_digest = signature_header.partition("=")
    method = method.strip().lower()
    if not sep or method not in _DIGESTS:
        logfire.warning("Malformed webhook signature header", method=method)
        raise SignatureMismatch("Couldn't validate the request signature")

    expected_digest = _hex_digest(body, app_secret, method)
    received = received_digest.strip().lower().encode("utf-8")

    if not hmac.compare_digest(expected_digest.encode("ascii"), received):
        logfire.warning("Webhook signature mismatch", method=method)
        raise SignatureMismatch("Couldn't validate the request signature")
