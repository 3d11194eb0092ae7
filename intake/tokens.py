from datetime import UTC, datetime, timedelta
import base64
import json

from intake.config import ACCESS_TOKEN_VALIDITY_HOURS


class AccessTokenIssuer:
    """
    Mints the access token returned with each stored document.

    The token is a reversible base64 encoding of {fileId, exp} and is not
    signed; nothing in this service verifies it. A signed token can replace
    it without changing issue()'s signature.
    """

    def __init__(self, validity_hours: int = ACCESS_TOKEN_VALIDITY_HOURS) -> None:
        self.validity = timedelta(hours=validity_hours)

    def issue(self, record_id: str, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(UTC)
        expires_at = issued_at + self.validity
        payload = {
            "fileId": record_id,
            "exp": int(expires_at.timestamp() * 1000),
        }
        return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")
