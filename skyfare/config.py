"""Runtime configuration, read from the environment."""

import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR = Path(os.getenv("SKYFARE_HOME", str(Path.home() / ".skyfare")))
RULES_DB = DATA_DIR / "markup.db"

SABRE_REST_PROD = "https://api.platform.sabre.com"
SABRE_REST_CERT = "https://api.cert.platform.sabre.com"

DEFAULT_CURRENCY = os.getenv("SKYFARE_DEFAULT_CURRENCY", "BDT")
DEFAULT_CABIN = "Economy"

CALENDAR_TTL = int(os.getenv("SKYFARE_CALENDAR_TTL", str(10 * 60)))  # seconds
CALENDAR_CONCURRENCY = int(os.getenv("SKYFARE_CALENDAR_CONCURRENCY", "8"))

HTTP_TIMEOUT = float(os.getenv("SKYFARE_HTTP_TIMEOUT", "60"))


@dataclass
class SabreCredentials:
    """Credentials and environment for the Sabre REST APIs."""
    user_id: str
    group: str        # pseudo-city code
    domain: str
    client_secret: str
    environment: str = "cert"

    @property
    def base_url(self) -> str:
        return SABRE_REST_PROD if self.environment == "production" else SABRE_REST_CERT


def load_sabre_credentials() -> SabreCredentials:
    return SabreCredentials(
        user_id=os.getenv("SABRE_USER_ID", ""),
        group=os.getenv("SABRE_GROUP", ""),
        domain=os.getenv("SABRE_DOMAIN", "AA"),
        client_secret=os.getenv("SABRE_CLIENT_SECRET", ""),
        environment=os.getenv("SABRE_ENVIRONMENT", "cert"),
    )
