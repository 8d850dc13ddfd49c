import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

DEFAULT_RPC_URLS = (
    "https://ethereum-rpc.publicnode.com",
    "https://eth.drpc.org",
    "https://rpc.ankr.com/eth",
    "https://eth.llamarpc.com",
)


class Settings:
    def __init__(self, environ=None):
        env = os.environ if environ is None else environ

        self.PROJECT_NAME = "ETH Transfer Relay"
        self.PROJECT_VERSION = "3.0.0"
        self.METHOD = "V3-EIP1559"

        # Server
        self.HOST = env.get("HOST", "0.0.0.0")
        self.PORT = int(env.get("PORT", "3000"))
        self.LOG_LEVEL = env.get("LOG_LEVEL", "INFO").upper()

        # Signing credential
        self.TREASURY_PRIVATE_KEY = self._load_secret(env.get("TREASURY_PRIVATE_KEY"))

        # Network
        self.RPC_URLS = self._split_urls(env.get("RPC_URLS")) or list(DEFAULT_RPC_URLS)
        self.CHAIN_ID = int(env.get("CHAIN_ID", "1"))
        self.RPC_TIMEOUT = float(env.get("RPC_TIMEOUT", "10"))

        # Transfers
        self.DEFAULT_DESTINATION = env.get(
            "DEFAULT_DESTINATION", "0x4024Fd78E2AD5532FBF3ec2B3eC83870FAe45fC7"
        )
        self.DEFAULT_AMOUNT = Decimal(env.get("DEFAULT_AMOUNT", "0.01"))
        self.CONFIRMATIONS = int(env.get("CONFIRMATIONS", "1"))
        self.RECEIPT_TIMEOUT = float(env.get("RECEIPT_TIMEOUT", "120"))
        self.RECEIPT_POLL_INTERVAL = float(env.get("RECEIPT_POLL_INTERVAL", "0.5"))
        self.SERIALIZE_TRANSFERS = env.get("SERIALIZE_TRANSFERS", "true").lower() in (
            "1", "true", "yes", "on",
        )

        if self.DEFAULT_AMOUNT <= 0:
            raise ValueError("DEFAULT_AMOUNT must be positive")
        if self.CONFIRMATIONS < 1:
            raise ValueError("CONFIRMATIONS must be at least 1")

    @staticmethod
    def _split_urls(value: str | None) -> list[str]:
        if not value:
            return []
        return [u.strip() for u in value.split(",") if u.strip()]

    @staticmethod
    def _load_secret(value: str | None) -> str | None:
        """Return the contents of *value* if it is a path to a file.

        The TREASURY_PRIVATE_KEY environment variable may contain either the
        raw key or a path to a file containing the key.  This helper reads
        the file when a path is provided and returns the stripped contents,
        so a key mounted as a secret file works the same as an inline one.
        """
        if value and os.path.isfile(value):
            try:
                with open(value, "r", encoding="utf-8") as fh:
                    return fh.read().strip()
            except OSError:
                pass
        return value or None

settings = Settings()
