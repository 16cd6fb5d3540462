import logging
import os
import yaml
import keyring

APP_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


class YamlConfig:
    """FitTracker settings file.

    Plain settings live in YAML. With ``ENCRYPT_SETTINGS=1`` the owner
    identity is moved to the OS keyring and the file only keeps a
    placeholder for it.
    """

    KEYRING_SERVICE = "fittracker"
    KEYRING_PLACEHOLDER = "<keyring>"
    SECRET_KEYS = ("device_id",)

    def __init__(self, path: str = "settings.yaml", encrypt: bool | None = None) -> None:
        self.path = path
        if encrypt is None:
            encrypt = os.environ.get("ENCRYPT_SETTINGS") == "1"
        self.encrypt = encrypt

    def _read(self) -> dict:
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a settings mapping")
        return data

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        data = self._read()
        if not self.encrypt:
            return {k: v for k, v in data.items() if v != self.KEYRING_PLACEHOLDER}
        for key in self.SECRET_KEYS:
            if key not in data:
                continue
            secret = keyring.get_password(self.KEYRING_SERVICE, key)
            if secret is None:
                logger.warning("%s is missing from the keyring", key)
                del data[key]
            else:
                data[key] = secret
        return data

    def save(self, data: dict) -> None:
        out = {k: v for k, v in data.items() if v is not None}
        if self.encrypt:
            for key in self.SECRET_KEYS:
                if key in out:
                    keyring.set_password(self.KEYRING_SERVICE, key, str(out[key]))
                    out[key] = self.KEYRING_PLACEHOLDER
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(out, f, sort_keys=True)
        os.replace(tmp_path, self.path)


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger for the API and CLI entry points."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
