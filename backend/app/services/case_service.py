import secrets
import time
from typing import Container, Optional


class CaseService:
    """
    Service for identifier generation shared by actors, reports and messages.
    """

    PREFIX = "id"
    SUFFIX_LENGTH = 7
    ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
    MAX_ATTEMPTS = 16

    @classmethod
    def generate_id(cls, taken: Optional[Container[str]] = None) -> str:
        """
        Generates an identifier.
        Format: id_<epoch ms>_<7 base36 chars> (e.g. id_1718000000000_k3j9x0a).

        If `taken` is given, retries until the id is not in it.
        """
        for _ in range(cls.MAX_ATTEMPTS):
            suffix = "".join(secrets.choice(cls.ALPHABET) for _ in range(cls.SUFFIX_LENGTH))
            candidate = f"{cls.PREFIX}_{int(time.time() * 1000)}_{suffix}"
            if taken is None or candidate not in taken:
                return candidate
        raise RuntimeError("Could not generate a unique id")
