"""
Identity Store - reporter and NGO accounts.

Email uniqueness is per role: a reporter and an NGO may share an address.
Credentials are handed to a pluggable verifier; the default accepts anything.
"""

import asyncio
from typing import Callable, Dict, List, Optional, Union

import structlog

from app.core.exceptions import DuplicateAccountError, NotFoundError
from app.schemas.actor import ActorRole, Reporter, NGO
from app.services.case_service import CaseService
from app.services.persistence import Persistence, USERS_KEY, NGOS_KEY

logger = structlog.get_logger()

ActorRecord = Union[Reporter, NGO]
CredentialVerifier = Callable[[ActorRecord, Optional[str]], bool]

DEFAULT_NGO_LOCATION = "N/A"


def accept_any_credentials(actor: ActorRecord, password: Optional[str]) -> bool:
    return True


class IdentityStore:

    def __init__(self, persistence: Persistence, credential_verifier: CredentialVerifier = accept_any_credentials):
        self._persistence = persistence
        self._verify = credential_verifier
        self._reporters: List[Reporter] = []
        self._ngos: List[NGO] = []
        self._lock = asyncio.Lock()

    async def load(self):
        self._reporters = [Reporter.model_validate(r) for r in await self._persistence.load(USERS_KEY)]
        self._ngos = [NGO.model_validate(n) for n in await self._persistence.load(NGOS_KEY)]
        logger.info("identity_store_loaded", reporters=len(self._reporters), ngos=len(self._ngos))

    def is_empty(self) -> bool:
        return not self._reporters and not self._ngos

    async def seed(self, reporters: List[Reporter], ngos: List[NGO]):
        async with self._lock:
            self._reporters = [r.model_copy(deep=True) for r in reporters]
            self._ngos = [n.model_copy(deep=True) for n in ngos]
            await self._persist(ActorRole.REPORTER)
            await self._persist(ActorRole.NGO)

    async def flush(self):
        await self._persist(ActorRole.REPORTER)
        await self._persist(ActorRole.NGO)

    def _collection(self, role: ActorRole) -> list:
        return self._reporters if ActorRole(role) == ActorRole.REPORTER else self._ngos

    async def _persist(self, role: ActorRole):
        if ActorRole(role) == ActorRole.REPORTER:
            await self._persistence.save(USERS_KEY, [r.model_dump(mode="json") for r in self._reporters])
        else:
            await self._persistence.save(NGOS_KEY, [n.model_dump(mode="json") for n in self._ngos])

    def _find_by_email(self, role: ActorRole, email: str) -> Optional[ActorRecord]:
        wanted = email.strip().lower()
        for actor in self._collection(role):
            if actor.email.lower() == wanted:
                return actor
        return None

    def _find_by_id(self, role: ActorRole, actor_id: str) -> Optional[ActorRecord]:
        for actor in self._collection(role):
            if actor.id == actor_id:
                return actor
        return None

    async def register(self, role: ActorRole, name: str, email: str, extra: Optional[Dict[str, str]] = None) -> ActorRecord:
        """
        Create an account of the given role.
        Raises DuplicateAccountError if the email is already used in that role.
        """
        role = ActorRole(role)
        extra = extra or {}
        async with self._lock:
            if self._find_by_email(role, email):
                raise DuplicateAccountError("An account with this email already exists.")

            collection = self._collection(role)
            actor_id = CaseService.generate_id({a.id for a in collection})
            if role == ActorRole.REPORTER:
                actor = Reporter(id=actor_id, name=name, email=email.strip(), points=0)
            else:
                actor = NGO(
                    id=actor_id,
                    name=name,
                    email=email.strip(),
                    location=extra.get("location") or DEFAULT_NGO_LOCATION,
                )
            collection.append(actor)
            await self._persist(role)

        logger.info("actor_registered", role=role.value, actor_id=actor.id)
        return actor.model_copy(deep=True)

    async def authenticate(self, role: ActorRole, email: str, password: Optional[str] = None) -> ActorRecord:
        """
        Resolve an account by email. The password is not checked unless a
        verifier was configured.
        """
        role = ActorRole(role)
        actor = self._find_by_email(role, email)
        if actor is None or not self._verify(actor, password):
            logger.warning("login_failed", role=role.value)
            raise NotFoundError("Invalid credentials. Please try again.")
        return actor.model_copy(deep=True)

    def get_by_id(self, actor_id: str, role: ActorRole) -> ActorRecord:
        actor = self._find_by_id(ActorRole(role), actor_id)
        if actor is None:
            label = "User" if ActorRole(role) == ActorRole.REPORTER else "NGO"
            raise NotFoundError(f"{label} not found")
        return actor.model_copy(deep=True)

    def exists(self, actor_id: str, role: ActorRole) -> bool:
        return self._find_by_id(ActorRole(role), actor_id) is not None

    async def award_points(self, reporter_id: str, amount: int) -> None:
        """
        Add guardian points. Unknown reporters are skipped, never raised.
        """
        async with self._lock:
            reporter = self._find_by_id(ActorRole.REPORTER, reporter_id)
            if reporter is None:
                logger.warning("points_award_skipped", reporter_id=reporter_id, amount=amount)
                return
            reporter.points += amount
            await self._persist(ActorRole.REPORTER)
        logger.info("points_awarded", reporter_id=reporter_id, amount=amount, balance=reporter.points)
