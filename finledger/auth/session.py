"""
Session / Identity Store

Keeps the registered users under the `users` key of the shared store and
the active session under `currentUser` of a session slot.

The session slot defaults to the shared store, which suits a single
local user. A multi-visitor front end gives every visitor their own
slot (see AppComponents.open_session) so one visitor's login never
signs in another.

DESIGN DECISION: Credential failures are results, not exceptions.
login and signup return an AuthResult with a message the UI can show
as-is. Only programming errors (changing a user's id, invalid field
values) raise.

The session copy never carries the password hash.
"""

from typing import Any, Optional, Union

from finledger.audit import AuditLogger
from finledger.auth.passwords import hash_password, verify_password
from finledger.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from finledger.models.user import AuthResult, SignupRequest, User
from finledger.services.storage import (
    CURRENT_USER_KEY,
    USERS_KEY,
    LedgerStore,
    scoped_key,
)


# Fields update_user never changes
PROTECTED_FIELDS = frozenset({"id", "created_at", "password_hash"})

SESSION_EXCLUDE = {"password_hash"}


class SessionStore:
    """Signup, login, logout and profile updates for a single session."""

    def __init__(
        self,
        store: LedgerStore,
        audit_logger: Optional[AuditLogger] = None,
        hash_rounds: int = 29000,
        session_slot: Optional[LedgerStore] = None,
    ):
        self._store = store
        self._session_slot = session_slot or store
        self._audit_logger = audit_logger
        self._hash_rounds = hash_rounds

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _load_users(self) -> list[User]:
        return self._store.get(USERS_KEY, User)

    def _save_users(self, users: list[User]) -> None:
        self._store.set(USERS_KEY, users, model=User)

    def _start_session(self, user: User) -> User:
        session_user = user.model_copy(update={"password_hash": None})
        self._session_slot.set_object(CURRENT_USER_KEY, session_user, exclude=SESSION_EXCLUDE)
        return session_user

    @property
    def current_user(self) -> Optional[User]:
        """The logged-in user, restored from the session slot, or None."""
        return self._session_slot.get_object(CURRENT_USER_KEY, User)

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def scoped_key(self, name: str) -> str:
        """
        Storage key for one of the active user's collections.

        Raises:
            PermissionError: If nobody is logged in
        """
        user = self.current_user
        if user is None:
            raise PermissionError("No active session")
        return scoped_key(name, user.id)

    def login(self, email: str, password: str) -> AuthResult:
        """
        Start a session.

        Succeeds only if exactly one stored user has this email and the
        password verifies against that user's hash.
        """
        email = email.strip().lower()
        matches = [
            user for user in self._load_users()
            if user.email == email
            and user.password_hash
            and verify_password(password, user.password_hash)
        ]

        if len(matches) != 1:
            self._audit(AuditEventBuilder.login_failed(email))
            return AuthResult(success=False, message="Invalid email or password")

        session_user = self._start_session(matches[0])
        self._audit(AuditEventBuilder.login_succeeded(session_user.id))
        return AuthResult(success=True, message="Login successful", user=session_user)

    def signup(self, data: Union[SignupRequest, dict]) -> AuthResult:
        """
        Register a new user and log them in.

        Fails without writing anything if the email is already taken.

        Raises:
            ValueError: If the signup data doesn't validate
        """
        request = (
            data if isinstance(data, SignupRequest)
            else SignupRequest.model_validate(data)
        )
        users = self._load_users()

        if any(user.email == request.email for user in users):
            self._audit(AuditEventBuilder.signup_rejected(request.email, "duplicate_email"))
            return AuthResult(success=False, message="Email already in use")

        new_user = User(
            **request.model_dump(exclude={"password"}),
            password_hash=hash_password(request.password, self._hash_rounds),
        )
        users.append(new_user)
        self._save_users(users)

        session_user = self._start_session(new_user)
        self._audit(AuditEventBuilder.user_signed_up(new_user.id, new_user.email))
        return AuthResult(success=True, message="Signup successful", user=session_user)

    def logout(self) -> None:
        """End the active session. Safe to call when nobody is logged in."""
        user = self.current_user
        self._session_slot.remove(CURRENT_USER_KEY)
        if user is not None:
            self._audit(AuditEvent(
                event_type=AuditEventType.LOGGED_OUT,
                entity_type="user",
                entity_id=user.id,
                user_id=user.id,
                description="User logged out",
            ))

    def update_user(self, **changes: Any) -> AuthResult:
        """
        Merge profile changes into the session and the stored user list.

        A `password` change is hashed before storing. An email owned by
        another user is refused.

        Raises:
            ValueError: If a protected field is changed or a value is invalid
        """
        forbidden = PROTECTED_FIELDS.intersection(changes)
        if forbidden:
            raise ValueError(f"Cannot change {', '.join(sorted(forbidden))}")

        session_user = self.current_user
        if session_user is None:
            return AuthResult(success=False, message="Not logged in")

        users = self._load_users()
        changes = dict(changes)

        if "password" in changes:
            changes["password_hash"] = hash_password(changes.pop("password"), self._hash_rounds)

        if "email" in changes:
            email = str(changes["email"]).strip().lower()
            if any(u.email == email and u.id != session_user.id for u in users):
                return AuthResult(success=False, message="Email already in use")
            changes["email"] = email

        updated_users = []
        for user in users:
            if user.id == session_user.id:
                user = User.model_validate({**user.model_dump(), **changes})
            updated_users.append(user)

        merged = User.model_validate({
            **session_user.model_dump(),
            **changes,
        })

        self._save_users(updated_users)
        session_user = self._start_session(merged)
        self._audit(AuditEvent(
            event_type=AuditEventType.USER_UPDATED,
            entity_type="user",
            entity_id=session_user.id,
            user_id=session_user.id,
            description="Profile updated",
            details={"fields": sorted(
                "password" if k == "password_hash" else k for k in changes
            )},
        ))
        return AuthResult(success=True, message="Profile updated", user=session_user)
