from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Session:
    """
    Credentials of the signed-in user.

    Acquired on login/signup, cleared on logout or when the server answers
    401. Nothing else holds the token.
    """

    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = field(default=None)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def acquire(self, token: str, user: Dict[str, Any]) -> None:
        self.token = token
        self.user = user

    def clear(self) -> None:
        self.token = None
        self.user = None

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
