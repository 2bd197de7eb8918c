"""Single-owner access control for privileged engine operations."""

import logging
from dataclasses import dataclass

from ..errors import AuthorizationError, InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass
class Ownable:
    """Owner gate for ``lock_tokens``, ``add_tokens`` and fund rescue."""

    owner: str

    def is_owner(self, caller: str) -> bool:
        """Return True if caller is the current owner."""
        return caller == self.owner

    def require_owner(self, caller: str) -> None:
        """
        Raise unless caller is the owner.

        Raises:
            AuthorizationError: If caller is not the owner
        """
        if not self.is_owner(caller):
            raise AuthorizationError("Ownable: caller is not the owner")

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hand ownership to another account."""
        self.require_owner(caller)
        if not new_owner:
            raise InvalidArgumentError("Ownable: new owner is the zero address")
        previous, self.owner = self.owner, new_owner

        logger.info(
            "Ownership transferred",
            extra={"event": "ownable.transfer", "from": previous, "to": new_owner},
        )
