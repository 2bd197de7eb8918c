"""Custody sub-accounts holding a single token on behalf of the engine."""

import logging

from ..errors import InvariantViolationError
from .token import Token

logger = logging.getLogger(__name__)


class TokenPool:
    """A custody account for one token.

    The pool owns an address in the token ledger. The engine moves tokens in
    and out of it; nothing else about the engine's accounting lives here.
    """

    def __init__(self, token: Token, address: str):
        self.token = token
        self.address = address

    def balance(self) -> int:
        """Tokens currently held by the pool."""
        return self.token.balance_of(self.address)

    def transfer_in(self, sender: str, amount: int, spender: str) -> None:
        """Pull amount from sender using the allowance granted to spender."""
        self.token.transfer_from(spender, sender, self.address, amount)

    def transfer_out(self, to: str, amount: int) -> None:
        """Send amount from the pool to an account."""
        self.token.transfer(self.address, to, amount)

    def rescue_funds(self, token: Token, to: str, amount: int) -> None:
        """
        Recover a foreign token that was sent to this pool's address.

        Args:
            token: Token to recover; must not be the pool's own token
            to: Recipient
            amount: Amount to recover

        Raises:
            InvariantViolationError: If token is the pool's own token
        """
        if token is self.token:
            raise InvariantViolationError("TokenPool: Cannot claim token held by the contract")
        token.transfer(self.address, to, amount)

        logger.info(
            "Funds rescued",
            extra={
                "event": "pool.rescue",
                "pool": self.address,
                "token": token.symbol,
                "to": to,
                "amount": amount,
            },
        )
