"""
In-memory fungible token ledger.

The geyser engine consumes tokens through ``balance_of``, ``transfer`` and
``transfer_from``; this implementation provides those plus ``approve`` and
``mint`` so that simulations and tests can fund accounts.

Security features:
- Unsigned 256-bit bounded amounts
- Balance and allowance checks before any state change
- Transfers are atomic: either both balances move or neither does
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

logger = logging.getLogger(__name__)

UINT256_MAX = 2**256 - 1


class TransferError(Exception):
    """Base class for token ledger failures."""


class InsufficientBalanceError(TransferError):
    """Sender balance is lower than the transfer amount."""


class InsufficientAllowanceError(TransferError):
    """Spender allowance is lower than the transfer amount."""


@dataclass
class TransferRecord:
    """A completed transfer (mints have an empty sender)."""

    sender: str
    recipient: str
    value: int


@dataclass
class Token:
    """
    Fungible token with balances and allowances.

    Accounts are plain strings; a token is identified by its symbol.
    """

    name: str
    symbol: str
    decimals: int = 18
    total_supply: int = 0

    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[str, Dict[str, int]] = field(default_factory=dict)
    transfers: List[TransferRecord] = field(default_factory=list)

    # ==================== View Functions ====================

    def balance_of(self, account: str) -> int:
        """Get the token balance of an account."""
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        """Get the allowance granted by owner to spender."""
        return self.allowances.get(owner, {}).get(spender, 0)

    def units(self, amount: float) -> int:
        """Convert a whole-token amount into base units."""
        return int(Decimal(str(amount)) * 10**self.decimals)

    # ==================== State-Changing Functions ====================

    def mint(self, to: str, amount: int) -> None:
        """
        Create new tokens for an account.

        Args:
            to: Recipient
            amount: Amount to mint
        """
        self._validate_amount(amount)
        if self.total_supply + amount > UINT256_MAX:
            raise TransferError("ERC20: mint would exceed uint256 supply")

        self.total_supply += amount
        self.balances[to] = self.balance_of(to) + amount
        self.transfers.append(TransferRecord("", to, amount))

        logger.debug(
            "Token mint",
            extra={"event": "token.mint", "token": self.symbol, "to": to, "amount": amount},
        )

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        """
        Approve spender to spend tokens on behalf of owner.

        Args:
            owner: Token owner
            spender: Account being approved
            amount: Amount to approve (replaces any previous allowance)

        Returns:
            True if successful
        """
        self._validate_amount(amount)
        self.allowances.setdefault(owner, {})[spender] = amount
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """
        Transfer tokens from sender to recipient.

        Raises:
            InsufficientBalanceError: If sender's balance is too low
        """
        self._validate_amount(amount)
        self._move(sender, recipient, amount)
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        """
        Transfer tokens on behalf of owner using spender's allowance.

        Raises:
            InsufficientAllowanceError: If the allowance is too low
            InsufficientBalanceError: If owner's balance is too low
        """
        self._validate_amount(amount)
        current = self.allowance(owner, spender)
        if current < amount:
            raise InsufficientAllowanceError(
                f"ERC20: transfer amount exceeds allowance ({amount} > {current})"
            )
        self._move(owner, recipient, amount)
        self.allowances.setdefault(owner, {})[spender] = current - amount
        return True

    # ==================== Internal ====================

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        sender_balance = self.balance_of(sender)
        if sender_balance < amount:
            raise InsufficientBalanceError(
                f"ERC20: transfer amount exceeds balance ({amount} > {sender_balance})"
            )
        self.balances[sender] = sender_balance - amount
        self.balances[recipient] = self.balance_of(recipient) + amount
        self.transfers.append(TransferRecord(sender, recipient, amount))

        logger.debug(
            "Token transfer",
            extra={
                "event": "token.transfer",
                "token": self.symbol,
                "from": sender,
                "to": recipient,
                "amount": amount,
            },
        )

    @staticmethod
    def _validate_amount(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise TransferError(f"ERC20: amount must be an int, got {type(amount).__name__}")
        if amount < 0 or amount > UINT256_MAX:
            raise TransferError(f"ERC20: amount out of range ({amount})")
