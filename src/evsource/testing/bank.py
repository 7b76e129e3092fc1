"""Reference domain – a bank account with payment cards.

Used by the test-suite and ``docs/examples`` to exercise every part of the
framework: aggregate events, entity events, snapshots and command handlers.
"""
from __future__ import annotations

import dataclasses
from decimal import Decimal
from typing import Any

from evsource.application.cqrs import Command, CommandBus, CommandHandler
from evsource.application.event_sourcing import AggregateRepository
from evsource.kernel.ddd import AggregateRoot, DomainEvent, Entity, EntityEvent, applies
from evsource.kernel.errors import DomainError, ValidationError
from evsource.kernel.time import Clock
from evsource.kernel.types import SequentialId

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class AccountOpened(DomainEvent):
    initial_balance: Decimal


@dataclasses.dataclass(frozen=True)
class AccountDebited(DomainEvent):
    amount: Decimal


@dataclasses.dataclass(frozen=True)
class AccountCredited(DomainEvent):
    amount: Decimal


@dataclasses.dataclass(frozen=True)
class CardIssued(DomainEvent):
    card_id: SequentialId
    daily_limit: Decimal


@dataclasses.dataclass(frozen=True)
class CardLimitChanged(EntityEvent):
    daily_limit: Decimal


@dataclasses.dataclass(frozen=True)
class CardBlocked(EntityEvent):
    reason: str = ""


class InsufficientFundsError(DomainError):
    default_code = "insufficient_funds"


# ---------------------------------------------------------------------------
# Entity + aggregate
# ---------------------------------------------------------------------------


class Card(Entity):
    """Payment card owned by a :class:`BankAccount`."""

    def __init__(
        self,
        owner: "BankAccount",
        id: SequentialId | None = None,  # noqa: A002
        daily_limit: Decimal = Decimal(0),
    ) -> None:
        super().__init__(owner, id)
        self.daily_limit = daily_limit
        self.blocked = False

    def change_limit(self, daily_limit: Decimal) -> None:
        if daily_limit < 0:
            raise ValidationError("Daily limit must not be negative")
        if self.blocked:
            raise DomainError(f"Card {self.id} is blocked")
        self._apply(CardLimitChanged(entity_id=self.id, daily_limit=daily_limit))

    def block(self, reason: str = "") -> None:
        if not self.blocked:
            self._apply(CardBlocked(entity_id=self.id, reason=reason))

    @applies(CardLimitChanged)
    def _on_limit_changed(self, event: CardLimitChanged) -> None:
        self.daily_limit = event.daily_limit

    @applies(CardBlocked)
    def _on_blocked(self, event: CardBlocked) -> None:
        self.blocked = True


class BankAccount(AggregateRoot):
    """Account whose balance is the sum of its opening, debit and credit events."""

    entity_types = (Card,)

    def __init__(
        self,
        id: SequentialId | None = None,  # noqa: A002
        *,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(id, clock=clock)
        self.balance = Decimal(0)
        self.opened = False

    # -- domain operations ---------------------------------------------

    def open(self, initial_balance: Decimal) -> None:
        if self.opened:
            raise DomainError(f"Account {self.id} is already open")
        if initial_balance < 0:
            raise ValidationError("Initial balance must not be negative")
        self.apply_event(AccountOpened(initial_balance=initial_balance))

    def debit(self, amount: Decimal) -> None:
        self._require_open()
        _require_positive(amount)
        if amount > self.balance:
            raise InsufficientFundsError(
                f"Cannot debit {amount} from {self.id}: balance is {self.balance}"
            )
        self.apply_event(AccountDebited(amount=amount))

    def credit(self, amount: Decimal) -> None:
        self._require_open()
        _require_positive(amount)
        self.apply_event(AccountCredited(amount=amount))

    def issue_card(self, daily_limit: Decimal, card_id: SequentialId | None = None) -> Card:
        self._require_open()
        card_id = card_id or SequentialId.generate()
        self.apply_event(CardIssued(card_id=card_id, daily_limit=daily_limit))
        return self.card(card_id)

    def card(self, card_id: SequentialId) -> Card:
        card = self.associated_entities.get(card_id)
        if not isinstance(card, Card):
            raise DomainError(f"Account {self.id} has no card {card_id}")
        return card

    @property
    def cards(self) -> list[Card]:
        return [e for e in self.associated_entities.values() if isinstance(e, Card)]

    def _require_open(self) -> None:
        if not self.opened:
            raise DomainError(f"Account {self.id} is not open")

    # -- state mutation ------------------------------------------------

    @applies(AccountOpened)
    def _on_opened(self, event: AccountOpened) -> None:
        self.opened = True
        self.balance = event.initial_balance

    @applies(AccountDebited)
    def _on_debited(self, event: AccountDebited) -> None:
        self.balance -= event.amount

    @applies(AccountCredited)
    def _on_credited(self, event: AccountCredited) -> None:
        self.balance += event.amount

    @applies(CardIssued)
    def _on_card_issued(self, event: CardIssued) -> None:
        Card(self, event.card_id, daily_limit=event.daily_limit)

    # -- snapshots -----------------------------------------------------

    def snapshot_state(self) -> dict[str, Any]:
        return {
            "opened": self.opened,
            "balance": str(self.balance),
            "cards": {
                str(card.id): {"daily_limit": str(card.daily_limit), "blocked": card.blocked}
                for card in self.cards
            },
        }

    def restore_state(self, state: dict[str, Any]) -> None:
        self.opened = bool(state["opened"])
        self.balance = Decimal(state["balance"])
        for card_id, card_state in state.get("cards", {}).items():
            card = Card(self, SequentialId.from_str(card_id), Decimal(card_state["daily_limit"]))
            card.blocked = bool(card_state["blocked"])

    def observable_state(self) -> dict[str, Any]:
        """Everything a caller can see, for equality checks in tests."""
        return {"version": self.version, **self.snapshot_state()}


def _require_positive(amount: Decimal) -> None:
    if amount <= 0:
        raise ValidationError(f"Amount must be positive, got {amount}")


# ---------------------------------------------------------------------------
# Commands + handlers
# ---------------------------------------------------------------------------


@dataclasses.dataclass(frozen=True)
class OpenAccount(Command):
    aggregate_id: SequentialId
    initial_balance: Decimal


@dataclasses.dataclass(frozen=True)
class DebitAccount(Command):
    aggregate_id: SequentialId
    amount: Decimal


@dataclasses.dataclass(frozen=True)
class CreditAccount(Command):
    aggregate_id: SequentialId
    amount: Decimal


@dataclasses.dataclass(frozen=True)
class IssueCard(Command):
    aggregate_id: SequentialId
    card_id: SequentialId
    daily_limit: Decimal


@dataclasses.dataclass(frozen=True)
class BlockCard(Command):
    aggregate_id: SequentialId
    card_id: SequentialId
    reason: str = ""


class OpenAccountHandler(CommandHandler[OpenAccount]):
    def __init__(self, repository: AggregateRepository[BankAccount]) -> None:
        self._repository = repository

    def handle(self, command: OpenAccount) -> None:
        account = BankAccount(command.aggregate_id)
        account.open(command.initial_balance)
        self._repository.save(account, expected_version=0)


class DebitAccountHandler(CommandHandler[DebitAccount]):
    def __init__(self, repository: AggregateRepository[BankAccount]) -> None:
        self._repository = repository

    def handle(self, command: DebitAccount) -> None:
        account = self._repository.load(command.aggregate_id)
        account.debit(command.amount)
        self._repository.save(account)


class CreditAccountHandler(CommandHandler[CreditAccount]):
    def __init__(self, repository: AggregateRepository[BankAccount]) -> None:
        self._repository = repository

    def handle(self, command: CreditAccount) -> None:
        account = self._repository.load(command.aggregate_id)
        account.credit(command.amount)
        self._repository.save(account)


class IssueCardHandler(CommandHandler[IssueCard]):
    def __init__(self, repository: AggregateRepository[BankAccount]) -> None:
        self._repository = repository

    def handle(self, command: IssueCard) -> None:
        account = self._repository.load(command.aggregate_id)
        account.issue_card(command.daily_limit, card_id=command.card_id)
        self._repository.save(account)


class BlockCardHandler(CommandHandler[BlockCard]):
    def __init__(self, repository: AggregateRepository[BankAccount]) -> None:
        self._repository = repository

    def handle(self, command: BlockCard) -> None:
        account = self._repository.load(command.aggregate_id)
        account.card(command.card_id).block(command.reason)
        self._repository.save(account)


def register_bank_handlers(bus: CommandBus, repository: AggregateRepository[BankAccount]) -> None:
    """Register one handler per bank command on *bus*."""
    bus.register(OpenAccount, OpenAccountHandler(repository))
    bus.register(DebitAccount, DebitAccountHandler(repository))
    bus.register(CreditAccount, CreditAccountHandler(repository))
    bus.register(IssueCard, IssueCardHandler(repository))
    bus.register(BlockCard, BlockCardHandler(repository))


__all__ = [
    "AccountCredited",
    "AccountDebited",
    "AccountOpened",
    "BankAccount",
    "BlockCard",
    "BlockCardHandler",
    "Card",
    "CardBlocked",
    "CardIssued",
    "CardLimitChanged",
    "CreditAccount",
    "CreditAccountHandler",
    "DebitAccount",
    "DebitAccountHandler",
    "InsufficientFundsError",
    "IssueCard",
    "IssueCardHandler",
    "OpenAccount",
    "OpenAccountHandler",
    "register_bank_handlers",
]
