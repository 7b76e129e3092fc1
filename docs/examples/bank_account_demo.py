"""Bank account walkthrough.

Opens an account, runs a few commands through the bus, forces a
concurrency conflict and retries it, then reloads from a snapshot.

Run with::

    python docs/examples/bank_account_demo.py            # JSON logs
    EVSOURCE_LOG_JSON=false python docs/examples/bank_account_demo.py
"""

from __future__ import annotations

import tempfile
from decimal import Decimal
from pathlib import Path

from sqlalchemy import create_engine

from evsource.adapters.sqlalchemy import SQLAlchemyEventStore, SQLAlchemySnapshotStore, create_schema
from evsource.application.event_sourcing import EveryNEventsPolicy
from evsource.application.host import Host, HostConfiguration
from evsource.config.settings import EnvSettingsLoader, EventSourcingSettings
from evsource.kernel.errors import ConcurrencyConflictError
from evsource.kernel.types import SequentialId
from evsource.observability.logging import get_logger
from evsource.testing.bank import (
    BankAccount,
    BlockCard,
    CreditAccount,
    DebitAccount,
    IssueCard,
    OpenAccount,
    register_bank_handlers,
)

logger = get_logger("bank_account_demo")


def main() -> None:
    settings = EnvSettingsLoader().load(EventSourcingSettings)
    workdir = Path(tempfile.mkdtemp(prefix="evsource-demo-"))
    engine = create_engine(f"sqlite:///{workdir / 'bank.db'}")
    create_schema(engine)

    config = (
        HostConfiguration(settings=settings, configure_logging=True)
        .use_event_store(lambda: SQLAlchemyEventStore(engine))
        .use_snapshot_store(lambda: SQLAlchemySnapshotStore(engine), EveryNEventsPolicy(3))
    )
    host = Host(config)
    accounts = host.repository(BankAccount)
    register_bank_handlers(host.command_bus, accounts)
    bus = host.command_bus

    account_id, card_id = SequentialId.generate(), SequentialId.generate()
    bus.send(OpenAccount(aggregate_id=account_id, initial_balance=Decimal("950")))
    bus.send(DebitAccount(aggregate_id=account_id, amount=Decimal("50")))
    bus.send(CreditAccount(aggregate_id=account_id, amount=Decimal("120")))
    bus.send(DebitAccount(aggregate_id=account_id, amount=Decimal("350")))

    account = accounts.load(account_id)
    logger.info("demo.balance", balance=str(account.balance), version=account.version)

    # two writers start from the same version; the second one loses
    first, second = accounts.load(account_id), accounts.load(account_id)
    first.credit(Decimal("10"))
    second.debit(Decimal("10"))
    accounts.save(first)
    try:
        accounts.save(second)
    except ConcurrencyConflictError as exc:
        logger.info("demo.conflict", expected=exc.expected, actual=exc.actual)

    def debit_again() -> None:
        fresh = accounts.load(account_id)
        fresh.debit(Decimal("10"))
        accounts.save(fresh)

    host.retry_policy.execute(debit_again)

    bus.send(IssueCard(aggregate_id=account_id, card_id=card_id, daily_limit=Decimal("300")))
    bus.send(BlockCard(aggregate_id=account_id, card_id=card_id, reason="lost"))

    account = accounts.load(account_id)
    snapshot = host.snapshot_store.load(account_id) if host.snapshot_store else None
    logger.info(
        "demo.done",
        balance=str(account.balance),
        version=account.version,
        card_blocked=account.card(card_id).blocked,
        snapshot_version=snapshot.version if snapshot else None,
        database=str(workdir / "bank.db"),
    )


if __name__ == "__main__":
    main()
