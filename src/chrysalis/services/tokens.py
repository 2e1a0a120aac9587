"""Token ledger adjustments for users."""
from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from chrysalis.models import User


def adjust_tokens(db: Session, user: User, delta: int) -> int:
    """Add ``delta`` to the user's token balance and return the new balance.

    The increment runs as a single UPDATE so concurrent adjustments never
    overwrite one another. No lower bound is applied; a balance may go
    negative. The caller owns the transaction.
    """
    db.execute(
        update(User)
        .where(User.id == user.id)
        .values(tokens=User.tokens + delta)
        .execution_options(synchronize_session=False)
    )
    balance = db.execute(select(User.tokens).where(User.id == user.id)).scalar_one()
    set_committed_value(user, "tokens", balance)
    return balance
