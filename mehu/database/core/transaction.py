# mehu/database/core/transaction.py
from contextlib import contextmanager
from sqlalchemy.orm import Session

@contextmanager
def transactional(db: Session):
    """BEGIN ... COMMIT around the block; ROLLBACK if it raises."""
    with db.begin():
        yield db
