from sqlalchemy.orm import Session


class UnitOfWork:
    """One session, one transaction: commits on clean exit, rolls back on error,
    and always closes the session."""

    def __init__(self, db: Session):
        self.db = db

    def __getattr__(self, attr):
        """
        Delegate attribute access to the underlying session.
        This allows the UoW to be passed to repositories as if it were a Session.
        """
        return getattr(self.db, attr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type:
                self.db.rollback()
            else:
                self.db.commit()
        finally:
            self.db.close()
