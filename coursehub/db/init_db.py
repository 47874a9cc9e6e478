from sqlalchemy.engine import Engine

from coursehub.db.base import Base

# import models so SQLAlchemy registers them
from coursehub.models import assignment, course, enrollment, lesson, submission, user  # noqa: F401


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
