from sqlalchemy.engine import Engine

from beacon.db import Base
from beacon.models import EventDB  # noqa: F401


def init_db(engine: Engine) -> None:
    # Idempotent: CREATE TABLE / INDEX only for what is missing.
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    from beacon.config.settings import load_settings
    from beacon.db import build_engine

    init_db(build_engine(load_settings()))
