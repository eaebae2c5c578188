from sqlmodel import SQLModel, create_engine, Session
from sqlmodel.pool import StaticPool
from sqlalchemy.engine import Engine

# by default everything lives in memory and is gone when the process exits
DATABASE_URL = "sqlite://"


# StaticPool keeps one connection for the whole engine, otherwise every new
# connection to "sqlite://" would open a brand new, empty database
def make_engine(database_url: str = DATABASE_URL, echo: bool = False) -> Engine:
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo)


#  turns all the SQLModel classes into real SQL tables
def create_db_and_tables(engine: Engine):
    SQLModel.metadata.create_all(engine)


def drop_db_and_tables(engine: Engine):
    SQLModel.metadata.drop_all(engine)


# objects stay readable after the session closes, callers get plain detached records
def new_session(engine: Engine) -> Session:
    return Session(engine, expire_on_commit=False)
