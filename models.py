from sqlalchemy import create_engine, func, Column, Integer, Text, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class RawReading(Base):
    __tablename__ = "leituras_brutas"
    id          = Column(Integer, primary_key=True)
    raw_message = Column("mensagem_bruta", Text, nullable=False)
    timestamp   = Column(DateTime, server_default=func.current_timestamp())


def setup_database(db_path):
    """Open (or create) the SQLite file and make sure the readings table exists.

    Safe to call repeatedly against the same file: an existing table and its
    rows are left alone. Raises SQLAlchemyError if the file cannot be opened
    or the table cannot be created.

    db_path may also be an SQLite URI such as "file:data.db?mode=ro&uri=true".
    """
    engine = create_engine(f"sqlite:///{db_path}", echo=False, future=True)
    Base.metadata.create_all(engine)
    print(f"[models] Database ready, table '{RawReading.__tablename__}': {db_path}")
    return sessionmaker(bind=engine)
