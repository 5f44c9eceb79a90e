from importlib.resources import files

from labinsight.database.connection import get_connection
from labinsight.logging.logger import Log


def apply_schema() -> None:
    """Create the analysis_jobs table and indexes if they are missing."""
    ddl = files("labinsight.database").joinpath("schema.sql").read_text(encoding="utf-8")
    with get_connection() as conn:
        conn.execute(ddl)
        conn.commit()
    Log.info("Database schema is up to date")
