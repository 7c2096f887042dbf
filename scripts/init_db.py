"""Initialize the SlugShare files database."""

import asyncio

from src.slugshare.config import load_config
from src.slugshare.db.db_init import create_engine_and_sessions, init_db


async def _init() -> None:
    config = load_config()
    engine, session_factory = create_engine_and_sessions(config.database_url)
    try:
        await init_db(engine, session_factory, seed_demo=config.seed_demo_file)
    finally:
        await engine.dispose()


def main() -> None:
    asyncio.run(_init())
    print("Database initialized.")


if __name__ == "__main__":
    main()
