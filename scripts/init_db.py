"""Create every table of the Nad Feud schema that does not exist yet.
Uses the same DATABASE_URL as the app (the project-root .env is loaded first)."""
import asyncio
import os
import sys

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)
os.chdir(_project_root)

# load .env before importing nadfeud so uvicorn and this script agree on DATABASE_URL
_env_file = os.path.join(_project_root, ".env")
if os.path.isfile(_env_file):
    with open(_env_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and "=" in line and not line.startswith("#"):
                k, _, v = line.partition("=")
                k, v = k.strip(), v.strip()
                if k and os.environ.get(k) is None:
                    os.environ[k] = v

from sqlalchemy import inspect

from nadfeud.core.config import settings
from nadfeud.core.db import engine
from nadfeud.models import Base


def _redact_url(url: str) -> str:
    """Hide the password so the log shows which database is used."""
    if "@" in url and "//" in url:
        pre, _, rest = url.partition("//")
        if "@" in rest:
            user_part, _, host_part = rest.rpartition("@")
            if ":" in user_part:
                user = user_part.split(":")[0]
                return f"{pre}//{user}:****@{host_part}"
    return url


async def main():
    print(f"Using DB: {_redact_url(settings.database_url)}")
    async with engine.begin() as conn:
        before = set(await conn.run_sync(lambda c: inspect(c).get_table_names()))
        print(f"Existing tables: {sorted(before)}")
        await conn.run_sync(Base.metadata.create_all)
        after = set(await conn.run_sync(lambda c: inspect(c).get_table_names()))
    created = sorted(after - before)
    missing = sorted(set(Base.metadata.tables) - after)
    if missing:
        print(f"ERROR: tables still missing: {missing}")
        sys.exit(1)
    print(f"Created: {created}" if created else "All tables already exist.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
