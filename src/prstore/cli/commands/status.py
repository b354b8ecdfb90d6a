"""Status and migrate commands for prstore CLI."""

import asyncio

from ...core.config import Config
from ...core.types import StoreStatus
from ...store import PullRequestDatabase, from_epoch_ms


def handle_migrate(args, config: Config) -> None:
    """Handle migrate command.

    Opening the store applies any pending migrations.
    """
    status = asyncio.run(_load_status(config))
    print(f"Database at schema version {status.schema_version}")


def handle_status(args, config: Config) -> None:
    """Handle status command.

    Args:
        args: Parsed command arguments.
        config: Application configuration.
    """
    _print_status(asyncio.run(_load_status(config)))


async def _load_status(config: Config) -> StoreStatus:
    async with PullRequestDatabase(config.db_path) as store:
        return await store.status()


def _print_status(status: StoreStatus) -> None:
    print("Pull Request Store Status")
    print("=" * 50)
    print(f"Database: {status.path}")
    print(f"Schema version: {status.schema_version} (latest {status.latest_version})")
    print(f"Pull requests: {status.total_pull_requests}")
    print()

    if not status.repositories:
        print("No repositories synced yet.")
        return

    print("Repositories:")
    for repo in status.repositories:
        mark = from_epoch_ms(repo.last_updated).isoformat() if repo.last_updated is not None else "never"
        print(f"  {repo.repo_id}: {repo.pull_requests} open, last updated {mark}")
