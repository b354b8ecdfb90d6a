"""Pull request commands for prstore CLI."""

import asyncio

from ...core.config import Config
from ...core.types import GitHubRepository
from ...store import PullRequestDatabase


def _repository(repo_id: int) -> GitHubRepository:
    # Only the persisted id matters to the store.
    return GitHubRepository(name=str(repo_id), owner="", db_id=repo_id)


def handle_list(args, config: Config) -> None:
    """Handle list command."""
    asyncio.run(_handle_list_async(args, config))


async def _handle_list_async(args, config: Config) -> None:
    async with PullRequestDatabase(config.db_path) as store:
        prs = await store.get_all_pull_requests_in_repository(_repository(args.repo_id))

    if not prs:
        print(f"No pull requests stored for repository {args.repo_id}")
        return

    for pr in prs:
        print(f"#{pr.number:<6} {pr.title}  ({pr.author}, {pr.head.ref} -> {pr.base.ref})")


def handle_purge(args, config: Config) -> None:
    """Handle purge command."""
    asyncio.run(_handle_purge_async(args, config))


async def _handle_purge_async(args, config: Config) -> None:
    async with PullRequestDatabase(config.db_path) as store:
        await store.delete_all_pull_requests_in_repository(_repository(args.repo_id))
    print(f"Purged pull requests for repository {args.repo_id}")
