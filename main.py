import asyncio
import sys
from loguru import logger

from maps_directory.clients import DatasetClient
from maps_directory.config import LOG_LEVEL
from maps_directory.filters import visible
from maps_directory.loader import Loader
from maps_directory.registry import SourceRegistry


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Replace loguru's default handler with a compact stderr sink."""
    logger.remove()
    logger.add(sys.stderr, level=level, format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>")


async def main(query: str = ""):
    """
    Load every category concurrently and report on each one.

    - Categories are loaded independently; one failure does not stop the others.
    - With a query, matching records of each loaded category are printed.
    """
    registry = SourceRegistry.default()
    loader = Loader(registry)

    try:
        outcomes = await loader.load_all()
        for category_id, outcome in outcomes.items():
            if isinstance(outcome, BaseException):
                print(f"{category_id}: {loader.cache.status(category_id).value} ({outcome})")
                continue

            print(f"{category_id}: {len(outcome)} records")
            if query:
                for record in visible(outcome, query, show_all=False):
                    print(
                        f"  {record.name or ''} | {record.phone or ''} | "
                        f"{record.rating_display} | {record.address or ''}"
                    )
        logger.debug(f"Cache stats: {loader.cache.get_cache_stats()}")
    finally:
        # Close the shared session to prevent unclosed connector warnings
        await DatasetClient().close()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(main(" ".join(sys.argv[1:])))
