import argparse
import sys
from pathlib import Path
import logging

from showsnap import logging_setup
from showsnap.adapters.tmdb.client import TMDBNotConfiguredError
from showsnap.adapters.tmdb.tmdb import TMDB_API
from showsnap.io.readers import read_lines
from showsnap.pipelines import seed_pipeline
from showsnap.settings import get_settings
from showsnap.utils.reproducibility import get_random_state

logger = logging.getLogger(__name__)


def _create_repository(backend: str, data_dir: Path | None):
    from api.repositories.local import LocalFileRepository
    from api.repositories.mongo import MongoRepository

    cfg = get_settings()
    if backend == "local":
        return LocalFileRepository(data_dir or cfg.local_store_dir)
    return MongoRepository(cfg.mongo)


def main(argv: list[str] | None = None) -> int:
    cfg = get_settings()

    p = argparse.ArgumentParser(description="Seed the movie catalog from TMDB and schedule showtimes in every theater")
    p.add_argument("--titles_file", help="Text file with one movie title per line (default: built-in list)")
    p.add_argument("--backend", choices=["mongo", "local"], default=cfg.storage_backend, help="Storage backend to seed")
    p.add_argument("--data_dir", help="Directory of the local store (local backend only)")
    p.add_argument("--seed", type=int, default=cfg.random_seed, help="Random seed for blocked seats")
    p.add_argument("--log_level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    a = p.parse_args(argv)

    # Initialize logging
    logging_setup.setup_logging(a.log_level)

    titles = read_lines(Path(a.titles_file)) if a.titles_file else None

    try:
        tmdb_api = TMDB_API()
    except TMDBNotConfiguredError as e:
        logger.error(f"{e}. Set TMDB_API_KEY or TMDB_READ_ACCESS_TOKEN.")
        return 1

    repo = _create_repository(a.backend, Path(a.data_dir) if a.data_dir else None)
    logger.info(f"Connected to {a.backend} storage")
    try:
        report = seed_pipeline.run_seed_pipeline(
            repo,
            tmdb_api,
            titles=titles,
            rng=get_random_state(a.seed),
        )
    except Exception as e:
        logger.error(f"Movie seeding failed: {e}", exc_info=True)
        return 1
    finally:
        repo.close()
        logger.info("Storage connection closed")

    logger.info(
        f"Seed complete: {report.movies_inserted} movies, {report.theaters_linked} theaters, "
        f"{report.showtimes_created} showtimes"
    )
    if report.skipped_titles:
        logger.warning(f"Skipped titles: {', '.join(report.skipped_titles)}")
    if report.fallback_titles:
        logger.info(f"Fallback movies used: {', '.join(report.fallback_titles)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
