"""Entry point for rss2sample: build the feed and print it as RSS 2.0."""

import sys
from datetime import UTC, datetime
from typing import TextIO

from .config import Config
from .errors import Rss2SampleError
from .logging_config import create_execution_logger, setup_structured_logging
from .sample import build_sample_feed, load_feed
from .serializer import FeedSerializer


def main(stdout: TextIO | None = None, stderr: TextIO | None = None) -> int:
    """
    Build the configured feed document and write it to standard output.

    Args:
        stdout: Stream for the XML document (defaults to sys.stdout)
        stderr: Stream for the error message on failure (defaults to sys.stderr)

    Returns:
        Process exit code: 0 on success, 1 on a feed or configuration error
    """
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr

    try:
        config = Config()
        setup_structured_logging(config.log_level)
    except ValueError as e:
        print(f"Configuration error: {e}", file=stderr)
        return 1

    execution_id = f"run_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
    main_logger = create_execution_logger("main", execution_id)
    main_logger.log_execution_start()

    try:
        feed_path = config.get_feed_path()
        if feed_path is None:
            main_logger.info("Using built-in sample feed")
            document = build_sample_feed()
        else:
            document = load_feed(feed_path, execution_id=execution_id)

        serializer = FeedSerializer(
            config.get_serializer_config(), execution_id=execution_id
        )
        # Emit fully before writing so a failure never leaves partial output
        text = serializer.emit(document)
    except Rss2SampleError as e:
        error_msg = f"{type(e).__name__}: {e}"
        main_logger.error(f"Feed generation failed: {error_msg}", error=str(e))
        main_logger.log_execution_end(success=False, error=error_msg)
        print(error_msg, file=stderr)
        return 1

    stdout.write(text)
    stdout.write("\n")
    main_logger.log_execution_end(
        success=True, items_count=len(document.channel.items)
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
