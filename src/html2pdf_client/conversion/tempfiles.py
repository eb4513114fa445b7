import logging
import secrets
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


@contextmanager
def temporary_html_file(html: str) -> Iterator[Path]:
    """Write inline HTML to a uniquely named file in the temp dir for one submission.

    The file is removed when the block exits, whether it returned or raised.
    """
    path = Path(tempfile.gettempdir()) / f"temp-{secrets.token_hex(16)}.html"
    try:
        with path.open("w", encoding="utf-8") as f:
            f.write(html)
        logger.debug("wrote %d characters of inline html to %s", len(html), path)
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("removed temporary file %s", path)
