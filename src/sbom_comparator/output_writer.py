"""
Writing of output artifacts.

Content is written to a temporary sibling file first and moved over the
target only once complete, so a failed write never leaves a partial file
behind under the target name.
"""

import logging
from pathlib import Path
from typing import Union

from sbom_comparator.exceptions import OutputWriteError

logger = logging.getLogger(__name__)


def write_output(content: str, output_file: Union[str, Path]) -> Path:
    """
    Atomically write ``content`` to ``output_file``.

    Returns:
        The path written

    Raises:
        OutputWriteError: If the file cannot be written
    """
    path = Path(output_file)
    tmp = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(content, encoding="utf-8")
        tmp.replace(path)
    except OSError as e:
        logger.error("Failed to write output to file (%s).", path)
        if tmp.exists():
            tmp.unlink()
        raise OutputWriteError(f"Failed to write output to file ({path}).") from e
    logger.debug("Wrote %s", path)
    return path
