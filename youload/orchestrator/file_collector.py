"""File collection utilities for batch selection."""
import logging
from pathlib import Path
from typing import Iterable, List, Union

from ..services.prober import is_video

logger = logging.getLogger(__name__)


class FileCollector:
    """Collects video files from the paths a user selected."""

    @staticmethod
    def collect_files(sources: Iterable[Union[str, Path]]) -> List[Path]:
        """
        Expand the selection into video files, keeping selection order.

        Folders are scanned recursively (sorted); files with unsupported
        extensions are skipped; duplicates are kept once.

        Args:
            sources: Files and/or folders

        Returns:
            List of video file paths
        """
        files: List[Path] = []
        seen = set()
        for source in sources:
            source = Path(source)
            if source.is_dir():
                candidates = sorted(p for p in source.rglob("*") if p.is_file())
            elif source.is_file():
                candidates = [source]
            else:
                logger.warning("Skipping missing path: %s", source)
                continue

            for candidate in candidates:
                if not is_video(candidate):
                    logger.debug("Skipping unsupported file: %s", candidate)
                    continue
                key = candidate.resolve()
                if key in seen:
                    continue
                seen.add(key)
                files.append(candidate)
        return files
