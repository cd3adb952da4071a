"""
Media Prober - Single Responsibility: read duration and orientation.

Runs ffprobe as an asyncio subprocess. ffprobe only parses the container
and stream headers, so even large files are probed without decoding.
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Set

from ..exceptions import ProbeError
from ..models import ProbeResult, UploadItem
from ..protocols import IMediaProber

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = {".mp4", ".mov", ".avi", ".mkv", ".webm"}


def is_video(path) -> bool:
    return Path(path).suffix.lower() in VIDEO_EXTENSIONS


def _rotation(stream: Dict[str, Any]) -> int:
    """Display rotation in degrees from stream tags or side data."""
    for side_data in stream.get("side_data_list") or []:
        if "rotation" in side_data:
            try:
                return int(float(side_data["rotation"]))
            except (TypeError, ValueError):
                pass
    rotate = (stream.get("tags") or {}).get("rotate")
    if rotate is not None:
        try:
            return int(float(rotate))
        except (TypeError, ValueError):
            pass
    return 0


def parse_ffprobe_output(raw: str) -> ProbeResult:
    """
    Build a ProbeResult from ffprobe JSON output.

    Width and height are swapped for streams rotated by +/-90 degrees so
    that orientation matches what a player displays.
    """
    try:
        data = json.loads(raw or "{}")
    except ValueError as exc:
        raise ProbeError(f"Unreadable ffprobe output: {exc}") from exc

    streams = data.get("streams") or []
    if not streams:
        raise ProbeError("No video stream found")
    stream = streams[0]

    try:
        width = int(stream["width"])
        height = int(stream["height"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ProbeError("Video stream has no dimensions") from exc

    if abs(_rotation(stream)) % 180 == 90:
        width, height = height, width

    duration = (data.get("format") or {}).get("duration") or stream.get("duration")
    try:
        duration_seconds = float(duration) if duration is not None else 0.0
    except (TypeError, ValueError):
        duration_seconds = 0.0

    return ProbeResult(duration_seconds=duration_seconds, width=width, height=height)


class MediaProber(IMediaProber):
    """
    Service for probing video files.

    Usage:
        prober = MediaProber(settings.ffprobe_path)
        result = await prober.probe(Path("clip.mp4"))

        # fire-and-forget, results land in the store
        prober.schedule(store, item)
        await prober.wait()
    """

    def __init__(self, ffprobe_path: str = "ffprobe", timeout: float = 30.0):
        self._ffprobe = ffprobe_path
        self._timeout = timeout
        self._tasks: Set[asyncio.Task] = set()

    def _command(self, path: Path):
        return [
            self._ffprobe,
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries",
            "format=duration:stream=width,height,duration:stream_tags=rotate:stream_side_data=rotation",
            "-of", "json",
            str(path),
        ]

    async def probe(self, path: Path) -> ProbeResult:
        """
        Probe a video file.

        Args:
            path: Path to video file

        Returns:
            ProbeResult with duration and display dimensions

        Raises:
            ProbeError: ffprobe missing, failing, timing out or returning no video stream
        """
        path = Path(path)
        try:
            proc = await asyncio.create_subprocess_exec(
                *self._command(path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ProbeError(f"Cannot run ffprobe ({self._ffprobe}): {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            await self._terminate(proc)
            raise ProbeError(f"ffprobe timed out after {self._timeout}s on {path.name}") from None
        except BaseException:
            # cancelled or interrupted
            await self._terminate(proc)
            raise

        if proc.returncode != 0:
            message = stderr.decode(errors="replace").strip() or f"exit code {proc.returncode}"
            raise ProbeError(f"ffprobe failed on {path.name}: {message}")

        return parse_ffprobe_output(stdout.decode(errors="replace"))

    @staticmethod
    async def _terminate(proc) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        await asyncio.shield(proc.wait())

    def schedule(self, store, item: UploadItem) -> asyncio.Task:
        """
        Probe an item in the background and write the result into the store.

        A failing probe leaves the item with its default classification.
        """
        task = asyncio.get_running_loop().create_task(self._probe_into(store, item))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _probe_into(self, store, item: UploadItem) -> Optional[ProbeResult]:
        try:
            result = await self.probe(item.file_path)
        except ProbeError as exc:
            logger.warning("Could not probe %s: %s", item.filename, exc)
            return None

        if store.apply_probe(item.id, result) is None:
            logger.debug("Item %s was removed before probing finished", item.filename)
        else:
            logger.debug(
                "Probed %s: %.2fs %dx%d",
                item.filename, result.duration_seconds, result.width, result.height,
            )
        return result

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def wait(self) -> None:
        """Wait for every scheduled probe to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel(self) -> None:
        """Cancel every scheduled probe."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
