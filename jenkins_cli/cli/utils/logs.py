"""Console log streaming for Jenkins CLI.

Uses the progressive text endpoint: each fetch returns the text from an
offset, the offset to resume from and whether more output is expected.
"""

import logging
import time
from typing import Callable, Iterator

from jenkins_cli.jenkins_api_control import JenkinsAPI


logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5


class LogStreamer:
    """Stream a build's console output until the build finishes."""

    def __init__(
        self,
        api: JenkinsAPI,
        job_name: str,
        build_number: int,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        start: int = 0,
    ):
        """Initialize log streamer.

        Args:
            api: Jenkins API client
            job_name: Full job path
            build_number: Build to stream
            poll_interval: Seconds to wait between fetches while output is pending
            sleep: Sleep function (replaceable in tests)
            start: Byte offset to start from
        """
        self.api = api
        self.job_name = job_name
        self.build_number = build_number
        self.poll_interval = poll_interval
        self.sleep = sleep
        self.offset = start

    def stream(self) -> Iterator[str]:
        """Yield new console text as it appears.

        Stops after the first fetch that reports no more data. Fetch errors
        propagate to the caller.

        Yields:
            Non-empty chunks of console text, in order
        """
        while True:
            chunk = self.api.get_progressive_log(self.job_name, self.build_number, start=self.offset)
            logger.debug(
                "Fetched %d chars from offset %d (next %d, more=%s)",
                len(chunk.text),
                self.offset,
                chunk.next_offset,
                chunk.has_more,
            )
            self.offset = chunk.next_offset
            if chunk.text:
                yield chunk.text
            if not chunk.has_more:
                return
            self.sleep(self.poll_interval)

    def follow(self, callback: Callable[[str], None]) -> int:
        """Stream to completion, passing each chunk to `callback`.

        Returns:
            Final offset (total size of the console log)
        """
        for text in self.stream():
            callback(text)
        return self.offset
