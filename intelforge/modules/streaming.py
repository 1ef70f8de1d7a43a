#!/usr/bin/env python3

"""
Chunked processing for handling large reports efficiently.

Reports are split on line boundaries, so no indicator is ever cut in half
and chunks need no overlap. Each chunk goes through the same pure
extraction call and the per-chunk results are merged afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path

from tqdm import tqdm

from intelforge.modules.exceptions import ExtractionError, IntelForgeError, ValidationError
from intelforge.modules.extractor import IOCExtractor
from intelforge.modules.file_parser import read_report
from intelforge.modules.logger import get_logger
from intelforge.modules.models import ExtractionOptions, IOCSet, IOCType
from intelforge.modules.utils import deduplicate_iocs_with_state, merge_ioc_sets
from intelforge.modules.warninglists import WarningLists

logger = get_logger(__name__)

DEFAULT_CHUNK_LINES = 1000
DEFAULT_MAX_WORKERS = 3


class ChunkedIOCExtractor:
    """
    Chunked IOC extractor for processing large reports.

    This class splits text into line-bounded chunks, extracts IOCs from the
    chunks on a bounded thread pool and merges the results in chunk order.
    """

    def __init__(
        self,
        chunk_lines: int = DEFAULT_CHUNK_LINES,
        max_workers: int = DEFAULT_MAX_WORKERS,
        options: ExtractionOptions | None = None,
        show_progress: bool | None = None,
        warning_lists: WarningLists | None = None,
    ) -> None:
        """
        Initialize the chunked extractor.

        Args:
            chunk_lines: Maximum number of lines per chunk
            max_workers: Maximum number of chunks processed at once
            options: Extraction options applied to every chunk
            show_progress: Show a progress bar; None shows one only when
                there is more than one chunk
            warning_lists: Classification tables, defaults to the bundled ones
        """
        if chunk_lines < 1:
            raise ValidationError(f"chunk_lines must be at least 1, got {chunk_lines}")
        if max_workers < 1:
            raise ValidationError(f"max_workers must be at least 1, got {max_workers}")

        self.chunk_lines = chunk_lines
        self.max_workers = max_workers
        self.options = options if options is not None else ExtractionOptions()
        self.show_progress = show_progress
        self.warning_lists = warning_lists

    def split_text(self, text: str) -> list[str]:
        """
        Split text into chunks of at most ``chunk_lines`` lines.

        Args:
            text: Text to split

        Returns:
            Non-blank chunks in document order
        """
        lines = text.splitlines()
        chunks = (
            "\n".join(lines[start:start + self.chunk_lines])
            for start in range(0, len(lines), self.chunk_lines)
        )
        return [chunk for chunk in chunks if chunk.strip()]

    def _extract_chunk(self, chunk: str) -> IOCSet:
        return IOCExtractor(self.options, self.warning_lists).extract_all(chunk)

    def extract(self, text: str) -> IOCSet:
        """
        Extract IOCs from text chunk by chunk.

        Args:
            text: Report text

        Returns:
            Merged IOCSet of all chunks
        """
        chunks = self.split_text(text)
        if not chunks:
            return IOCSet.empty()
        if len(chunks) == 1:
            return self._extract_chunk(chunks[0])

        show_progress = self.show_progress is not False
        logger.info("Extracting IOCs from %d chunks with %d workers", len(chunks), self.max_workers)

        results: list[IOCSet] = [IOCSet.empty()] * len(chunks)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index: dict[Future[IOCSet], int] = {
                executor.submit(self._extract_chunk, chunk): index
                for index, chunk in enumerate(chunks)
            }

            with tqdm(
                total=len(chunks),
                desc="Extracting IOCs",
                unit="chunk",
                disable=not show_progress,
            ) as progress:
                for future in as_completed(future_to_index):
                    index = future_to_index[future]
                    try:
                        results[index] = future.result()
                    except ExtractionError as exc:
                        logger.warning("Skipping chunk %d: %s", index + 1, exc)
                    progress.update(1)

        return merge_ioc_sets(results)

    def iter_extract(self, text: str) -> Iterator[IOCSet]:
        """
        Extract IOCs chunk by chunk, yielding only values not seen before.

        Chunks are processed sequentially, so results arrive in document
        order as soon as each chunk is done.

        Args:
            text: Report text

        Yields:
            IOCSets of newly found values; empty ones are skipped
        """
        seen_iocs: dict[IOCType, set[str]] = {}
        for chunk in self.split_text(text):
            fresh = deduplicate_iocs_with_state(self._extract_chunk(chunk), seen_iocs)
            if not fresh.is_empty():
                yield fresh

    def extract_from_file(self, file_path: Path | str, file_type: str | None = None) -> IOCSet:
        """
        Read a report file and extract IOCs from it chunk by chunk.

        Args:
            file_path: Path to a text, HTML or PDF report
            file_type: Force a file type instead of detecting it

        Returns:
            Merged IOCSet of the report
        """
        logger.info("Starting chunked extraction from %s", file_path)
        return self.extract(read_report(file_path, file_type))


class ParallelReportExtractor:
    """
    Parallel extractor for processing multiple reports concurrently.
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        chunk_lines: int = DEFAULT_CHUNK_LINES,
        options: ExtractionOptions | None = None,
        warning_lists: WarningLists | None = None,
    ) -> None:
        if chunk_lines < 1:
            raise ValidationError(f"chunk_lines must be at least 1, got {chunk_lines}")
        if max_workers < 1:
            raise ValidationError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self.chunk_lines = chunk_lines
        self.options = options
        self.warning_lists = warning_lists

    def _process_file(self, file_path: str) -> IOCSet:
        # One worker per report; chunks of a report are processed sequentially
        extractor = ChunkedIOCExtractor(
            chunk_lines=self.chunk_lines,
            max_workers=1,
            options=self.options,
            show_progress=False,
            warning_lists=self.warning_lists,
        )
        return extractor.extract_from_file(file_path)

    def extract_from_files(self, file_paths: list[str]) -> dict[str, IOCSet]:
        """
        Extract IOCs from several reports in parallel.

        A report that cannot be read is logged and left out of the result.

        Args:
            file_paths: Report paths

        Returns:
            Mapping of path to IOCSet, in the order the paths were given
        """
        results: dict[str, IOCSet] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_file = {
                executor.submit(self._process_file, file_path): file_path
                for file_path in file_paths
            }

            for future in tqdm(
                as_completed(future_to_file),
                total=len(future_to_file),
                desc="Processing reports",
                unit="file",
                disable=len(file_paths) < 2,
            ):
                file_path = future_to_file[future]
                try:
                    results[file_path] = future.result()
                except IntelForgeError as exc:
                    logger.error("Error processing %s: %s", file_path, exc)
                    continue
                logger.info("Completed extraction from %s", file_path)

        return {path: results[path] for path in file_paths if path in results}
