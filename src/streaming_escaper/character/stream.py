"""Chunked stream processing built on the escaping transform.

The processor reads its input in chunks of at most ``buffer_size``
characters and pushes each chunk, character by character, through an
:class:`~streaming_escaper.character.transformation.Escaper` into a writer.
Strings, UTF-8 bytes and text or binary file objects are accepted. Unlike
sink-level transforms, the processor also tracks progress and metrics.

Sink and I/O errors are not caught: they reach the caller unchanged.
"""

import codecs
import time
from dataclasses import dataclass, field
from typing import (
    BinaryIO,
    Callable,
    Generator,
    Iterator,
    List,
    Optional,
    TextIO,
    Tuple,
    Union,
)

from streaming_escaper.shared.config import StreamConfig
from streaming_escaper.shared.logging import get_logger
from streaming_escaper.shared.result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    EscapeMetrics,
    EscapeResult,
)

from .transformation import Escaper
from .writer import StringWriter, TextIOWriter, Writer

InputType = Union[str, bytes, BinaryIO, TextIO]
ProgressCallback = Callable[[int, int], bool]  # (processed, total) -> continue

_REPLACEMENT_CHAR = "\ufffd"
_ENCODED_REPLACEMENT_CHAR = _REPLACEMENT_CHAR.encode("utf-8")


@dataclass
class StreamingProgress:
    """Progress information for streaming operations.

    Attributes:
        processed_units: Characters (text input) or bytes (binary input) consumed
        total_units: Total units to process (0 if unknown)
        processed_chunks: Number of chunks processed
        current_chunk_size: Size of the chunk being processed
        cancelled: Whether the progress callback cancelled the operation
    """
    processed_units: int = 0
    total_units: int = 0
    processed_chunks: int = 0
    current_chunk_size: int = 0
    cancelled: bool = False


@dataclass
class StreamingResult:
    """Lazily escaped stream.

    ``progress`` and ``metrics`` are updated as ``chunks`` is consumed.
    """
    chunks: Generator[str, None, None]
    progress: StreamingProgress
    metrics: EscapeMetrics = field(default_factory=EscapeMetrics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)


class _ReplacingDecoder:
    """Incremental UTF-8 decoder that counts replaced invalid sequences.

    U+FFFD already present in the input is told apart from replacements by
    counting its encoded form in the raw bytes, including occurrences split
    across reads.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._tail = b""
        self._decoded = 0
        self._genuine = 0

    @property
    def replaced(self) -> int:
        return self._decoded - self._genuine

    def decode(self, data: bytes, final: bool = False) -> str:
        window = self._tail + data
        self._genuine += window.count(_ENCODED_REPLACEMENT_CHAR)
        self._tail = window[-(len(_ENCODED_REPLACEMENT_CHAR) - 1):]
        text = self._decoder.decode(data, final)
        self._decoded += text.count(_REPLACEMENT_CHAR)
        return text


class _CountingWriter(Writer):
    """Pass-through writer that counts what reaches the sink."""

    def __init__(self, inner: Writer) -> None:
        self.inner = inner
        self.chars_written = 0
        self.bytes_written = 0

    def write_char(self, c: str) -> None:
        self.inner.write_char(c)
        self.chars_written += 1
        self.bytes_written += len(c.encode("utf-8"))

    def size_hint(self, byte_count: int) -> None:
        self.inner.size_hint(byte_count)


class EscapeStreamProcessor:
    """Escapes whole inputs or streams them chunk by chunk.

    Args:
        escaper: Escaping policy applied to every character
        config: Stream processing configuration
    """

    def __init__(self, escaper: Escaper, config: Optional[StreamConfig] = None) -> None:
        self.escaper = escaper
        self.config = config or StreamConfig()
        self.logger = get_logger(__name__, self.config.correlation_id, "stream_processor")

    def process(self, input_data: InputType) -> EscapeResult:
        """Escape the complete input into memory.

        Args:
            input_data: Text, UTF-8 bytes or a file object

        Returns:
            EscapeResult with the escaped text and metrics
        """
        sink = StringWriter()
        metrics, diagnostics = self._run(input_data, sink, None)
        return EscapeResult(text=sink.getvalue(), metrics=metrics, diagnostics=diagnostics)

    def write(
        self,
        input_data: InputType,
        writer: Writer,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> EscapeMetrics:
        """Escape the input into ``writer``.

        Returns:
            Metrics for the characters that reached the writer; diagnostics
            are only logged, use :meth:`process` to receive them
        """
        metrics, _ = self._run(input_data, writer, progress_callback)
        return metrics

    def escape_file(self, source: Union[TextIO, BinaryIO], destination: TextIO) -> EscapeMetrics:
        """Stream one file object into another text file object."""
        return self.write(source, TextIOWriter(destination))

    def _run(
        self,
        input_data: InputType,
        writer: Writer,
        progress_callback: Optional[ProgressCallback],
    ) -> Tuple[EscapeMetrics, List[DiagnosticEntry]]:
        progress = StreamingProgress(total_units=self._measure(input_data))
        metrics = EscapeMetrics()
        diagnostics: List[DiagnosticEntry] = []
        for _ in self._drive(input_data, writer, progress, metrics, diagnostics, progress_callback):
            pass
        return metrics, diagnostics

    def process_stream(
        self,
        input_data: InputType,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> StreamingResult:
        """Escape lazily, yielding one escaped string per input chunk.

        Args:
            input_data: Text, UTF-8 bytes or a file object
            progress_callback: Called before each chunk with
                ``(processed, total)``; returning False cancels the stream

        Returns:
            StreamingResult whose ``chunks`` generator produces the output
        """
        progress = StreamingProgress(total_units=self._measure(input_data))
        metrics = EscapeMetrics()
        diagnostics: List[DiagnosticEntry] = []
        sink = StringWriter()

        def chunk_generator() -> Generator[str, None, None]:
            drive = self._drive(input_data, sink, progress, metrics, diagnostics, progress_callback)
            for _ in drive:
                chunk = sink.getvalue()
                sink.clear()
                yield chunk

        return StreamingResult(
            chunks=chunk_generator(),
            progress=progress,
            metrics=metrics,
            diagnostics=diagnostics,
        )

    def _drive(
        self,
        input_data: InputType,
        writer: Writer,
        progress: StreamingProgress,
        metrics: EscapeMetrics,
        diagnostics: List[DiagnosticEntry],
        progress_callback: Optional[ProgressCallback],
    ) -> Iterator[None]:
        """Push chunks through the escaper, yielding after each chunk."""
        collect = self.config.collect_metrics
        counter = _CountingWriter(writer) if collect else None
        target = writer.transform(self.escaper) if counter is None else counter.transform(self.escaper)
        decoder = _ReplacingDecoder()
        start = time.perf_counter()

        self.logger.debug(
            "Starting escape stream",
            extra={"total_units": progress.total_units, "buffer_size": self.config.buffer_size},
        )

        for chunk, consumed in self._iter_chunks(input_data, decoder):
            if progress_callback and not progress_callback(
                progress.processed_units, progress.total_units
            ):
                progress.cancelled = True
                self.logger.debug(
                    "Escape stream cancelled",
                    extra={"processed_units": progress.processed_units},
                )
                break

            progress.current_chunk_size = consumed
            chunk_bytes = len(chunk.encode("utf-8"))
            target.size_hint(chunk_bytes)
            target.write_str(chunk)

            progress.processed_units += consumed
            progress.processed_chunks += 1
            if counter is not None:
                metrics.characters_processed += len(chunk)
                metrics.input_bytes += chunk_bytes
                metrics.size_hint_bytes += self.escaper.transform_size_hint(chunk_bytes)
                metrics.output_bytes = counter.bytes_written
                metrics.characters_escaped = counter.chars_written - metrics.characters_processed
                metrics.processing_time_ms = (time.perf_counter() - start) * 1000.0
            metrics.chunks_processed += 1
            yield

        if decoder.replaced:
            self.logger.warning(
                "Replaced invalid UTF-8 input",
                extra={"replacements": decoder.replaced},
            )
            diagnostics.append(DiagnosticEntry(
                severity=DiagnosticSeverity.WARNING,
                message=f"Replaced {decoder.replaced} invalid UTF-8 sequence(s) with U+FFFD",
                component="stream_processor",
                details={"replacements": decoder.replaced},
                correlation_id=self.config.correlation_id,
            ))

        self.logger.debug(
            "Finished escape stream",
            extra={"chunks": metrics.chunks_processed, "cancelled": progress.cancelled},
        )

    def _iter_chunks(
        self, input_data: InputType, decoder: "_ReplacingDecoder"
    ) -> Iterator[Tuple[str, int]]:
        """Yield ``(text_chunk, units_consumed)`` pairs."""
        size = self.config.buffer_size
        if isinstance(input_data, str):
            for offset in range(0, len(input_data), size):
                chunk = input_data[offset:offset + size]
                yield chunk, len(chunk)
            return

        if isinstance(input_data, (bytes, bytearray)):
            for offset in range(0, len(input_data), size):
                raw = bytes(input_data[offset:offset + size])
                yield decoder.decode(raw), len(raw)
            tail = decoder.decode(b"", final=True)
            if tail:
                yield tail, 0
            return

        if not hasattr(input_data, "read"):
            raise TypeError(f"Unsupported input type: {type(input_data).__name__}")

        while True:
            data = input_data.read(size)
            if not data:
                break
            if isinstance(data, bytes):
                yield decoder.decode(data), len(data)
            else:
                yield data, len(data)
        tail = decoder.decode(b"", final=True)
        if tail:
            yield tail, 0

    def _measure(self, input_data: InputType) -> int:
        if isinstance(input_data, (str, bytes, bytearray)):
            return len(input_data)
        # Size of a seekable file from its current position, else unknown
        try:
            current = input_data.tell()
            end = input_data.seek(0, 2)
            input_data.seek(current)
            return max(0, end - current)
        except (AttributeError, OSError, ValueError):
            return 0
