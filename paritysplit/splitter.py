"""PDF splitting logic to separate odd and even pages."""

import io
from pathlib import Path

import structlog
from pypdf import PdfReader, PdfWriter

from paritysplit.config import settings
from paritysplit.models import ParityPartition, SplitResult
from paritysplit.storage import new_stamp

logger = structlog.get_logger()

ODD_SUFFIX = "odd-pages.pdf"
EVEN_SUFFIX = "even-pages.pdf"


class SplitterError(Exception):
    """Exception raised when PDF splitting fails."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class LoadError(SplitterError):
    """Raised when the input bytes are not a readable PDF."""

    def __init__(self, message: str) -> None:
        super().__init__(code="LOAD_FAILED", message=message)


def partition_pages(page_count: int) -> ParityPartition:
    """
    Group page indices by the parity of their 1-indexed page number.

    Pages 1, 3, 5, ... (indices 0, 2, 4, ...) are odd, the rest even.
    """
    partition = ParityPartition()
    for i in range(page_count):
        if (i + 1) % 2 == 0:
            partition.even.append(i)
        else:
            partition.odd.append(i)
    return partition


def load_pdf(data: bytes) -> PdfReader:
    """
    Parse PDF bytes and force the page tree to load.

    Raises:
        LoadError: If the bytes cannot be read as a PDF
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        # Page tree is resolved lazily, touch it so broken files fail here
        len(reader.pages)
    except Exception as e:
        raise LoadError(f"Failed to load PDF: {str(e)}") from e
    return reader


class ParitySplitter:
    """Splits a PDF into an odd-pages and an even-pages document."""

    def __init__(self, public_dir: Path = Path(settings.public_dir)) -> None:
        """
        Initialize splitter.

        Args:
            public_dir: Directory the split documents are written to
        """
        self._public_dir = public_dir

    def split(self, input_path: Path) -> SplitResult:
        """
        Split a PDF by page parity and remove the input file.

        Args:
            input_path: Path to the uploaded PDF, deleted before returning

        Returns:
            SplitResult with output basenames, None for an empty group

        Raises:
            LoadError: If the input is not a readable PDF
            SplitterError: If reading or writing fails
        """
        written: list[Path] = []
        try:
            stamp = new_stamp()
            reader = load_pdf(input_path.read_bytes())
            page_count = len(reader.pages)
            partition = partition_pages(page_count)

            odd_path = self._write_group(reader, partition.odd, stamp, ODD_SUFFIX)
            if odd_path:
                written.append(odd_path)
            even_path = self._write_group(reader, partition.even, stamp, EVEN_SUFFIX)
            if even_path:
                written.append(even_path)

            logger.info(
                "PDF parity split complete",
                input=input_path.name,
                page_count=page_count,
                odd_pages=len(partition.odd),
                even_pages=len(partition.even),
            )

            return SplitResult(
                oddFile=odd_path.name if odd_path else None,
                evenFile=even_path.name if even_path else None,
                pageCount=page_count,
            )

        except LoadError as e:
            logger.error("PDF load failed", input=input_path.name, error=e.message)
            raise
        except Exception as e:
            logger.exception("PDF split failed", input=input_path.name, error=str(e))
            self._rollback(written)
            raise SplitterError(
                code="SPLIT_FAILED",
                message=f"Failed to split PDF: {str(e)}",
            ) from e
        finally:
            self._remove_input(input_path)

    def _write_group(
        self,
        reader: PdfReader,
        indices: list[int],
        stamp: str,
        suffix: str,
    ) -> Path | None:
        """Copy the given pages, in order, into a new PDF in the public dir."""
        if not indices:
            return None

        writer = PdfWriter()
        for i in indices:
            writer.add_page(reader.pages[i])

        buffer = io.BytesIO()
        writer.write(buffer)

        output_path = self._public_dir / f"{stamp}-{suffix}"
        output_path.write_bytes(buffer.getvalue())

        logger.debug(
            "Parity group written",
            path=str(output_path),
            page_count=len(indices),
            size_bytes=output_path.stat().st_size,
        )
        return output_path

    def _rollback(self, written: list[Path]) -> None:
        """Delete outputs of a failed split so no half pair is left behind."""
        for path in written:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.error("Failed to remove partial output",
                             path=str(path), error=str(e))

    def _remove_input(self, input_path: Path) -> None:
        try:
            input_path.unlink()
            logger.debug("Removed transient input", path=str(input_path))
        except OSError as e:
            logger.error("Failed to clean up input file",
                         path=str(input_path), error=str(e))


# Global splitter instance
splitter = ParitySplitter()
