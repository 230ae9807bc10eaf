from __future__ import annotations
from pathlib import Path
import fitz  # PyMuPDF

class PdfReader:
    """
    Uses PyMuPDF to reopen a synthesized report: page count, page text and
    PNG previews. Accepts a file path or the raw document bytes.
    """

    def __init__(self, source: Path | bytes):
        if isinstance(source, (bytes, bytearray)):
            self.pdf_path = None
            self.doc = fitz.open(stream=bytes(source), filetype="pdf")
        else:
            self.pdf_path = Path(source)
            self.doc = fitz.open(str(self.pdf_path))

    def __len__(self) -> int:
        return len(self.doc)

    def __enter__(self) -> "PdfReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.doc.close()

    @property
    def needs_repair(self) -> bool:
        # Set when MuPDF had to rebuild a broken xref table on open
        return bool(self.doc.is_repaired)

    def page_text(self, page_index: int) -> str:
        return self.doc[page_index].get_text()

    def render_page_to_png(self, page_index: int, out_path: Path, dpi: int = 200) -> None:
        page = self.doc[page_index]
        zoom = dpi / 72.0
        mat = fitz.Matrix(zoom, zoom)
        pix = page.get_pixmap(matrix=mat, alpha=False)
        pix.save(str(out_path))
