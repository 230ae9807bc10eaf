from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from config import LayoutConfig

from .layout import paginate, wrap_lines
from .lines import build_plain_lines, normalize_lines, split_physical_lines
from .models import ReportEntry, ReportOptions

BINARY_MARKER = b"%\xE2\xE3\xCF\xD3\n"
FREE_ENTRY = b"0000000000 65535 f \n"

CONTENT = "content"
PAGE = "page"
PAGES = "pages"
FONT = "font"
CATALOG = "catalog"

RefValue = Union[int, Tuple[int, ...]]


def escape_text(text: str) -> str:
    # Backslash first so the parentheses' own escapes are not doubled
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def encode_text(text: str) -> bytes:
    # Latin-1 only; anything else becomes "?" before any length is measured
    return text.encode("latin-1", errors="replace")


@dataclass(frozen=True)
class ObjectIds:
    """
    Final id table, computed from the page count before any body is rendered.

      content streams 1..N, pages N+1..2N, page tree, font, catalog (last)
    """
    n_pages: int

    def content(self, page_index: int) -> int:
        return page_index + 1

    def page(self, page_index: int) -> int:
        return self.n_pages + page_index + 1

    @property
    def pages(self) -> int:
        return 2 * self.n_pages + 1

    @property
    def font(self) -> int:
        return self.pages + 1

    @property
    def catalog(self) -> int:
        return self.font + 1

    @property
    def count(self) -> int:
        return self.catalog


@dataclass(frozen=True)
class PdfObject:
    id: int
    kind: str
    body: str
    refs: Dict[str, RefValue] = field(default_factory=dict)


@dataclass(frozen=True)
class Document:
    data: bytes
    pages: Tuple[Tuple[str, ...], ...]
    objects: Tuple[PdfObject, ...]
    offsets: Tuple[int, ...]
    xref_offset: int
    line_count: int

    @property
    def page_count(self) -> int:
        return len(self.pages)


# -----------------------
# Content streams
# -----------------------

def build_content_stream(page_lines: Sequence[str], layout: LayoutConfig | None = None) -> str:
    layout = layout or LayoutConfig()
    parts = ["BT", f"/{layout.font_name} {layout.font_size} Tf"]
    y = layout.top_margin
    for line in page_lines:
        parts.append(f"1 0 0 1 {layout.left_margin} {y} Tm")
        parts.append(f"({escape_text(line)}) Tj")
        y -= layout.leading
    parts.append("ET")
    return "\n".join(parts)


# -----------------------
# Object graph
# -----------------------

def _ref(obj_id: int) -> str:
    return f"{obj_id} 0 R"


def _render_body(kind: str, refs: Dict[str, Any], layout: LayoutConfig) -> str:
    if kind == PAGE:
        box = " ".join(str(v) for v in layout.media_box)
        return (
            f"<< /Type /Page /Parent {_ref(refs['Parent'])} /MediaBox [{box}] "
            f"/Resources << /Font << /{layout.font_name} {_ref(refs['Font'])} >> >> "
            f"/Contents {_ref(refs['Contents'])} >>"
        )
    if kind == PAGES:
        kids = " ".join(_ref(k) for k in refs["Kids"])
        return f"<< /Type /Pages /Kids [{kids}] /Count {len(refs['Kids'])} >>"
    if kind == FONT:
        return (
            f"<< /Type /Font /Subtype /Type1 /BaseFont /{layout.base_font} "
            f"/Encoding /WinAnsiEncoding >>"
        )
    if kind == CATALOG:
        return f"<< /Type /Catalog /Pages {_ref(refs['Pages'])} >>"
    raise ValueError(f"No dictionary body for object kind: {kind}")


def assemble_objects(pages: Sequence[Sequence[str]], layout: LayoutConfig | None = None) -> List[PdfObject]:
    layout = layout or LayoutConfig()
    ids = ObjectIds(len(pages))
    objects: List[PdfObject] = []

    for i, page_lines in enumerate(pages):
        objects.append(PdfObject(id=ids.content(i), kind=CONTENT, body=build_content_stream(page_lines, layout)))

    for i in range(len(pages)):
        refs = {"Parent": ids.pages, "Font": ids.font, "Contents": ids.content(i)}
        objects.append(PdfObject(id=ids.page(i), kind=PAGE, body=_render_body(PAGE, refs, layout), refs=refs))

    tail: List[Tuple[int, str, Dict[str, RefValue]]] = [
        (ids.pages, PAGES, {"Kids": tuple(ids.page(i) for i in range(len(pages)))}),
        (ids.font, FONT, {}),
        (ids.catalog, CATALOG, {"Pages": ids.pages}),
    ]
    for obj_id, kind, refs in tail:
        objects.append(PdfObject(id=obj_id, kind=kind, body=_render_body(kind, refs, layout), refs=refs))

    return objects


# -----------------------
# Serialization
# -----------------------

@dataclass(frozen=True)
class SerializerState:
    chunks: Tuple[bytes, ...]
    length: int
    offsets: Tuple[int, ...] = ()

    @classmethod
    def start(cls, header: bytes) -> "SerializerState":
        return cls(chunks=(header,), length=len(header))

    def write(self, data: bytes) -> "SerializerState":
        return SerializerState(self.chunks + (data,), self.length + len(data), self.offsets)

    def getvalue(self) -> bytes:
        return b"".join(self.chunks)


def serialize_object(obj: PdfObject) -> bytes:
    out = f"{obj.id} 0 obj\n".encode("ascii")
    if obj.kind == CONTENT:
        data = encode_text(obj.body)
        out += f"<< /Length {len(data)} >>\nstream\n".encode("ascii") + data + b"\nendstream\n"
    else:
        out += encode_text(obj.body) + b"\n"
    return out + b"endobj\n"


def write_object(state: SerializerState, obj: PdfObject) -> SerializerState:
    # The offset is where "<id> 0 obj" begins
    placed = SerializerState(state.chunks, state.length, state.offsets + (state.length,))
    return placed.write(serialize_object(obj))


def build_xref(offsets: Sequence[int], root_id: int, xref_offset: int) -> bytes:
    size = len(offsets) + 1
    rows = [f"xref\n0 {size}\n".encode("ascii"), FREE_ENTRY]
    rows.extend(f"{off:010d} 00000 n \n".encode("ascii") for off in offsets)
    rows.append(
        "\n".join([
            "trailer",
            f"<< /Size {size} /Root {_ref(root_id)} >>",
            "startxref",
            str(xref_offset),
            "%%EOF",
        ]).encode("ascii")
    )
    return b"".join(rows)


def serialize(objects: Sequence[PdfObject], version: str = "1.1") -> Tuple[bytes, Tuple[int, ...], int]:
    header = f"%PDF-{version}\n".encode("ascii") + BINARY_MARKER
    ordered = sorted(objects, key=lambda o: o.id)
    state = reduce(write_object, ordered, SerializerState.start(header))
    xref_offset = state.length
    root_id = next(o.id for o in ordered if o.kind == CATALOG)
    state = state.write(build_xref(state.offsets, root_id, xref_offset))
    return state.getvalue(), state.offsets, xref_offset


# -----------------------
# Public entry points
# -----------------------

Source = Iterable[Union[str, ReportEntry, Dict[str, Any]]]


def resolve_lines(source: Source | None, options: ReportOptions) -> List[str]:
    """
    Raw display lines for a call: pre-formatted lines win, then a list of
    strings, then flattened report entries. A source mixing strings with
    entries is rejected rather than partly rendered.
    """
    if options.preformatted_lines is not None:
        return split_physical_lines(options.preformatted_lines)

    # Nothing captured renders as a single blank page
    items = list(source or [])
    if not items:
        return []
    if all(isinstance(item, str) for item in items):
        return split_physical_lines(items)

    bad = [i for i, item in enumerate(items) if not isinstance(item, (ReportEntry, dict))]
    if bad:
        raise ValueError(
            f"Source mixes entries with {type(items[bad[0]]).__name__} items (first at index {bad[0]}); "
            "pass either a list of lines or a list of entries"
        )

    entries = [item if isinstance(item, ReportEntry) else ReportEntry.from_dict(item) for item in items]
    generated_at = options.generated_at or dt.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return split_physical_lines(build_plain_lines(entries, options.title, options.mode, generated_at))


def build_document(
    source: Source | None = None,
    options: ReportOptions | None = None,
    layout: LayoutConfig | None = None,
) -> Document:
    options = options or ReportOptions()
    layout = layout or LayoutConfig()

    lines = normalize_lines(resolve_lines(source, options))
    wrapped = wrap_lines(lines, layout.wrap_width)
    pages = paginate(wrapped, layout.lines_per_page)
    objects = assemble_objects(pages, layout)
    data, offsets, xref_offset = serialize(objects, layout.pdf_version)

    return Document(
        data=data,
        pages=tuple(tuple(p) for p in pages),
        objects=tuple(objects),
        offsets=offsets,
        xref_offset=xref_offset,
        line_count=len(lines),
    )


def synthesize(
    source: Source | None = None,
    options: ReportOptions | None = None,
    layout: LayoutConfig | None = None,
) -> bytes:
    return build_document(source, options, layout).data
