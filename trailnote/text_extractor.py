from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

# pdfminer.six
from pdfminer.high_level import extract_pages
from pdfminer.layout import LAParams, LTChar, LTTextContainer, LTTextLine

@dataclass
class LineItem:
    text: str
    page_index: int
    x0: float
    y_baseline: float
    font_size: float

class TextExtractor:
    """
    Line extraction using pdfminer.six.

    Used to check a synthesized report from the outside: every rendered
    line comes back with its page, left edge and baseline so placement
    (left margin, descending leading) can be compared with the layout.
    """

    def __init__(self, laparams: LAParams | None = None):
        # Keep each Tm-positioned line separate; no paragraph merging
        self.laparams = laparams or LAParams(line_margin=0.1, char_margin=200.0, boxes_flow=None)

    def extract(self, source: Union[Path, bytes]) -> List[LineItem]:
        fp = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else str(source)
        results: List[LineItem] = []

        for page_index, layout in enumerate(extract_pages(fp, laparams=self.laparams)):
            page_lines: List[LineItem] = []

            for element in layout:
                if not isinstance(element, LTTextContainer):
                    continue

                for obj in element:
                    if not isinstance(obj, LTTextLine):
                        continue

                    text = obj.get_text().rstrip("\n")
                    chars = [ch for ch in obj if isinstance(ch, LTChar)]
                    if not chars:
                        continue

                    page_lines.append(LineItem(
                        text=text.strip(),
                        page_index=page_index,
                        x0=float(chars[0].matrix[4]),
                        y_baseline=float(chars[0].matrix[5]),
                        font_size=float(chars[0].size),
                    ))

            # Top-to-bottom on each page
            page_lines.sort(key=lambda x: -x.y_baseline)
            results.extend(page_lines)

        return results

    def page_texts(self, source: Union[Path, bytes]) -> List[List[str]]:
        pages: List[List[str]] = []
        for item in self.extract(source):
            while len(pages) <= item.page_index:
                pages.append([])
            pages[item.page_index].append(item.text)
        return pages
