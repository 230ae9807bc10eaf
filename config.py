from dataclasses import dataclass, field

@dataclass(frozen=True)
class LayoutConfig:
    wrap_width: int = 80

    # Vertical budget in points (US Letter)
    top_margin: int = 760
    bottom_margin: int = 40
    leading: int = 14
    left_margin: int = 40

    # Single built-in text face
    font_size: int = 12
    font_name: str = "F1"
    base_font: str = "Helvetica"

    media_box: tuple[int, int, int, int] = (0, 0, 612, 792)
    pdf_version: str = "1.1"

    @property
    def lines_per_page(self) -> int:
        return max(1, (self.top_margin - self.bottom_margin) // self.leading)


@dataclass(frozen=True)
class ReportConfig:
    title: str = "TrailNote Report"

    # Session ring buffer sizes
    session_capacity: int = 5
    history_capacity: int = 5

    # Summarizer: "none", "textrank" or "openai"
    summarizer: str = "none"
    openai_model: str = "gpt-5.2"
    summary_sentences: int = 3
    keyword_limit: int = 5

    # Outline line builder limits
    outline_summary_chars: int = 240
    outline_max_headings: int = 6
    outline_max_bullets: int = 8
    plain_max_bullets: int = 5

    # Debug knobs
    verify: bool = True
    preview_pages: int = 0      # render first N pages to PNG after export

    layout: LayoutConfig = field(default_factory=LayoutConfig)
