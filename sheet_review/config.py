"""
Configuration for reviewing and exporting annotated spreadsheets.
"""

from typing import List

from pydantic import BaseModel, Field


class ReviewConfig(BaseModel):
    """Configuration shared by the reader, the session and the exporter."""

    group_prefix: str = Field(
        default="Revision group",
        description="Label prefix that marks group header rows and the group column"
    )
    search_debounce_ms: int = Field(
        default=300,
        ge=0,
        description="Quiet period before a raw search query takes effect"
    )
    autosave_delay_ms: int = Field(
        default=2000,
        ge=0,
        description="Quiet period before a snapshot is persisted"
    )
    edit_prefix: str = Field(
        default="edited_",
        description="Prefix prepended to the original file name on export"
    )
    green_argb: str = Field(
        default="FF00B050",
        description="ARGB fill written for approved (green) cells"
    )
    red_argb: str = Field(
        default="FFFF0000",
        description="ARGB fill written for flagged (red) cells"
    )
    main_sheet_title: str = Field(default="Main", description="Title of the sheet holding every row")
    flagged_sheet_title: str = Field(default="Flagged", description="Title of the red-rows sheet")
    commented_sheet_title: str = Field(default="Commented", description="Title of the noted-rows sheet")
    summary_sheet_title: str = Field(default="Group summary", description="Title of the per-group counts sheet")
    summary_headers: List[str] = Field(
        default_factory=lambda: ["Revision group", "Item count", "Red count"],
        description="Header row of the group summary sheet"
    )
    untitled_group_label: str = Field(
        default="Untitled",
        description="Label used in the summary when a group header has no text"
    )
    comment_author: str = Field(
        default="sheet-review",
        description="Author recorded on exported cell comments"
    )
