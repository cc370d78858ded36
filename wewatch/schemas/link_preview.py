"""Link preview response schema."""

from pydantic import BaseModel


class LinkPreviewRead(BaseModel):
    """Preview image for a page; ``None`` when the page advertises none."""

    image: str | None = None
