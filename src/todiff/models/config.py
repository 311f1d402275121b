"""Runtime options for a diff or merge run."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DiffOptions(BaseModel):
    """Options controlling matching and reporting.

    Built from command-line flags; there is no configuration file.
    """

    similarity: Optional[int] = Field(
        None,
        ge=0,
        le=100,
        description="Minimum description similarity (percent) for fuzzy matching; None or 100 disables it",
    )
    show_removed: bool = Field(True, description="Whether to report a 'Removed tasks' section")
    color: str = Field("auto", description="Colorize the output: auto, always or never")
    workers: int = Field(1, ge=1, description="Threads used to parse lines")

    @field_validator("color")
    @classmethod
    def _check_color(cls, value: str) -> str:
        if value not in ("auto", "always", "never"):
            raise ValueError(f"Invalid color mode '{value}'. Use auto, always or never.")
        return value

    @property
    def fuzzy_threshold(self) -> Optional[float]:
        """Similarity as a ratio for the matcher, or None when fuzzy matching is off."""
        if self.similarity is None or self.similarity >= 100:
            return None
        return self.similarity / 100
