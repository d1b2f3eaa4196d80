"""Chant script schema: the canonical syllables of one recitation."""

import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from .types import CanonicalSyllable, Swara


class ScriptSyllable(BaseModel):
    """One syllable of a chant script."""

    text: str = Field(min_length=1)
    swara: Swara
    start_time: float | None = Field(default=None, ge=0.0)
    end_time: float | None = Field(default=None, ge=0.0)

    @field_validator("swara", mode="before")
    @classmethod
    def parse_swara(cls, value: object) -> Swara:
        if isinstance(value, str):
            return Swara.parse(value)
        return value  # type: ignore[return-value]

    @model_validator(mode="after")
    def check_times(self) -> "ScriptSyllable":
        if self.start_time is not None and self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError(f"Syllable '{self.text}' ends before it starts")
        return self


class ChantScript(BaseModel):
    """A chant with its syllables and expected swaras."""

    schema_version: str = "1.0.0"
    id: str
    title: str = ""
    reference_audio: str | None = None
    syllables: list[ScriptSyllable] = Field(min_length=1)

    @classmethod
    def from_json_file(cls, path: Path) -> "ChantScript":
        """Load a chant script from JSON file.

        Args:
            path: Path to the JSON file

        Returns:
            A ChantScript instance populated from the JSON data
        """
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls.model_validate(data)

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return self.model_dump_json(indent=2)

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.syllables)

    def to_canonical(self) -> list[CanonicalSyllable]:
        """Canonical syllables in script order."""
        return [
            CanonicalSyllable(
                index=i,
                text=s.text,
                expected=s.swara,
                start_time=s.start_time,
                end_time=s.end_time,
            )
            for i, s in enumerate(self.syllables)
        ]
