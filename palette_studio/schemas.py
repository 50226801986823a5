"""
Palette Studio Schemas
Pydantic models for swatches, rendered surfaces and palette export.
"""
from pydantic import BaseModel, ConfigDict, Field, model_validator

from palette_studio.services.colors.conversions import rgb_to_hex, rgb_to_hsl


class SwatchFields(BaseModel):
    """
    Position and color of a palette entry, without identity.

    Build instances with ``from_rgb`` so the hex and HSL fields are always
    derived from r, g, b together. Direct construction is validated against
    the same derivation and rejects stale fields.
    """
    model_config = ConfigDict(frozen=True)

    x: int = Field(..., ge=0, description="Column in bitmap space")
    y: int = Field(..., ge=0, description="Row in bitmap space")
    color: str = Field(
        ...,
        pattern=r"^#[0-9A-F]{6}$",
        description="Uppercase hex color code in format #RRGGBB"
    )
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)
    h: int = Field(..., ge=0, lt=360, description="Hue in degrees")
    s: int = Field(..., ge=0, le=100, description="Saturation percent")
    l: int = Field(..., ge=0, le=100, description="Lightness percent")

    @model_validator(mode="after")
    def _check_derived_fields(self):
        if self.color != rgb_to_hex(self.r, self.g, self.b):
            raise ValueError(f"color {self.color} does not match rgb({self.r}, {self.g}, {self.b})")
        if (self.h, self.s, self.l) != tuple(rgb_to_hsl(self.r, self.g, self.b)):
            raise ValueError(f"hsl({self.h}, {self.s}, {self.l}) does not match rgb({self.r}, {self.g}, {self.b})")
        return self

    @classmethod
    def from_rgb(cls, x: int, y: int, r: int, g: int, b: int) -> "SwatchFields":
        """Derive every color field from r, g, b."""
        hsl = rgb_to_hsl(r, g, b)
        return cls(
            x=int(x), y=int(y),
            color=rgb_to_hex(r, g, b),
            r=int(r), g=int(g), b=int(b),
            h=hsl.h, s=hsl.s, l=hsl.l
        )

    @property
    def rgb(self) -> tuple:
        return (self.r, self.g, self.b)

    def assign(self, swatch_id: str) -> "Swatch":
        """Attach an identity, producing a full swatch."""
        return Swatch(id=swatch_id, **self.model_dump())


class Swatch(SwatchFields):
    """One palette entry: a bitmap coordinate and its color."""
    id: str = Field(..., min_length=1, description="Unique swatch identifier")

    def to_fields(self) -> SwatchFields:
        """Drop the identity, keeping position and color."""
        return SwatchFields(**self.model_dump(exclude={"id"}))


class RenderedSurface(BaseModel):
    """On-screen rectangle in which the bitmap is displayed."""
    model_config = ConfigDict(frozen=True)

    left: float = Field(0.0, description="Surface left edge in pointer coordinates")
    top: float = Field(0.0, description="Surface top edge in pointer coordinates")
    width: float = Field(..., gt=0, description="Rendered width")
    height: float = Field(..., gt=0, description="Rendered height")


class ExportRGB(BaseModel):
    """RGB channels in a JSON export entry."""
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)


class ExportEntry(BaseModel):
    """Single swatch in a JSON palette export."""
    hex: str = Field(
        ...,
        pattern=r"^#[0-9A-Fa-f]{6}$",
        description="Hex color code in format #RRGGBB"
    )
    rgb: ExportRGB
