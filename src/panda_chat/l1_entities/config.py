"""Configuration Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class AddToLibraryPolicy(str, enum.Enum):
    """How ADD_TO_LIBRARY handles a follow-up endpoint returned by the server."""

    REPORT_ONLY = 'report_only'  # never call the endpoint, always report success
    CALL_ENDPOINT = 'call_endpoint'  # POST to the endpoint when one is returned


class RateLimitConfig(BaseModel):
    default_cooldown_seconds: int = Field(ge=0)


class ActionConfig(BaseModel):
    add_to_library: AddToLibraryPolicy
    purchase_path: str  # formatted with template_id

    def purchase_target(self, template_id: int) -> str:
        return self.purchase_path.format(template_id=template_id)


class PriceFormat(BaseModel):
    """How a surface labels template prices."""

    free_label: str = 'FREE'
    pattern: str = '${amount}'  # {amount} is the digit-grouped price
    thousands_separator: str = ','

    def label(self, price: int) -> str:
        if price == 0:
            return self.free_label
        return self.pattern.format(amount=f'{price:,}'.replace(',', self.thousands_separator))


class SurfaceConfig(BaseModel):
    name: str
    resume: bool = True
    strip_markdown: bool = False
    max_template_cards: int = 3
    price: PriceFormat = Field(default_factory=PriceFormat)


class AppConfig(BaseModel):
    rate_limit: RateLimitConfig
    actions: ActionConfig
    surfaces: dict[str, SurfaceConfig]

    def surface(self, name: str) -> SurfaceConfig:
        """Look up a surface by name. Raises KeyError for unknown names."""
        if name not in self.surfaces:
            raise KeyError(f'Unknown chat surface: {name!r} (known: {", ".join(sorted(self.surfaces))})')
        return self.surfaces[name]
