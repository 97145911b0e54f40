"""Pydantic models for Shopify customer directory records."""

from pydantic import BaseModel, Field


class CustomerRecord(BaseModel):
    """Customer as stored in Shopify. Shopify owns it; we only read and upsert."""

    id: str = Field(description="Customer GID, e.g. gid://shopify/Customer/123")
    email: str | None = None


class MetafieldEntry(BaseModel):
    """Namespaced key/value attached to a customer."""

    owner_id: str
    namespace: str
    key: str
    value: str
    type: str = "single_line_text_field"

    def to_input(self) -> dict[str, str]:
        """Shape expected by the metafieldsSet mutation (MetafieldsSetInput)."""
        return {
            "ownerId": self.owner_id,
            "namespace": self.namespace,
            "key": self.key,
            "type": self.type,
            "value": self.value,
        }
