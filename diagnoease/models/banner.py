from beanie import Document


class Banner(Document):
    """Home page promotion. At most one banner is active at a time."""
    name: str
    title: str | None = None
    description: str | None = None
    image: str | None = None
    couponCode: str | None = None
    couponRate: float | None = None
    isActive: bool = False

    class Settings:
        name = "banners"
        indexes = ["isActive"]
