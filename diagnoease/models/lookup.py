from beanie import Document


class District(Document):
    # Dataset id; upazilas point at it through district_id
    code: str | None = None
    name: str
    bn_name: str | None = None
    division_id: str | None = None
    lat: str | None = None
    lon: str | None = None
    url: str | None = None

    class Settings:
        name = "districts"
        indexes = ["code"]


class Upazila(Document):
    code: str | None = None
    district_id: str | None = None
    name: str
    bn_name: str | None = None
    url: str | None = None

    class Settings:
        name = "upazilas"


class Recommendation(Document):
    """Health tip shown on the dashboard."""
    title: str
    description: str | None = None
    image: str | None = None
    category: str | None = None

    class Settings:
        name = "recommendations"
