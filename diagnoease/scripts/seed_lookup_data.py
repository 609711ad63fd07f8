import argparse
import asyncio
import json
from pathlib import Path
from typing import Type

from beanie import Document

from diagnoease.database import close_db, init_db
from diagnoease.models import District, Recommendation, Upazila

COLLECTIONS: dict[str, Type[Document]] = {
    "districts": District,
    "upazilas": Upazila,
    "recommendations": Recommendation,
}


def load_records(path: Path) -> list[dict]:
    """Read a JSON array of objects; the dataset's own "id" is kept as "code"."""
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON array")
    for record in records:
        record.pop("_id", None)
        if "id" in record:
            record.setdefault("code", str(record.pop("id")))
    return records


async def seed(model: Type[Document], records: list[dict], replace: bool) -> int:
    if replace:
        await model.find_all().delete()
    elif await model.find_all().count():
        print(f"[SKIP] {model.Settings.name} already has data (use --replace)")
        return 0
    documents = [model.model_validate(record) for record in records]
    if documents:
        await model.insert_many(documents)
    print(f"[OK] Inserted {len(documents)} {model.Settings.name}")
    return len(documents)


async def main() -> None:
    """
    Load read-only lookup collections from JSON files, e.g.

        python -m diagnoease.scripts.seed_lookup_data districts data/districts.json
    """
    parser = argparse.ArgumentParser(description="Seed lookup collections")
    parser.add_argument("collection", choices=sorted(COLLECTIONS))
    parser.add_argument("file", type=Path)
    parser.add_argument("--replace", action="store_true", help="drop existing documents first")
    args = parser.parse_args()

    records = load_records(args.file)
    await init_db()
    try:
        await seed(COLLECTIONS[args.collection], records, args.replace)
    finally:
        close_db()


if __name__ == "__main__":
    asyncio.run(main())
