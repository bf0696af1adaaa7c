"""Basic usage example for the Page-O-Matic build pipeline."""

from pageomatic.config import Settings
from pageomatic.models import SourceUnit
from pageomatic.services import BuildService, CatalogExporter, CatalogService
from pageomatic.storage import Database


ARTICLE = """---
title: Clean Architecture
date: 2024-10-28
tags: [architecture, clean-architecture]
author: jane
---
Layers depend inwards only.

![layers](diagrams/layers.mmd)

```mermaid
graph TD
  Frameworks-->Adapters
  Adapters-->UseCases
  UseCases-->Entities
```
"""

DRAFT = """---
title: Work in Progress
date: 2024-11-05
draft: true
---
Not ready yet.
"""


def main():
    """Build a small collection in memory and publish it to a SQLite catalog."""
    settings = Settings(_env_file=None, database_url="sqlite:///./pageomatic-example.db")

    sources = [
        SourceUnit(path="posts/clean-architecture.md", text=ARTICLE),
        SourceUnit(path="posts/wip.md", text=DRAFT),
    ]
    # Only the diagram file referenced by the article exists
    assets = {"posts/diagrams/layers.mmd"}

    result = BuildService(settings).run(sources, assets)
    collection = result.collection
    print(f"Built {collection!r}")
    print(f"Summary: {result.report.summary()}")

    for exclusion in result.report.excluded:
        print(f"Excluded {exclusion.source_path}: {exclusion.reason}")

    # Query the sealed collection
    print("\n--- Query Examples ---")
    for document in collection.all():
        print(f"{document.published_at:%Y-%m-%d}  {document.title}  {sorted(document.tags)}")
    print(f"Tagged 'architecture': {[d.id for d in collection.by_tag('architecture')]}")
    print(f"Tags: {collection.tags()}")

    # Publish to the catalog
    db = Database(settings.database_url, settings=settings)
    db.create_tables()
    print(f"\nPublished: {CatalogExporter(db).publish(collection, result.report)}")

    with db.session() as session:
        record = CatalogService(session).get_document("posts/clean-architecture")
        print(f"Catalog has '{record.title}' with metadata {record.meta}")

    db.dispose()


if __name__ == "__main__":
    main()
