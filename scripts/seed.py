"""Seed a local database with the admin user and sample content."""
import argparse
import asyncio
import random
import time
from datetime import timedelta

from quillcms.config import settings
from quillcms.database import Base, async_session, engine
from quillcms.models import Article, Comment, File, Page, User, utcnow
from quillcms.security import hash_password

TAGS = ["python", "graphql", "fastapi", "postgresql", "redis", "testing",
        "performance", "security", "devops", "writing"]

PAGES = {
    "about": "About",
    "contact": "Contact",
    "projects": "Projects",
}


async def seed(admin_password: str, num_articles: int):
    print(f"Seeding: admin user {settings.ADMIN_USER!r}, {len(PAGES)} pages, {num_articles} articles")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        admin = User(
            name=settings.ADMIN_USER,
            email=f"{settings.ADMIN_USER}@example.com",
            pw_hash=hash_password(admin_password),
        )
        session.add(admin)

        for name, title in PAGES.items():
            page = Page(name=name, title=title, content=f"# {title}\n\nPage content.")
            session.add(page)
            session.add(File(name=f"{name}-banner", extension="png", page=page))
        await session.flush()
        print(f"  Created {len(PAGES)} pages")

        now = utcnow()
        for i in range(num_articles):
            created = now - timedelta(days=num_articles - i)
            published = random.random() < 0.7
            article = Article(
                title=f"Article {i}: Notes on {random.choice(TAGS)}",
                summary=f"Summary of article {i}",
                content=f"Body of article {i}.\n\n" * 5,
                tags=random.sample(TAGS, k=random.randint(1, 3)),
                draft=not published,
                created_at=created,
                modified_at=created,
                published_at=created + timedelta(hours=1) if published else None,
            )
            session.add(article)
            for j in range(random.randint(0, 3)):
                session.add(Comment(content=f"Comment {j} on article {i}", user=admin, article=article))
            if i % 5 == 0:
                session.add(File(name=f"figure-{i}", extension="svg", article=article))
        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"Seeding complete in {elapsed:.2f}s")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the CMS database")
    parser.add_argument("--admin-password", default="admin", help="Password for the admin user")
    parser.add_argument("--articles", type=int, default=20, help="Number of articles to create")
    args = parser.parse_args()
    asyncio.run(seed(args.admin_password, args.articles))
