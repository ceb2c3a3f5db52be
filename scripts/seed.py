"""Database seeder for local development and demos."""
import asyncio
import argparse
import random
import time
from datetime import datetime, timezone, timedelta

from newsdesk.categories import CATEGORIES
from newsdesk.database import engine, async_session, Base
from newsdesk.models import Article, Comment, CommentLike, Tag, User, UserRole
from newsdesk.security import hash_password
from newsdesk.services.article_service import slugify

TAGS = ["breaking", "analysis", "opinion", "interview", "explainer", "local",
        "global", "long-read", "data", "investigation", "review", "live"]

SUBJECTS = ["markets", "elections", "climate", "startups", "vaccines", "transit",
            "housing", "streaming", "robotics", "wildfires", "exports", "museums"]

DEFAULT_PASSWORD = "password123"


async def seed(small: bool = False):
    num_authors = 5 if small else 25
    num_articles = 40 if small else 1000
    max_comments_per_article = 3 if small else 8

    print(f"Seeding: 1 admin + {num_authors} authors, {num_articles} articles")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    # Shared by every seeded account.
    password_hash = await hash_password(DEFAULT_PASSWORD)

    async with async_session() as session:
        tags = [Tag(name=name) for name in TAGS]
        session.add_all(tags)
        await session.flush()
        print(f"  Created {len(tags)} tags")

        admin = User(
            name="Site Admin",
            email="admin@example.com",
            password_hash=password_hash,
            role=UserRole.ADMIN.value,
        )
        authors = [
            User(
                name=f"Author {i}",
                email=f"author_{i:03d}@example.com",
                password_hash=password_hash,
                role=UserRole.AUTHOR.value,
            )
            for i in range(num_authors)
        ]
        session.add(admin)
        session.add_all(authors)
        await session.flush()
        everyone = [admin, *authors]
        print(f"  Created {len(everyone)} users (password: {DEFAULT_PASSWORD})")

        articles = []
        for i in range(num_articles):
            category = random.choice(CATEGORIES)["name"]
            title = f"{i}: What {random.choice(SUBJECTS)} mean for {category.lower()}"
            created = datetime.now(timezone.utc) - timedelta(days=random.randint(0, 365))
            published = random.random() > 0.2
            article = Article(
                title=title,
                slug=slugify(title),
                summary=f"A short take on {category.lower()} this week.",
                explanation=f"Longer explanation for article {i}. " * 10,
                category=category,
                published=published,
                published_at=created if published else None,
                created_at=created,
                user_id=random.choice(authors).id,
            )
            article.tags = random.sample(tags, k=random.randint(1, 3))
            session.add(article)
            articles.append(article)
        await session.flush()
        print(f"  Created {len(articles)} articles")

        total_comments = 0
        total_likes = 0
        for article in articles:
            roots = []
            for _ in range(random.randint(0, max_comments_per_article)):
                comment = Comment(
                    content=random.choice(["Great read.", "I disagree.", "Sources?", "Thanks for this."]),
                    article_id=article.id,
                    user_id=random.choice(everyone).id,
                    parent_comment_id=random.choice(roots).id if roots and random.random() < 0.4 else None,
                )
                session.add(comment)
                await session.flush()
                if comment.parent_comment_id is None:
                    roots.append(comment)
                total_comments += 1

                for liker in random.sample(everyone, k=random.randint(0, 3)):
                    session.add(CommentLike(comment_id=comment.id, user_id=liker.id))
                    total_likes += 1
            await session.flush()

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {len(everyone)}")
    print(f"  Articles: {num_articles}")
    print(f"  Comments: {total_comments}")
    print(f"  Likes: {total_likes}")


def main():
    parser = argparse.ArgumentParser(description="Seed the newsdesk database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (40 articles)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
