"""Database seeder: users, posts, comments and likes for local development."""
import asyncio
import argparse
import random
import time

from blog_service.database import engine, async_session, Base
from blog_service.schemas import PostCreate, UserCreate
from blog_service.security import create_access_token
from blog_service.services import comment_service, like_service, post_service, user_service

TAGS = ["python", "fastapi", "postgresql", "docker", "testing", "security",
        "performance", "rest-api", "go", "rust"]
CATEGORIES = ["engineering", "tutorials", "news", "opinion"]


async def seed(small: bool = False):
    num_users = 5 if small else 25
    num_posts = 20 if small else 500
    max_comments_per_post = 2 if small else 5

    print(f"Seeding: {num_users} users, {num_posts} posts, up to {max_comments_per_post} comments each")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        users = []
        for i in range(num_users):
            user = await user_service.create_user(
                session, UserCreate(name=f"User {i}", email=f"user_{i:04d}@example.com")
            )
            users.append(user)
        print(f"  Created {len(users)} users")

        total_comments = 0
        for i in range(num_posts):
            author = random.choice(users)
            post = await post_service.create_post(
                session,
                author["id"],
                PostCreate(
                    title=f"Post {i}: notes on {random.choice(TAGS)}",
                    content=f"This is the full content of post {i}. " * 20,
                    tags=random.sample(TAGS, k=random.randint(1, 3)),
                    categories=random.sample(CATEGORIES, k=1),
                ),
            )
            for _ in range(random.randint(0, max_comments_per_post)):
                await comment_service.add_comment(
                    session, post["id"], random.choice(users)["id"], "Great post, thanks for sharing."
                )
                total_comments += 1
            for liker in random.sample(users, k=random.randint(0, len(users) // 2)):
                await like_service.like_post(session, post["id"], liker["id"])

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Posts: {num_posts}")
    print(f"  Comments: {total_comments}")
    print("\nBearer tokens:")
    for user in users[:3]:
        print(f"  {user['email']}: {create_access_token(user['id'])}")


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (20 posts)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
