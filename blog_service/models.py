from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blog_service.database import Base


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships: lazy="noload" enforces explicit eager loading in services
    posts: Mapped[List["Post"]] = relationship(
        "Post", back_populates="author", lazy="noload"
    )


# ---------------------------------------------------------------------------
# Tag / Category
#
# Names are unique at the storage layer; the name resolver relies on the
# constraint to settle concurrent find-or-create calls.
# ---------------------------------------------------------------------------
class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)


# ---------------------------------------------------------------------------
# Post <-> Tag / Category links
#
# Association objects rather than plain secondary tables: each link has its
# own key and a position, so a post keeps the order it was given and may
# reference the same tag more than once.
# ---------------------------------------------------------------------------
class PostTag(Base):
    __tablename__ = "post_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tag: Mapped["Tag"] = relationship("Tag", lazy="joined")


class PostCategory(Base):
    __tablename__ = "post_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    category: Mapped["Category"] = relationship("Category", lazy="joined")


# ---------------------------------------------------------------------------
# Post
# ---------------------------------------------------------------------------
class Post(Base):
    __tablename__ = "posts"

    __table_args__ = (
        # Default feed ordering (newest first)
        Index("ix_posts_created_at_id", "created_at", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    # Set once at creation; no update path writes it.
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships: all lazy="noload"; use selectinload/joinedload in services
    author: Mapped["User"] = relationship("User", back_populates="posts", lazy="noload")
    tag_links: Mapped[List["PostTag"]] = relationship(
        "PostTag",
        order_by="PostTag.position",
        cascade="all, delete-orphan",
        lazy="noload",
    )
    category_links: Mapped[List["PostCategory"]] = relationship(
        "PostCategory",
        order_by="PostCategory.position",
        cascade="all, delete-orphan",
        lazy="noload",
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="post", order_by="Comment.id", lazy="noload"
    )

    @property
    def tags(self) -> list["Tag"]:
        return [link.tag for link in self.tag_links]

    @property
    def categories(self) -> list["Category"]:
        return [link.category for link in self.category_links]


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    # Foreign keys
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    post: Mapped["Post"] = relationship("Post", back_populates="comments", lazy="noload")
    author: Mapped["User"] = relationship("User", lazy="noload")


# ---------------------------------------------------------------------------
# Like
# ---------------------------------------------------------------------------
class Like(Base):
    __tablename__ = "likes"

    __table_args__ = (
        # One like per user per post
        UniqueConstraint("post_id", "user_id", name="uq_likes_post_id_user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
