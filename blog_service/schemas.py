from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


# --- Tag / Category ---

class NameResponse(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


# --- User ---

class UserBase(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    email: str = Field(max_length=255)


class UserCreate(UserBase):
    pass


class UserResponse(UserBase):
    id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AuthorResponse(BaseModel):
    id: int
    name: str
    email: str


# --- Comment ---

class CommentCreate(BaseModel):
    content: str = Field(min_length=1)


class CommentUpdate(CommentCreate):
    pass


class CommentResponse(BaseModel):
    id: int
    content: str
    post_id: int
    author_id: int
    author: AuthorResponse | None = None
    created_at: datetime | None
    updated_at: datetime | None


# --- Post ---

class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    content: str = Field(min_length=1)
    tags: list[str] = []  # tag names, resolved to records on write
    categories: list[str] = []


class PostUpdate(BaseModel):
    # The author is deliberately absent: it is fixed at creation.
    title: str | None = Field(None, min_length=1, max_length=300)
    content: str | None = Field(None, min_length=1)
    tags: list[str] | None = None
    categories: list[str] | None = None


class PostResponse(BaseModel):
    id: int
    title: str
    content: str
    author_id: int
    author: AuthorResponse | None = None
    tags: list[NameResponse] = []
    categories: list[NameResponse] = []
    comments: list[CommentResponse] = []
    created_at: datetime | None
    updated_at: datetime | None


class PostDetail(PostResponse):
    likeCount: int


class PostList(BaseModel):
    posts: list[PostResponse]
    totalPages: int
    currentPage: int


# --- Likes ---

class LikeSummary(BaseModel):
    postId: int
    likeCount: int
