from __future__ import annotations

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class Blog(Base):
    __tablename__ = 'blogs'

    blog_id: Mapped[int] = mapped_column(primary_key=True)
    url: Mapped[str] = mapped_column(String(2048))

    posts: Mapped[list[Post]] = relationship(back_populates='blog')


class Post(Base):
    __tablename__ = 'posts'

    post_id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    blog_id: Mapped[int] = mapped_column(ForeignKey('blogs.blog_id'))

    blog: Mapped[Blog] = relationship(back_populates='posts')
