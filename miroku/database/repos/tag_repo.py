from __future__ import annotations
from typing import Optional, List, Iterable, Dict, Tuple
from uuid import UUID
from sqlalchemy import select, and_, func, delete
from sqlalchemy.orm import Session

from miroku.database.models.movie import Movie
from miroku.database.models.taxonomy import Tag, MovieTag
from miroku.common.strings.splitters import normalize_name
from miroku.domain.errors import Conflict, InvalidArgument, NotFound


class TagRepo:
    def __init__(self, db: Session) -> None:
        self.db = db

    # ----- tags -----
    def get(self, owner_id: UUID, tag_id: UUID) -> Optional[Tag]:
        tag = self.db.get(Tag, tag_id)
        if tag is None or tag.owner_id != owner_id:
            return None
        return tag

    def get_or_raise(self, owner_id: UUID, tag_id: UUID) -> Tag:
        tag = self.get(owner_id, tag_id)
        if tag is None:
            raise NotFound(f"Tag {tag_id} not found")
        return tag

    def get_by_name(self, owner_id: UUID, name: str) -> Optional[Tag]:
        stmt = select(Tag).where(and_(Tag.owner_id == owner_id, Tag.name == normalize_name(name))).limit(1)
        return self.db.execute(stmt).scalars().first()

    def list_tags(self, owner_id: UUID) -> List[Tuple[Tag, int]]:
        """Tags with the number of movies carrying them, by name."""
        stmt = (
            select(Tag, func.count(MovieTag.movie_id))
            .outerjoin(MovieTag, MovieTag.tag_id == Tag.id)
            .where(Tag.owner_id == owner_id)
            .group_by(Tag.id)
            .order_by(Tag.name.asc())
        )
        return [(tag, int(n)) for tag, n in self.db.execute(stmt).all()]

    def create_tag(self, owner_id: UUID, *, name: str, color: Optional[str] = None) -> Tag:
        name = normalize_name(name)
        if not name:
            raise InvalidArgument("Tag name must not be empty")
        if self.get_by_name(owner_id, name):
            raise Conflict(f"Tag {name!r} already exists")
        t = Tag(owner_id=owner_id, name=name, color=color)
        self.db.add(t)
        self.db.flush()
        return t

    def update_tag(self, owner_id: UUID, tag_id: UUID, *, name: Optional[str] = None, color: Optional[str] = None) -> Tag:
        tag = self.get_or_raise(owner_id, tag_id)
        if name is not None:
            name = normalize_name(name)
            if not name:
                raise InvalidArgument("Tag name must not be empty")
            other = self.get_by_name(owner_id, name)
            if other is not None and other.id != tag.id:
                raise Conflict(f"Tag {name!r} already exists")
            tag.name = name
        if color is not None:
            tag.color = color
        self.db.flush()
        return tag

    def delete_tag(self, owner_id: UUID, tag_id: UUID) -> None:
        tag = self.get_or_raise(owner_id, tag_id)
        self.db.delete(tag)
        self.db.flush()

    # ----- movie links -----
    def list_for_movie(self, movie_id: UUID) -> List[Tag]:
        """
        Tags for a single movie.
        """
        stmt = (
            select(Tag)
            .join(MovieTag, MovieTag.tag_id == Tag.id)
            .where(MovieTag.movie_id == movie_id)
            .order_by(Tag.name.asc())
        )
        return self.db.execute(stmt).scalars().all()

    def add_tag_to_movie(self, owner_id: UUID, movie_id: UUID, tag_id: UUID) -> None:
        movie = self.db.get(Movie, movie_id)
        if movie is None or movie.owner_id != owner_id:
            raise NotFound(f"Movie {movie_id} not found")
        self.get_or_raise(owner_id, tag_id)
        # idempotent attach
        linked = self.db.get(MovieTag, (movie_id, tag_id))
        if linked is None:
            self.db.add(MovieTag(movie_id=movie_id, tag_id=tag_id))
            self.db.flush()

    def remove_tag_from_movie(self, movie_id: UUID, tag_id: UUID) -> None:
        self.db.execute(delete(MovieTag).where(and_(MovieTag.movie_id == movie_id, MovieTag.tag_id == tag_id)))

    def batch_tags_for_movies(self, movie_ids: Iterable[UUID]) -> Dict[UUID, List[Tag]]:
        """
        Map of movie_id -> [Tag] for a list of movies.
        """
        ids = list(movie_ids)
        if not ids:
            return {}
        stmt = (
            select(MovieTag.movie_id, Tag)
            .join(Tag, Tag.id == MovieTag.tag_id)
            .where(MovieTag.movie_id.in_(ids))
            .order_by(MovieTag.movie_id.asc(), Tag.name.asc())
        )
        out: Dict[UUID, List[Tag]] = {}
        for mid, tag in self.db.execute(stmt).all():
            out.setdefault(mid, []).append(tag)
        return out
