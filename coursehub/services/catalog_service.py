"""Role-aware course catalog query.

The catalog predicate is ``V AND category AND level AND S`` where ``V`` is the
visibility group and ``S`` the search group. Each group is kept as its own
nested clause so the OR inside one never absorbs the other.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from sqlalchemy import ColumnElement, and_, func, or_, select
from sqlalchemy.orm import Session

from coursehub.core.security import Identity
from coursehub.models import Course
from coursehub.schemas.catalog import CatalogQuery

LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class CatalogPage:
    courses: list[Course]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def visibility_clause(identity: Identity | None) -> ColumnElement[bool]:
    if identity is None:
        return Course.is_active.is_(True)
    return or_(Course.is_active.is_(True), Course.instructor_id == identity.user_id)


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def search_clause(term: str) -> ColumnElement[bool]:
    pattern = f"%{_escape_like(term)}%"
    return or_(
        Course.title.ilike(pattern, escape=LIKE_ESCAPE),
        Course.description.ilike(pattern, escape=LIKE_ESCAPE),
        Course.course_code.ilike(pattern, escape=LIKE_ESCAPE),
    )


def build_catalog_filter(query: CatalogQuery, identity: Identity | None) -> ColumnElement[bool]:
    clauses: list[ColumnElement[bool]] = [visibility_clause(identity)]
    if query.category:
        clauses.append(Course.category == query.category)
    if query.level:
        clauses.append(Course.level == query.level)
    if query.search:
        clauses.append(search_clause(query.search))
    return and_(*clauses)


def list_catalog(db: Session, query: CatalogQuery, identity: Identity | None) -> CatalogPage:
    predicate = build_catalog_filter(query, identity)

    total = int(db.execute(select(func.count()).select_from(Course).where(predicate)).scalar_one())
    courses = (
        db.execute(
            select(Course)
            .where(predicate)
            .order_by(Course.created_at.desc(), Course.id.desc())
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        )
        .scalars()
        .all()
    )
    return CatalogPage(courses=list(courses), page=query.page, limit=query.limit, total=total)
