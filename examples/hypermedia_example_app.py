"""Example FastAPI app serving articles as HAL or JSON:API.

Run with:
    uvicorn examples.hypermedia_example_app:app --reload

Then try:
    curl -H "Accept: application/hal+json" "http://localhost:8000/api/v1/articles/1?include=author"
    curl "http://localhost:8000/api/v1/articles/1/comments?page[limit]=1"
"""
from __future__ import annotations

from typing import Iterator

from fastapi import Depends, FastAPI, Request
from fastapi.responses import Response
from sqlalchemy import Column, ForeignKey, Integer, String, create_engine, select
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from hateoas_kit import (
    JSONAPI,
    ActionLink,
    HypermediaError,
    HypermediaSettings,
    LinkContext,
    ResourceRepresenter,
    UnsupportedFormatError,
    WireFormat,
    dumps,
    negotiate_format,
)
from hateoas_kit.formats import error_document
from hateoas_kit.sqlalchemy import SQLAlchemyDataLayer

DATABASE_URL = "sqlite:///./hypermedia_example.db"

engine = create_engine(DATABASE_URL, echo=True)
session_factory = sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    articles = relationship("Article", back_populates="author")


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    body = Column(String, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"))
    author = relationship("User", back_populates="articles")
    comments = relationship("Comment", back_populates="article", order_by="Comment.id")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True)
    body = Column(String, nullable=False)
    article_id = Column(Integer, ForeignKey("articles.id"))
    article = relationship("Article", back_populates="comments")


MODELS = {"users": User, "articles": Article, "comments": Comment}

settings = HypermediaSettings(base_url="/api/v1", page_size=5)
link_context = LinkContext.from_settings(
    settings,
    actions={"articles": [ActionLink("publish", "publish", title="Publish article")]},
)


def get_session() -> Iterator[Session]:
    with session_factory() as session:
        yield session


def get_representer(session: Session = Depends(get_session)) -> ResourceRepresenter:
    return ResourceRepresenter(SQLAlchemyDataLayer(session=session, models=MODELS), link_context)


def seed_example_data(session: Session) -> None:
    """Insert example users, articles and comments if empty."""
    if session.execute(select(User.id).limit(1)).first() is not None:
        return
    jane = User(name="Jane Doe", email="jane.doe@example.com")
    john = User(name="John Smith", email="john.smith@example.com")
    session.add_all(
        [
            Article(
                title="Hypermedia with FastAPI",
                body="Links let clients discover what they can do next.",
                author=jane,
                comments=[Comment(body="Great article!"), Comment(body="Helpful examples.")],
            ),
            Article(
                title="HAL or JSON:API?",
                body="The same resources, two wire formats.",
                author=john,
                comments=[Comment(body="Why not both?")],
            ),
        ]
    )
    session.commit()


def respond(document: dict, wire_format: WireFormat, status_code: int = 200) -> Response:
    return Response(dumps(document), status_code=status_code, media_type=wire_format.media_type)


app = FastAPI(
    title="Hypermedia Example",
    description="Articles represented as HAL or JSON:API, chosen by the Accept header.",
    version="0.1.0",
)


@app.on_event("startup")
def on_startup() -> None:
    Base.metadata.create_all(engine)
    with session_factory() as session:
        seed_example_data(session)


@app.exception_handler(HypermediaError)
async def hypermedia_error_handler(request: Request, exc: HypermediaError) -> Response:
    try:
        wire_format = negotiate_format(request.headers.get("accept"))
    except UnsupportedFormatError:
        wire_format = JSONAPI
    return respond(error_document(exc, wire_format), wire_format, int(exc.status))


@app.exception_handler(ValueError)
async def bad_query_handler(request: Request, exc: ValueError) -> Response:
    return respond({"errors": [{"status": "400", "detail": str(exc)}]}, JSONAPI, 400)


@app.get("/api/v1/{resource_type}/{resource_id}")
def read_resource(
    resource_type: str,
    resource_id: str,
    request: Request,
    representer: ResourceRepresenter = Depends(get_representer),
) -> Response:
    wire_format = negotiate_format(request.headers.get("accept"))
    context = representer.context_from_query(request.query_params)
    document = representer.represent(resource_type, resource_id, wire_format, context=context)
    return respond(document, wire_format)


@app.get("/api/v1/{resource_type}/{resource_id}/{relation}")
def read_related(
    resource_type: str,
    resource_id: str,
    relation: str,
    request: Request,
    representer: ResourceRepresenter = Depends(get_representer),
) -> Response:
    wire_format = negotiate_format(request.headers.get("accept"))
    context = representer.context_from_query(request.query_params)
    document = representer.represent_related(
        resource_type, resource_id, relation, wire_format, context=context
    )
    return respond(document, wire_format)
