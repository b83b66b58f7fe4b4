import os

# Configure the app for tests before anything from staybook is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["AUTO_CREATE_SCHEMA"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["NOTIFICATION_EMAIL_ENABLE"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import date
from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from staybook.db import Base, get_db, init_db
from staybook.main import app
from staybook.models import Hotel, User, UserType
from staybook.security import issue_token

D = date(2030, 1, 10)

_seq = count(1)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(user_type=UserType.GUEST, first_name="Ann", last_name="Guest", email=None):
        n = next(_seq)
        user = User(
            auth_id=f"auth-{n}",
            email=email or f"user{n}@example.com",
            first_name=first_name,
            last_name=last_name,
            user_type=user_type,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_hotel(db):
    def _make(host, name="Sea View", city="Lisbon", price="149.00", max_guests=4, is_active=True, **extra):
        hotel = Hotel(
            host_id=host.id,
            name=name,
            address="1 Harbour Road",
            city=city,
            country="Portugal",
            max_guests=max_guests,
            bedrooms=extra.pop("bedrooms", 1),
            bathrooms=extra.pop("bathrooms", 1),
            price_per_night=Decimal(price),
            amenities=extra.pop("amenities", []),
            images=extra.pop("images", []),
            is_active=is_active,
            **extra,
        )
        db.add(hotel)
        db.commit()
        db.refresh(hotel)
        return hotel
    return _make


@pytest.fixture
def host(make_user):
    return make_user(UserType.HOST, first_name="Hal", last_name="Host")


@pytest.fixture
def guest(make_user):
    return make_user(UserType.GUEST)


@pytest.fixture
def hotel(make_hotel, host):
    return make_hotel(host)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {issue_token(user.auth_id)}"}
