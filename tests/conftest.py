import jwt
import pytest

from config import TestConfig
from nutrilog import create_app
from nutrilog.extensions import db


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def auth_headers():
    def make(user_id="user-1"):
        token = jwt.encode({"sub": user_id}, TestConfig.SECRET_KEY, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}
    return make
