from types import SimpleNamespace

import pytest
from flask import Flask, abort

from realm_services.api.errors import register_error_handlers
from realm_services.core.exceptions import InternalServerError, NotSupportedError


@pytest.fixture()
def flask_client():
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.logger = SimpleNamespace(error=lambda *args, **kwargs: None)

    register_error_handlers(app)

    @app.route("/crash")
    def crash():
        raise RuntimeError("boom")

    @app.route("/unsupported")
    def unsupported():
        raise NotSupportedError("Query paging not currently supported")

    @app.route("/wrapped")
    def wrapped():
        cause = KeyError("stage")
        raise InternalServerError("Unable to handle read", cause)

    @app.route("/form/error")
    def form_error():
        abort(400, "invalid payload")

    @app.route("/api/unauth")
    def api_unauth():
        abort(401)

    @app.route("/only-get", methods=["GET"])
    def only_get():
        return "ok"

    with app.test_client() as client:
        yield client


def test_resource_error_rendered_with_status(flask_client):
    response = flask_client.get("/unsupported")

    assert response.status_code == 501
    assert response.get_json() == {
        "code": 501,
        "reason": "Not Implemented",
        "message": "Query paging not currently supported",
    }


def test_internal_resource_error(flask_client):
    response = flask_client.get("/wrapped")

    assert response.status_code == 500
    assert response.get_json()["message"] == "Unable to handle read"


def test_unhandled_exception_hides_details(flask_client):
    response = flask_client.get("/crash")

    assert response.status_code == 500
    body = response.get_json()
    assert body["message"] == "An unexpected error occurred"
    assert "boom" not in response.get_data(as_text=True)


def test_bad_request_keeps_description(flask_client):
    response = flask_client.get("/form/error")

    assert response.status_code == 400
    assert response.get_json()["message"] == "invalid payload"


def test_unauthorized(flask_client):
    response = flask_client.get("/api/unauth")
    assert response.status_code == 401
    assert response.get_json()["reason"] == "Unauthorized"


def test_not_found(flask_client):
    response = flask_client.get("/nowhere")
    assert response.status_code == 404
    assert response.get_json()["code"] == 404


def test_method_not_allowed(flask_client):
    response = flask_client.delete("/only-get")
    assert response.status_code == 405
    assert response.get_json()["reason"] == "Method Not Allowed"
