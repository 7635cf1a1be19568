import pytest

from rootpilot import exceptions


@pytest.mark.parametrize(
    "error_cls, status_code, message",
    [
        (exceptions.ValidationError, 400, "Invalid input data"),
        (exceptions.AuthenticationError, 401, "Access token required"),
        (exceptions.InvalidTokenError, 403, "Invalid or expired token"),
        (exceptions.AccessDeniedError, 403, "Access denied"),
        (exceptions.NotFoundError, 404, "Not found"),
        (exceptions.ConflictError, 400, "Resource already exists"),
        (exceptions.InternalError, 500, "Internal server error"),
    ],
)
def test_default_status_and_message(error_cls, status_code, message):
    error = error_cls()
    assert isinstance(error, exceptions.RootPilotError)
    assert error.status_code == status_code
    assert error.message == message == str(error)


def test_custom_message():
    assert exceptions.NotFoundError("Incident not found").message == "Incident not found"


def test_domain_error_raised_in_a_route_is_rendered(app, client):
    @app.get("/boom")
    async def boom():
        raise exceptions.InternalError("Engine crashed")

    response = client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"error": "Engine crashed"}


def test_unknown_route_uses_error_body(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
