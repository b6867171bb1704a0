from aiohttp import test_utils

from core.health import HEALTH_BODY, create_app, start_health_server


async def test_root_route_returns_ok():
    async with test_utils.TestClient(test_utils.TestServer(create_app())) as client:
        response = await client.get("/")

        assert response.status == 200
        assert await response.text() == HEALTH_BODY


async def test_start_health_server_returns_runner():
    runner = await start_health_server(0, host="127.0.0.1")

    assert runner is not None
    await runner.cleanup()
