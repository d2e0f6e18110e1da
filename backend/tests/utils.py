import asyncio


def run(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


def sensor_payload(**overrides) -> dict:
    payload = {"temperature": 24.5, "humidity": 60, "pump": True}
    payload.update(overrides)
    return payload
